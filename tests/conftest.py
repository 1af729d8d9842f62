"""Shared pytest fixtures for the manifest-concat test suite.

Guidelines
----------
* No network access: the HTTP client is replaced by :class:`FakeHttpClient`.
* Async code is driven with ``asyncio.run`` from plain test functions.
* Manifest bodies are built with the ``hls_master``/``hls_media``/``dash_mpd``
  factory fixtures.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Dict, List, Tuple, Union

import pytest

from manifest_concat.utils.http_client import HttpResponse

Route = Tuple[int, Union[str, Exception], float]


class FakeHttpClient:
    """In-memory stand-in for :class:`manifest_concat.utils.HttpClient`."""

    def __init__(self) -> None:
        self.routes: Dict[str, Route] = {}
        self.requests: List[str] = []

    def add(self, url: str, body: Union[str, Exception] = "", status: int = 200, delay: float = 0.0) -> None:
        self.routes[url] = (status, body, delay)

    async def get(self, url: str) -> HttpResponse:
        self.requests.append(url)
        status, body, delay = self.routes.get(url, (404, "", 0.0))
        if delay:
            await asyncio.sleep(delay)
        if isinstance(body, Exception):
            raise body
        return HttpResponse(status_code=status, body=body)


@pytest.fixture
def http_client() -> FakeHttpClient:
    return FakeHttpClient()


def _hls_master(num_playlists: int = 1, playlist_prefix: str = "playlist", include_demuxed_audio: bool = False,
                codecs: str | None = None, resolutions: List[str] | None = None) -> str:
    lines = ["#EXTM3U", "#EXT-X-VERSION:3"]
    if include_demuxed_audio:
        lines.append(
            '#EXT-X-MEDIA:TYPE=AUDIO,GROUP-ID="audio",LANGUAGE="en",NAME="English",'
            f'AUTOSELECT=YES,DEFAULT=YES,URI="{playlist_prefix}-audio.m3u8"'
        )
    for index in range(num_playlists):
        attributes = [f"BANDWIDTH={index}"]
        if resolutions:
            attributes.append(f"RESOLUTION={resolutions[index]}")
        if codecs:
            attributes.append(f'CODECS="{codecs}"')
        if include_demuxed_audio:
            attributes.append('AUDIO="audio"')
        lines.append("#EXT-X-STREAM-INF:" + ",".join(attributes))
        lines.append(f"{playlist_prefix}{index}.m3u8")
    return "\n".join(lines) + "\n"


def _hls_media(num_segments: int = 1, segment_prefix: str = "", segment_duration: int = 10,
               target_duration: int = 10) -> str:
    lines = [
        "#EXTM3U",
        "#EXT-X-VERSION:3",
        "#EXT-X-PLAYLIST-TYPE:VOD",
        "#EXT-X-MEDIA-SEQUENCE:0",
        f"#EXT-X-TARGETDURATION:{target_duration}",
    ]
    for index in range(num_segments):
        lines.append(f"#EXTINF:{segment_duration},")
        lines.append(f"{segment_prefix}{index}.ts")
    lines.append("#EXT-X-ENDLIST")
    return "\n".join(lines) + "\n"


def _dash_mpd(num_segments: int = 1, segment_duration: int = 10) -> str:
    return f"""<?xml version="1.0"?>
<MPD
  xmlns="urn:mpeg:dash:schema:mpd:2011"
  profiles="urn:mpeg:dash:profile:full:2011"
  minBufferTime="PT1.5S"
  mediaPresentationDuration="PT{num_segments * segment_duration}S">
  <Period>
    <BaseURL>main/</BaseURL>
    <AdaptationSet mimeType="video/mp4">
      <BaseURL>video/</BaseURL>
      <Representation id="1080p" bandwidth="6800000" width="1920" height="1080" codecs="avc1.420015">
        <BaseURL>1080/</BaseURL>
        <SegmentTemplate media="$RepresentationID$-segment-$Number$.mp4"
          initialization="$RepresentationID$-init.mp4"
          duration="{segment_duration}" timescale="1" startNumber="0" />
      </Representation>
      <Representation id="720p" bandwidth="2400000" width="1280" height="720" codecs="avc1.420015">
        <BaseURL>720/</BaseURL>
        <SegmentTemplate media="$RepresentationID$-segment-$Number$.mp4"
          initialization="$RepresentationID$-init.mp4"
          duration="{segment_duration}" timescale="1" startNumber="0" />
      </Representation>
    </AdaptationSet>
    <AdaptationSet mimeType="audio/mp4">
      <BaseURL>audio/</BaseURL>
      <Representation id="audio" bandwidth="128000" codecs="mp4a.40.2">
        <BaseURL>720/</BaseURL>
        <SegmentTemplate media="segment-$Number$.mp4"
          initialization="$RepresentationID$-init.mp4"
          duration="{segment_duration}" timescale="1" startNumber="0" />
      </Representation>
    </AdaptationSet>
  </Period>
</MPD>
"""


@pytest.fixture
def hls_master() -> Callable[..., str]:
    return _hls_master


@pytest.fixture
def hls_media() -> Callable[..., str]:
    return _hls_media


@pytest.fixture
def dash_mpd() -> Callable[..., str]:
    return _dash_mpd
