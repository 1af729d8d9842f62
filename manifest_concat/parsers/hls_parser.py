"""Parses HLS master and media playlists into normalized manifest models."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Union

import m3u8
from m3u8.parser import ParseError as M3U8ParseError

from ..exceptions import ParseError
from ..models import (
    ByteRange,
    MasterManifest,
    MediaGroups,
    MediaGroupTrack,
    MediaManifest,
    Rendition,
    RenditionAttributes,
    Resolution,
    Segment,
    SegmentMap,
)
from ..utils.url_utils import resolve_url

HlsManifest = Union[MasterManifest, MediaManifest]


def _parse_byterange(value: Optional[str], next_offsets: Dict[str, int], uri: str) -> Optional[ByteRange]:
    """Parses ``length[@offset]``; a missing offset continues the previous range of ``uri``."""

    if not value:
        return None
    length_text, _, offset_text = str(value).partition("@")
    try:
        length = int(length_text)
        offset = int(offset_text) if offset_text else next_offsets.get(uri, 0)
    except ValueError as exc:
        raise ParseError(f"Invalid byterange {value!r} for {uri}") from exc
    next_offsets[uri] = offset + length
    return ByteRange(length=length, offset=offset)


class HlsManifestParser:
    """Turns HLS text into a :class:`MasterManifest` or a :class:`MediaManifest`.

    Every URI is resolved against ``base_url``. Master playlists are not
    followed: their renditions keep ``segments=None`` until requested.
    """

    def parse(self, text: str, base_url: str) -> HlsManifest:
        if not text or not text.lstrip().startswith("#EXTM3U"):
            raise ParseError(f"Playlist at {base_url} does not start with #EXTM3U")
        try:
            playlist = m3u8.loads(text)
        except (M3U8ParseError, ValueError) as exc:
            raise ParseError(f"Unable to parse playlist at {base_url}: {exc}") from exc

        if playlist.is_variant:
            return self._parse_master(playlist, base_url)
        return self._parse_media(playlist, base_url)

    def _parse_master(self, playlist: m3u8.M3U8, base_url: str) -> MasterManifest:
        renditions: List[Rendition] = []
        for variant in playlist.playlists:
            info = variant.stream_info
            resolution = None
            if info.resolution:
                width, height = info.resolution
                resolution = Resolution(width=width, height=height)
            renditions.append(
                Rendition(
                    uri=variant.uri,
                    resolved_uri=resolve_url(base_url, variant.uri),
                    attributes=RenditionAttributes(
                        bandwidth=info.bandwidth,
                        resolution=resolution,
                        codecs=info.codecs,
                        audio=info.audio,
                    ),
                )
            )

        media_groups = MediaGroups()
        for media in playlist.media:
            if (media.type or "").upper() != "AUDIO" or not media.group_id:
                continue
            name = media.name or media.language or "default"
            media_groups.audio.setdefault(media.group_id, {})[name] = MediaGroupTrack(
                default=(media.default or "").upper() == "YES",
                autoselect=(media.autoselect or "").upper() == "YES",
                language=media.language,
                uri=media.uri,
                resolved_uri=resolve_url(base_url, media.uri) if media.uri else None,
            )

        logging.debug("HLS master %s: %s renditions, %s audio groups", base_url, len(renditions), len(media_groups.audio))
        return MasterManifest(uri=base_url, playlists=renditions, media_groups=media_groups)

    def _parse_media(self, playlist: m3u8.M3U8, base_url: str) -> MediaManifest:
        segments: List[Segment] = []
        next_offsets: Dict[str, int] = {}
        timeline = 0
        for segment in playlist.segments:
            if segment.discontinuity and segments:
                timeline += 1
            init_section = getattr(segment, "init_section", None)
            segment_map = None
            if init_section is not None and init_section.uri:
                segment_map = SegmentMap(
                    uri=init_section.uri,
                    resolved_uri=resolve_url(base_url, init_section.uri),
                    byterange=_parse_byterange(init_section.byterange, {}, init_section.uri),
                )
            segments.append(
                Segment(
                    uri=segment.uri,
                    resolved_uri=resolve_url(base_url, segment.uri),
                    duration=float(segment.duration or 0),
                    timeline=timeline,
                    discontinuity=True if segment.discontinuity else None,
                    map=segment_map,
                    byterange=_parse_byterange(segment.byterange, next_offsets, segment.uri),
                )
            )

        if not segments:
            logging.warning("Media playlist at %s did not contain segments", base_url)

        target_duration = playlist.target_duration
        if target_duration is None and segments:
            target_duration = max(segment.duration for segment in segments)

        return MediaManifest(
            uri=base_url,
            resolved_uri=base_url,
            segments=segments,
            target_duration=target_duration,
            media_sequence=playlist.media_sequence or 0,
            end_list=bool(playlist.is_endlist),
            playlist_type=playlist.playlist_type.upper() if playlist.playlist_type else None,
        )
