"""Tests for DashManifestParser (parsers/dash_parser.py)."""

from __future__ import annotations

import pytest

from manifest_concat.exceptions import ParseError
from manifest_concat.parsers import DashManifestParser
from manifest_concat.parsers.dash_parser import fill_template

BASE_URL = "http://test.com/dash.mpd"

TIMELINE_MPD = """<?xml version="1.0"?>
<MPD xmlns="urn:mpeg:dash:schema:mpd:2011" type="static" mediaPresentationDuration="PT8S">
  <Period>
    <AdaptationSet mimeType="video/mp4" codecs="avc1.64001f">
      <SegmentTemplate timescale="1000" media="v-$Time$.m4s" initialization="v-init.m4s">
        <SegmentTimeline>
          <S t="0" d="2000" r="2"/>
          <S d="2000"/>
        </SegmentTimeline>
      </SegmentTemplate>
      <Representation id="v" bandwidth="1000000" width="640" height="360"/>
    </AdaptationSet>
  </Period>
</MPD>
"""

SEGMENT_LIST_MPD = """<?xml version="1.0"?>
<MPD xmlns="urn:mpeg:dash:schema:mpd:2011" mediaPresentationDuration="PT8S">
  <Period>
    <AdaptationSet mimeType="video/mp4">
      <Representation id="a" bandwidth="500000" width="320" height="180" codecs="avc1.42c00d,mp4a.40.2">
        <BaseURL>file.mp4</BaseURL>
        <SegmentList timescale="1" duration="4">
          <Initialization sourceURL="file.mp4" range="0-99"/>
          <SegmentURL mediaRange="100-199"/>
          <SegmentURL mediaRange="200-299"/>
        </SegmentList>
      </Representation>
    </AdaptationSet>
  </Period>
</MPD>
"""


class TestSegmentTemplate:
    def test_video_renditions_use_placeholder_uris(self, dash_mpd) -> None:
        manifest = DashManifestParser().parse(dash_mpd(), BASE_URL)

        assert [playlist.uri for playlist in manifest.playlists] == ["placeholder-uri-0", "placeholder-uri-1"]
        assert manifest.playlists[0].resolved_uri == "http://test.com/placeholder-uri-0"
        assert manifest.playlists[0].attributes.resolution.height == 1080
        assert manifest.playlists[1].attributes.bandwidth == 2400000

    def test_segments_follow_nested_base_urls(self, dash_mpd) -> None:
        rendition = DashManifestParser().parse(dash_mpd(), BASE_URL).playlists[0]

        assert len(rendition.segments) == 1
        segment = rendition.segments[0]
        assert segment.resolved_uri == "http://test.com/main/video/1080/1080p-segment-0.mp4"
        assert segment.map.resolved_uri == "http://test.com/main/video/1080/1080p-init.mp4"
        assert segment.duration == 10
        assert segment.number == 0
        assert rendition.target_duration == 10

    def test_segment_count_from_duration(self, dash_mpd) -> None:
        rendition = DashManifestParser().parse(dash_mpd(num_segments=3), BASE_URL).playlists[1]

        assert [segment.uri for segment in rendition.segments] == [
            "720p-segment-0.mp4",
            "720p-segment-1.mp4",
            "720p-segment-2.mp4",
        ]

    def test_audio_becomes_default_media_group(self, dash_mpd) -> None:
        manifest = DashManifestParser().parse(dash_mpd(), BASE_URL)

        track = manifest.media_groups.audio["audio"]["main"]
        assert track.default is True
        assert track.playlists[0].attributes.codecs == "mp4a.40.2"
        assert track.playlists[0].segments[0].resolved_uri == "http://test.com/main/audio/720/segment-0.mp4"
        assert all(playlist.attributes.audio == "audio" for playlist in manifest.playlists)

    def test_lookup_by_resolved_uri(self, dash_mpd) -> None:
        manifest = DashManifestParser().parse(dash_mpd(), BASE_URL)

        by_uri = manifest.playlists_by_uri()
        assert by_uri["http://test.com/placeholder-uri-1"].attributes.resolution.height == 720
        track = manifest.media_groups.audio["audio"]["main"]
        assert list(track.playlists_by_uri()) == ["http://test.com/placeholder-uri-audio-main-0"]

    def test_segment_timeline(self) -> None:
        rendition = DashManifestParser().parse(TIMELINE_MPD, "https://cdn.test/vod/stream.mpd").playlists[0]

        assert [segment.resolved_uri for segment in rendition.segments] == [
            "https://cdn.test/vod/v-0.m4s",
            "https://cdn.test/vod/v-2000.m4s",
            "https://cdn.test/vod/v-4000.m4s",
            "https://cdn.test/vod/v-6000.m4s",
        ]
        assert [segment.number for segment in rendition.segments] == [1, 2, 3, 4]
        assert all(segment.duration == 2.0 for segment in rendition.segments)
        assert rendition.attributes.codecs == "avc1.64001f"
        assert rendition.attributes.audio is None


class TestSegmentList:
    def test_media_ranges_become_byteranges(self) -> None:
        rendition = DashManifestParser().parse(SEGMENT_LIST_MPD, "https://cdn.test/vod/stream.mpd").playlists[0]

        first, second = rendition.segments
        assert first.resolved_uri == "https://cdn.test/vod/file.mp4"
        assert (first.byterange.length, first.byterange.offset) == (100, 100)
        assert (second.byterange.length, second.byterange.offset) == (100, 200)
        assert first.duration == 4
        assert first.map.byterange.offset == 0
        assert first.map.byterange.length == 100


class TestRejectedDocuments:
    def test_multiple_periods(self, dash_mpd) -> None:
        text = dash_mpd().replace("</Period>", "</Period><Period></Period>")
        with pytest.raises(ParseError):
            DashManifestParser().parse(text, BASE_URL)

    def test_live_mpd(self, dash_mpd) -> None:
        text = dash_mpd().replace("<MPD", '<MPD type="dynamic"', 1)
        with pytest.raises(ParseError):
            DashManifestParser().parse(text, BASE_URL)

    def test_invalid_xml(self) -> None:
        with pytest.raises(ParseError):
            DashManifestParser().parse("<MPD><Period>", BASE_URL)


class TestMalformedAttributes:
    @pytest.mark.parametrize(
        ("original", "replacement"),
        [
            ('bandwidth="6800000"', 'bandwidth="6.8e6"'),
            ('width="1920"', 'width="wide"'),
            ('height="1080"', 'height="-1080"'),
            ('timescale="1"', 'timescale="0"'),
            ('startNumber="0"', 'startNumber="first"'),
            ('duration="10"', 'duration="0"'),
        ],
    )
    def test_template_attributes(self, dash_mpd, original: str, replacement: str) -> None:
        text = dash_mpd().replace(original, replacement, 1)
        with pytest.raises(ParseError, match="Invalid"):
            DashManifestParser().parse(text, BASE_URL)

    @pytest.mark.parametrize("segment", ['<S t="0" d="abc" r="2"/>', '<S t="0" d="0" r="-1"/>'])
    def test_timeline_entries(self, segment: str) -> None:
        text = TIMELINE_MPD.replace('<S t="0" d="2000" r="2"/>', segment)
        with pytest.raises(ParseError, match="Invalid S@d"):
            DashManifestParser().parse(text, BASE_URL)

    def test_segment_list_range(self) -> None:
        text = SEGMENT_LIST_MPD.replace('mediaRange="100-199"', 'mediaRange="start-end"')
        with pytest.raises(ParseError, match="Invalid range"):
            DashManifestParser().parse(text, BASE_URL)

    def test_entities_are_not_expanded(self, dash_mpd, tmp_path) -> None:
        secret = tmp_path / "secret.txt"
        secret.write_text("leaked/", encoding="utf-8")
        doctype = f'<!DOCTYPE MPD [<!ENTITY ext SYSTEM "{secret.as_uri()}">]>\n<MPD'
        text = dash_mpd().replace("<MPD", doctype, 1).replace("<BaseURL>main/</BaseURL>", "<BaseURL>&ext;</BaseURL>")

        manifest = DashManifestParser().parse(text, BASE_URL)

        uris = [segment.resolved_uri for playlist in manifest.playlists for segment in playlist.segments]
        assert uris
        assert not any("leaked" in uri for uri in uris)


class TestFillTemplate:
    def test_padded_number(self) -> None:
        assert fill_template("$RepresentationID$/$Number%05d$.m4s", "v1", 800, number=42) == "v1/00042.m4s"

    def test_bandwidth_and_escaped_dollar(self) -> None:
        assert fill_template("$Bandwidth$-$$-$Time$.mp4", "v1", 800, time=90) == "800-$-90.mp4"
