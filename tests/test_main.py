"""Tests for the command-line entry point (main.py)."""

from __future__ import annotations

import json

from manifest_concat import main as cli
from manifest_concat.utils.http_client import HttpClient


def _write_media(path, prefix: str) -> None:
    path.write_text(
        "#EXTM3U\n#EXT-X-TARGETDURATION:6\n"
        f"#EXTINF:6.0,\n{prefix}0.ts\n#EXTINF:4.0,\n{prefix}1.ts\n#EXT-X-ENDLIST\n",
        encoding="utf-8",
    )


class TestArguments:
    def test_source_with_mime_type(self) -> None:
        spec = cli._source_arg("https://cdn.test/a.mpd::application/dash+xml")
        assert spec.url == "https://cdn.test/a.mpd"
        assert spec.mime_type == "application/dash+xml"

    def test_source_without_mime_type(self) -> None:
        assert cli._source_arg("https://cdn.test/a.m3u8").mime_type is None

    def test_mime_type_is_inferred(self, tmp_path) -> None:
        sources_file = tmp_path / "sources.json"
        sources_file.write_text(json.dumps([{"url": "https://cdn.test/a.mpd"}]), encoding="utf-8")
        args = cli.parse_args(["--sources-file", str(sources_file), "--source", "https://cdn.test/b.m3u8"])

        sources = cli.collect_sources(args, HttpClient())

        assert [source.mime_type for source in sources] == ["application/dash+xml", "application/x-mpegurl"]


class TestMain:
    def test_writes_combined_manifest(self, tmp_path) -> None:
        first, second = tmp_path / "first.m3u8", tmp_path / "second.m3u8"
        _write_media(first, "a")
        _write_media(second, "b")
        output = tmp_path / "out" / "combined.json"

        exit_code = cli.main(["--source", str(first), "--source", str(second), "--output", str(output)])

        assert exit_code == 0
        data = json.loads(output.read_text(encoding="utf-8"))
        playlist = data["playlists"][0]
        assert [segment["resolvedUri"] for segment in playlist["segments"]] == [
            str(tmp_path / "a0.ts"),
            str(tmp_path / "a1.ts"),
            str(tmp_path / "b0.ts"),
            str(tmp_path / "b1.ts"),
        ]
        assert playlist["discontinuityStarts"] == [2]
        assert playlist["targetDuration"] == 6

    def test_missing_file_fails(self, tmp_path) -> None:
        missing = tmp_path / "missing.m3u8"
        assert cli.main(["--source", str(missing)]) == 1

    def test_unknown_mime_type_fails(self, tmp_path) -> None:
        source = tmp_path / "video.mp4"
        source.write_text("", encoding="utf-8")
        assert cli.main(["--source", str(source)]) == 1
