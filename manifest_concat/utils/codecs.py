"""Helpers for reading RFC 6381 ``CODECS`` declarations."""

from __future__ import annotations

import re
from typing import Callable, Iterable, Optional

from pydantic import BaseModel

from ..models import MediaGroups

VIDEO_CODEC_PATTERN = re.compile(r"^(avc[13]|hvc1|hev1|vp0?9|vp8|av01|dvh[1e])(.*)$", re.IGNORECASE)
AUDIO_PROFILE_PATTERN = re.compile(r"^mp4a\.[0-9a-f]+\.([0-9a-f]+)$", re.IGNORECASE)
LEGACY_AVC_PATTERN = re.compile(r"avc1\.(\d+)\.(\d+)", re.IGNORECASE)

DecoderPredicate = Callable[[str], bool]


class CodecInfo(BaseModel):
    codec_count: int = 0
    video_codec: Optional[str] = None
    video_object_type_indicator: Optional[str] = None
    video_codec_string: Optional[str] = None
    audio_profile: Optional[str] = None


def _split_codecs(codecs: str) -> list[str]:
    return [entry.strip() for entry in codecs.split(",") if entry.strip()]


def parse_codecs(codecs: str) -> CodecInfo:
    """Counts the codecs in ``codecs`` and picks out the video codec and AAC profile."""

    entries = _split_codecs(codecs or "")
    info = CodecInfo(codec_count=len(entries))
    for entry in entries:
        video = VIDEO_CODEC_PATTERN.match(entry)
        if video and info.video_codec is None:
            info.video_codec = video.group(1)
            info.video_object_type_indicator = video.group(2)
            info.video_codec_string = entry
            continue
        audio = AUDIO_PROFILE_PATTERN.match(entry)
        if audio and info.audio_profile is None:
            info.audio_profile = audio.group(1)
    return info


def audio_profile_from_default(media_groups: MediaGroups, audio_group_id: Optional[str]) -> Optional[str]:
    """Returns the AAC profile of the default track in ``audio_group_id``, if declared."""

    if not audio_group_id:
        return None
    audio_group = media_groups.audio.get(audio_group_id)
    if not audio_group:
        return None
    for track in audio_group.values():
        if track.default and track.playlists:
            return parse_codecs(track.playlists[0].attributes.codecs or "").audio_profile
    return None


def _translate_legacy_avc(match: re.Match) -> str:
    profile, level = int(match.group(1)), int(match.group(2))
    return f"avc1.{profile:02x}00{level:02x}"


def map_legacy_avc_codecs(codecs: str) -> str:
    """Rewrites ``avc1.<profile>.<level>`` (decimal) into the hexadecimal form."""

    return LEGACY_AVC_PATTERN.sub(_translate_legacy_avc, codecs)


def codec_prefix_predicate(prefixes: Iterable[str]) -> DecoderPredicate:
    """Builds a decoder predicate accepting codecs that start with one of ``prefixes``."""

    allowed = tuple(prefix.strip().lower() for prefix in prefixes if prefix.strip())

    def is_supported(codec: str) -> bool:
        return any(entry.lower().startswith(allowed) for entry in _split_codecs(codec))

    return is_supported
