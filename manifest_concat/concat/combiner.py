"""Splices renditions into one playlist and wraps the result in a master manifest."""

from __future__ import annotations

from typing import List, Optional, Sequence

from ..config import DEFAULT_MASTER_URI
from ..models import (
    MasterManifest,
    MediaGroups,
    MediaGroupTrack,
    Rendition,
    RenditionAttributes,
    Segment,
)

COMBINED_PLAYLIST_URI = "combined-playlist"
COMBINED_AUDIO_URI = "combined-audio-playlists"
AUDIO_GROUP_ID = "audio"


def combine_playlists(playlists: Sequence[Rendition], uri_suffix: str = "") -> Rendition:
    """Joins the segments of ``playlists`` in order, with a discontinuity at
    the start of every playlist after the first.

    The input renditions are left untouched. ``uri_suffix`` keeps the
    combined audio URI distinct from the video one; the player treats a
    rendition whose URI matches an audio playlist as audio only.
    """

    segments: List[Segment] = []
    for playlist in playlists:
        cloned = [segment.model_copy(deep=True) for segment in playlist.segments or []]
        if segments and cloned:
            cloned[0].discontinuity = True
        segments.extend(cloned)
    if segments:
        segments[0].discontinuity = None

    # BANDWIDTH is the peak rate, so the combined value is the largest declared.
    bandwidths = [playlist.attributes.bandwidth for playlist in playlists if playlist.attributes.bandwidth]
    # Codecs may differ while still being compatible; the first declaration wins.
    codecs = next((playlist.attributes.codecs for playlist in playlists if playlist.attributes.codecs), None)

    discontinuity_starts: List[int] = []
    timeline = 0
    for index, segment in enumerate(segments):
        if segment.discontinuity:
            discontinuity_starts.append(index)
            timeline += 1
        segment.timeline = timeline

    uri = f"{COMBINED_PLAYLIST_URI}{uri_suffix}"
    return Rendition(
        uri=uri,
        resolved_uri=uri,
        attributes=RenditionAttributes(bandwidth=max(bandwidths) if bandwidths else None, codecs=codecs),
        segments=segments,
        target_duration=max((playlist.target_duration or 0 for playlist in playlists), default=0),
        playlist_type="VOD",
        end_list=True,
        media_sequence=0,
        discontinuity_sequence=0,
        discontinuity_starts=discontinuity_starts,
    )


def construct_master_manifest(video_playlist: Rendition, audio_playlist: Optional[Rendition] = None,
                              uri: str = DEFAULT_MASTER_URI) -> MasterManifest:
    """Builds a single-rendition master manifest around the combined playlists."""

    video_playlist = video_playlist.model_copy(deep=True)
    media_groups = MediaGroups()

    if audio_playlist is not None:
        # No language, so the player never compares languages across sources.
        media_groups.audio[AUDIO_GROUP_ID] = {
            "default": MediaGroupTrack(
                autoselect=True,
                default=True,
                language="",
                uri=COMBINED_AUDIO_URI,
                playlists=[audio_playlist.model_copy(deep=True)],
            )
        }
        video_playlist.attributes.audio = AUDIO_GROUP_ID

    return MasterManifest(uri=uri, playlists=[video_playlist], media_groups=media_groups)
