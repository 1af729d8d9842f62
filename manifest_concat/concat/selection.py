"""Picks one video rendition per source and its paired default audio."""

from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence

from ..config import DEFAULT_INITIAL_BANDWIDTH
from ..exceptions import CompatibilityError
from ..models import Rendition
from .normalizer import NormalizedManifest


def _bandwidth_distance(rendition: Rendition, initial_bandwidth: int) -> float:
    bandwidth = rendition.attributes.bandwidth
    if bandwidth is None:
        return math.inf
    return abs(bandwidth - initial_bandwidth)


def _prefer(current: Optional[Rendition], candidate: Rendition, target_vertical_resolution: int,
            initial_bandwidth: int) -> Rendition:
    if current is None:
        return candidate

    candidate_resolution = candidate.attributes.resolution
    current_resolution = current.attributes.resolution
    if candidate_resolution is not None:
        if current_resolution is None:
            return candidate
        if abs(candidate_resolution.height - target_vertical_resolution) < abs(
            current_resolution.height - target_vertical_resolution
        ):
            return candidate
        return current

    if current_resolution is not None:
        return current

    if _bandwidth_distance(candidate, initial_bandwidth) < _bandwidth_distance(current, initial_bandwidth):
        return candidate
    return current


def choose_video_playlists(manifests_playlists: Sequence[Sequence[Rendition]], target_vertical_resolution: int,
                           initial_bandwidth: int = DEFAULT_INITIAL_BANDWIDTH) -> List[Rendition]:
    """Selects, per source, the rendition closest to ``target_vertical_resolution``.

    Renditions declaring a resolution always beat ones that do not. Without
    any resolution information the rendition whose bandwidth is closest to
    ``initial_bandwidth`` wins. Ties keep the rendition seen first.
    """

    chosen: List[Rendition] = []
    for playlists in manifests_playlists:
        if len(playlists) == 1:
            chosen.append(playlists[0])
            continue
        selected: Optional[Rendition] = None
        for playlist in playlists:
            selected = _prefer(selected, playlist, target_vertical_resolution, initial_bandwidth)
        chosen.append(selected)
    return chosen


def choose_audio_playlists(manifests: Sequence[NormalizedManifest],
                           video_playlists: Sequence[Rendition]) -> List[Rendition]:
    """Finds the default demuxed audio rendition for each selected video rendition.

    Returns an empty list when no source has demuxed default audio. A
    rendition cannot switch between muxed and demuxed audio mid-stream, so
    pairing only some of the sources raises :class:`CompatibilityError`.
    """

    if len(manifests) != len(video_playlists):
        raise ValueError("Invalid number of video playlists for provided manifests")

    audio_playlists: List[Rendition] = []
    for manifest, video_playlist in zip(manifests, video_playlists):
        group_id = video_playlist.attributes.audio
        audio_group = manifest.media_groups.audio.get(group_id) if group_id else None
        if not audio_group:
            continue

        for name, track in audio_group.items():
            # Tracks with neither a URI nor playlists only describe muxed audio.
            if track.default and (track.resolved_uri or track.playlists):
                logging.debug("Paired audio track %r of group %r with %s", name, group_id, video_playlist.resolved_uri)
                audio_playlists.append(track.as_rendition())
                break

    if audio_playlists and len(audio_playlists) != len(manifests):
        raise CompatibilityError("Did not find matching audio playlists for all video playlists")
    return audio_playlists
