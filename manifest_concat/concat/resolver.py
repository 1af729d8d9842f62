"""Fetches the media playlists of selected renditions that lack segments."""

from __future__ import annotations

import logging
from typing import Dict, List, Sequence

from ..exceptions import ParseError
from ..models import MediaManifest, Rendition
from .fetch import FetchCoordinator
from .normalizer import parse_manifest


async def resolve_playlists(playlists: Sequence[Rendition], mime_types: Sequence[str],
                            coordinator: FetchCoordinator) -> List[Rendition]:
    """Returns copies of ``playlists`` (same order), each carrying its segments.

    ``mime_types`` runs parallel to ``playlists``. Renditions that already
    have segments are copied as they are; the others are requested once per
    distinct URI (a source may be concatenated with itself) and parsed.
    """

    if len(playlists) != len(mime_types):
        raise ValueError("Expected one mime type per playlist")

    unresolved_uris: List[str] = []
    mime_type_by_uri: Dict[str, str] = {}
    for playlist, mime_type in zip(playlists, mime_types):
        if playlist.segments is not None:
            continue
        if playlist.resolved_uri not in mime_type_by_uri:
            unresolved_uris.append(playlist.resolved_uri)
            mime_type_by_uri[playlist.resolved_uri] = mime_type

    if not unresolved_uris:
        return [playlist.model_copy(deep=True) for playlist in playlists]

    logging.info("Resolving %s media playlist(s)", len(unresolved_uris))
    responses = await coordinator.request_all(unresolved_uris)

    parsed_by_uri: Dict[str, MediaManifest] = {}
    for uri in unresolved_uris:
        manifest = parse_manifest(uri, responses[uri], mime_type_by_uri[uri])
        if not isinstance(manifest, MediaManifest):
            raise ParseError(f"Expected a media playlist at {uri}")
        parsed_by_uri[uri] = manifest

    resolved: List[Rendition] = []
    for playlist in playlists:
        if playlist.segments is not None:
            resolved.append(playlist.model_copy(deep=True))
            continue
        media = parsed_by_uri[playlist.resolved_uri]
        copy = playlist.model_copy(deep=True)
        copy.segments = [segment.model_copy(deep=True) for segment in media.segments or []]
        copy.target_duration = media.target_duration
        resolved.append(copy)
    return resolved
