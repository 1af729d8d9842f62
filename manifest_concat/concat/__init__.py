"""Manifest concatenation: fetch, normalize, filter, select, resolve, combine."""

from .combiner import combine_playlists, construct_master_manifest
from .concatenator import ManifestConcatenator, validate_sources
from .fetch import FetchCoordinator
from .filters import codecs_for_playlists, remove_unsupported_playlists
from .normalizer import ManifestDialect, dialect_for_mime_type, parse_manifest, renditions_of
from .resolver import resolve_playlists
from .selection import choose_audio_playlists, choose_video_playlists

__all__ = [
    "ManifestConcatenator",
    "FetchCoordinator",
    "ManifestDialect",
    "choose_audio_playlists",
    "choose_video_playlists",
    "codecs_for_playlists",
    "combine_playlists",
    "construct_master_manifest",
    "dialect_for_mime_type",
    "parse_manifest",
    "remove_unsupported_playlists",
    "renditions_of",
    "resolve_playlists",
    "validate_sources",
]
