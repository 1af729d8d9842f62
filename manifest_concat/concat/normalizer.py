"""Dispatches manifest bodies to the HLS or DASH parser by declared mime type."""

from __future__ import annotations

import enum
import logging
import re
from typing import List, Union

from ..exceptions import UnsupportedMimeTypeError
from ..models import MasterManifest, MediaManifest, Rendition
from ..parsers import DashManifestParser, HlsManifestParser

NormalizedManifest = Union[MasterManifest, MediaManifest]

HLS_MIME_PATTERN = re.compile(r"^(audio|video|application)/(x-|vnd\.apple\.)?mpegurl", re.IGNORECASE)
DASH_MIME_PATTERN = re.compile(r"^application/dash\+xml", re.IGNORECASE)


class ManifestDialect(enum.Enum):
    HLS = "hls"
    DASH = "dash"


def dialect_for_mime_type(mime_type: str) -> ManifestDialect:
    if HLS_MIME_PATTERN.match(mime_type or ""):
        return ManifestDialect.HLS
    if DASH_MIME_PATTERN.match(mime_type or ""):
        return ManifestDialect.DASH
    raise UnsupportedMimeTypeError(f"Unsupported mime type: {mime_type}")


def parse_manifest(url: str, manifest_text: str, mime_type: str) -> NormalizedManifest:
    """Parses ``manifest_text`` fetched from ``url``.

    DASH yields a master manifest whose renditions already carry segments.
    An HLS master yields renditions with absolute URIs but no segments; they
    are only fetched for the renditions that end up selected. An HLS media
    playlist yields a media manifest with segments resolved against ``url``.
    """

    dialect = dialect_for_mime_type(mime_type)
    if dialect is ManifestDialect.DASH:
        return DashManifestParser().parse(manifest_text, url)

    manifest = HlsManifestParser().parse(manifest_text, url)
    if isinstance(manifest, MediaManifest):
        manifest.uri = url
        manifest.resolved_uri = url
    logging.debug("Parsed %s as %s %s", url, dialect.value, type(manifest).__name__)
    return manifest


def renditions_of(manifest: NormalizedManifest) -> List[Rendition]:
    """A master's renditions, or the media manifest itself as its only rendition."""

    if isinstance(manifest, MasterManifest):
        return list(manifest.playlists)
    return [manifest]
