"""URL helpers for resolving manifest references."""

from __future__ import annotations

import posixpath
from typing import Optional
from urllib.parse import urljoin, urlparse

HLS_MIME_TYPE = "application/x-mpegurl"
DASH_MIME_TYPE = "application/dash+xml"

_EXTENSION_MIME_TYPES = {
    ".m3u8": HLS_MIME_TYPE,
    ".m3u": HLS_MIME_TYPE,
    ".mpd": DASH_MIME_TYPE,
}


def resolve_url(base_url: str, relative_url: str) -> str:
    """Resolves ``relative_url`` against ``base_url``; absolute URLs are returned unchanged."""

    if not base_url:
        return relative_url
    return urljoin(base_url, relative_url)


def infer_mime_type(url: str) -> Optional[str]:
    """Guesses a manifest mime type from the URL's file extension."""

    path = urlparse(url).path or url
    _, extension = posixpath.splitext(path.lower())
    return _EXTENSION_MIME_TYPES.get(extension)
