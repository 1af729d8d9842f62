"""Format-specific manifest parsers (HLS text playlists and DASH MPDs)."""

from .dash_parser import DashManifestParser
from .hls_parser import HlsManifestParser

__all__ = ["DashManifestParser", "HlsManifestParser"]
