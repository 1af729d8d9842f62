"""Data models for sources, normalized manifests, renditions and segments."""

from .manifest_models import (
    ByteRange,
    MasterManifest,
    MediaGroups,
    MediaGroupTrack,
    MediaManifest,
    Rendition,
    RenditionAttributes,
    Resolution,
    Segment,
    SegmentMap,
)
from .source_models import FetchedManifest, SourceSpec

__all__ = [
    "ByteRange",
    "MasterManifest",
    "MediaGroups",
    "MediaGroupTrack",
    "MediaManifest",
    "Rendition",
    "RenditionAttributes",
    "Resolution",
    "Segment",
    "SegmentMap",
    "FetchedManifest",
    "SourceSpec",
]
