"""Pydantic models for normalized manifests, renditions and segments.

Python attributes are snake_case; ``model_dump(by_alias=True)`` produces the
camelCase shape the playback engine consumes (``resolvedUri``,
``targetDuration``, ``mediaGroups`` ...). Playlist attributes keep their HLS
spelling (``BANDWIDTH``, ``RESOLUTION``, ``CODECS``, ``AUDIO``).
"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ManifestModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ByteRange(ManifestModel):
    length: int
    offset: int = 0


class SegmentMap(ManifestModel):
    """Initialization segment reference (DASH ``initialization``, HLS ``EXT-X-MAP``)."""

    uri: str
    resolved_uri: str
    byterange: Optional[ByteRange] = None


class Segment(ManifestModel):
    uri: str
    resolved_uri: str
    duration: float
    timeline: int = 0
    discontinuity: Optional[bool] = None
    number: Optional[int] = None
    map: Optional[SegmentMap] = None
    byterange: Optional[ByteRange] = None


class Resolution(ManifestModel):
    width: int
    height: int


class RenditionAttributes(ManifestModel):
    bandwidth: Optional[int] = Field(default=None, alias="BANDWIDTH")
    resolution: Optional[Resolution] = Field(default=None, alias="RESOLUTION")
    codecs: Optional[str] = Field(default=None, alias="CODECS")
    audio: Optional[str] = Field(default=None, alias="AUDIO")


class Rendition(ManifestModel):
    """One encoded stream.

    ``segments`` is ``None`` until the rendition's media playlist has been
    fetched. The playlist-level fields (``end_list``, ``media_sequence`` ...)
    are only populated on combined playlists and media manifests.
    """

    uri: str
    resolved_uri: str
    attributes: RenditionAttributes = Field(default_factory=RenditionAttributes)
    segments: Optional[List[Segment]] = None
    target_duration: Optional[float] = None
    playlist_type: Optional[str] = None
    end_list: Optional[bool] = None
    media_sequence: Optional[int] = None
    discontinuity_sequence: Optional[int] = None
    discontinuity_starts: Optional[List[int]] = None


class MediaGroupTrack(ManifestModel):
    """A named entry of a media group.

    A leaf HLS track carries ``resolved_uri``, a DASH track carries nested
    ``playlists`` and a muxed-audio placeholder carries neither.
    """

    default: bool = False
    autoselect: bool = False
    language: Optional[str] = None
    uri: Optional[str] = None
    resolved_uri: Optional[str] = None
    playlists: Optional[List[Rendition]] = None

    def playlists_by_uri(self) -> Dict[str, Rendition]:
        return {playlist.resolved_uri: playlist for playlist in self.playlists or []}

    def as_rendition(self) -> Rendition:
        if self.playlists:
            return self.playlists[0]
        return Rendition(uri=self.uri or self.resolved_uri, resolved_uri=self.resolved_uri)


MediaGroup = Dict[str, Dict[str, MediaGroupTrack]]


class MediaGroups(ManifestModel):
    audio: MediaGroup = Field(default_factory=dict, alias="AUDIO")
    video: MediaGroup = Field(default_factory=dict, alias="VIDEO")
    closed_captions: MediaGroup = Field(default_factory=dict, alias="CLOSED-CAPTIONS")
    subtitles: MediaGroup = Field(default_factory=dict, alias="SUBTITLES")


class MediaManifest(Rendition):
    """A media playlist fetched directly as a source; it is its own rendition."""

    media_groups: MediaGroups = Field(default_factory=MediaGroups)


class MasterManifest(ManifestModel):
    uri: str = ""
    playlists: List[Rendition] = Field(default_factory=list)
    media_groups: MediaGroups = Field(default_factory=MediaGroups)

    def playlists_by_uri(self) -> Dict[str, Rendition]:
        return {playlist.resolved_uri: playlist for playlist in self.playlists}
