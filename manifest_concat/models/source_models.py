"""Models describing the sources handed to a concatenation run."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field


class SourceSpec(BaseModel):
    """One video to concatenate: where its manifest lives and what it is."""

    model_config = ConfigDict(populate_by_name=True)

    url: Optional[str] = None
    mime_type: Optional[str] = Field(default=None, alias="mimeType")

    @classmethod
    def from_value(cls, value: "SourceSpec | Mapping[str, Any]") -> "SourceSpec":
        if isinstance(value, SourceSpec):
            return value
        return cls(url=value.get("url"), mime_type=value.get("mimeType") or value.get("mime_type"))


class FetchedManifest(BaseModel):
    """A source whose manifest body has already been downloaded."""

    url: str
    body: str
    mime_type: str
