"""Exception hierarchy shared by the fetch, parse and concatenation layers.

ConcatError
├── ValidationError
├── RequestError
├── ParseError
│   └── UnsupportedMimeTypeError
└── CompatibilityError
"""

from __future__ import annotations

from typing import Optional


class ConcatError(Exception):
    """Base class for every error reported by a concatenation run."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ConcatError):
    """Raised when the caller supplied unusable sources."""


class RequestError(ConcatError):
    """Raised when a manifest request fails or returns a non-success status."""

    def __init__(self, message: str, url: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code

    @property
    def request(self) -> dict:
        return {"url": self.url, "status": self.status_code}


class ParseError(ConcatError):
    """Raised when a manifest body cannot be understood."""


class UnsupportedMimeTypeError(ParseError):
    """Raised when a declared mime type maps to neither HLS nor DASH."""


class CompatibilityError(ConcatError):
    """Raised when the selected renditions cannot be joined into one stream."""
