"""Concatenate HLS and DASH sources into a single synthetic master manifest."""

from .concat import ManifestConcatenator
from .config import ConcatSettings
from .exceptions import (
    CompatibilityError,
    ConcatError,
    ParseError,
    RequestError,
    UnsupportedMimeTypeError,
    ValidationError,
)

__version__ = "0.1.0"

__all__ = [
    "ManifestConcatenator",
    "ConcatSettings",
    "ConcatError",
    "CompatibilityError",
    "ParseError",
    "RequestError",
    "UnsupportedMimeTypeError",
    "ValidationError",
]
