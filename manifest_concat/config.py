"""Runtime settings, read from the environment (and ``.env``) by the CLI."""

from __future__ import annotations

import os
from typing import List, Optional

from pydantic import BaseModel

# Initial bandwidth estimate of the playback engine, in bits per second.
DEFAULT_INITIAL_BANDWIDTH = 4194304
DEFAULT_TARGET_RESOLUTION = 720
DEFAULT_MASTER_URI = "combined-master"


def _env_str(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or value == "":
        return None
    return value


def _env_int(name: str) -> int | None:
    value = _env_str(name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _env_list(name: str) -> list[str] | None:
    raw = _env_str(name)
    if not raw:
        return None
    items = [item.strip() for item in raw.split(",") if item.strip()]
    return items or None


class ConcatSettings(BaseModel):
    """Knobs for a concatenation run."""

    initial_bandwidth: int = DEFAULT_INITIAL_BANDWIDTH
    target_vertical_resolution: int = DEFAULT_TARGET_RESOLUTION
    timeout: int = 10
    master_uri: str = DEFAULT_MASTER_URI
    supported_codecs: Optional[List[str]] = None

    @classmethod
    def from_env(cls) -> "ConcatSettings":
        values = {
            "initial_bandwidth": _env_int("INITIAL_BANDWIDTH"),
            "target_vertical_resolution": _env_int("TARGET_RESOLUTION"),
            "timeout": _env_int("REQUEST_TIMEOUT"),
            "master_uri": _env_str("MASTER_URI"),
            "supported_codecs": _env_list("SUPPORTED_CODECS"),
        }
        return cls(**{key: value for key, value in values.items() if value is not None})
