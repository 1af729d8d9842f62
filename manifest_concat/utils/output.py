"""Serialization of the combined master manifest to JSON."""

from __future__ import annotations

import json
import os
import sys
from typing import Any, Dict, Optional

from ..models import MasterManifest


def manifest_to_dict(manifest: MasterManifest) -> Dict[str, Any]:
    """Dumps ``manifest`` in the playback engine's camelCase shape."""

    return manifest.model_dump(by_alias=True, exclude_none=True, mode="json")


def write_manifest(manifest: MasterManifest, path: Optional[str] = None) -> None:
    """Writes ``manifest`` as indented JSON to ``path`` (stdout when omitted)."""

    payload = manifest_to_dict(manifest)
    if not path or path == "-":
        json.dump(payload, sys.stdout, ensure_ascii=False, indent=2)
        sys.stdout.write("\n")
        return

    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "w", encoding="utf-8") as handle:
        json.dump(payload, handle, ensure_ascii=False, indent=2)
