"""Lookup of the `engines.node` constraint in the nearest package.json."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional, Union

from .semver import valid_range

logger = logging.getLogger(__name__)

MANIFEST_NAME = "package.json"


def find_manifest(filename: Union[str, Path]) -> Optional[Path]:
    """Return the closest package.json at or above the directory of `filename`."""
    path = Path(filename).resolve()
    directory = path if path.is_dir() else path.parent
    for candidate in (directory, *directory.parents):
        manifest = candidate / MANIFEST_NAME
        if manifest.is_file():
            return manifest
    return None


def find_engines_range(filename: Union[str, Path]) -> Optional[str]:
    """
    Read the Node.js version range a file's package declares.

    Returns:
        The normalized `engines.node` range, or None when there is no
        manifest, the field is missing, or it is not a valid range.
    """
    manifest = find_manifest(filename)
    if manifest is None:
        return None
    try:
        info = json.loads(manifest.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable %s: %s", manifest, exc)
        return None

    engines = info.get("engines") if isinstance(info, dict) else None
    node_range = engines.get("node") if isinstance(engines, dict) else None
    normalized = valid_range(node_range)
    logger.debug("engines.node in %s: %r -> %r", manifest, node_range, normalized)
    return normalized


__all__ = ["MANIFEST_NAME", "find_engines_range", "find_manifest"]
