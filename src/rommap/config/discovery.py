"""Locate the ``rommap.toml`` a command runs against."""

from __future__ import annotations

import os
from pathlib import Path

CONFIG_FILENAME = "rommap.toml"
CONFIG_ENV_VAR = "ROMMAP_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Return the config file for *start* (default: cwd), or None.

    ``ROMMAP_CONFIG`` names the file outright; a value pointing at no file
    means no config at all rather than falling back to discovery.
    Otherwise the nearest ``rommap.toml`` in *start* or its ancestors wins.
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        path = Path(override)
        return path if path.is_file() else None

    directory = (start or Path.cwd()).resolve()
    for candidate_dir in (directory, *directory.parents):
        candidate = candidate_dir / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None
