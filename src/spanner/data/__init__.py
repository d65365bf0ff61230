"""
spanner data resource helpers.

Provides access to bundled configuration defaults and JSON schemas
using importlib.resources.
"""

from __future__ import annotations

from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import yaml


def get_data_path(subpackage: str, filename: str = "") -> Path:
    """
    Get absolute path to a data file or directory.

    Args:
        subpackage: Name of the data subfolder (e.g., "config", "schemas")
        filename: Optional filename within the subfolder

    Returns:
        Absolute path to the file or directory

    Example:
        >>> get_data_path("config", "paths.yaml")
        PosixPath('/path/to/spanner/data/config/paths.yaml')
    """
    pkg = resources.files("spanner.data")
    base = Path(str(pkg / subpackage))
    return base / filename if filename else base


@lru_cache(maxsize=32)
def read_yaml(subpackage: str, filename: str) -> dict[str, Any]:
    """
    Read and parse a bundled YAML data file (cached).

    Args:
        subpackage: Name of the data subfolder
        filename: YAML filename

    Returns:
        Parsed YAML content as dictionary
    """
    path = get_data_path(subpackage, filename)
    return yaml.safe_load(path.read_text(encoding="utf-8")) or {}


__all__ = ["get_data_path", "read_yaml"]
