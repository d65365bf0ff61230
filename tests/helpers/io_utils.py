"""Helpers for writing YAML declarations and config overlays."""
from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml


def write_yaml(path: Path, data: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
    return path


def write_component(project_root: Path, relpath: str, data: Any) -> Path:
    """Write a declaration file under ``.spanner/components``."""
    return write_yaml(project_root / ".spanner" / "components" / relpath, data)


def write_config(project_root: Path, name: str, data: Any) -> Path:
    """Write a project config overlay under ``.spanner/config``."""
    return write_yaml(project_root / ".spanner" / "config" / name, data)
