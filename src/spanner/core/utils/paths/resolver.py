"""Project root and config directory resolution.

Resolution priority for the project root:
1. Explicit argument (``--repo-root`` on the CLI)
2. ``SPANNER_PROJECT_ROOT`` environment variable
3. Current working directory
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from spanner.data import read_yaml as read_bundled_yaml

PROJECT_ROOT_ENV = "SPANNER_PROJECT_ROOT"
DEFAULT_CONFIG_DIR_NAME = ".spanner"


def resolve_project_root(explicit: Optional[Path | str] = None) -> Path:
    """Return the absolute project root."""
    if explicit:
        return Path(explicit).expanduser().resolve()
    env_root = os.environ.get(PROJECT_ROOT_ENV)
    if env_root and env_root.strip():
        return Path(env_root.strip()).expanduser().resolve()
    return Path.cwd().resolve()


def _bundled_dir_name(key: str) -> Optional[str]:
    section = read_bundled_yaml("config", "paths.yaml").get("paths")
    if isinstance(section, dict):
        value = section.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def _dir_name(key: str) -> str:
    # Env override first; this value is needed before ConfigManager can run.
    env_override = os.environ.get(f"SPANNER_paths__{key}")
    if env_override and env_override.strip():
        return env_override.strip()
    return _bundled_dir_name(key) or DEFAULT_CONFIG_DIR_NAME


def get_project_config_dir(repo_root: Path, create: bool = False) -> Path:
    """Return ``<repo_root>/.spanner`` (or its configured override)."""
    name = _dir_name("project_config_dir")
    path = Path(name).expanduser()
    if not path.is_absolute():
        path = Path(repo_root) / path
    if create:
        path.mkdir(parents=True, exist_ok=True)
    return path


def get_user_config_dir(create: bool = False) -> Path:
    """Return the user-level config directory (default ``~/.spanner``)."""
    path = Path(_dir_name("user_config_dir")).expanduser()
    if not path.is_absolute():
        path = Path.home() / path
    if create:
        path.mkdir(parents=True, exist_ok=True)
    return path


__all__ = [
    "PROJECT_ROOT_ENV",
    "resolve_project_root",
    "get_project_config_dir",
    "get_user_config_dir",
]
