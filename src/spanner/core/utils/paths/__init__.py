"""Path resolution helpers."""
from __future__ import annotations

from .resolver import (
    PROJECT_ROOT_ENV,
    get_project_config_dir,
    get_user_config_dir,
    resolve_project_root,
)

__all__ = [
    "PROJECT_ROOT_ENV",
    "resolve_project_root",
    "get_project_config_dir",
    "get_user_config_dir",
]
