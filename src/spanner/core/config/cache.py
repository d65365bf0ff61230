"""Centralized configuration caching.

All domain configs share one loaded configuration per project root. The
cache key includes a fingerprint of SPANNER_* environment variables and of
the project/user config file mtimes so long-running processes and tests
never observe stale config.
"""
from __future__ import annotations

import hashlib
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from spanner.core.utils.io import iter_yaml_files
from spanner.core.utils.paths import resolve_project_root

_config_cache: Dict[str, Dict[str, Any]] = {}


def _fingerprint_dir(directory: Path) -> List[Tuple[str, int, int]]:
    files: List[Tuple[str, int, int]] = []
    for p in iter_yaml_files(directory):
        try:
            st = p.stat()
            files.append((p.name, int(st.st_mtime_ns), int(st.st_size)))
        except OSError:
            files.append((p.name, 0, 0))
    return files


def _cache_key(repo_root: Path, config_dirs: List[Path]) -> str:
    env_items = sorted(
        (k, os.environ.get(k, ""))
        for k in os.environ.keys()
        if k.startswith("SPANNER_")
    )
    env_fp = hashlib.sha256(repr(env_items).encode("utf-8")).hexdigest()[:12]
    cfg_files = [_fingerprint_dir(d) for d in config_dirs]
    cfg_fp = hashlib.sha256(repr(cfg_files).encode("utf-8")).hexdigest()[:12]
    return f"{repo_root}:env={env_fp}:cfg={cfg_fp}"


def get_cached_config(repo_root: Optional[Path] = None, *, validate: bool = True) -> Dict[str, Any]:
    """Return the merged configuration for ``repo_root``, loading it once."""
    from .manager import ConfigManager

    root = Path(repo_root).expanduser().resolve() if repo_root else resolve_project_root()
    manager = ConfigManager(root)
    key = _cache_key(root, manager.config_dirs())
    cached = _config_cache.get(key)
    if cached is None:
        cached = manager.load_config(validate=validate)
        _config_cache[key] = cached
    return cached


def clear_all_caches() -> None:
    """Drop every cached configuration."""
    _config_cache.clear()


__all__ = ["get_cached_config", "clear_all_caches"]
