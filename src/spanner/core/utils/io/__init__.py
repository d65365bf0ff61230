"""I/O utilities for spanner.

- Core: atomic writes, directory management, text I/O
- JSON: read/write with locking
- YAML: read with locking, file discovery
"""
from __future__ import annotations

from .core import (
    PathLike,
    atomic_write,
    ensure_directory,
    ensure_parent_dir,
    read_text,
    write_text,
)
from .json import read_json, write_json_atomic
from .yaml import iter_yaml_files, read_yaml

__all__ = [
    "PathLike",
    "ensure_parent_dir",
    "ensure_directory",
    "atomic_write",
    "read_text",
    "write_text",
    "read_json",
    "write_json_atomic",
    "read_yaml",
    "iter_yaml_files",
]
