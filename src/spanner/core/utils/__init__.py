"""Shared utilities (I/O, merging, paths, subprocess)."""
from __future__ import annotations

__all__: list[str] = []
