"""Core engine: declarations, registry, install, sync, lock, activation."""
from __future__ import annotations

__all__: list[str] = []
