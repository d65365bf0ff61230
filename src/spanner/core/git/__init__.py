"""Version-control transport."""
from __future__ import annotations

from .operations import GitTransport, Transport, revisions_match

__all__ = ["GitTransport", "Transport", "revisions_match"]
