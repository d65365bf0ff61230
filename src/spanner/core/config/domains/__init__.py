"""Domain-specific configuration accessors."""
from __future__ import annotations

from .logging import LoggingConfig
from .paths import PathsConfig
from .timeouts import TimeoutsConfig

__all__ = ["LoggingConfig", "PathsConfig", "TimeoutsConfig"]
