"""Layered YAML configuration."""
from __future__ import annotations

from .base import BaseDomainConfig
from .cache import clear_all_caches, get_cached_config
from .domains import LoggingConfig, PathsConfig, TimeoutsConfig
from .manager import ConfigManager

__all__ = [
    "BaseDomainConfig",
    "ConfigManager",
    "LoggingConfig",
    "PathsConfig",
    "TimeoutsConfig",
    "clear_all_caches",
    "get_cached_config",
]
