from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

from spanner.core.utils.io import ensure_directory

PACKAGE_LOGGER = "spanner"
STDERR_FORMAT = "[spanner] %(levelname)s: %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_STDERR_HANDLER: logging.Handler | None = None
_FILE_HANDLER: logging.Handler | None = None
_CONFIGURED_LOG_PATH: str | None = None


def _level_from_name(name: str) -> int:
    value = getattr(logging, str(name).upper(), None)
    return value if isinstance(value, int) else logging.INFO


def _drop(handler: Optional[logging.Handler]) -> None:
    if handler is None:
        return
    logging.getLogger(PACKAGE_LOGGER).removeHandler(handler)
    handler.close()


def configure_logging(
    level: str = "INFO",
    log_path: Optional[Path] = None,
    *,
    json_mode: bool = False,
) -> None:
    """Configure the ``spanner`` logger for CLI use.

    Installs a stderr handler with a ``[spanner]`` prefix (omitted in JSON mode
    so stdout/stderr stay machine-readable) and, when ``log_path`` is given, a
    file handler. Idempotent per-process: repeated calls replace the handlers
    this module installed rather than stacking new ones.
    """
    global _STDERR_HANDLER, _FILE_HANDLER, _CONFIGURED_LOG_PATH

    lvl = _level_from_name(level)
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(lvl)

    _drop(_STDERR_HANDLER)
    _STDERR_HANDLER = None
    if json_mode:
        # Keep logging's lastResort handler from writing to stderr.
        _STDERR_HANDLER = logging.NullHandler()
    else:
        _STDERR_HANDLER = logging.StreamHandler(sys.stderr)
        _STDERR_HANDLER.setFormatter(logging.Formatter(STDERR_FORMAT))
    _STDERR_HANDLER.setLevel(lvl)
    logger.addHandler(_STDERR_HANDLER)

    resolved = str(Path(log_path).expanduser().resolve()) if log_path else None
    if resolved == _CONFIGURED_LOG_PATH and _FILE_HANDLER is not None:
        _FILE_HANDLER.setLevel(lvl)
        return

    _drop(_FILE_HANDLER)
    _FILE_HANDLER = None
    _CONFIGURED_LOG_PATH = None
    if resolved:
        ensure_directory(Path(resolved).parent)
        fh = logging.FileHandler(resolved, encoding="utf-8")
        fh.setLevel(lvl)
        fh.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(fh)
        _FILE_HANDLER = fh
        _CONFIGURED_LOG_PATH = resolved


def reset_logging_for_tests() -> None:
    """Test-only: remove handlers installed by :func:`configure_logging`."""
    global _STDERR_HANDLER, _FILE_HANDLER, _CONFIGURED_LOG_PATH
    _drop(_STDERR_HANDLER)
    _drop(_FILE_HANDLER)
    _STDERR_HANDLER = None
    _FILE_HANDLER = None
    _CONFIGURED_LOG_PATH = None
    logging.getLogger(PACKAGE_LOGGER).setLevel(logging.NOTSET)


__all__ = ["configure_logging", "reset_logging_for_tests"]
