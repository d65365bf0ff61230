"""Shared CLI utilities."""
from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any, Dict, Optional

from spanner.core.logs import configure_logging
from spanner.core.manager import ComponentManager, OperationResult
from spanner.core.utils.paths import resolve_project_root

from ._output import OutputFormatter


def get_repo_root(args: argparse.Namespace) -> Path:
    """Project root from ``--repo-root``, SPANNER_PROJECT_ROOT or cwd."""
    return resolve_project_root(getattr(args, "repo_root", None))


def setup_logging(args: argparse.Namespace, repo_root: Optional[Path] = None) -> None:
    """Configure logging from config, honouring ``--verbose`` and ``--json``."""
    from spanner.core.config import LoggingConfig

    cfg = LoggingConfig(repo_root=repo_root or get_repo_root(args))
    level = "DEBUG" if getattr(args, "verbose", False) else cfg.level
    configure_logging(level, cfg.file, json_mode=bool(getattr(args, "json", False)))


def build_manager(args: argparse.Namespace, *, load: bool = True) -> ComponentManager:
    """Create a manager for the project and register its declarations."""
    manager = ComponentManager(get_repo_root(args))
    if load:
        manager.load()
    return manager


def emit_result(
    formatter: OutputFormatter,
    result: OperationResult,
    message: str,
    extra: Optional[Dict[str, Any]] = None,
) -> int:
    """Print an operation result; return the process exit code."""
    if formatter.json_mode:
        formatter.json_output({**result.to_dict(), **(extra or {})})
    else:
        formatter.text(message)
        for identity, reason in sorted(result.failures.items()):
            formatter.text_kv(identity, reason)
        if result.persistence_error:
            formatter.text(f"Lockfile not written: {result.persistence_error}")
    return 0 if result.ok else 1


__all__ = ["build_manager", "emit_result", "get_repo_root", "setup_logging"]
