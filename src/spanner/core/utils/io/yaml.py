"""YAML I/O utilities."""
from __future__ import annotations

import fcntl
from pathlib import Path
from typing import Any, Iterator

import yaml


def read_yaml(path: Path, default: Any = None, raise_on_error: bool = False) -> Any:
    """Read YAML with error handling.

    Returns ``default`` if the file is missing or invalid, unless
    ``raise_on_error`` is True.

    Examples:
        >>> config = read_yaml(Path("config.yaml"), default={})
    """
    path = Path(path)
    if not path.exists():
        if raise_on_error:
            raise FileNotFoundError(f"File not found: {path}")
        return default

    try:
        with open(path, "r", encoding="utf-8") as f:
            fcntl.flock(f.fileno(), fcntl.LOCK_SH)
            try:
                data = yaml.safe_load(f)
            finally:
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        return data if data is not None else default
    except (OSError, yaml.YAMLError):
        if raise_on_error:
            raise
        return default


def iter_yaml_files(directory: Path, *, recursive: bool = False) -> Iterator[Path]:
    """Yield ``*.yaml``/``*.yml`` files under ``directory`` in sorted order."""
    directory = Path(directory)
    if not directory.is_dir():
        return
    pattern = "**/*" if recursive else "*"
    candidates = [
        p for p in directory.glob(pattern)
        if p.is_file() and p.suffix in {".yaml", ".yml"}
    ]
    yield from sorted(candidates)


__all__ = ["read_yaml", "iter_yaml_files"]
