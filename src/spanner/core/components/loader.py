"""Discover declarations from YAML files."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List, Mapping, Optional

import yaml

from spanner.core.exceptions import ValidationError
from spanner.core.utils.io import iter_yaml_files, read_yaml

from .store import Declaration

logger = logging.getLogger(__name__)


def _declarations_from(doc: Any, source: str) -> List[Declaration]:
    if doc is None:
        return []
    if isinstance(doc, Mapping):
        return [Declaration(data=dict(doc), source=source)]
    if isinstance(doc, list):
        out: List[Declaration] = []
        for i, item in enumerate(doc):
            if not isinstance(item, Mapping):
                raise ValidationError(
                    f"{source}: entry #{i + 1} must be a component mapping, got {type(item).__name__}",
                    source=source,
                )
            out.append(Declaration(data=dict(item), source=source))
        return out
    raise ValidationError(
        f"{source}: expected a component mapping or a list of them, got {type(doc).__name__}",
        source=source,
    )


def load_file(path: Path, source: Optional[str] = None) -> List[Declaration]:
    """Load the declarations in one YAML file.

    Raises:
        ValidationError: the file is not valid YAML or has the wrong shape.
        FileNotFoundError: the file does not exist.
    """
    path = Path(path)
    source = source or path.name
    try:
        doc = read_yaml(path, raise_on_error=True)
    except yaml.YAMLError as exc:
        raise ValidationError(f"{source}: invalid YAML: {exc}", source=source) from exc
    return _declarations_from(doc, source)


def find_all(directory: Path) -> List[Declaration]:
    """Load every declaration under ``directory`` (recursive, sorted).

    Each file holds one mapping or a list of mappings. The declaration source
    is the file path relative to ``directory``. A missing directory yields no
    declarations.
    """
    directory = Path(directory)
    if not directory.is_dir():
        logger.warning("Component directory not found: %s", directory)
        return []

    found: List[Declaration] = []
    for path in iter_yaml_files(directory, recursive=True):
        found.extend(load_file(path, path.relative_to(directory).as_posix()))
    logger.debug("Loaded %d declaration(s) from %s", len(found), directory)
    return found


__all__ = ["find_all", "load_file"]
