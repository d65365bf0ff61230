"""Component declarations: model, validation, registry and dependency graph."""
from __future__ import annotations

from .graph import DependencyGraph
from .identity import component_name, normalize_identity
from .loader import find_all, load_file
from .model import (
    API_SOURCE,
    DEPENDENCY_SOURCE,
    ComponentSpec,
    DependencyRef,
    PinKind,
    TriggerKind,
    Triggers,
    VersionPin,
)
from .registry import SpecRegistry, merge
from .store import Declaration, DeclarationStore
from .validation import validate_declaration

__all__ = [
    "API_SOURCE",
    "DEPENDENCY_SOURCE",
    "ComponentSpec",
    "Declaration",
    "DeclarationStore",
    "DependencyGraph",
    "DependencyRef",
    "PinKind",
    "SpecRegistry",
    "TriggerKind",
    "Triggers",
    "VersionPin",
    "component_name",
    "find_all",
    "load_file",
    "merge",
    "normalize_identity",
    "validate_declaration",
]
