"""Canonical component registry.

``merge`` turns raw declarations into one ``ComponentSpec`` per identity:

1. every declaration is validated before anything is merged;
2. explicit declarations sharing an identity are unified; the configured
   one wins, and two configured declarations are a ``ConflictError``;
3. dependencies that were never declared are filled in as bare records.
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from spanner.core.exceptions import ConflictError

from .model import DEPENDENCY_SOURCE, ComponentSpec
from .store import Declaration
from .validation import validate_declaration

logger = logging.getLogger(__name__)


class SpecRegistry:
    """Mapping of identity to canonical spec plus the source it came from."""

    def __init__(
        self,
        specs: Optional[Mapping[str, ComponentSpec]] = None,
        sources: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._specs: Dict[str, ComponentSpec] = dict(specs or {})
        self._sources: Dict[str, str] = dict(sources or {})
        for identity, spec in self._specs.items():
            self._sources.setdefault(identity, spec.source)

    def get(self, identity: str) -> Optional[ComponentSpec]:
        return self._specs.get(identity)

    def __getitem__(self, identity: str) -> ComponentSpec:
        return self._specs[identity]

    def __contains__(self, identity: object) -> bool:
        return identity in self._specs

    def __iter__(self) -> Iterator[str]:
        return iter(self._specs)

    def __len__(self) -> int:
        return len(self._specs)

    def items(self) -> Iterator[Tuple[str, ComponentSpec]]:
        return iter(list(self._specs.items()))

    def source_of(self, identity: str) -> Optional[str]:
        return self._sources.get(identity)

    @property
    def specs(self) -> Dict[str, ComponentSpec]:
        return dict(self._specs)

    @property
    def sources(self) -> Dict[str, str]:
        return dict(self._sources)

    def _put(self, spec: ComponentSpec) -> None:
        self._specs[spec.identity] = spec
        self._sources[spec.identity] = spec.source


def _merge_one(registry: SpecRegistry, spec: ComponentSpec) -> None:
    existing = registry.get(spec.identity)
    if existing is None:
        registry._put(spec)
        return

    existing_configured = existing.has_configuration()
    new_configured = spec.has_configuration()
    if existing_configured and new_configured:
        raise ConflictError(
            f"conflict: component '{spec.identity}' has configuration in both "
            f"'{existing.source}' and '{spec.source}'",
            identity=spec.identity,
            sources=[existing.source, spec.source],
        )
    if new_configured:
        registry._put(spec)
    # Otherwise keep the existing record (configured, or both bare).


def _check_install_names(registry: SpecRegistry) -> None:
    seen: Dict[str, str] = {}
    for identity, spec in registry.items():
        other = seen.get(spec.name)
        if other is not None:
            raise ConflictError(
                f"conflict: '{other}' and '{identity}' would both install as '{spec.name}'",
                identity=identity,
                sources=[registry.source_of(other) or "", registry.source_of(identity) or ""],
                context={"name": spec.name, "identities": [other, identity]},
            )
        seen[spec.name] = identity


def merge(declarations: Iterable[Declaration]) -> SpecRegistry:
    """Validate and merge ``declarations`` into a new ``SpecRegistry``.

    Raises:
        ValidationError: a declaration is malformed.
        ConflictError: two declarations configure the same identity, or two
            identities share an install name.
    """
    decls = list(declarations)
    for decl in decls:
        validate_declaration(decl.data, source=decl.source)

    explicit: List[ComponentSpec] = [
        ComponentSpec.from_declaration(decl.data, source=decl.source) for decl in decls
    ]

    registry = SpecRegistry()
    for spec in explicit:
        _merge_one(registry, spec)

    for spec in explicit:
        for dep in spec.dependencies:
            if dep not in registry:
                logger.debug("Adding bare dependency %s (required by %s)", dep, spec.identity)
                registry._put(ComponentSpec.bare(dep, source=DEPENDENCY_SOURCE))

    _check_install_names(registry)
    return registry


__all__ = ["SpecRegistry", "merge"]
