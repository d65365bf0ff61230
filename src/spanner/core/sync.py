"""Move working copies to the version their pin asks for."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Set

from spanner.core.components import ComponentSpec, DependencyGraph, PinKind, SpecRegistry
from spanner.core.exceptions import TransportError
from spanner.core.git import Transport, revisions_match
from spanner.core.lockfile import LockEntry, LockStore

logger = logging.getLogger(__name__)


@dataclass
class SyncReport:
    lock_changed: bool = False
    synced: List[str] = field(default_factory=list)
    failures: Dict[str, str] = field(default_factory=dict)


class SyncEngine:
    def __init__(self, transport: Transport, install_root: Path) -> None:
        self.transport = transport
        self.install_root = Path(install_root)

    def _resolve(self, spec: ComponentSpec, path: Path) -> Optional[LockEntry]:
        pin = spec.pin
        kind = pin.kind
        if kind is PinKind.COMMIT:
            current = self.transport.current_revision(path)
            if not revisions_match(current, pin.commit):
                self.transport.checkout(path, pin.commit)
                current = self.transport.current_revision(path)
                logger.info("Synced %s to %s", spec.identity, current[:7])
            return LockEntry(branch=pin.branch or "", commit=current)
        if kind is PinKind.TAG:
            self.transport.checkout(path, pin.tag)
            logger.info("Synced %s to tag %s", spec.identity, pin.tag)
            return LockEntry(
                branch=self.transport.current_branch(path) or "",
                commit=self.transport.current_revision(path),
            )
        if kind is PinKind.BRANCH:
            # Checkout first so a detached HEAD gets back onto the branch.
            self.transport.checkout(path, pin.branch)
            self.transport.pull(path)
            logger.info("Synced %s to latest on %s", spec.identity, pin.branch)
            return LockEntry(branch=pin.branch, commit=self.transport.current_revision(path))
        return None

    def sync(
        self,
        identity: str,
        spec: ComponentSpec,
        lock_store: LockStore,
        visited: Set[str],
        failures: Optional[Dict[str, str]] = None,
    ) -> bool:
        """Sync one component; return True if its lock entry changed."""
        if identity in visited:
            return False
        visited.add(identity)

        path = self.install_root / spec.name
        if not path.is_dir():
            logger.debug("Skipping sync of %s: not installed", identity)
            return False

        try:
            entry = self._resolve(spec, path)
        except TransportError as exc:
            logger.error("Failed to sync %s: %s", identity, exc)
            if failures is not None:
                failures[identity] = str(exc)
            return False

        if entry is None:
            return False
        return lock_store.set(identity, entry)

    def sync_all(self, registry: SpecRegistry, lock_store: LockStore) -> SyncReport:
        report = SyncReport()
        visited: Set[str] = set()
        for identity in DependencyGraph(registry).order():
            spec = registry[identity]
            if self.sync(identity, spec, lock_store, visited, report.failures):
                report.lock_changed = True
            if identity not in report.failures and (self.install_root / spec.name).is_dir():
                report.synced.append(identity)
        return report


__all__ = ["SyncEngine", "SyncReport"]
