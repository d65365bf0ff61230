"""Component manager: the command surface over the resolution engine.

The manager owns the per-process registry and activation engine. Every
operation reads the lockfile once, mutates it in memory and writes it at
most once.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from spanner.core.activation import ActivationEngine, Runtime
from spanner.core.components import (
    API_SOURCE,
    ComponentSpec,
    Declaration,
    DeclarationStore,
    DependencyGraph,
    SpecRegistry,
    find_all,
    merge,
    normalize_identity,
)
from spanner.core.config import PathsConfig
from spanner.core.exceptions import PersistenceError
from spanner.core.git import GitTransport, Transport
from spanner.core.install import Installer
from spanner.core.lockfile import LockStore
from spanner.core.restore import Restorer
from spanner.core.sync import SyncEngine
from spanner.core.update import Reviewer, UpdateInfo, apply_updates, collect_all, review
from spanner.core.utils.paths import resolve_project_root

logger = logging.getLogger(__name__)

DeclarationLike = Union[Declaration, Mapping[str, Any]]


@dataclass
class OperationResult:
    operation: str
    lock_changed: bool = False
    lock_written: bool = False
    failures: Dict[str, str] = field(default_factory=dict)
    persistence_error: Optional[str] = None
    lock_read_error: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures and self.persistence_error is None and self.lock_read_error is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "operation": self.operation,
            "ok": self.ok,
            "lock_changed": self.lock_changed,
            "lock_written": self.lock_written,
            "failures": dict(self.failures),
            "persistence_error": self.persistence_error,
            "lock_read_error": self.lock_read_error,
            **self.details,
        }


class ComponentManager:
    """Declarative component lifecycle for one project.

    Activation is only wired up when a ``runtime`` is given; without one,
    components are installed and locked but never activated.
    """

    def __init__(
        self,
        repo_root: Optional[Path] = None,
        *,
        transport: Optional[Transport] = None,
        runtime: Optional[Runtime] = None,
        components_dir: Optional[Path] = None,
        install_root: Optional[Path] = None,
        lockfile_path: Optional[Path] = None,
    ) -> None:
        self.repo_root = resolve_project_root(repo_root)
        paths = PathsConfig(repo_root=self.repo_root)
        self.components_dir = Path(components_dir) if components_dir else paths.components_dir
        self.install_root = Path(install_root) if install_root else paths.install_root
        self.lockfile_path = Path(lockfile_path) if lockfile_path else paths.lockfile_path

        self.transport: Transport = transport or GitTransport(repo_root=self.repo_root)
        self.activation: Optional[ActivationEngine] = ActivationEngine(runtime) if runtime is not None else None
        self.installer = Installer(self.transport, self.install_root, activation=self.activation)
        self.syncer = SyncEngine(self.transport, self.install_root)
        self.restorer = Restorer(self.transport, self.install_root)

        self._store = DeclarationStore()
        self.registry = SpecRegistry()

    # ----- helpers -----

    def _read_lock(self) -> LockStore:
        return LockStore.read(self.lockfile_path)

    def _persist(self, lock: LockStore, result: OperationResult) -> None:
        if not lock.dirty:
            return
        try:
            lock.write()
            result.lock_written = True
        except PersistenceError as exc:
            logger.error("%s", exc)
            result.persistence_error = str(exc)

    @staticmethod
    def _as_declarations(declarations: Union[DeclarationLike, Iterable[DeclarationLike]], source: str) -> List[Declaration]:
        if isinstance(declarations, (Declaration, Mapping)):
            declarations = [declarations]
        out: List[Declaration] = []
        for item in declarations:
            out.append(item if isinstance(item, Declaration) else Declaration(data=item, source=source))
        return out

    # ----- commands -----

    def register(
        self,
        declarations: Union[DeclarationLike, Iterable[DeclarationLike]],
        source: str = API_SOURCE,
    ) -> List[str]:
        """Validate and merge declarations without installing anything.

        Returns the declared root identities. Nothing changes when validation,
        conflict or cycle checks fail.
        """
        items = self._as_declarations(declarations, source)
        candidate_store = self._store.copy()
        candidate_store.extend(items)
        candidate = merge(candidate_store)

        roots: List[str] = []
        for decl in items:
            identity = normalize_identity(decl.data["url"])
            if identity not in roots:
                roots.append(identity)
        DependencyGraph(candidate).order(roots)

        self._store = candidate_store
        self.registry = candidate
        return roots

    def load(self, directory: Optional[Path] = None) -> List[str]:
        """Register the declarations found under ``directory`` (no install)."""
        return self.register(find_all(Path(directory) if directory else self.components_dir))

    def setup(self, directory: Optional[Path] = None) -> OperationResult:
        """Load declarations from the components directory and ``add`` them."""
        directory = Path(directory) if directory else self.components_dir
        declarations = find_all(directory)
        if not declarations:
            logger.info("No components found in %s", directory)
            return OperationResult("setup")
        result = self.add(declarations)
        result.operation = "setup"
        return result

    def add(
        self,
        declarations: Union[DeclarationLike, Iterable[DeclarationLike]],
        source: str = API_SOURCE,
    ) -> OperationResult:
        """Register declarations, then install them and their dependencies."""
        roots = self.register(declarations, source)

        lock = self._read_lock()
        run = self.installer.install_all(roots, self.registry, lock)
        result = OperationResult(
            "add",
            lock_changed=run.lock_changed,
            failures=dict(run.failures),
            details={"roots": roots, "installed": list(run.cloned)},
        )
        self._persist(lock, result)
        return result

    def sync(self) -> OperationResult:
        result = OperationResult("sync")
        if not len(self.registry):
            logger.warning("No components registered. Call setup() first.")
            return result

        lock = self._read_lock()
        removed: List[str] = []
        for identity in list(lock):
            if identity not in self.registry:
                logger.info("Removing %s from lockfile", identity)
                lock.remove(identity)
                removed.append(identity)

        run = self.installer.install_all(list(self.registry), self.registry, lock)
        report = self.syncer.sync_all(self.registry, lock)

        result.lock_changed = bool(removed) or run.lock_changed or report.lock_changed
        result.failures.update(run.failures)
        result.failures.update(report.failures)
        result.details = {
            "installed": list(run.cloned),
            "synced": list(report.synced),
            "removed_from_lock": removed,
        }
        self._persist(lock, result)
        return result

    def collect_updates(self) -> List[UpdateInfo]:
        """Return available updates without changing anything."""
        return collect_all(self.registry, self._read_lock(), self.transport, self.install_root)

    def update(self, reviewer: Reviewer) -> OperationResult:
        """Collect updates, let ``reviewer`` approve some, lock them and restore."""
        result = OperationResult("update", details={"updates": [], "approved": []})
        if not len(self.registry):
            logger.warning("No components registered. Call setup() first.")
            return result

        lock = self._read_lock()
        if lock.read_error:
            # An unparseable lock reads as empty.
            logger.error("Refusing to update: %s", lock.read_error)
            result.lock_read_error = lock.read_error
            return result
        updates = collect_all(self.registry, lock, self.transport, self.install_root)
        result.details["updates"] = [u.to_dict() for u in updates]
        if not updates:
            logger.info("All components up to date.")
            return result
        logger.info("Found %d component(s) with updates.", len(updates))

        approved = review(updates, reviewer)
        result.details["approved"] = [u.identity for u in approved]
        if not approved:
            logger.info("No updates selected.")
            return result

        try:
            result.lock_changed = apply_updates(approved, lock)
            result.lock_written = result.lock_changed
        except PersistenceError as exc:
            logger.error("%s", exc)
            result.persistence_error = str(exc)
            return result

        logger.info("Applying %d update(s)...", len(approved))
        report = self.restorer.restore_all(lock)
        result.failures.update(report.failures)
        result.details["restore"] = report.to_dict()
        return result

    def restore(self) -> OperationResult:
        """Make the install root match the lockfile."""
        lock = self._read_lock()
        report = self.restorer.restore_all(lock)
        return OperationResult(
            "restore",
            failures=dict(report.failures),
            lock_read_error=lock.read_error,
            details=report.to_dict(),
        )

    def list_registered(self) -> Dict[str, ComponentSpec]:
        """Return the canonical identity -> spec mapping."""
        return self.registry.specs


__all__ = ["ComponentManager", "OperationResult"]
