"""Dependency-first installation of registered components."""
from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from spanner.core.activation import ActivationEngine
from spanner.core.components import ComponentSpec, DependencyGraph, SpecRegistry, component_name
from spanner.core.exceptions import CycleError, TransportError
from spanner.core.git import Transport
from spanner.core.lockfile import LockEntry, LockStore

logger = logging.getLogger(__name__)


class InstallState(str, Enum):
    UNPROCESSED = "unprocessed"
    PROCESSING = "processing"
    INSTALLED = "installed"
    FAILED = "failed"


@dataclass
class InstallRun:
    """Per-run installation state; never shared between runs."""

    states: Dict[str, InstallState] = field(default_factory=dict)
    failures: Dict[str, str] = field(default_factory=dict)
    cloned: List[str] = field(default_factory=list)
    lock_changed: bool = False

    def state(self, identity: str) -> InstallState:
        return self.states.get(identity, InstallState.UNPROCESSED)

    def fail(self, identity: str, reason: str) -> None:
        self.states[identity] = InstallState.FAILED
        self.failures[identity] = reason


def is_corrupt_install(path: Path) -> bool:
    """A directory holding nothing besides ``.git`` is a broken clone."""
    if not path.is_dir():
        return False
    return {p.name for p in path.iterdir()} <= {".git"}


class Installer:
    def __init__(
        self,
        transport: Transport,
        install_root: Path,
        activation: Optional[ActivationEngine] = None,
    ) -> None:
        self.transport = transport
        self.install_root = Path(install_root)
        self.activation = activation

    def install_path(self, identity: str) -> Path:
        return self.install_root / component_name(identity)

    def _clone(self, spec: ComponentSpec, path: Path) -> None:
        if is_corrupt_install(path):
            logger.warning("Removing corrupt install of %s at %s", spec.identity, path)
            shutil.rmtree(path)
        if path.exists():
            return
        logger.info("Installing %s...", spec.name)
        self.transport.clone(
            spec.identity,
            path,
            branch=spec.pin.branch,
            tag=spec.pin.tag,
            commit=spec.pin.commit,
        )
        logger.info("Installed %s", spec.identity)

    def _ensure_lock_entry(self, spec: ComponentSpec, path: Path, lock_store: LockStore) -> bool:
        if lock_store.get(spec.identity) is not None:
            return False
        commit = self.transport.current_revision(path)
        branch = self.transport.current_branch(path) or spec.pin.branch or ""
        return lock_store.set(spec.identity, LockEntry(branch=branch, commit=commit))

    def ensure_installed(
        self,
        identity: str,
        registry: SpecRegistry,
        lock_store: LockStore,
        run: InstallRun,
    ) -> bool:
        """Install ``identity`` and its dependencies; return True if the lock changed."""
        state = run.state(identity)
        if state in (InstallState.INSTALLED, InstallState.FAILED):
            return False
        if state is InstallState.PROCESSING:
            raise CycleError([identity])

        spec = registry.get(identity) or ComponentSpec.bare(identity)
        run.states[identity] = InstallState.PROCESSING

        lock_changed = False
        failed_deps: List[str] = []
        for dep in spec.dependencies:
            if self.ensure_installed(dep, registry, lock_store, run):
                lock_changed = True
            if run.state(dep) is InstallState.FAILED:
                failed_deps.append(dep)

        if failed_deps:
            reason = "dependency failed: " + ", ".join(failed_deps)
            logger.error("Skipping %s: %s", identity, reason)
            run.fail(identity, reason)
            run.lock_changed = run.lock_changed or lock_changed
            return lock_changed

        path = self.install_path(identity)
        existed = path.exists() and not is_corrupt_install(path)
        try:
            self._clone(spec, path)
            if self._ensure_lock_entry(spec, path, lock_store):
                lock_changed = True
        except TransportError as exc:
            logger.error("Failed to install %s: %s", identity, exc)
            run.fail(identity, str(exc))
            run.lock_changed = run.lock_changed or lock_changed
            return lock_changed

        if not existed:
            run.cloned.append(identity)
        run.states[identity] = InstallState.INSTALLED
        if self.activation is not None:
            self.activation.register(spec, path)

        run.lock_changed = run.lock_changed or lock_changed
        return lock_changed

    def install_all(
        self,
        roots: Iterable[str],
        registry: SpecRegistry,
        lock_store: LockStore,
    ) -> InstallRun:
        """Install ``roots`` (and their closure) in dependency-first order.

        Raises:
            CycleError: before anything is installed.
        """
        order = DependencyGraph(registry).order(list(roots))
        run = InstallRun()
        for identity in order:
            self.ensure_installed(identity, registry, lock_store, run)
        return run


__all__ = ["InstallRun", "InstallState", "Installer", "is_corrupt_install"]
