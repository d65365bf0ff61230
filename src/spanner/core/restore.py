"""Make the install root match the lockfile."""
from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

from spanner.core.components import component_name
from spanner.core.exceptions import TransportError
from spanner.core.git import Transport, revisions_match
from spanner.core.lockfile import LockEntry, LockStore

logger = logging.getLogger(__name__)


@dataclass
class RestoreReport:
    restored: List[str] = field(default_factory=list)
    unchanged: List[str] = field(default_factory=list)
    cloned: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)
    failures: Dict[str, str] = field(default_factory=dict)
    refused: bool = False

    @property
    def ok(self) -> bool:
        return not self.failures and not self.refused

    def to_dict(self) -> Dict[str, Any]:
        return {
            "restored": list(self.restored),
            "unchanged": list(self.unchanged),
            "cloned": list(self.cloned),
            "removed": list(self.removed),
            "failures": dict(self.failures),
            "refused": self.refused,
        }


class Restorer:
    def __init__(self, transport: Transport, install_root: Path) -> None:
        self.transport = transport
        self.install_root = Path(install_root)

    def restore(self, identity: str, entry: LockEntry) -> bool:
        """Check out the locked commit; return False if already there.

        Raises:
            TransportError: the checkout failed.
        """
        path = self.install_root / component_name(identity)
        current = self.transport.current_revision(path)
        if revisions_match(current, entry.commit):
            return False
        self.transport.checkout(path, entry.commit)
        logger.info("Restored %s to %s", identity, entry.commit[:7])
        return True

    def clone(self, identity: str, entry: LockEntry) -> None:
        path = self.install_root / component_name(identity)
        logger.info("Installing %s from lockfile...", identity)
        self.transport.clone(identity, path, branch=entry.branch or None)
        self.transport.checkout(path, entry.commit)

    def remove(self, name: str) -> bool:
        path = self.install_root / name
        if not path.exists():
            return False
        shutil.rmtree(path)
        logger.info("Removed %s", name)
        return True

    def restore_all(self, lock_store: LockStore) -> RestoreReport:
        report = RestoreReport()
        if lock_store.read_error:
            logger.error("Refusing to restore: %s", lock_store.read_error)
            report.refused = True
            return report
        if lock_store.is_empty():
            logger.warning("Lockfile is empty. Nothing to restore.")
            report.refused = True
            return report

        locked_names = {component_name(identity): identity for identity in lock_store}
        on_disk = sorted(p.name for p in self.install_root.iterdir() if p.is_dir()) if self.install_root.is_dir() else []

        for name in on_disk:
            identity = locked_names.get(name)
            if identity is None:
                logger.warning("%s not in lockfile, removing...", name)
                try:
                    self.remove(name)
                except OSError as exc:
                    logger.error("Failed to remove %s: %s", name, exc)
                    report.failures[name] = str(exc)
                    continue
                report.removed.append(name)
                continue
            try:
                if self.restore(identity, lock_store.get(identity)):
                    report.restored.append(identity)
                else:
                    report.unchanged.append(identity)
            except TransportError as exc:
                logger.error("Failed to restore %s: %s", identity, exc)
                report.failures[identity] = str(exc)

        present = set(on_disk)
        for name, identity in sorted(locked_names.items()):
            if name in present:
                continue
            try:
                self.clone(identity, lock_store.get(identity))
            except TransportError as exc:
                logger.error("Failed to install %s: %s", identity, exc)
                report.failures[identity] = str(exc)
                continue
            report.cloned.append(identity)
        return report


__all__ = ["RestoreReport", "Restorer"]
