"""Update workflow: fetch, diff, review, lock.

``collect_all`` finds components whose tracked branch moved upstream,
``review`` filters them through a reviewer callable and ``apply_updates``
records the approved commits. Checking the new commits out is left to
restore.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from spanner.core.components import ComponentSpec, PinKind, SpecRegistry, component_name
from spanner.core.exceptions import TransportError
from spanner.core.git import Transport, revisions_match
from spanner.core.lockfile import LockEntry, LockStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UpdateInfo:
    identity: str
    branch: str
    old_commit: str
    new_commit: str
    log_lines: Tuple[str, ...] = ()
    tag: Optional[str] = None

    @property
    def name(self) -> str:
        return component_name(self.identity)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "identity": self.identity,
            "name": self.name,
            "branch": self.branch,
            "old_commit": self.old_commit,
            "new_commit": self.new_commit,
            "log": list(self.log_lines),
            "tag": self.tag,
        }


Reviewer = Callable[[List[UpdateInfo]], Iterable[Any]]


def tracked_branch(spec: ComponentSpec, entry: Optional[LockEntry]) -> Optional[str]:
    """Branch an update check follows, or None for pinned components."""
    kind = spec.pin.kind
    if kind is PinKind.BRANCH:
        return spec.pin.branch
    if kind is PinKind.NONE and entry is not None and entry.branch:
        return entry.branch
    return None


def collect_all(
    registry: SpecRegistry,
    lock_store: LockStore,
    transport: Transport,
    install_root: Path,
) -> List[UpdateInfo]:
    updates: List[UpdateInfo] = []
    for identity, spec in registry.items():
        path = Path(install_root) / spec.name
        if not path.is_dir():
            continue
        entry = lock_store.get(identity)
        branch = tracked_branch(spec, entry)
        if not branch:
            continue

        try:
            transport.fetch(path)
            new_commit = transport.remote_revision(path, branch)
            old_commit = entry.commit if entry else transport.current_revision(path)
        except TransportError as exc:
            logger.error("Failed to check %s for updates: %s", identity, exc)
            continue

        if revisions_match(old_commit, new_commit):
            continue
        updates.append(
            UpdateInfo(
                identity=identity,
                branch=branch,
                old_commit=old_commit,
                new_commit=new_commit,
                log_lines=tuple(transport.log_range(path, old_commit, new_commit)),
                tag=transport.nearest_tag(path, new_commit),
            )
        )
    logger.debug("Found %d update(s)", len(updates))
    return updates


def review(updates: Sequence[UpdateInfo], reviewer: Reviewer) -> List[UpdateInfo]:
    """Return the offered updates the reviewer approved, in offered order.

    The reviewer may return ``UpdateInfo`` objects or identities; anything it
    returns that was not offered is ignored.
    """
    offered = list(updates)
    chosen = reviewer(list(offered)) or ()
    approved_ids = {item.identity if isinstance(item, UpdateInfo) else str(item) for item in chosen}
    return [info for info in offered if info.identity in approved_ids]


def apply_updates(approved: Iterable[UpdateInfo], lock_store: LockStore) -> bool:
    """Record approved commits and persist the lock.

    Raises:
        PersistenceError: the lockfile could not be written.
    """
    changed = False
    for info in approved:
        if lock_store.set(info.identity, LockEntry(branch=info.branch, commit=info.new_commit)):
            changed = True
    if lock_store.dirty:
        lock_store.write()
    return changed


__all__ = ["Reviewer", "UpdateInfo", "apply_updates", "collect_all", "review", "tracked_branch"]
