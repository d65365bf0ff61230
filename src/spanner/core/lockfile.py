"""Lockfile: durable identity -> resolved version map.

The lockfile is UTF-8 JSON with sorted keys and two-space indentation::

    {
      "https://example.com/acme/widget": {"branch": "main", "commit": "3f2c..."}
    }

Reads fail open (a missing or malformed file is an empty store); writes are
atomic.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, Mapping, Optional

from spanner.core.exceptions import PersistenceError
from spanner.core.utils.io import read_json, write_json_atomic

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LockEntry:
    branch: str
    commit: str

    def to_dict(self) -> Dict[str, str]:
        return {"branch": self.branch, "commit": self.commit}

    @classmethod
    def from_dict(cls, data: Any) -> Optional["LockEntry"]:
        """Parse a stored entry, returning None when it is malformed."""
        if not isinstance(data, Mapping):
            return None
        commit = data.get("commit")
        branch = data.get("branch", "")
        if not isinstance(commit, str) or not commit.strip():
            return None
        if branch is None:
            branch = ""
        if not isinstance(branch, str):
            return None
        return cls(branch=branch, commit=commit.strip())


class LockStore:
    """In-memory lock map bound to a lockfile path.

    Read once per operation, mutated in memory and written at most once;
    ``dirty`` tracks whether anything changed since the last read or write.
    """

    def __init__(self, path: Path, entries: Optional[Mapping[str, LockEntry]] = None) -> None:
        self.path = Path(path)
        self._entries: Dict[str, LockEntry] = dict(entries or {})
        self.read_error: Optional[str] = None
        self.dirty = False

    @classmethod
    def read(cls, path: Path) -> "LockStore":
        store = cls(path)
        try:
            raw = read_json(store.path, default={})
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            store.read_error = f"Failed to parse lockfile {store.path}: {exc}"
            logger.error("%s", store.read_error)
            return store
        except OSError as exc:
            store.read_error = f"Failed to read lockfile {store.path}: {exc}"
            logger.error("%s", store.read_error)
            return store

        if not isinstance(raw, Mapping):
            store.read_error = f"Lockfile {store.path} must contain a JSON object"
            logger.error("%s", store.read_error)
            return store

        for identity, value in raw.items():
            entry = LockEntry.from_dict(value)
            if entry is None:
                logger.warning("Dropping malformed lock entry for %s", identity)
                continue
            store._entries[str(identity)] = entry
        return store

    def get(self, identity: str) -> Optional[LockEntry]:
        return self._entries.get(identity)

    def set(self, identity: str, entry: LockEntry) -> bool:
        """Store ``entry``; return True if the stored value changed."""
        if self._entries.get(identity) == entry:
            return False
        self._entries[identity] = entry
        self.dirty = True
        return True

    def remove(self, identity: str) -> bool:
        if identity not in self._entries:
            return False
        del self._entries[identity]
        self.dirty = True
        return True

    def __contains__(self, identity: object) -> bool:
        return identity in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def is_empty(self) -> bool:
        return not self._entries

    def entries(self) -> Dict[str, LockEntry]:
        return dict(self._entries)

    def to_dict(self) -> Dict[str, Dict[str, str]]:
        return {identity: self._entries[identity].to_dict() for identity in sorted(self._entries)}

    def write(self) -> None:
        """Persist atomically; raise ``PersistenceError`` on failure."""
        try:
            write_json_atomic(self.path, self.to_dict(), indent=2, sort_keys=True)
        except OSError as exc:
            raise PersistenceError(
                f"Failed to write lockfile {self.path}: {exc}",
                context={"path": str(self.path)},
            ) from exc
        self.dirty = False
        logger.debug("Wrote %d lock entries to %s", len(self), self.path)


__all__ = ["LockEntry", "LockStore"]
