"""Host runtime interface and the in-process implementation."""
from __future__ import annotations

import fnmatch
import itertools
import logging
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List

from spanner.core.components.model import TriggerKind

logger = logging.getLogger(__name__)

_handle_ids = itertools.count(1)


@dataclass(eq=False)
class SubscriptionHandle:
    """A one-shot subscription returned by ``Runtime.subscribe_once``."""

    kind: TriggerKind
    pattern: str
    callback: Callable[[], None]
    id: int = field(default_factory=lambda: next(_handle_ids))
    active: bool = True


class Runtime(ABC):
    """What the activation engine needs from its host."""

    @abstractmethod
    def register_path_activation(self, path: Path) -> None:
        """Put ``path`` on the search path; later registrations take priority."""

    @abstractmethod
    def subscribe_once(self, kind: TriggerKind, pattern: str, callback: Callable[[], None]) -> SubscriptionHandle:
        """Call ``callback`` the first time a matching ``kind`` event fires."""

    @abstractmethod
    def unsubscribe(self, handle: SubscriptionHandle) -> None:
        """Cancel ``handle``; a no-op for handles that already fired."""


class LocalRuntime(Runtime):
    """In-process runtime.

    ``search_path`` lists activated paths, highest priority first. With
    ``mirror_sys_path`` the same paths are prepended to ``sys.path`` so Python
    modules in activated components become importable.

    Events are delivered with :meth:`fire`. Filetype and event patterns are
    matched with ``fnmatch``; keys and commands must match exactly.
    """

    def __init__(self, *, mirror_sys_path: bool = False) -> None:
        self.mirror_sys_path = mirror_sys_path
        self.search_path: List[Path] = []
        self._subscriptions: List[SubscriptionHandle] = []

    def register_path_activation(self, path: Path) -> None:
        path = Path(path)
        if path in self.search_path:
            return
        self.search_path.insert(0, path)
        if self.mirror_sys_path and str(path) not in sys.path:
            sys.path.insert(0, str(path))
        logger.debug("Activated search path %s", path)

    def subscribe_once(self, kind: TriggerKind, pattern: str, callback: Callable[[], None]) -> SubscriptionHandle:
        handle = SubscriptionHandle(kind=TriggerKind(kind), pattern=pattern, callback=callback)
        self._subscriptions.append(handle)
        return handle

    def unsubscribe(self, handle: SubscriptionHandle) -> None:
        handle.active = False
        if handle in self._subscriptions:
            self._subscriptions.remove(handle)

    @property
    def subscriptions(self) -> List[SubscriptionHandle]:
        return list(self._subscriptions)

    @staticmethod
    def _matches(handle: SubscriptionHandle, kind: TriggerKind, value: str) -> bool:
        if handle.kind is not kind:
            return False
        if kind in (TriggerKind.FILETYPE, TriggerKind.EVENT):
            return fnmatch.fnmatchcase(value, handle.pattern)
        return value == handle.pattern

    def fire(self, kind: TriggerKind, value: str) -> int:
        """Deliver an event; return how many subscriptions it triggered."""
        kind = TriggerKind(kind)
        fired = 0
        for handle in list(self._subscriptions):
            # A callback may unsubscribe handles later in this snapshot.
            if not handle.active or not self._matches(handle, kind, value):
                continue
            self.unsubscribe(handle)
            handle.callback()
            fired += 1
        return fired


__all__ = ["LocalRuntime", "Runtime", "SubscriptionHandle"]
