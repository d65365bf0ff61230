"""Deferred activation.

A component activates immediately when it declares no triggers. Otherwise
every trigger is armed with the runtime and the first one to fire activates
the component and cancels the rest. Activation happens at most once per
identity per engine, so the hook runs at most once no matter how many
triggers match.
"""
from __future__ import annotations

import logging
from enum import Enum
from functools import partial
from pathlib import Path
from typing import Dict, List, Optional

from spanner.core.components.model import ComponentSpec
from spanner.core.exceptions import HookError

from .hooks import resolve_hook
from .runtime import Runtime, SubscriptionHandle

logger = logging.getLogger(__name__)


class ActivationState(str, Enum):
    PENDING = "pending"
    ARMED = "armed"
    ACTIVE = "active"


class ActivationEngine:
    def __init__(self, runtime: Runtime) -> None:
        self.runtime = runtime
        self._states: Dict[str, ActivationState] = {}
        self._handles: Dict[str, List[SubscriptionHandle]] = {}
        self._specs: Dict[str, ComponentSpec] = {}
        self._paths: Dict[str, Path] = {}
        self.hook_failures: Dict[str, str] = {}

    def state(self, identity: str) -> ActivationState:
        return self._states.get(identity, ActivationState.PENDING)

    def pending_handles(self, identity: str) -> List[SubscriptionHandle]:
        return list(self._handles.get(identity, ()))

    def register(self, spec: ComponentSpec, install_path: Path) -> ActivationState:
        """Activate ``spec`` now or arm its triggers.

        Registering an identity that is already armed or active is a no-op.
        """
        identity = spec.identity
        current = self.state(identity)
        if current is not ActivationState.PENDING:
            return current

        self._specs[identity] = spec
        self._paths[identity] = Path(install_path)

        if spec.triggers.is_empty():
            self.activate(identity)
            return self.state(identity)

        self._states[identity] = ActivationState.ARMED
        handles: List[SubscriptionHandle] = []
        self._handles[identity] = handles
        for kind, pattern in spec.triggers.items():
            handles.append(self.runtime.subscribe_once(kind, pattern, partial(self._on_trigger, identity)))
        logger.debug("Armed %s with %d trigger(s)", identity, len(handles))
        return self.state(identity)

    def _on_trigger(self, identity: str) -> None:
        self.activate(identity)

    def activate(self, identity: str) -> bool:
        """Activate a registered identity; return False if already active."""
        if identity not in self._specs:
            raise KeyError(f"Component not registered for activation: {identity}")
        if self._states.get(identity) is ActivationState.ACTIVE:
            return False
        self._states[identity] = ActivationState.ACTIVE

        for handle in self._handles.pop(identity, []):
            self.runtime.unsubscribe(handle)

        self.runtime.register_path_activation(self._paths[identity])
        self._run_hook(self._specs[identity])
        logger.debug("Activated %s", identity)
        return True

    def _run_hook(self, spec: ComponentSpec) -> None:
        if spec.hook is None:
            return
        try:
            hook = resolve_hook(spec.hook)
        except HookError as exc:
            self.hook_failures[spec.identity] = str(exc)
            logger.error("Hook for %s could not be resolved: %s", spec.identity, exc)
            return
        try:
            hook()
        except Exception as exc:  # user code; activation stands regardless
            self.hook_failures[spec.identity] = f"{type(exc).__name__}: {exc}"
            logger.exception("Hook for %s failed", spec.identity)

    def active(self) -> List[str]:
        return [i for i, s in self._states.items() if s is ActivationState.ACTIVE]


__all__ = ["ActivationEngine", "ActivationState"]
