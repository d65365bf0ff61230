"""Deferred activation of installed components."""
from __future__ import annotations

from .engine import ActivationEngine, ActivationState
from .hooks import resolve_hook
from .runtime import LocalRuntime, Runtime, SubscriptionHandle

__all__ = [
    "ActivationEngine",
    "ActivationState",
    "LocalRuntime",
    "Runtime",
    "SubscriptionHandle",
    "resolve_hook",
]
