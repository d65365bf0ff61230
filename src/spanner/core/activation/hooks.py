"""Activation hook resolution."""
from __future__ import annotations

import importlib
from typing import Any, Callable

from spanner.core.exceptions import HookError


def resolve_hook(ref: Any) -> Callable[[], Any]:
    """Return a zero-argument callable for ``ref``.

    ``ref`` is either a callable or a ``"package.module:attr"`` string; dotted
    attributes (``module:Class.method``) are followed.

    Raises:
        HookError: the reference cannot be imported or is not callable.
    """
    if callable(ref):
        return ref
    if not isinstance(ref, str) or ":" not in ref:
        raise HookError(
            f"Invalid hook reference {ref!r}; expected 'module:attribute'",
            context={"hook": repr(ref)},
        )

    module_name, _, attr_path = ref.partition(":")
    try:
        target: Any = importlib.import_module(module_name)
    except ImportError as exc:
        raise HookError(f"Cannot import hook module '{module_name}': {exc}", context={"hook": ref}) from exc

    for part in attr_path.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as exc:
            raise HookError(f"Hook '{ref}' not found: no attribute '{part}'", context={"hook": ref}) from exc

    if not callable(target):
        raise HookError(f"Hook '{ref}' is not callable", context={"hook": ref})
    return target


__all__ = ["resolve_hook"]
