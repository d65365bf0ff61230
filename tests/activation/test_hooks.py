from __future__ import annotations

import os.path

import pytest

from spanner.core.activation.hooks import resolve_hook
from spanner.core.exceptions import HookError


def test_callable_is_returned_unchanged() -> None:
    def hook() -> None:
        pass

    assert resolve_hook(hook) is hook


def test_module_attribute_reference() -> None:
    assert resolve_hook("os.path:join") is os.path.join


def test_dotted_attribute_reference() -> None:
    assert resolve_hook("pathlib:Path.cwd") is not None


@pytest.mark.parametrize(
    "ref, message",
    [
        ("no_colon_here", "expected 'module:attribute'"),
        ("spanner_no_such_module:run", "Cannot import hook module"),
        ("os.path:no_such_function", "no attribute 'no_such_function'"),
        ("os:sep", "is not callable"),
        (42, "Invalid hook reference"),
    ],
)
def test_bad_references_raise_hook_error(ref, message) -> None:
    with pytest.raises(HookError, match=message):
        resolve_hook(ref)
