"""Component identity normalization."""
from __future__ import annotations

from typing import Any


def normalize_identity(url: Any) -> str:
    """Return the canonical identity for a source URL.

    Surrounding whitespace, trailing slashes and a trailing ``.git`` suffix are
    stripped, so ``https://host/a/b.git/`` and ``https://host/a/b`` collapse to
    the same component.

    Examples:
        >>> normalize_identity(" https://example.com/acme/widget.git/ ")
        'https://example.com/acme/widget'
    """
    value = str(url).strip()
    while True:
        stripped = value.rstrip("/")
        if stripped.endswith(".git"):
            stripped = stripped[: -len(".git")]
        if stripped == value:
            return value
        value = stripped


def component_name(identity: str) -> str:
    """Return the install name (last path segment) of ``identity``."""
    tail = normalize_identity(identity).replace("\\", "/").rsplit("/", 1)[-1]
    # scp-style remotes ("git@host:repo") have no slash before the name.
    return tail.rsplit(":", 1)[-1]


__all__ = ["normalize_identity", "component_name"]
