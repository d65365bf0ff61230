"""Declaration validation.

Structural checks that need a precise error message (missing url, unknown
fields, dependency records carrying configuration) run first; the remaining
shape checks are delegated to the bundled ``component.schema.yaml``.
"""
from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

import jsonschema

from spanner.core.exceptions import ValidationError
from spanner.data import read_yaml as read_bundled_yaml

from .identity import normalize_identity

ALLOWED_FIELDS = frozenset({
    "url",
    "branch",
    "tag",
    "commit",
    "dependencies",
    "filetypes",
    "events",
    "keys",
    "commands",
    "hook",
})

_validator: Optional[Any] = None


def _schema_validator() -> Any:
    global _validator
    if _validator is None:
        schema = read_bundled_yaml("schemas", "component.schema.yaml")
        cls = jsonschema.validators.validator_for(schema)
        cls.check_schema(schema)
        _validator = cls(schema)
    return _validator


def _fail(message: str, *, source: str, identity: Optional[str] = None, field: Optional[str] = None) -> ValidationError:
    where = source
    if identity:
        where = f"{source} ({identity})"
    return ValidationError(f"{where}: {message}", source=source, identity=identity, field=field)


def validate_dependency(dep: Any, *, source: str, identity: str, index: int) -> None:
    if isinstance(dep, str):
        if not dep.strip():
            raise _fail(f"dependency #{index + 1}: url must be a non-empty string", source=source, identity=identity, field="dependencies")
        return
    if not isinstance(dep, Mapping):
        raise _fail(
            f"dependency #{index + 1}: expected a url string or a mapping with 'url'",
            source=source,
            identity=identity,
            field="dependencies",
        )
    url = dep.get("url")
    if not isinstance(url, str) or not url.strip():
        raise _fail(f"dependency #{index + 1}: missing 'url' field", source=source, identity=identity, field="dependencies")
    for key in dep:
        if key != "url":
            raise _fail(
                f"dependency '{url}': should only have 'url' field, found '{key}'. "
                "If you need to configure this component, declare it in its own file.",
                source=source,
                identity=identity,
                field="dependencies",
            )


def validate_declaration(data: Any, *, source: str) -> None:
    """Validate a single raw declaration, raising ``ValidationError``."""
    if not isinstance(data, Mapping):
        raise _fail(f"expected a component mapping, got {type(data).__name__}", source=source)

    url = data.get("url")
    if not isinstance(url, str) or not url.strip():
        raise _fail("missing 'url' (a non-empty string)", source=source, field="url")
    identity = normalize_identity(url)

    for key in data:
        if key not in ALLOWED_FIELDS:
            raise _fail(f"unknown field '{key}'", source=source, identity=identity, field=str(key))

    deps = data.get("dependencies")
    if deps is not None:
        if not isinstance(deps, (list, tuple)):
            raise _fail("dependencies must be a list", source=source, identity=identity, field="dependencies")
        for i, dep in enumerate(deps):
            validate_dependency(dep, source=source, identity=identity, index=i)

    # Callables are valid hooks but are not representable in JSON Schema.
    doc: Dict[str, Any] = dict(data)
    if callable(doc.get("hook")):
        doc.pop("hook")
    for key, value in list(doc.items()):
        if isinstance(value, tuple):
            doc[key] = list(value)

    errors = sorted(_schema_validator().iter_errors(doc), key=lambda e: list(e.path))
    if errors:
        first = errors[0]
        field = ".".join(str(p) for p in first.path) or None
        prefix = f"field '{field}': " if field else ""
        raise _fail(prefix + first.message, source=source, identity=identity, field=field)

    if data.get("commit") and not data.get("branch"):
        raise _fail("commit requires branch to be specified", source=source, identity=identity, field="commit")
    if data.get("branch") and data.get("tag"):
        raise _fail("branch and tag are mutually exclusive", source=source, identity=identity, field="tag")


__all__ = ["ALLOWED_FIELDS", "validate_declaration", "validate_dependency"]
