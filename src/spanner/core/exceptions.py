from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping


class SpannerError(Exception):
    """Base exception for spanner."""

    context: Dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            # Store a shallow copy to avoid accidental mutation.
            self.context = dict(context)
        else:
            self.context = {}

    def to_json_error(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": self.context,
        }


class ValidationError(SpannerError, ValueError):
    """Raised when a component declaration or configuration is malformed."""

    def __init__(
        self,
        message: str = "",
        *,
        source: str | None = None,
        identity: str | None = None,
        field: str | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        ctx = dict(context or {})
        if source:
            ctx["source"] = source
        if identity:
            ctx["identity"] = identity
        if field:
            ctx["field"] = field
        SpannerError.__init__(self, message, context=ctx)
        ValueError.__init__(self, message)


class ConflictError(SpannerError):
    """Raised when two declarations configure the same component."""

    def __init__(
        self,
        message: str,
        *,
        identity: str | None = None,
        sources: Iterable[str] = (),
        context: Mapping[str, Any] | None = None,
    ) -> None:
        ctx = dict(context or {})
        if identity:
            ctx["identity"] = identity
        sources = list(sources)
        if sources:
            ctx["sources"] = sources
        super().__init__(message, context=ctx)


class CycleError(SpannerError):
    """Raised when the dependency graph contains a cycle."""

    def __init__(self, members: Iterable[str]) -> None:
        self.members = sorted(members)
        super().__init__(
            "Dependency cycle detected between: " + ", ".join(self.members),
            context={"members": self.members},
        )


class TransportError(SpannerError, RuntimeError):
    """Raised when a version-control operation fails."""

    def __init__(
        self,
        message: str,
        *,
        operation: str | None = None,
        path: str | None = None,
        stderr: str | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        ctx = dict(context or {})
        if operation:
            ctx["operation"] = operation
        if path:
            ctx["path"] = path
        if stderr:
            ctx["stderr"] = stderr
        SpannerError.__init__(self, message, context=ctx)
        RuntimeError.__init__(self, message)


class PersistenceError(SpannerError, OSError):
    """Raised when the lockfile cannot be written."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        SpannerError.__init__(self, message, context=context)
        OSError.__init__(self, message)


class HookError(SpannerError):
    """Raised when an activation hook reference cannot be resolved."""


__all__ = [
    "SpannerError",
    "ValidationError",
    "ConflictError",
    "CycleError",
    "TransportError",
    "PersistenceError",
    "HookError",
]
