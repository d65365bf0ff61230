"""Component declaration data model."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Tuple, Union

from .identity import component_name, normalize_identity

API_SOURCE = "(api)"
DEPENDENCY_SOURCE = "(dependency)"

HookRef = Union[str, Callable[[], Any]]


class PinKind(str, Enum):
    COMMIT = "commit"
    TAG = "tag"
    BRANCH = "branch"
    NONE = "none"


@dataclass(frozen=True)
class VersionPin:
    """Requested version of a component.

    ``commit`` is only meaningful together with ``branch``: the commit is the
    enforced checkout, the branch names the upstream it came from.
    """

    branch: Optional[str] = None
    tag: Optional[str] = None
    commit: Optional[str] = None

    @property
    def kind(self) -> PinKind:
        if self.commit:
            return PinKind.COMMIT
        if self.tag:
            return PinKind.TAG
        if self.branch:
            return PinKind.BRANCH
        return PinKind.NONE

    def is_empty(self) -> bool:
        return self.kind is PinKind.NONE

    def to_dict(self) -> Dict[str, str]:
        out: Dict[str, str] = {}
        if self.branch:
            out["branch"] = self.branch
        if self.tag:
            out["tag"] = self.tag
        if self.commit:
            out["commit"] = self.commit
        return out


class TriggerKind(str, Enum):
    FILETYPE = "filetype"
    EVENT = "event"
    KEY = "key"
    COMMAND = "command"


# Declaration key -> trigger kind
TRIGGER_FIELDS: Dict[str, TriggerKind] = {
    "filetypes": TriggerKind.FILETYPE,
    "events": TriggerKind.EVENT,
    "keys": TriggerKind.KEY,
    "commands": TriggerKind.COMMAND,
}


@dataclass(frozen=True)
class Triggers:
    filetypes: Tuple[str, ...] = ()
    events: Tuple[str, ...] = ()
    keys: Tuple[str, ...] = ()
    commands: Tuple[str, ...] = ()

    def is_empty(self) -> bool:
        return not (self.filetypes or self.events or self.keys or self.commands)

    def items(self) -> Iterator[Tuple[TriggerKind, str]]:
        """Yield ``(kind, pattern)`` for every declared trigger."""
        for key, kind in TRIGGER_FIELDS.items():
            for pattern in getattr(self, key):
                yield kind, pattern

    @classmethod
    def from_declaration(cls, data: Mapping[str, Any]) -> "Triggers":
        return cls(**{key: tuple(data.get(key) or ()) for key in TRIGGER_FIELDS})

    def to_dict(self) -> Dict[str, List[str]]:
        return {key: list(getattr(self, key)) for key in TRIGGER_FIELDS if getattr(self, key)}


@dataclass(frozen=True)
class DependencyRef:
    """A dependency entry: only the component's url."""

    identity: str

    @classmethod
    def from_declaration(cls, value: Any) -> "DependencyRef":
        url = value.get("url") if isinstance(value, Mapping) else value
        return cls(identity=normalize_identity(url))


@dataclass(frozen=True)
class ComponentSpec:
    identity: str
    pin: VersionPin = field(default_factory=VersionPin)
    dependencies: Tuple[str, ...] = ()
    triggers: Triggers = field(default_factory=Triggers)
    hook: Optional[HookRef] = None
    source: str = API_SOURCE

    @property
    def name(self) -> str:
        return component_name(self.identity)

    def has_configuration(self) -> bool:
        """True when the spec carries anything beyond its identity."""
        return bool(
            not self.pin.is_empty()
            or not self.triggers.is_empty()
            or self.hook is not None
            or self.dependencies
        )

    @classmethod
    def bare(cls, identity: str, source: str = DEPENDENCY_SOURCE) -> "ComponentSpec":
        return cls(identity=normalize_identity(identity), source=source)

    @classmethod
    def from_declaration(cls, data: Mapping[str, Any], source: str = API_SOURCE) -> "ComponentSpec":
        """Build a spec from an already validated declaration mapping."""
        deps: List[str] = []
        for raw in data.get("dependencies") or ():
            ref = DependencyRef.from_declaration(raw)
            if ref.identity not in deps:
                deps.append(ref.identity)
        return cls(
            identity=normalize_identity(data["url"]),
            pin=VersionPin(
                branch=data.get("branch"),
                tag=data.get("tag"),
                commit=data.get("commit"),
            ),
            dependencies=tuple(deps),
            triggers=Triggers.from_declaration(data),
            hook=data.get("hook"),
            source=source,
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"url": self.identity, **self.pin.to_dict()}
        if self.dependencies:
            out["dependencies"] = list(self.dependencies)
        out.update(self.triggers.to_dict())
        if isinstance(self.hook, str):
            out["hook"] = self.hook
        elif self.hook is not None:
            out["hook"] = getattr(self.hook, "__qualname__", repr(self.hook))
        out["source"] = self.source
        return out


__all__ = [
    "API_SOURCE",
    "DEPENDENCY_SOURCE",
    "ComponentSpec",
    "DependencyRef",
    "HookRef",
    "PinKind",
    "TRIGGER_FIELDS",
    "TriggerKind",
    "Triggers",
    "VersionPin",
]
