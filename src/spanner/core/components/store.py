"""Raw declaration store."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Iterator, List, Mapping

from .model import API_SOURCE


@dataclass(frozen=True)
class Declaration:
    """A raw declaration and the location it was read from."""

    data: Mapping[str, Any]
    source: str = API_SOURCE


class DeclarationStore:
    """Ordered collection of raw declarations.

    The store performs no merging; it only remembers what was declared and
    where. Re-adding an identical declaration from the same source is a no-op
    so repeated ``setup`` calls stay idempotent.
    """

    def __init__(self, declarations: Iterable[Declaration] = ()) -> None:
        self._items: List[Declaration] = []
        for decl in declarations:
            self.add(decl)

    def add(self, decl: Declaration) -> bool:
        if decl in self._items:
            return False
        self._items.append(decl)
        return True

    def extend(self, declarations: Iterable[Declaration]) -> int:
        return sum(1 for decl in declarations if self.add(decl))

    def copy(self) -> "DeclarationStore":
        return DeclarationStore(self._items)

    def __iter__(self) -> Iterator[Declaration]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)


__all__ = ["Declaration", "DeclarationStore"]
