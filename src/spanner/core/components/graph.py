"""Dependency DAG over a ``SpecRegistry``."""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Set

from spanner.core.exceptions import CycleError

from .registry import SpecRegistry


class DependencyGraph:
    """Dependency-first ordering with cycle detection.

    ``order`` uses Kahn's algorithm over ``dependency -> [dependents]`` edges so
    a node's in-degree is its number of prerequisites. Ties are broken by the
    order of ``roots`` and then by registration order, making the result
    deterministic for a given set of declarations.
    """

    def __init__(self, registry: SpecRegistry) -> None:
        self.registry = registry
        self.edges: Dict[str, List[str]] = {
            identity: list(spec.dependencies) for identity, spec in registry.items()
        }

    def closure(self, roots: Iterable[str]) -> Set[str]:
        """Return ``roots`` plus everything reachable through dependencies."""
        seen: Set[str] = set()
        stack = [r for r in roots if r in self.edges]
        while stack:
            node = stack.pop()
            if node in seen:
                continue
            seen.add(node)
            stack.extend(d for d in self.edges.get(node, ()) if d not in seen)
        return seen

    def order(self, roots: Optional[Iterable[str]] = None) -> List[str]:
        """Return identities in dependency-first order.

        Raises:
            CycleError: the (sub)graph contains a cycle.
        """
        root_list = list(self.edges) if roots is None else [r for r in roots if r in self.edges]
        nodes = self.closure(root_list)

        preferred: Dict[str, int] = {}
        for name in list(root_list) + list(self.edges):
            preferred.setdefault(name, len(preferred))

        adj: Dict[str, List[str]] = {n: [] for n in nodes}
        indeg: Dict[str, int] = {n: 0 for n in nodes}
        for node in nodes:
            for dep in self.edges.get(node, ()):
                if dep in nodes:
                    adj[dep].append(node)
                    indeg[node] += 1

        ready = [n for n, d in indeg.items() if d == 0]
        order: List[str] = []
        while ready:
            ready.sort(key=lambda x: preferred.get(x, len(preferred)))
            n = ready.pop(0)
            order.append(n)
            for m in adj[n]:
                indeg[m] -= 1
                if indeg[m] == 0:
                    ready.append(m)

        if len(order) != len(nodes):
            raise CycleError(self._cycle_members(set(nodes) - set(order)))
        return order

    def _cycle_members(self, remaining: Set[str]) -> Set[str]:
        # Peel off nodes that only depend into the cycle without being on it.
        members = set(remaining)
        changed = True
        while changed:
            changed = False
            for node in list(members):
                has_dependent = any(node in self.edges.get(m, ()) for m in members)
                if not has_dependent:
                    members.discard(node)
                    changed = True
        return members or remaining


__all__ = ["DependencyGraph"]
