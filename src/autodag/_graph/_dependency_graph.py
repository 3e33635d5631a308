"""Static view of the dependency edges declared in a graph."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ._algorithms import find_cycle, topological_sort

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping


@dataclass(frozen=True, slots=True)
class DependencyGraph[T]:
    """Immutable snapshot of "depends on" edges between declared nodes.

    Unlike the resolver, which discovers edges lazily, this view holds every
    edge at once, which makes it suitable for validation, ordering and cache
    invalidation. Dependencies keep their declared order.

    Attributes:
        _predecessors: Mapping from each declared node to its ordered dependencies.
        _successors: Mapping from each node (declared or merely referenced) to
            the declared nodes that depend on it.

    """

    _predecessors: dict[T, tuple[T, ...]] = field(default_factory=dict)
    _successors: dict[T, frozenset[T]] = field(default_factory=dict)

    @classmethod
    def from_dependencies(cls, dependencies: Mapping[T, Iterable[T]]) -> DependencyGraph[T]:
        """Build a graph from each declared node's dependency list.

        Args:
            dependencies: Mapping from declared node to the nodes it depends on.

        Returns:
            A new DependencyGraph instance.

        Example:
            >>> graph = DependencyGraph.from_dependencies({"x": [], "f": ["x"], "g": ["x"]})
            >>> sorted(graph.successors("x"))
            ['f', 'g']

        """
        predecessors = {node: tuple(deps) for node, deps in dependencies.items()}
        successors: dict[T, set[T]] = {node: set() for node in predecessors}
        for node, deps in predecessors.items():
            for dep in deps:
                successors.setdefault(dep, set()).add(node)
        return cls(
            _predecessors=predecessors,
            _successors={k: frozenset(v) for k, v in successors.items()},
        )

    @property
    def nodes(self) -> frozenset[T]:
        """Declared nodes."""
        return frozenset(self._predecessors)

    def predecessors(self, node: T) -> tuple[T, ...]:
        """Get the declared dependencies of a node, in order."""
        return self._predecessors.get(node, ())

    def successors(self, node: T) -> frozenset[T]:
        """Get the declared nodes that directly depend on a node."""
        return self._successors.get(node, frozenset())

    def roots(self) -> frozenset[T]:
        """Get declared nodes without dependencies."""
        return frozenset(n for n, deps in self._predecessors.items() if not deps)

    def leaves(self) -> frozenset[T]:
        """Get declared nodes nothing depends on."""
        return frozenset(n for n in self._predecessors if not self._successors.get(n))

    def ancestors(self, node: T) -> frozenset[T]:
        """Get all transitive dependencies of a node, including undeclared ones."""
        visited: set[T] = set()
        stack = list(self.predecessors(node))
        while stack:
            current = stack.pop()
            if current not in visited:
                visited.add(current)
                stack.extend(self.predecessors(current))
        return frozenset(visited)

    def descendants(self, node: T) -> frozenset[T]:
        """Get all declared nodes that transitively depend on a node."""
        visited: set[T] = set()
        stack = list(self.successors(node))
        while stack:
            current = stack.pop()
            if current not in visited:
                visited.add(current)
                stack.extend(self.successors(current))
        return frozenset(visited)

    def missing(self) -> dict[T, tuple[T, ...]]:
        """Get the undeclared dependencies of every node that has some.

        Returns:
            Mapping from declared node to its dependencies that are not declared.
            Nodes without missing dependencies are omitted.

        """
        result: dict[T, tuple[T, ...]] = {}
        for node, deps in self._predecessors.items():
            absent = tuple(dep for dep in deps if dep not in self._predecessors)
            if absent:
                result[node] = absent
        return result

    def find_cycle(self, start: T | None = None) -> list[T] | None:
        """Find one cycle, optionally only among nodes reachable from ``start``.

        Returns:
            The cycle, first node repeated at the end, or None.

        """
        return find_cycle(self._predecessors, start)

    def topological_order(self, target: T | None = None) -> list[T]:
        """Return declared nodes with dependencies before dependents.

        Args:
            target: Restrict the order to this node and its ancestors.

        Raises:
            ValueError: If the (restricted) graph contains a cycle.

        """
        if target is None:
            selected = self._predecessors
        else:
            keep = self.ancestors(target) | {target}
            selected = {n: deps for n, deps in self._predecessors.items() if n in keep}
        return [n for n in topological_sort(selected) if n in self._predecessors]

    def validate(self) -> list[str]:
        """Check the graph without running anything.

        Returns:
            Human-readable problems: missing dependencies, then the first cycle
            found. Empty when the graph can be resolved.

        """
        errors = [
            f"Node '{node}' has unknown dependencies: {', '.join(map(repr, absent))}"
            for node, absent in self.missing().items()
        ]
        cycle = self.find_cycle()
        if cycle is not None:
            errors.append(f"Cycle detected: {' -> '.join(map(str, cycle))}")
        return errors

    def __len__(self) -> int:
        """Return the number of declared nodes."""
        return len(self._predecessors)

    def __contains__(self, node: object) -> bool:
        """Check if a node is declared."""
        return node in self._predecessors
