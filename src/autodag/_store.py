"""Registry of the nodes declared in a graph."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Sequence
from typing import Any

from ._errors import UnknownDependencyError
from ._graph import DependencyGraph
from ._nodes import ComputationNode, Node, NodeKind, ValueNode

logger = logging.getLogger(__name__)


def _check_name(name: object, what: str) -> str:
    if not isinstance(name, str) or not name:
        msg = f"{what} must be a non-empty string, got {name!r}"
        raise ValueError(msg)
    return name


class NodeStore:
    """Mapping from node name to its definition.

    The store is written during the declaration phase only. Redeclaring a
    name replaces the previous definition; dependency names are not checked
    against the store until they are resolved.

    Example:
        >>> store = NodeStore()
        >>> value = store.declare_value("x", 1)
        >>> node = store.declare_computation("f", lambda x: x + 1, ["x"])
        >>> store.lookup("f").dependencies
        ('x',)

    """

    __slots__ = ("_nodes",)

    def __init__(self) -> None:
        self._nodes: dict[str, Node] = {}

    def declare_value(self, name: str, payload: Any) -> ValueNode:
        """Store a value node under ``name``, replacing any previous node."""
        node = ValueNode(name=_check_name(name, "Node name"), payload=payload)
        self._store(node)
        return node

    def declare_computation(
        self,
        name: str,
        compute_fn: Callable[..., Any],
        dependencies: Sequence[str],
    ) -> ComputationNode:
        """Store a computation node under ``name``, replacing any previous node.

        Args:
            name: Name of the node.
            compute_fn: Callable receiving the dependency values positionally.
            dependencies: Ordered dependency names. They need not exist yet.

        Returns:
            The stored node.

        Raises:
            TypeError: If ``compute_fn`` is not callable or ``dependencies`` is a string.
            ValueError: If a name is not a non-empty string.

        """
        _check_name(name, "Node name")
        if not callable(compute_fn):
            msg = f"Computation '{name}' must be callable, got {type(compute_fn).__name__}"
            raise TypeError(msg)
        if isinstance(dependencies, str):
            msg = f"Dependencies of '{name}' must be a sequence of names, not a string"
            raise TypeError(msg)
        deps = tuple(_check_name(dep, f"Dependency of '{name}'") for dep in dependencies)
        node = ComputationNode(name=name, compute_fn=compute_fn, dependencies=deps)
        self._store(node)
        return node

    def _store(self, node: Node) -> None:
        previous = self._nodes.pop(node.name, None)
        if previous is not None:
            logger.debug("Redeclaring %s (%s -> %s)", node.name, previous.kind, node.kind)
        # Re-insert so iteration follows the latest declaration order
        self._nodes[node.name] = node

    def lookup(self, name: str) -> Node:
        """Get the node declared under ``name``.

        Raises:
            UnknownDependencyError: If no node has that name.

        """
        try:
            return self._nodes[name]
        except KeyError:
            raise UnknownDependencyError(name) from None

    def get(self, name: str) -> Node | None:
        """Get the node declared under ``name``, or None."""
        return self._nodes.get(name)

    @property
    def names(self) -> list[str]:
        """Declared names in declaration order."""
        return list(self._nodes)

    def get_nodes_by_kind(self, kind: NodeKind) -> list[Node]:
        """Get all nodes of a specific kind, in declaration order."""
        return [node for node in self._nodes.values() if node.kind == kind]

    def dependency_graph(self) -> DependencyGraph[str]:
        """Snapshot the declared edges as a DependencyGraph."""
        return DependencyGraph.from_dependencies({name: node.dependencies for name, node in self._nodes.items()})

    def __iter__(self) -> Iterator[str]:
        return iter(self._nodes)

    def __len__(self) -> int:
        """Return the number of declared nodes."""
        return len(self._nodes)

    def __contains__(self, name: object) -> bool:
        """Check if a node is declared under ``name``."""
        return name in self._nodes
