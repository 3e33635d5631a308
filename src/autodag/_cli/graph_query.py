"""Graph query functions for CLI commands.

This module provides pure functions for querying a declared graph.
These are the functional core - no I/O, no Rich rendering.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from autodag._engine import Failed, Resolved

if TYPE_CHECKING:
    from collections.abc import Sequence

    from autodag._dag import Graph
    from autodag._nodes import NodeKind


@dataclass(frozen=True, slots=True)
class NodeInfo:
    """Basic information about a node for listing."""

    name: str
    kind: NodeKind
    dependencies: tuple[str, ...]
    missing: tuple[str, ...]


@dataclass(slots=True)
class TreeNode:
    """A node in a dependency tree for rendering."""

    name: str
    children: list[TreeNode]
    declared: bool = True
    repeated: bool = False


@dataclass(frozen=True, slots=True)
class ResolveOutcome:
    """Outcome of resolving one node from the command line."""

    name: str
    value: Any = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def list_nodes(graph: Graph) -> list[NodeInfo]:
    """List declared nodes with their dependencies, in declaration order."""
    missing = graph.dependency_graph().missing()
    return [
        NodeInfo(
            name=name,
            kind=node.kind,
            dependencies=node.dependencies,
            missing=missing.get(name, ()),
        )
        for name in graph.names
        for node in (graph.get_node(name),)
    ]


def get_dependency_tree(
    graph: Graph,
    name: str,
    *,
    invert: bool = False,
    max_depth: int | None = None,
) -> TreeNode:
    """Build a dependency tree for visualization.

    A node reached again through another branch is shown once more, marked
    as repeated, without its children. That also stops cycles.

    Args:
        graph: The graph containing the node.
        name: The root node of the tree.
        invert: If False, show what the node depends on.
                If True, show what depends on the node.
        max_depth: Maximum depth to traverse (None for unlimited).

    Returns:
        TreeNode representing the dependency tree.

    Raises:
        UnknownDependencyError: If the node is not declared.

    """
    graph.get_node(name)
    dependency_graph = graph.dependency_graph()

    def build_tree(node: str, depth: int, visited: set[str]) -> TreeNode:
        tree = TreeNode(name=node, children=[], declared=node in dependency_graph)
        if max_depth is not None and depth >= max_depth:
            return tree

        if invert:
            neighbors: Sequence[str] = sorted(dependency_graph.successors(node))
        else:
            neighbors = dependency_graph.predecessors(node)

        for neighbor in neighbors:
            if neighbor in visited:
                tree.children.append(
                    TreeNode(name=neighbor, children=[], declared=neighbor in dependency_graph, repeated=True),
                )
                continue
            visited.add(neighbor)
            tree.children.append(build_tree(neighbor, depth + 1, visited))
        return tree

    return build_tree(name, 0, {name})


def resolve_nodes(graph: Graph, names: Sequence[str]) -> list[ResolveOutcome]:
    """Resolve several nodes concurrently in a fresh event loop.

    Every requested node gets an outcome; one failure does not hide the others.
    """

    async def main() -> list[Any]:
        return await asyncio.gather(*(graph.resolve(name) for name in names), return_exceptions=True)

    results = asyncio.run(main())
    return [
        ResolveOutcome(name=name, error=result)
        if isinstance(result, BaseException)
        else ResolveOutcome(name=name, value=result)
        for name, result in zip(names, results, strict=True)
    ]


def count_settled(graph: Graph) -> tuple[int, int]:
    """Count resolved and failed nodes of the graph."""
    resolved = failed = 0
    for name in graph.names:
        match graph.state(name):
            case Resolved():
                resolved += 1
            case Failed():
                failed += 1
    return resolved, failed
