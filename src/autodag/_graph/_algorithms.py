"""Graph algorithms over dependency mappings."""

from collections import deque
from collections.abc import Hashable, Mapping, Sequence
from typing import Any

_EXHAUSTED: Any = object()


def topological_sort[T: Hashable](predecessors: Mapping[T, Sequence[T]]) -> list[T]:
    """Order nodes so that every node comes after all of its dependencies.

    Ties are broken by the iteration order of ``predecessors``, so the result
    is deterministic for a given declaration order.

    Args:
        predecessors: Mapping from node to the nodes it depends on. Dependencies
            that are not keys of the mapping are treated as nodes without
            dependencies of their own.

    Returns:
        List of nodes in dependency order.

    Raises:
        ValueError: If the graph contains a cycle.

    Example:
        >>> topological_sort({"c": ["b"], "b": ["a"], "a": []})
        ['a', 'b', 'c']

    """
    nodes: dict[T, None] = {}
    for node, deps in predecessors.items():
        nodes.setdefault(node)
        for dep in deps:
            nodes.setdefault(dep)

    indegree = dict.fromkeys(nodes, 0)
    successors: dict[T, list[T]] = {node: [] for node in nodes}
    for node, deps in predecessors.items():
        for dep in dict.fromkeys(deps):
            indegree[node] += 1
            successors[dep].append(node)

    queue = deque(node for node, degree in indegree.items() if degree == 0)
    order: list[T] = []
    while queue:
        node = queue.popleft()
        order.append(node)
        for successor in successors[node]:
            indegree[successor] -= 1
            if indegree[successor] == 0:
                queue.append(successor)

    if len(order) != len(nodes):
        msg = "Cycle detected in graph"
        raise ValueError(msg)

    return order


def find_cycle[T: Hashable](predecessors: Mapping[T, Sequence[T]], start: T | None = None) -> list[T] | None:
    """Find one dependency cycle, if any.

    Args:
        predecessors: Mapping from node to the nodes it depends on.
        start: Only search among nodes reachable from this node. Searches the
            whole mapping when None.

    Returns:
        The cycle as a list of nodes that starts and ends with the same node,
        following "depends on" edges, or None if there is no cycle.

    Example:
        >>> find_cycle({"a": ["b"], "b": ["a"]})
        ['a', 'b', 'a']

    """
    done: set[T] = set()
    roots = list(predecessors) if start is None else [start]

    for root in roots:
        if root in done:
            continue
        # Iterative DFS; `stack` holds the current chain and an iterator over each node's deps
        chain: list[T] = [root]
        on_chain: set[T] = {root}
        stack = [iter(predecessors.get(root, ()))]
        while stack:
            dep = next(stack[-1], _EXHAUSTED)
            if dep is _EXHAUSTED:
                stack.pop()
                finished = chain.pop()
                on_chain.discard(finished)
                done.add(finished)
                continue
            if dep in on_chain:
                return [*chain[chain.index(dep) :], dep]
            if dep in done:
                continue
            chain.append(dep)
            on_chain.add(dep)
            stack.append(iter(predecessors.get(dep, ())))

    return None
