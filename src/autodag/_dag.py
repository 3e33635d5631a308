"""The user-facing graph object."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from ._declare import dependency_names, node_name
from ._engine import CacheState, ResolutionCache, Resolver, normalize
from ._errors import CycleDetectedError, DeclarationError, UnknownDependencyError
from ._nodes import Node, NodeKind
from ._settings import CacheLifetime, EngineSettings, FailurePolicy
from ._store import NodeStore

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator, Sequence

    from ._graph import DependencyGraph

logger = logging.getLogger(__name__)


class Graph:
    """A graph of named values and computations.

    Nodes are declared first, then resolved. Resolving a computation resolves
    its dependencies concurrently, calls it with their values and memoizes
    the outcome, so a node shared by several dependents runs once.

    Example:
        >>> graph = Graph()
        >>> graph.value("x", 1)
        1
        >>> @graph.computation()
        ... def f(x):
        ...     return x + 1
        >>> graph.run_sync("f")
        2

    """

    def __init__(
        self,
        name: str = "graph",
        *,
        settings: EngineSettings | None = None,
        failure_policy: FailurePolicy | None = None,
        cache_lifetime: CacheLifetime | None = None,
    ) -> None:
        overrides = {
            key: value
            for key, value in (("failure_policy", failure_policy), ("cache_lifetime", cache_lifetime))
            if value is not None
        }
        base = settings if settings is not None else EngineSettings()
        self.name = name
        self._settings = EngineSettings.model_validate({**base.model_dump(), **overrides})
        self._store = NodeStore()
        self._cache = ResolutionCache()
        self._resolver = Resolver(self._store, self._cache, self._settings)

    def __repr__(self) -> str:
        return f"Graph(name={self.name!r}, nodes={len(self._store)})"

    @property
    def settings(self) -> EngineSettings:
        """Resolution policies of this graph."""
        return self._settings

    # ------------------------------------------------------------------
    # Declaration
    # ------------------------------------------------------------------

    def declare_value(self, name: str, payload: Any) -> None:
        """Declare a node holding ``payload``.

        A previous node with the same name is replaced, and every cached
        computation depending on it is forgotten.

        Raises:
            DeclarationError: If ``name`` or one of its dependents is being resolved.

        """
        self._ensure_idle(name)
        self._store.declare_value(name, payload)
        self._cache.resolve(name, payload)
        self._invalidate_dependents(name)

    def declare_computation(
        self,
        name: str,
        compute_fn: Callable[..., Any],
        dependencies: Sequence[str],
    ) -> None:
        """Declare a node computed by ``compute_fn`` from ``dependencies``.

        Dependencies are looked up when the node is resolved, so they may be
        declared later. A previous node with the same name is replaced, and
        every cached computation depending on it is forgotten.

        Args:
            name: Name of the node.
            compute_fn: Callable receiving the dependency values positionally.
                It may return a plain value or an awaitable.
            dependencies: Ordered dependency names.

        Raises:
            DeclarationError: If ``name`` or one of its dependents is being resolved.

        """
        self._ensure_idle(name)
        self._store.declare_computation(name, compute_fn, dependencies)
        self._cache.reset(name)
        self._invalidate_dependents(name)

    def value[T](self, name: str, payload: T) -> T:
        """Declare a value node and return its payload."""
        self.declare_value(name, payload)
        return payload

    def computation[F: Callable[..., Any]](
        self,
        name: str | None = None,
        *,
        depends_on: Iterable[str] | None = None,
    ) -> Callable[[F], F]:
        """Decorator to declare a function as a computation node.

        Args:
            name: Node name. Defaults to the function name.
            depends_on: Dependency names. Defaults to the function's parameter names.

        Returns:
            A decorator that declares the function and returns it unchanged.

        """

        def decorator(fn: F) -> F:
            node = name if name is not None else node_name(fn)
            deps = tuple(depends_on) if depends_on is not None else dependency_names(fn)
            self.declare_computation(node, fn, deps)
            return fn

        return decorator

    def _ensure_idle(self, name: str) -> None:
        in_progress = self._cache.in_progress()
        if not in_progress:
            return
        affected = {name} | self._store.dependency_graph().descendants(name)
        busy = sorted(affected & in_progress.keys())
        if busy:
            msg = f"Cannot declare '{name}' while {', '.join(map(repr, busy))} is being resolved."
            raise DeclarationError(msg)

    def _invalidate_dependents(self, name: str) -> None:
        dropped = self._cache.invalidate(self._store.dependency_graph().descendants(name))
        if dropped:
            logger.debug("Declaring %s invalidated %s", name, ", ".join(dropped))

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve(self, name: str) -> asyncio.Future[Any]:
        """Get a future for the value of the node called ``name``.

        Must be called from a running event loop. Failures (unknown names,
        cycles, failing callables) are delivered through the future.
        Computations may call this for other nodes while they run. Cancelling
        the returned future does not abort the node's evaluation.
        """
        return self._resolver.resolve(name)

    async def run_entry_point(self, fn: Callable[..., Any], dependencies: Sequence[str]) -> Any:
        """Resolve ``dependencies`` and call ``fn`` once with their values.

        The result of ``fn`` is returned as-is, without caching or unwrapping.
        """
        return await self._resolver.run_entry_point(fn, dependencies)

    async def run(self, fn: Callable[..., Any], *, depends_on: Iterable[str] | None = None) -> Any:
        """Run ``fn`` as an entry point, naming dependencies by its parameters."""
        deps = tuple(depends_on) if depends_on is not None else dependency_names(fn)
        return await self._resolver.run_entry_point(fn, deps)

    def run_sync(self, target: str | Callable[..., Any]) -> Any:
        """Resolve a node, or run an entry-point function, in a new event loop.

        An awaitable returned by an entry-point function is awaited once.

        Args:
            target: A node name or an entry-point function.

        Returns:
            The node value or the entry point's result.

        """

        async def main() -> Any:
            if isinstance(target, str):
                return await self.resolve(target)
            return await normalize(await self.run(target))

        return asyncio.run(main())

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def get_node(self, name: str) -> Node:
        """Get the definition of a node.

        Raises:
            UnknownDependencyError: If no node has that name.

        """
        return self._store.lookup(name)

    @property
    def names(self) -> list[str]:
        """Declared node names in declaration order."""
        return self._store.names

    def get_nodes_by_kind(self, kind: NodeKind) -> list[Node]:
        """Get all nodes of a specific kind."""
        return self._store.get_nodes_by_kind(kind)

    def state(self, name: str) -> CacheState:
        """Get the resolution state of a node.

        Raises:
            UnknownDependencyError: If no node has that name.

        """
        self._store.lookup(name)
        return self._cache.get(name)

    def invalidate(self, name: str | None = None) -> list[str]:
        """Forget memoized computation outcomes.

        Args:
            name: Forget this node and everything depending on it. Forgets
                every computation when None.

        Returns:
            The names whose outcome was dropped. Nodes being resolved are kept.

        """
        if name is None:
            targets = {node.name for node in self._store.get_nodes_by_kind(NodeKind.COMPUTATION)}
        else:
            if self._store.lookup(name).kind is NodeKind.VALUE:
                targets = set()
            else:
                targets = {name}
            targets |= self._store.dependency_graph().descendants(name)
        return self._cache.invalidate(targets)

    def dependency_graph(self) -> DependencyGraph[str]:
        """Snapshot the declared dependency edges."""
        return self._store.dependency_graph()

    def validate(self) -> list[str]:
        """List problems that would make resolution fail, without running anything.

        Returns:
            Messages about unknown dependencies and cycles. Empty if none.

        """
        return self._store.dependency_graph().validate()

    def evaluation_order(self, name: str | None = None) -> list[str]:
        """Return declared nodes with dependencies before dependents.

        Args:
            name: Restrict the order to this node and the nodes it depends on.

        Raises:
            UnknownDependencyError: If ``name`` is not declared.
            CycleDetectedError: If the considered nodes contain a cycle.

        """
        graph = self._store.dependency_graph()
        if name is not None and name not in graph:
            raise UnknownDependencyError(name)
        cycle = graph.find_cycle(name)
        if cycle is not None:
            raise CycleDetectedError(cycle)
        return graph.topological_order(name)

    def __contains__(self, name: object) -> bool:
        return name in self._store

    def __iter__(self) -> Iterator[str]:
        return iter(self._store)

    def __len__(self) -> int:
        return len(self._store)
