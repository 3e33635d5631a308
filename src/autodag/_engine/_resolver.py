"""Asynchronous resolver for computation graphs."""

from __future__ import annotations

import asyncio
import logging
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any

from autodag._errors import (
    ENTRY_POINT_NAME,
    AutodagError,
    ComputationError,
    CycleDetectedError,
    UnknownDependencyError,
)
from autodag._graph import find_cycle
from autodag._nodes import ComputationNode, NodeKind, ValueNode
from autodag._settings import CacheLifetime, EngineSettings, FailurePolicy

from ._cache import Failed, InProgress, Resolved
from ._normalize import completed, failed, normalize

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from autodag._store import NodeStore

    from ._cache import ResolutionCache

logger = logging.getLogger(__name__)


class Resolver:
    """Resolves nodes of a graph, memoizing their outcomes.

    Every resolve request returns an ``asyncio.Future``. A computation's
    dependencies are requested all at once and joined before its callable
    runs, so independent branches make progress concurrently. Requests for a
    node that is already being resolved share the same evaluation, which
    keeps each callable to a single invocation per cache epoch. Callers get a
    shielded view of it: cancelling that future only stops their own wait.

    Callables may call ``resolve`` themselves. The chain of nodes being
    evaluated is carried in a context variable, so a request that re-enters
    a node on that chain fails with CycleDetectedError.

    The resolver must be used from a running event loop, and one graph must
    not be resolved from several loops at the same time.
    """

    __slots__ = ("_cache", "_chain", "_settings", "_store", "_waiting")

    def __init__(self, store: NodeStore, cache: ResolutionCache, settings: EngineSettings) -> None:
        self._store = store
        self._cache = cache
        self._settings = settings
        # In-progress node -> the dependencies its evaluation is waiting on
        self._waiting: dict[str, tuple[str, ...]] = {}
        # Resolution chain of the running task; tasks started from it inherit the value
        self._chain: ContextVar[tuple[str, ...]] = ContextVar(f"autodag_chain_{id(self)}", default=())

    @property
    def settings(self) -> EngineSettings:
        return self._settings

    def resolve(self, name: str) -> asyncio.Future[Any]:
        """Get a future for the value of the node called ``name``.

        Failures are delivered through the future, never raised here.
        Cancelling the returned future does not abort the node's evaluation,
        which other callers may share.

        Args:
            name: Name of the node to resolve.

        Returns:
            Future yielding the node's value, or failing with
            UnknownDependencyError, CycleDetectedError or ComputationError.

        """
        chain = self._chain.get()
        self._note_wait(chain, (name,))
        handle = self._resolve(name, chain, chain[-1] if chain else None)
        return asyncio.shield(handle)

    async def run_entry_point(self, fn: Callable[..., Any], dependencies: Sequence[str]) -> Any:
        """Resolve ``dependencies`` and call ``fn`` with their values once.

        The entry point is not a node: its result is neither cached nor
        unwrapped. When ``fn`` returns an awaitable, the caller receives that
        awaitable unchanged.

        Args:
            fn: The callable to invoke.
            dependencies: Ordered names of the nodes passed to ``fn``.

        Returns:
            Whatever ``fn`` returns.

        Raises:
            AutodagError: If a dependency cannot be resolved or ``fn`` raises.

        """
        label = getattr(fn, "__qualname__", ENTRY_POINT_NAME)
        if self._settings.cache_lifetime is CacheLifetime.RUN:
            dropped = self._cache.invalidate(
                node.name for node in self._store.get_nodes_by_kind(NodeKind.COMPUTATION)
            )
            logger.debug("Dropped %d cached computation(s) before running %s", len(dropped), label)

        deps = tuple(dependencies)
        chain = self._chain.get()
        self._note_wait(chain, deps)
        args = await self._join(deps, chain, label)
        logger.debug("Invoking entry point %s with %d argument(s)", label, len(args))
        try:
            return fn(*args)
        except AutodagError:
            raise
        except Exception as e:
            raise ComputationError(label, e) from e

    def _resolve(self, name: str, path: tuple[str, ...], required_by: str | None = None) -> asyncio.Future[Any]:
        if name in path:
            cycle = (*path[path.index(name) :], name)
            logger.debug("Cycle detected: %s", " -> ".join(cycle))
            return failed(CycleDetectedError(cycle))

        node = self._store.get(name)
        if node is None:
            return failed(UnknownDependencyError(name, required_by=required_by))

        match self._cache.get(name):
            case Resolved(value):
                return completed(value)
            case Failed(error) if self._settings.failure_policy is FailurePolicy.POISON:
                return failed(error)
            case InProgress(handle=handle, path=started_by):
                if path:
                    cycle = find_cycle(self._waiting, start=path[-1])
                    if cycle is not None:
                        logger.debug("Cycle detected across resolutions: %s", " -> ".join(cycle))
                        return failed(CycleDetectedError(cycle))
                logger.debug("Coalescing onto in-flight %s (started by %s)", name, " -> ".join(started_by))
                return handle

        match node:
            case ValueNode(payload=payload):
                self._cache.resolve(name, payload)
                return completed(payload)
            case ComputationNode():
                chain = (*path, name)
                handle = asyncio.ensure_future(self._settle(node, chain))
                self._cache.start(name, handle, chain)
                return handle

    async def _settle(self, node: ComputationNode, chain: tuple[str, ...]) -> Any:
        name = node.name
        logger.debug("Resolving %s", name)
        self._chain.set(chain)
        try:
            value = await self._evaluate(node, chain)
        except asyncio.CancelledError:
            logger.debug("Resolution of %s was cancelled", name)
            self._cache.reset(name)
            raise
        except Exception as e:
            logger.debug("Resolution of %s failed: %s", name, e)
            self._cache.fail(name, e)
            raise
        finally:
            self._waiting.pop(name, None)

        self._cache.resolve(name, value)
        logger.debug("Resolved %s", name)
        return value

    def _note_wait(self, chain: tuple[str, ...], names: tuple[str, ...]) -> None:
        """Record that the evaluation at the end of ``chain`` now also waits on ``names``."""
        if chain:
            waiter = chain[-1]
            self._waiting[waiter] = (*self._waiting.get(waiter, ()), *names)

    async def _evaluate(self, node: ComputationNode, chain: tuple[str, ...]) -> Any:
        self._waiting[node.name] = node.dependencies
        args = await self._join(node.dependencies, chain, node.name)

        logger.debug("Invoking %s with %d argument(s)", node.name, len(args))
        try:
            return await normalize(node.compute_fn(*args))
        except AutodagError:
            raise
        except Exception as e:
            raise ComputationError(node.name, e) from e

    async def _join(self, dependencies: tuple[str, ...], chain: tuple[str, ...], required_by: str) -> list[Any]:
        """Request every dependency, then wait for all of them.

        Raises the first failure in ``dependencies`` order, once every
        dependency has settled.
        """
        handles = [self._resolve(dep, chain, required_by) for dep in dependencies]
        # Shielded so that cancelling one dependent never cancels a shared dependency
        outcomes = await asyncio.gather(*(asyncio.shield(h) for h in handles), return_exceptions=True)
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                raise outcome
        return outcomes
