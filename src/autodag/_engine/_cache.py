"""Per-node resolution state."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterable


@dataclass(frozen=True, slots=True)
class Idle:
    """Not resolved yet; the next resolve runs the computation."""


@dataclass(frozen=True, slots=True)
class InProgress:
    """Being resolved; concurrent requests share ``handle``.

    Attributes:
        handle: Future completed with the node's outcome.
        path: Names on the call chain that started the resolution, ending with this node.

    """

    handle: asyncio.Future[Any] = field(repr=False)
    path: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class Resolved:
    """Resolved to ``value``."""

    value: Any


@dataclass(frozen=True, slots=True)
class Failed:
    """Resolution ended with ``error``."""

    error: BaseException


type CacheState = Idle | InProgress | Resolved | Failed

IDLE = Idle()


class ResolutionCache:
    """Resolution state of every node of a graph.

    Names that were never recorded are Idle. All transitions happen on the
    event loop thread without suspending, so each one is atomic with respect
    to other resolve calls.
    """

    __slots__ = ("_states",)

    def __init__(self) -> None:
        self._states: dict[str, CacheState] = {}

    def get(self, name: str) -> CacheState:
        return self._states.get(name, IDLE)

    def start(self, name: str, handle: asyncio.Future[Any], path: tuple[str, ...]) -> InProgress:
        state = InProgress(handle=handle, path=path)
        self._states[name] = state
        return state

    def resolve(self, name: str, value: Any) -> None:
        self._states[name] = Resolved(value)

    def fail(self, name: str, error: BaseException) -> None:
        self._states[name] = Failed(error)

    def reset(self, name: str) -> None:
        self._states.pop(name, None)

    def in_progress(self) -> dict[str, InProgress]:
        """Get the entries currently being resolved."""
        return {name: state for name, state in self._states.items() if isinstance(state, InProgress)}

    def invalidate(self, names: Iterable[str]) -> list[str]:
        """Forget the outcome of settled computations.

        In-progress entries are left untouched.

        Returns:
            The names whose state was actually dropped.

        """
        dropped = []
        for name in names:
            if isinstance(self._states.get(name), Resolved | Failed):
                del self._states[name]
                dropped.append(name)
        return dropped
