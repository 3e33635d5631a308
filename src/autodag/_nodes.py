"""Node definitions of a computation graph."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum, auto
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable


class NodeKind(StrEnum):
    """The kind of node in the computation graph."""

    VALUE = auto()  # Constant payload, resolved at declaration
    COMPUTATION = auto()  # Callable over other nodes


@dataclass(frozen=True, slots=True)
class ValueNode:
    """A node holding a constant payload.

    Attributes:
        name: Unique name of the node within its graph.
        payload: The value delivered to dependents.

    """

    name: str
    payload: Any = field(repr=False)

    @property
    def kind(self) -> NodeKind:
        return NodeKind.VALUE

    @property
    def dependencies(self) -> tuple[str, ...]:
        return ()


@dataclass(frozen=True, slots=True)
class ComputationNode:
    """A node computed from other nodes.

    The callable receives the resolved values of ``dependencies`` as positional
    arguments, in order. It may return a plain value or an awaitable.

    Attributes:
        name: Unique name of the node within its graph.
        compute_fn: The callable producing the node's value.
        dependencies: Ordered names of the nodes passed to ``compute_fn``.

    Example:
        >>> ComputationNode(
        ...     name="total",
        ...     compute_fn=lambda price, tax: price + tax,
        ...     dependencies=("price", "tax"),
        ... )

    """

    name: str
    compute_fn: Callable[..., Any] = field(repr=False)
    dependencies: tuple[str, ...] = ()

    @property
    def kind(self) -> NodeKind:
        return NodeKind.COMPUTATION


type Node = ValueNode | ComputationNode
