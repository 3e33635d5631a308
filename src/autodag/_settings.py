"""Engine policies that the original design left open."""

from enum import StrEnum
from typing import Self

from pydantic import BaseModel, ConfigDict


class _PolicyEnum(StrEnum):
    """String enum whose members carry a description as their docstring."""

    def __new__(cls, value: str, doc: str = "") -> Self:
        obj = str.__new__(cls, value)
        obj._value_ = value
        obj.__doc__ = doc
        return obj


class FailurePolicy(_PolicyEnum):
    """What a later resolve does with a node whose computation failed."""

    POISON = "poison", "The failure is cached; later resolves fail immediately with the same error."
    RETRY = "retry", "The failure is forgotten; the next resolve invokes the callable again."


class CacheLifetime(_PolicyEnum):
    """How long resolved computation values are kept."""

    GRAPH = "graph", "Values persist for the lifetime of the graph."
    RUN = "run", "Computation values are dropped at the start of every entry-point run."


class EngineSettings(BaseModel):
    """Resolution policies of a graph.

    Attributes:
        failure_policy: Whether failed outcomes are cached.
        cache_lifetime: Whether memoized values outlive a single entry-point run.

    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    failure_policy: FailurePolicy = FailurePolicy.POISON
    cache_lifetime: CacheLifetime = CacheLifetime.GRAPH
