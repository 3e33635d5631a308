"""Declarative resolution of asynchronous computation graphs."""

__all__ = [
    "AutodagError",
    "CacheLifetime",
    "CacheState",
    "ComputationError",
    "ComputationNode",
    "CycleDetectedError",
    "DeclarationError",
    "DependencyGraph",
    "EngineSettings",
    "Failed",
    "FailurePolicy",
    "Graph",
    "Idle",
    "InProgress",
    "Node",
    "NodeKind",
    "Resolved",
    "UnknownDependencyError",
    "ValueNode",
    "dependency_names",
]

from ._dag import Graph
from ._declare import dependency_names
from ._engine import CacheState, Failed, Idle, InProgress, Resolved
from ._errors import (
    AutodagError,
    ComputationError,
    CycleDetectedError,
    DeclarationError,
    UnknownDependencyError,
)
from ._graph import DependencyGraph
from ._nodes import ComputationNode, Node, NodeKind, ValueNode
from ._settings import CacheLifetime, EngineSettings, FailurePolicy
