"""Static dependency graph abstractions.

This module contains:
- DependencyGraph[T]: An immutable snapshot of declared dependency edges
- topological_sort: Ordering of nodes by their dependencies
- find_cycle: Detection of one dependency cycle with its path
"""

from ._algorithms import find_cycle, topological_sort
from ._dependency_graph import DependencyGraph

__all__ = ["DependencyGraph", "find_cycle", "topological_sort"]
