"""Exceptions raised while declaring and resolving a graph."""

from collections.abc import Sequence

ENTRY_POINT_NAME = "<entry point>"


class AutodagError(Exception):
    """Base class for all autodag errors."""


class DeclarationError(AutodagError):
    """A node was declared at a time the graph cannot accept it."""


class UnknownDependencyError(AutodagError, KeyError):
    """A dependency name has no matching node in the graph.

    Attributes:
        name: The name that could not be found.
        required_by: The node that asked for it, or None for a direct lookup.

    """

    def __init__(self, name: str, required_by: str | None = None) -> None:
        self.name = name
        self.required_by = required_by
        super().__init__(name)

    def __str__(self) -> str:
        if self.required_by is None:
            return f"Unknown dependency '{self.name}'"
        return f"Unknown dependency '{self.name}' (required by '{self.required_by}')"


class CycleDetectedError(AutodagError):
    """Resolution of a node re-entered itself through its own dependencies.

    Attributes:
        path: Node names forming the cycle. The first name is repeated at the end.

    """

    def __init__(self, path: Sequence[str]) -> None:
        self.path = tuple(path)
        super().__init__(f"Cycle detected: {' -> '.join(self.path)}")


class ComputationError(AutodagError):
    """The callable of a node raised an exception.

    Attributes:
        name: The node whose callable failed.
        cause: The exception raised by the callable.

    """

    def __init__(self, name: str, cause: BaseException) -> None:
        self.name = name
        self.cause = cause
        super().__init__(f"Computation '{name}' failed: {type(cause).__name__}: {cause}")
