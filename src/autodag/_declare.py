"""Derivation of dependency names from function signatures."""

import inspect
from collections.abc import Callable
from typing import Any

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


def dependency_names(fn: Callable[..., Any]) -> tuple[str, ...]:
    """Get the dependency names of a function from its parameter names.

    Every parameter names the node whose value it receives. Only plain
    positional parameters are accepted, because the engine passes dependency
    values positionally.

    Args:
        fn: The function to inspect.

    Returns:
        The parameter names, in order.

    Raises:
        TypeError: If a parameter is variadic, keyword-only or has a default.

    Example:
        >>> def total(price, tax): ...
        >>> dependency_names(total)
        ('price', 'tax')

    """
    sig = inspect.signature(fn)
    names: list[str] = []
    for param in sig.parameters.values():
        if param.kind not in _POSITIONAL:
            msg = f"Parameter '{param.name}' of {_describe(fn)} must be positional to name a dependency."
            raise TypeError(msg)
        if param.default is not inspect.Parameter.empty:
            msg = f"Parameter '{param.name}' of {_describe(fn)} cannot have a default value."
            raise TypeError(msg)
        names.append(param.name)
    return tuple(names)


def node_name(fn: Callable[..., Any]) -> str:
    """Get the default node name for a decorated function."""
    name = getattr(fn, "__name__", None)
    if not isinstance(name, str) or name == "<lambda>":
        msg = "Function must have a valid name; pass one explicitly."
        raise TypeError(msg)
    return name


def _describe(fn: Callable[..., Any]) -> str:
    return f"'{getattr(fn, '__qualname__', repr(fn))}'"
