"""Uniform asynchronous handles for computation results.

Whatever a callable returns, the resolver only ever deals with an
``asyncio.Future``:

- a plain value is promoted to an already-completed future;
- an awaitable is scheduled with ``asyncio.ensure_future``, so awaiting the
  handle yields the awaitable's value.

Only one level is unwrapped. When the awaited value is itself awaitable (for
example a coroutine returning a future), that inner awaitable is the node's
value and is handed to dependents as-is.
"""

import asyncio
import inspect
from typing import Any


def is_handle(obj: object) -> bool:
    """Check if ``obj`` is an asynchronous handle the normalizer would unwrap."""
    return inspect.isawaitable(obj)


def completed(value: Any) -> asyncio.Future[Any]:
    """Create a future already completed with ``value``.

    Must be called with a running event loop.
    """
    future = asyncio.get_running_loop().create_future()
    future.set_result(value)
    return future


def failed(error: BaseException) -> asyncio.Future[Any]:
    """Create a future already failed with ``error``.

    Must be called with a running event loop.
    """
    future = asyncio.get_running_loop().create_future()
    future.set_exception(error)
    return future


def normalize(result: Any) -> asyncio.Future[Any]:
    """Turn a callable's raw result into a future, removing one level of wrapping.

    Args:
        result: The value returned by a computation's callable.

    Returns:
        A future that yields ``result`` itself when it is not awaitable, or
        the value ``result`` resolves to otherwise.

    """
    if is_handle(result):
        return asyncio.ensure_future(result)
    return completed(result)
