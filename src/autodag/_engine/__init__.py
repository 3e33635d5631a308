"""Resolution engine for computation graphs.

This module provides the runtime half of autodag: the per-node resolution
cache, the normalizer that turns any callable result into a future, and the
resolver that ties them together.

Key types:
- Resolver: Resolves nodes and runs entry points
- ResolutionCache: Per-node state (Idle, InProgress, Resolved, Failed)
- normalize: One-level unwrapping of callable results into futures
"""

from ._cache import CacheState, Failed, Idle, InProgress, ResolutionCache, Resolved
from ._normalize import completed, failed, is_handle, normalize
from ._resolver import Resolver

__all__ = [
    "CacheState",
    "Failed",
    "Idle",
    "InProgress",
    "ResolutionCache",
    "Resolved",
    "Resolver",
    "completed",
    "failed",
    "is_handle",
    "normalize",
]
