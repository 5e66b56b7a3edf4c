"""Abstract base classes for the gateway's two caches.

``ICacheProvider`` is a plain key-value cache with TTL (used for short-lived
lookups such as project file listings).  ``IResponseCache`` is the
memoization layer in front of AI generation calls: it owns freshness,
capacity bounds and in-flight request collapsing.

Services depend on these interfaces, never on a concrete cache or a
module-level instance; the composition root in ``ai_gateway.main`` decides
which implementation is injected.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from ai_gateway.models.cache import CacheMetrics
from ai_gateway.utils.cache_keys import generate_cache_key

T = TypeVar("T")


class ICacheProvider(ABC):
    """Contract for key-value cache services.

    All operations are async so a network-backed store could implement the
    same contract without blocking the event loop.
    """

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Return the value stored under *key*, or ``None`` if missing/expired."""

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Store *value* under *key*.

        Parameters
        ----------
        key:
            The cache key.
        value:
            The value to store.
        ttl:
            Time-to-live in seconds.  ``None`` uses the provider default.
        """

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove *key*; a no-op if it does not exist."""

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Return ``True`` if *key* is present and not expired."""

    @abstractmethod
    async def clear(self) -> None:
        """Remove every entry."""


class IResponseCache(ABC):
    """Contract for the memory-bounded AI response cache."""

    @abstractmethod
    async def get_or_set(
        self,
        key: str,
        producer: Callable[[], Awaitable[T]],
        ttl_ms: int | None = None,
    ) -> T:
        """Return the fresh cached value for *key*, or produce and cache it.

        Concurrent calls for the same missing key share a single
        ``producer()`` invocation.  Producer exceptions propagate unchanged
        to every waiting caller and are never cached.

        Parameters
        ----------
        key:
            Pre-computed key, normally from :meth:`generate_key`.
        producer:
            Zero-argument coroutine function computing the value.
        ttl_ms:
            Freshness window in milliseconds; ``None`` uses the instance
            default.
        """

    @abstractmethod
    def clear(self) -> None:
        """Drop all entries and pending requests and reset metrics."""

    @abstractmethod
    def get_metrics(self) -> CacheMetrics:
        """Return a snapshot of hit/miss/eviction counters and usage."""

    @abstractmethod
    async def shutdown(self) -> None:
        """Stop background work owned by the cache."""

    @staticmethod
    def generate_key(operation: str, params: dict[str, Any]) -> str:
        """Build a deterministic key from an operation name and its params."""
        return generate_cache_key(operation, params)
