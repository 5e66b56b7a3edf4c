"""Memory-bounded, in-process response cache for AI generation calls.

Memoizes expensive, non-deterministic generation results keyed by
:func:`~ai_gateway.utils.cache_keys.generate_cache_key`, with three
guarantees:

* **Freshness** -- an entry is only returned while ``expires_at`` is in the
  future; expiry is re-checked on every read, independent of the sweep.
* **Bounded memory** -- before every insert, least-recently-used entries are
  evicted until both the entry-count and estimated-byte bounds hold.
* **Request collapsing** -- concurrent callers for the same missing key share
  one producer run.

Concurrency model: one asyncio event loop, no locks.  ``get_or_set`` checks
for an in-flight request and registers its own with no ``await`` in between,
so a second caller always sees the marker.  The producer runs inside a task
owned by the cache; callers wait on it through ``asyncio.shield`` so that a
cancelled caller does not cancel the generation the others are waiting on.
The cache imposes no producer timeout; a producer that never finishes keeps
its pending marker forever, so providers must time out their own calls.
"""

from __future__ import annotations

import asyncio
import itertools
import time
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, TypeVar

import structlog

from ai_gateway.interfaces.cache_provider import IResponseCache
from ai_gateway.models.cache import CacheEntry, CacheMetrics
from ai_gateway.utils.cache_keys import generate_cache_key
from ai_gateway.utils.serialization import estimate_size

logger = structlog.get_logger(logger_name=__name__)

T = TypeVar("T")

_BYTES_PER_MB = 1024 * 1024


def _wall_clock_ms() -> float:
    return time.time() * 1000.0


class ResponseCache(IResponseCache):
    """LRU + TTL cache with in-flight request deduplication.

    Parameters
    ----------
    max_entries:
        Maximum number of live entries.
    max_memory_mb:
        Budget for the summed ``size_estimate`` of all entries.
    default_ttl_ms:
        TTL used when ``get_or_set`` is called without one.
    cleanup_interval_ms:
        Period of the background expiry sweep.
    auto_cleanup:
        Run the background sweep at all.  It starts immediately when a loop
        is running, otherwise on the first ``get_or_set`` (or ``start()``).
    clock:
        Returns the current time in milliseconds.  Tests inject a fake one.
    size_estimator:
        Maps a value to its approximate size in bytes.
    """

    def __init__(
        self,
        max_entries: int = 100,
        max_memory_mb: float = 50.0,
        default_ttl_ms: int = 10 * 60 * 1000,
        cleanup_interval_ms: int = 60 * 1000,
        *,
        auto_cleanup: bool = True,
        clock: Callable[[], float] = _wall_clock_ms,
        size_estimator: Callable[[Any], int] = estimate_size,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        if max_memory_mb <= 0:
            raise ValueError("max_memory_mb must be positive")

        self._max_entries = max_entries
        self._max_memory_bytes = int(max_memory_mb * _BYTES_PER_MB)
        self._default_ttl_ms = default_ttl_ms
        self._cleanup_interval_s = cleanup_interval_ms / 1000.0
        self._auto_cleanup = auto_cleanup
        self._clock = clock
        self._size_estimator = size_estimator

        self._entries: dict[str, CacheEntry] = {}
        self._access_order: dict[str, int] = {}
        self._access_counter = itertools.count(1)
        self._pending: dict[str, asyncio.Task[Any]] = {}
        self._memory_bytes = 0
        # Bumped by clear() so generations started before it cannot
        # repopulate the cache afterwards.
        self._generation = 0

        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._deduplicated = 0
        self._total_requests = 0

        self._sweeper: asyncio.Task[None] | None = None
        self._closed = False
        if auto_cleanup:
            try:
                asyncio.get_running_loop()
            except RuntimeError:
                pass  # no loop yet; started lazily on first use
            else:
                self.start()

    # ------------------------------------------------------------------
    # IResponseCache implementation
    # ------------------------------------------------------------------

    async def get_or_set(
        self,
        key: str,
        producer: Callable[[], Awaitable[T]],
        ttl_ms: int | None = None,
    ) -> T:
        """Return the fresh value for *key*, producing it at most once."""
        if self._auto_cleanup and not self._closed:
            self.start()

        self._total_requests += 1

        entry = self._entries.get(key)
        if entry is not None:
            if entry.is_fresh(self._clock()):
                self._hits += 1
                self._touch(key)
                logger.debug("cache_hit", key=key)
                return entry.value
            self._remove(key)

        pending = self._pending.get(key)
        if pending is not None:
            self._deduplicated += 1
            logger.debug("cache_request_deduplicated", key=key)
            return await asyncio.shield(pending)

        self._misses += 1
        logger.debug("cache_miss", key=key)
        ttl = self._default_ttl_ms if ttl_ms is None else ttl_ms
        task = asyncio.ensure_future(self._produce(key, producer, ttl, self._generation))
        task.add_done_callback(self._log_producer_outcome(key))
        self._pending[key] = task
        return await asyncio.shield(task)

    def clear(self) -> None:
        """Drop all entries and pending markers and zero the metrics.

        In-flight producers keep running for the callers already awaiting
        them, but their results are not stored.
        """
        self._entries.clear()
        self._access_order.clear()
        self._pending.clear()
        self._memory_bytes = 0
        self._generation += 1
        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._deduplicated = 0
        self._total_requests = 0
        logger.info("cache_cleared")

    def get_metrics(self) -> CacheMetrics:
        hit_rate = (
            round(self._hits / self._total_requests * 100, 2)
            if self._total_requests
            else 0.0
        )
        return CacheMetrics(
            hits=self._hits,
            misses=self._misses,
            evictions=self._evictions,
            deduplicated=self._deduplicated,
            total_requests=self._total_requests,
            entries=len(self._entries),
            pending=len(self._pending),
            memory_usage_bytes=self._memory_bytes,
            hit_rate=hit_rate,
        )

    async def shutdown(self) -> None:
        """Stop the background sweep.  Entries are left untouched."""
        self._closed = True
        sweeper, self._sweeper = self._sweeper, None
        if sweeper is None or sweeper.done():
            return
        sweeper.cancel()
        try:
            await sweeper
        except asyncio.CancelledError:
            pass
        logger.debug("cache_sweeper_stopped")

    @staticmethod
    def generate_key(operation: str, params: Mapping[str, Any]) -> str:
        """Deterministic ``<operation>_<hash>`` key; param order is irrelevant."""
        return generate_cache_key(operation, params)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start the background sweep if it is not already running.

        Must be called from inside a running event loop.
        """
        if self._sweeper is not None and not self._sweeper.done():
            return
        self._closed = False
        self._sweeper = asyncio.get_running_loop().create_task(self._sweep_loop())

    def cleanup(self) -> int:
        """Delete every expired entry now and return how many were removed."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if not entry.is_fresh(now)]
        for key in expired:
            self._remove(key)
        if expired:
            logger.debug("cache_sweep_complete", removed=len(expired), remaining=len(self._entries))
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _produce(
        self,
        key: str,
        producer: Callable[[], Awaitable[T]],
        ttl_ms: int,
        generation: int,
    ) -> T:
        try:
            value = await producer()
            if generation == self._generation:
                self._store(key, value, ttl_ms)
            return value
        finally:
            if self._pending.get(key) is asyncio.current_task():
                del self._pending[key]

    def _store(self, key: str, value: Any, ttl_ms: int) -> None:
        size = self._size_estimator(value)
        if key in self._entries:
            self._remove(key)
        self._ensure_capacity(size)
        self._entries[key] = CacheEntry(
            value=value,
            expires_at=self._clock() + ttl_ms,
            size_estimate=size,
        )
        self._memory_bytes += size
        self._touch(key)
        logger.debug("cache_set", key=key, size_bytes=size, ttl_ms=ttl_ms)

    def _ensure_capacity(self, incoming_size: int) -> None:
        """Evict LRU entries until *incoming_size* fits both bounds.

        An entry bigger than the whole memory budget still goes in once the
        store is empty: writes are never refused.
        """
        while self._entries and (
            len(self._entries) >= self._max_entries
            or self._memory_bytes + incoming_size > self._max_memory_bytes
        ):
            self._evict_lru()

    def _evict_lru(self) -> None:
        lru_key = min(self._access_order, key=self._access_order.__getitem__)
        self._remove(lru_key)
        self._evictions += 1
        logger.debug("cache_eviction", key=lru_key, memory_bytes=self._memory_bytes)

    def _touch(self, key: str) -> None:
        self._access_order[key] = next(self._access_counter)

    def _remove(self, key: str) -> None:
        entry = self._entries.pop(key, None)
        self._access_order.pop(key, None)
        if entry is not None:
            self._memory_bytes -= entry.size_estimate

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self._cleanup_interval_s)
            self.cleanup()

    @staticmethod
    def _log_producer_outcome(key: str) -> Callable[[asyncio.Task[Any]], None]:
        # Also retrieves the exception, so a failed task whose callers were
        # all cancelled does not trigger "exception was never retrieved".
        def _callback(task: asyncio.Task[Any]) -> None:
            if task.cancelled():
                logger.warning("cache_producer_cancelled", key=key)
                return
            exc = task.exception()
            if exc is not None:
                logger.warning(
                    "cache_producer_failed",
                    key=key,
                    error=str(exc),
                    error_type=type(exc).__name__,
                )

        return _callback
