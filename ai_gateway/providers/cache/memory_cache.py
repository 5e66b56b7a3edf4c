"""In-memory key-value cache provider using cachetools.TTLCache.

Short-lived memo for cheap-to-refetch lookups, e.g. a project's supporting
file listing while several generation requests for the same project arrive
close together.  Not used for AI responses: those go through
:class:`~ai_gateway.providers.cache.response_cache.ResponseCache`, which
also bounds memory and collapses concurrent requests.
"""

from __future__ import annotations

from typing import Any

import structlog
from cachetools import TTLCache

from ai_gateway.interfaces.cache_provider import ICacheProvider

logger = structlog.get_logger(logger_name=__name__)


class MemoryCacheProvider(ICacheProvider):
    """In-memory TTL cache backed by ``cachetools.TTLCache``.

    Parameters
    ----------
    max_size:
        Maximum number of entries before the least-recently-used entry
        is evicted.
    ttl:
        Time-to-live in seconds for cache entries.
    timer:
        Clock used by ``TTLCache`` (seconds).  Injected in tests.
    """

    def __init__(self, max_size: int = 256, ttl: int = 300, timer: Any = None) -> None:
        self._default_ttl = ttl
        if timer is None:
            self._cache: TTLCache[str, Any] = TTLCache(maxsize=max_size, ttl=ttl)
        else:
            self._cache = TTLCache(maxsize=max_size, ttl=ttl, timer=timer)

    # ------------------------------------------------------------------
    # ICacheProvider implementation
    # ------------------------------------------------------------------

    async def get(self, key: str) -> Any | None:
        """Retrieve the cached value for *key*, or ``None`` if missing/expired."""
        value = self._cache.get(key)
        if value is not None:
            logger.debug("kv_cache_hit", key=key)
        else:
            logger.debug("kv_cache_miss", key=key)
        return value

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Store *value* under *key*.

        ``TTLCache`` applies one TTL to every entry, so a per-item *ttl*
        different from the constructor's is logged and ignored.
        """
        if ttl is not None and ttl != self._default_ttl:
            logger.debug("kv_cache_ttl_ignored", key=key, requested_ttl=ttl)
        self._cache[key] = value
        logger.debug("kv_cache_set", key=key)

    async def delete(self, key: str) -> None:
        """Remove *key* from the cache (no-op if absent)."""
        self._cache.pop(key, None)

    async def exists(self, key: str) -> bool:
        """Return ``True`` if *key* is present and not expired."""
        return key in self._cache

    async def clear(self) -> None:
        self._cache.clear()

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def cleanup(self) -> int:
        """Purge expired entries now; return how many were removed."""
        return len(self._cache.expire())

    def size(self) -> int:
        """Number of live entries (``TTLCache`` expires lazily on access)."""
        return len(self._cache)
