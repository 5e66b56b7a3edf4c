"""Cache providers.

ResponseCache is the memory-bounded memoization layer in front of every AI
generation call (TTL, LRU eviction by count and estimated bytes, in-flight
request collapsing).  MemoryCacheProvider is a plain cachetools TTL cache
for short-lived lookups such as project file listings.

Both are process-local; nothing here is shared across workers.
"""

from ai_gateway.providers.cache.memory_cache import MemoryCacheProvider
from ai_gateway.providers.cache.response_cache import ResponseCache

__all__ = ["MemoryCacheProvider", "ResponseCache"]
