"""Response-cache models: stored entries and the metrics snapshot."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class CacheEntry(BaseModel):
    """One cached generation result.

    Entries are replaced wholesale or deleted, never mutated.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    value: Any
    expires_at: float  # absolute, milliseconds on the cache's clock
    size_estimate: int = Field(ge=0)  # bytes

    def is_fresh(self, now_ms: float) -> bool:
        return self.expires_at > now_ms


class CacheMetrics(BaseModel):
    """Point-in-time view of the response cache's counters.

    ``hit_rate`` is a percentage (0-100) of ``hits / total_requests``, and
    ``0.0`` before the first request.  ``deduplicated`` counts calls that
    joined an in-flight generation instead of starting their own; they are
    part of ``total_requests`` but neither hits nor misses.
    """

    model_config = ConfigDict(frozen=True)

    hits: int = 0
    misses: int = 0
    evictions: int = 0
    deduplicated: int = 0
    total_requests: int = 0
    entries: int = 0
    pending: int = 0
    memory_usage_bytes: int = 0
    hit_rate: float = 0.0

    @property
    def memory_usage_mb(self) -> float:
        return round(self.memory_usage_bytes / (1024 * 1024), 3)
