"""Unit tests for ResponseCache: freshness, bounds, collapsing and metrics."""

from __future__ import annotations

import asyncio

import pytest

from ai_gateway.providers.cache.response_cache import ResponseCache


def _counting_producer(value, calls: list, delay: float = 0.0):
    async def _produce():
        calls.append(value)
        if delay:
            await asyncio.sleep(delay)
        return value

    return _produce


# ======================================================================
# Key generation
# ======================================================================


class TestGenerateKey:
    def test_param_order_does_not_matter(self) -> None:
        first = ResponseCache.generate_key("generateInsights", {"a": 1, "b": [1, 2]})
        second = ResponseCache.generate_key("generateInsights", {"b": [1, 2], "a": 1})
        assert first == second

    def test_nested_order_does_not_matter(self) -> None:
        first = ResponseCache.generate_key("op", {"ctx": {"x": 1, "y": 2}})
        second = ResponseCache.generate_key("op", {"ctx": {"y": 2, "x": 1}})
        assert first == second

    def test_prefixed_with_operation(self) -> None:
        assert ResponseCache.generate_key("generateRoadmap", {"p": 1}).startswith("generateRoadmap_")

    def test_different_params_give_different_keys(self) -> None:
        assert ResponseCache.generate_key("op", {"title": "a"}) != ResponseCache.generate_key(
            "op", {"title": "b"}
        )

    def test_known_value_for_empty_params(self) -> None:
        assert ResponseCache.generate_key("op", {}) == "op_31e"

    def test_non_mapping_params_rejected(self) -> None:
        with pytest.raises(TypeError):
            ResponseCache.generate_key("op", ["not", "a", "mapping"])  # type: ignore[arg-type]


# ======================================================================
# Hits, misses, expiry
# ======================================================================


class TestFreshness:
    @pytest.mark.asyncio
    async def test_second_call_is_a_hit(self, response_cache: ResponseCache) -> None:
        calls: list = []
        assert await response_cache.get_or_set("k", _counting_producer(1, calls)) == 1
        assert await response_cache.get_or_set("k", _counting_producer(2, calls)) == 1
        assert calls == [1]

        metrics = response_cache.get_metrics()
        assert metrics.hits == 1
        assert metrics.misses == 1
        assert metrics.total_requests == 2
        assert metrics.hit_rate == 50.0

    @pytest.mark.asyncio
    async def test_entry_served_until_ttl_elapses(
        self, response_cache: ResponseCache, clock
    ) -> None:
        calls: list = []
        await response_cache.get_or_set("k", _counting_producer("v1", calls), ttl_ms=1000)

        clock.advance(999)
        assert await response_cache.get_or_set("k", _counting_producer("v2", calls)) == "v1"

        clock.advance(1)
        assert await response_cache.get_or_set("k", _counting_producer("v2", calls)) == "v2"
        assert calls == ["v1", "v2"]

    @pytest.mark.asyncio
    async def test_default_ttl_used_when_none_given(
        self, response_cache: ResponseCache, clock
    ) -> None:
        calls: list = []
        await response_cache.get_or_set("k", _counting_producer(1, calls))
        clock.advance(1000)
        await response_cache.get_or_set("k", _counting_producer(2, calls))
        assert calls == [1, 2]

    @pytest.mark.asyncio
    async def test_falsy_values_are_cached(self, response_cache: ResponseCache) -> None:
        calls: list = []
        await response_cache.get_or_set("k", _counting_producer({}, calls))
        assert await response_cache.get_or_set("k", _counting_producer({"x": 1}, calls)) == {}
        assert len(calls) == 1


# ======================================================================
# Request collapsing
# ======================================================================


class TestRequestCollapsing:
    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_producer(self, response_cache: ResponseCache) -> None:
        calls: list = []
        results = await asyncio.gather(
            *(
                response_cache.get_or_set("k", _counting_producer("shared", calls, delay=0.01))
                for _ in range(5)
            )
        )

        assert results == ["shared"] * 5
        assert calls == ["shared"]
        metrics = response_cache.get_metrics()
        assert metrics.misses == 1
        assert metrics.deduplicated == 4
        assert metrics.total_requests == 5
        assert metrics.pending == 0

    @pytest.mark.asyncio
    async def test_failure_reaches_every_waiter_and_is_not_cached(
        self, response_cache: ResponseCache
    ) -> None:
        attempts = 0

        async def _failing():
            nonlocal attempts
            attempts += 1
            await asyncio.sleep(0.01)
            raise ValueError("boom")

        results = await asyncio.gather(
            response_cache.get_or_set("k", _failing),
            response_cache.get_or_set("k", _failing),
            return_exceptions=True,
        )

        assert all(isinstance(r, ValueError) for r in results)
        assert results[0] is results[1]
        assert attempts == 1
        assert "k" not in response_cache
        assert response_cache.get_metrics().pending == 0

        calls: list = []
        assert await response_cache.get_or_set("k", _counting_producer("ok", calls)) == "ok"
        assert calls == ["ok"]

    @pytest.mark.asyncio
    async def test_cancelled_caller_does_not_cancel_shared_generation(
        self, response_cache: ResponseCache
    ) -> None:
        calls: list = []
        producer = _counting_producer("value", calls, delay=0.02)

        first = asyncio.ensure_future(response_cache.get_or_set("k", producer))
        await asyncio.sleep(0)
        second = asyncio.ensure_future(response_cache.get_or_set("k", producer))
        await asyncio.sleep(0)

        first.cancel()
        assert await second == "value"
        with pytest.raises(asyncio.CancelledError):
            await first
        assert calls == ["value"]
        assert "k" in response_cache

    @pytest.mark.asyncio
    async def test_clear_during_generation_discards_result(self, response_cache: ResponseCache) -> None:
        release = asyncio.Event()

        async def _slow():
            await release.wait()
            return "stale"

        waiter = asyncio.ensure_future(response_cache.get_or_set("k", _slow))
        await asyncio.sleep(0)
        response_cache.clear()
        release.set()

        assert await waiter == "stale"
        assert "k" not in response_cache
        assert len(response_cache) == 0


# ======================================================================
# Bounds and eviction
# ======================================================================


class TestEviction:
    @pytest.mark.asyncio
    async def test_least_recently_used_entry_evicted(self, clock) -> None:
        cache = ResponseCache(max_entries=2, default_ttl_ms=1000, auto_cleanup=False, clock=clock)
        calls: list = []

        await cache.get_or_set("a", _counting_producer(1, calls))
        await cache.get_or_set("b", _counting_producer(2, calls))
        assert await cache.get_or_set("a", _counting_producer(99, calls)) == 1
        await cache.get_or_set("c", _counting_producer(3, calls))

        assert "a" in cache
        assert "b" not in cache
        assert "c" in cache
        metrics = cache.get_metrics()
        assert (metrics.hits, metrics.misses, metrics.evictions) == (1, 3, 1)
        assert metrics.hit_rate == 25.0
        assert metrics.entries == 2

    @pytest.mark.asyncio
    async def test_memory_budget_evicts_until_new_entry_fits(self, clock) -> None:
        cache = ResponseCache(
            max_entries=100,
            max_memory_mb=1,
            auto_cleanup=False,
            clock=clock,
            size_estimator=lambda value: value,
        )
        calls: list = []

        await cache.get_or_set("a", _counting_producer(600_000, calls))
        await cache.get_or_set("b", _counting_producer(600_000, calls))

        assert "a" not in cache
        assert "b" in cache
        metrics = cache.get_metrics()
        assert metrics.memory_usage_bytes == 600_000
        assert metrics.evictions == 1

    @pytest.mark.asyncio
    async def test_oversized_entry_still_stored_alone(self, clock) -> None:
        cache = ResponseCache(
            max_memory_mb=1,
            auto_cleanup=False,
            clock=clock,
            size_estimator=lambda value: value,
        )
        calls: list = []

        await cache.get_or_set("small", _counting_producer(10, calls))
        await cache.get_or_set("huge", _counting_producer(5_000_000, calls))

        assert "huge" in cache
        assert "small" not in cache
        assert len(cache) == 1

    @pytest.mark.asyncio
    async def test_memory_accounting_tracks_stored_entries(self, response_cache: ResponseCache) -> None:
        calls: list = []
        await response_cache.get_or_set("k", _counting_producer({"text": "x" * 100}, calls))
        assert response_cache.get_metrics().memory_usage_bytes > 200

    def test_invalid_bounds_rejected(self) -> None:
        with pytest.raises(ValueError):
            ResponseCache(max_entries=0, auto_cleanup=False)
        with pytest.raises(ValueError):
            ResponseCache(max_memory_mb=0, auto_cleanup=False)


# ======================================================================
# Maintenance and metrics
# ======================================================================


class TestMaintenance:
    @pytest.mark.asyncio
    async def test_cleanup_removes_only_expired_entries(
        self, response_cache: ResponseCache, clock
    ) -> None:
        calls: list = []
        await response_cache.get_or_set("short", _counting_producer(1, calls), ttl_ms=100)
        await response_cache.get_or_set("long", _counting_producer(2, calls), ttl_ms=10_000)

        clock.advance(500)
        assert response_cache.cleanup() == 1
        assert "short" not in response_cache
        assert "long" in response_cache
        assert response_cache.get_metrics().memory_usage_bytes > 0

    @pytest.mark.asyncio
    async def test_background_sweep_purges_expired_entries(self, clock) -> None:
        cache = ResponseCache(cleanup_interval_ms=10, clock=clock)
        try:
            await cache.get_or_set("k", _counting_producer(1, []), ttl_ms=5)
            clock.advance(10)
            await asyncio.sleep(0.05)
            assert len(cache) == 0
        finally:
            await cache.shutdown()

    @pytest.mark.asyncio
    async def test_shutdown_is_idempotent(self, clock) -> None:
        cache = ResponseCache(clock=clock)
        await cache.shutdown()
        await cache.shutdown()

    @pytest.mark.asyncio
    async def test_clear_resets_entries_and_metrics(self, response_cache: ResponseCache) -> None:
        calls: list = []
        await response_cache.get_or_set("a", _counting_producer(1, calls))
        await response_cache.get_or_set("a", _counting_producer(1, calls))

        response_cache.clear()

        metrics = response_cache.get_metrics()
        assert metrics.entries == 0
        assert metrics.hits == 0
        assert metrics.total_requests == 0
        assert metrics.memory_usage_bytes == 0
        assert metrics.hit_rate == 0.0

    def test_metrics_before_any_request(self, response_cache: ResponseCache) -> None:
        metrics = response_cache.get_metrics()
        assert metrics.hit_rate == 0.0
        assert metrics.memory_usage_mb == 0.0
