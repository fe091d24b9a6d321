"""Tests for the fan-out helpers."""

import asyncio

import pytest

from .concurrency import chunked, gather_isolated


async def _value(v, delay=0.0):
    await asyncio.sleep(delay)
    return v


async def _boom():
    raise RuntimeError("boom")


class TestGatherIsolated:
    @pytest.mark.asyncio
    async def test_keeps_order(self):
        results = await gather_isolated([_value(1, 0.02), _value(2), _value(3, 0.01)], default=None)
        assert results == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_failure_becomes_default(self):
        results = await gather_isolated([_value("a"), _boom(), _value("c")], default="-")
        assert results == ["a", "-", "c"]

    @pytest.mark.asyncio
    async def test_empty(self):
        assert await gather_isolated([], default=0) == []

    @pytest.mark.asyncio
    async def test_limit_bounds_in_flight(self):
        in_flight = 0
        peak = 0

        async def tracked(i):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return i

        results = await gather_isolated((tracked(i) for i in range(10)), default=None, limit=3)
        assert results == list(range(10))
        assert peak <= 3


class TestChunked:
    def test_splits_into_batches(self):
        assert chunked([1, 2, 3, 4, 5, 6, 7], 5) == [[1, 2, 3, 4, 5], [6, 7]]

    def test_empty(self):
        assert chunked([], 5) == []

    def test_rejects_zero(self):
        with pytest.raises(ValueError):
            chunked([1], 0)
