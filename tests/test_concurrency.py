"""
tests/test_concurrency.py

Bounded async worker pool.

Coverage
--------
- Never more than max_concurrent workers in flight
- Results line up with inputs regardless of completion order
- Empty input
- Pool size below one is treated as one
- Worker exceptions propagate
"""

from __future__ import annotations

import asyncio

import pytest

from app.inventory.concurrency import run_with_concurrency


class TestRunWithConcurrency:
    @pytest.mark.asyncio
    async def test_respects_limit(self) -> None:
        in_flight = 0
        peak = 0

        async def worker(value: int) -> int:
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.001)
            in_flight -= 1
            return value

        await run_with_concurrency(list(range(20)), worker, max_concurrent=3)
        assert peak == 3

    @pytest.mark.asyncio
    async def test_results_follow_input_order(self) -> None:
        async def worker(value: int) -> int:
            # Later inputs finish first.
            await asyncio.sleep(0.001 * (10 - value))
            return value * 10

        results = await run_with_concurrency(list(range(10)), worker, max_concurrent=4)
        assert results == [value * 10 for value in range(10)]

    @pytest.mark.asyncio
    async def test_empty_input(self) -> None:
        async def worker(value: int) -> int:
            raise AssertionError("should not be called")

        assert await run_with_concurrency([], worker, max_concurrent=2) == []

    @pytest.mark.asyncio
    async def test_zero_limit_runs_serially(self) -> None:
        in_flight = 0
        peak = 0

        async def worker(value: str) -> str:
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0)
            in_flight -= 1
            return value.upper()

        assert await run_with_concurrency(["a", "b", "c"], worker, max_concurrent=0) == ["A", "B", "C"]
        assert peak == 1

    @pytest.mark.asyncio
    async def test_worker_exception_propagates(self) -> None:
        async def worker(value: int) -> int:
            if value == 2:
                raise ValueError("boom")
            return value

        with pytest.raises(ValueError, match="boom"):
            await run_with_concurrency([1, 2, 3], worker, max_concurrent=2)
