"""
tests/test_rate_limiter.py

Per-host spacing of outgoing requests.

Coverage
--------
- First request to a host never waits
- Second request inside the interval sleeps for the remainder
- Requests after the interval do not wait
- Hosts are tracked independently and case-insensitively
- URLs without a host, or with a malformed one, pass through
- reset() forgets history
"""

from __future__ import annotations

import pytest

from app.inventory.rate_limiter import DomainRateLimiter


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def limiter(clock: FakeClock) -> DomainRateLimiter:
    return DomainRateLimiter(min_interval_seconds=1.0, clock=clock, sleep=clock.sleep)


class TestDomainRateLimiter:
    @pytest.mark.asyncio
    async def test_first_request_does_not_wait(self, limiter: DomainRateLimiter, clock: FakeClock) -> None:
        assert await limiter.wait(url="https://peptidetech.co/a") == 0.0
        assert clock.sleeps == []

    @pytest.mark.asyncio
    async def test_second_request_sleeps_for_remainder(self, limiter: DomainRateLimiter, clock: FakeClock) -> None:
        await limiter.wait(url="https://peptidetech.co/a")
        clock.now += 0.25
        waited = await limiter.wait(url="https://peptidetech.co/b")
        assert waited == pytest.approx(0.75)
        assert clock.sleeps == [pytest.approx(0.75)]

    @pytest.mark.asyncio
    async def test_no_wait_after_interval(self, limiter: DomainRateLimiter, clock: FakeClock) -> None:
        await limiter.wait(url="https://peptidetech.co/a")
        clock.now += 5.0
        assert await limiter.wait(url="https://peptidetech.co/b") == 0.0

    @pytest.mark.asyncio
    async def test_hosts_are_independent(self, limiter: DomainRateLimiter, clock: FakeClock) -> None:
        await limiter.wait(url="https://peptidetech.co/a")
        assert await limiter.wait(url="https://modifiedaminos.shop/a") == 0.0
        assert clock.sleeps == []

    @pytest.mark.asyncio
    async def test_host_match_is_case_insensitive(self, limiter: DomainRateLimiter) -> None:
        await limiter.wait(url="https://PeptideTech.co/a")
        assert await limiter.wait(url="https://peptidetech.co/b") == pytest.approx(1.0)

    @pytest.mark.asyncio
    async def test_url_without_host_passes_through(self, limiter: DomainRateLimiter, clock: FakeClock) -> None:
        assert await limiter.wait(url="not a url") == 0.0
        assert await limiter.wait(url="not a url") == 0.0
        assert clock.sleeps == []

    @pytest.mark.asyncio
    async def test_malformed_host_passes_through(self, limiter: DomainRateLimiter, clock: FakeClock) -> None:
        assert DomainRateLimiter.host_for("http://[broken/product") == ""
        assert await limiter.wait(url="http://[broken/product") == 0.0
        assert clock.sleeps == []

    @pytest.mark.asyncio
    async def test_reset_forgets_history(self, limiter: DomainRateLimiter) -> None:
        await limiter.wait(url="https://peptidetech.co/a")
        limiter.reset()
        assert limiter.time_since_last("peptidetech.co") is None
        assert await limiter.wait(url="https://peptidetech.co/b") == 0.0

    def test_negative_interval_is_clamped(self) -> None:
        assert DomainRateLimiter(min_interval_seconds=-3).min_interval_seconds == 0.0
