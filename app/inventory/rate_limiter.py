"""
Domain-aware request rate limiter.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from urllib.parse import urlparse


class DomainRateLimiter:
    """
    Enforces a minimum interval between requests per host.

    State lives for the lifetime of the instance. Pass one instance to every
    fetcher of a run (or process) and call ``reset()`` between test cases.
    """

    def __init__(
        self,
        *,
        min_interval_seconds: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        self._min_interval_seconds = max(0.0, min_interval_seconds)
        self._clock = clock
        self._sleep = sleep
        self._last_request_by_host: dict[str, float] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    @property
    def min_interval_seconds(self) -> float:
        return self._min_interval_seconds

    @staticmethod
    def host_for(url: str) -> str:
        try:
            parsed = urlparse(url)
        except ValueError:
            return ""
        return (parsed.hostname or parsed.netloc or "").lower()

    def record_request(self, host: str) -> None:
        self._last_request_by_host[host.lower()] = self._clock()

    def time_since_last(self, host: str) -> float | None:
        """
        Seconds since the last recorded request to ``host``, or None if never.
        """

        last = self._last_request_by_host.get(host.lower())
        if last is None:
            return None
        return self._clock() - last

    async def wait(self, *, url: str) -> float:
        """
        Sleep as needed so requests to one host stay spaced out, then record
        the request. Returns the seconds slept.

        Unparseable URLs pass through; the fetch itself reports the failure.
        """

        host = self.host_for(url)
        if not host:
            return 0.0

        lock = self._locks.setdefault(host, asyncio.Lock())
        async with lock:
            elapsed = self.time_since_last(host)
            wait_seconds = 0.0
            if elapsed is not None:
                wait_seconds = max(0.0, self._min_interval_seconds - elapsed)
            if wait_seconds > 0:
                await self._sleep(wait_seconds)
            self.record_request(host)
            return wait_seconds

    def reset(self) -> None:
        self._last_request_by_host.clear()
        self._locks.clear()
