"""
Bounded-timeout async page fetcher.
"""

from __future__ import annotations

import asyncio
import logging

import httpx

from app.inventory.logging_utils import log_event
from app.inventory.rate_limiter import DomainRateLimiter
from app.inventory.types import FetchResult

logger = logging.getLogger(__name__)

HTML_ACCEPT = "text/html,application/xhtml+xml,application/json;q=0.9,*/*;q=0.8"
JSON_ACCEPT = "application/json,text/html;q=0.8,*/*;q=0.5"


class PageFetcher:
    """
    GETs product pages and structured product endpoints.

    Every request carries a hard deadline covering connect, redirects and body.
    Timeouts and transport failures come back as a ``FetchResult`` with
    ``status_code == 0``; nothing raises past ``fetch``.
    """

    DEFAULT_HEADERS = {
        "Accept": HTML_ACCEPT,
        "Accept-Language": "en-US,en;q=0.5",
        "Cache-Control": "no-cache",
    }

    def __init__(
        self,
        *,
        timeout_seconds: float,
        user_agent: str,
        rate_limiter: DomainRateLimiter | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.timeout_seconds = timeout_seconds
        self.user_agent = user_agent
        self.rate_limiter = rate_limiter
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> "PageFetcher":
        self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout_seconds),
                headers={**self.DEFAULT_HEADERS, "User-Agent": self.user_agent},
                follow_redirects=True,
            )
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    @property
    def timeout_ms(self) -> int:
        return int(self.timeout_seconds * 1000)

    async def fetch(self, url: str, *, accept: str = HTML_ACCEPT) -> FetchResult:
        client = self._ensure_client()
        headers = {"Accept": accept, "User-Agent": self.user_agent}
        try:
            if self.rate_limiter is not None:
                await self.rate_limiter.wait(url=url)
            response = await asyncio.wait_for(
                client.get(url, headers=headers),
                timeout=self.timeout_seconds,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            log_event(logger, logging.WARNING, "fetch_timeout", url=url, timeout_ms=self.timeout_ms)
            return FetchResult(
                url=url,
                error=f"Timeout after {self.timeout_ms}ms",
                timed_out=True,
            )
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
            log_event(logger, logging.WARNING, "fetch_failed", url=url, error=str(exc))
            return FetchResult(url=url, error=str(exc) or type(exc).__name__)

        return FetchResult(
            url=url,
            status_code=response.status_code,
            text=response.text,
            content_type=response.headers.get("content-type", ""),
        )
