"""
Base stock checker abstraction for Tier-1 verification.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone

from app.inventory.fetcher import PageFetcher
from app.inventory.logging_utils import log_event
from app.inventory.types import FetchResult, StockSource, StockVerdict

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class StockCheckerBase(ABC):
    """
    One checker per vendor integration family.

    ``check`` is the boundary: it always returns a verdict. Anything a
    subclass raises becomes an ``error`` verdict that keeps the listing
    in stock, since only positive evidence of absence may mark it out.
    """

    family: str = ""

    def __init__(self, *, fetcher: PageFetcher | None = None) -> None:
        self.fetcher = fetcher

    async def check(self, product_url: str) -> StockVerdict:
        checked_at = utc_now()
        try:
            return await self.check_url(product_url, checked_at=checked_at)
        except Exception as exc:
            message = str(exc) or type(exc).__name__
            log_event(
                logger,
                logging.ERROR,
                "stock_check_failed",
                family=self.family,
                product_url=product_url,
                error=message,
            )
            return StockVerdict(
                in_stock=True,
                source=StockSource.ERROR,
                error=message,
                checked_at=checked_at,
            )

    @abstractmethod
    async def check_url(self, product_url: str, *, checked_at: datetime) -> StockVerdict:
        """
        Fetch and classify one listing.
        """

    def _require_fetcher(self) -> PageFetcher:
        if self.fetcher is None:
            raise RuntimeError(f"{type(self).__name__} requires a PageFetcher.")
        return self.fetcher

    @staticmethod
    def transport_failure_verdict(fetched: FetchResult, *, checked_at: datetime) -> StockVerdict:
        """
        Timeouts and connection failures never count as absence.
        """

        return StockVerdict(
            in_stock=True,
            source=StockSource.TIMEOUT if fetched.timed_out else StockSource.ERROR,
            error=fetched.error,
            checked_at=checked_at,
        )
