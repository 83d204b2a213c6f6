"""
Checker for vendors whose listings cannot be scraped.
"""

from __future__ import annotations

from datetime import datetime

from app.inventory.checkers.base import StockCheckerBase
from app.inventory.types import StockSource, StockVerdict, VendorFamily


class AccessRestrictedChecker(StockCheckerBase):
    """
    No network call: listings behind a login are always assumed available.
    """

    family = VendorFamily.ACCESS_RESTRICTED

    async def check_url(self, product_url: str, *, checked_at: datetime) -> StockVerdict:
        return StockVerdict(
            in_stock=True,
            source=StockSource.ACCESS_RESTRICTED,
            checked_at=checked_at,
        )
