"""
Tier-1 entry point: one listing URL + vendor in, one stock verdict out.
"""

from __future__ import annotations

from app.inventory.checkers import StockCheckerBase
from app.inventory.checkers.base import utc_now
from app.inventory.config.models import VendorProfiles
from app.inventory.fetcher import PageFetcher
from app.inventory.registry import CheckerRegistry
from app.inventory.types import StockSource, StockVerdict, VendorFamily


class StockChecker:
    """
    Dispatches each listing to the checker for its vendor's integration family.
    """

    def __init__(
        self,
        *,
        vendor_profiles: VendorProfiles,
        fetcher: PageFetcher,
        registry: CheckerRegistry | None = None,
    ) -> None:
        self._vendor_profiles = vendor_profiles
        self._fetcher = fetcher
        self._registry = registry or CheckerRegistry()
        self._checkers: dict[str, StockCheckerBase] = {}

    @property
    def vendor_profiles(self) -> VendorProfiles:
        return self._vendor_profiles

    def _checker_for(self, family: str) -> StockCheckerBase:
        checker = self._checkers.get(family)
        if checker is None:
            checker = self._registry.create_checker(family=family, fetcher=self._fetcher)
            self._checkers[family] = checker
        return checker

    async def check_product_stock(self, product_url: str | None, vendor_slug: str) -> StockVerdict:
        family = self._vendor_profiles.family_for(vendor_slug)

        # Restricted vendors win over a missing URL: they are never scraped at all.
        if family == VendorFamily.ACCESS_RESTRICTED:
            return await self._checker_for(family).check(product_url or "")

        if not product_url:
            return StockVerdict(in_stock=True, source=StockSource.NO_URL, checked_at=utc_now())

        return await self._checker_for(family).check(product_url)
