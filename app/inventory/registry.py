"""
Checker class registry keyed by vendor integration family.
"""

from __future__ import annotations

from collections.abc import Mapping

from app.inventory.checkers import (
    AccessRestrictedChecker,
    JSONAPIChecker,
    StockCheckerBase,
    StructuredStorefrontChecker,
)
from app.inventory.fetcher import PageFetcher
from app.inventory.types import VendorFamily


class CheckerRegistry:
    """
    Maps integration families to checker classes; extra families can be registered.
    """

    def __init__(self, registrations: Mapping[str, type[StockCheckerBase]] | None = None) -> None:
        builtins: dict[str, type[StockCheckerBase]] = {
            VendorFamily.STRUCTURED_STOREFRONT: StructuredStorefrontChecker,
            VendorFamily.JSON_API: JSONAPIChecker,
            VendorFamily.ACCESS_RESTRICTED: AccessRestrictedChecker,
        }
        if registrations:
            builtins.update(registrations)
        self._registrations = builtins

    def register(self, *, family: str, checker_class: type[StockCheckerBase]) -> None:
        self._registrations[family.strip().lower()] = checker_class

    def create_checker(self, *, family: str, fetcher: PageFetcher) -> StockCheckerBase:
        checker_class = self._registrations.get(family)
        if checker_class is None:
            allowed = ", ".join(sorted(self._registrations.keys()))
            raise ValueError(f"Unknown vendor family='{family}'. Allowed families: {allowed}.")
        return checker_class(fetcher=fetcher)
