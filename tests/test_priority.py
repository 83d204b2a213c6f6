"""
tests/test_priority.py

Tier-2 queue selection.

Coverage
--------
- Never-verified listings come first
- Among verified listings, Tier-1 errors come before clean ones
- Oldest verification first within a group
- Cap is honored
- Restricted vendors, dead listings and listings without a URL are excluded
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from app.inventory.priority import build_verification_queue, is_verifiable
from app.inventory.types import StockSource

BASE_TIME = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)


class TestVerificationQueue:
    def test_priority_order(self, make_item, vendor_profiles) -> None:
        clean_old = make_item(product_name="clean-old", ai_verified_at=BASE_TIME - timedelta(days=9))
        clean_new = make_item(product_name="clean-new", ai_verified_at=BASE_TIME - timedelta(days=1))
        errored = make_item(
            product_name="errored",
            ai_verified_at=BASE_TIME - timedelta(hours=1),
            check_error="HTTP 500",
        )
        never = make_item(product_name="never")

        queue = build_verification_queue(
            [clean_new, errored, clean_old, never],
            cap=10,
            vendor_profiles=vendor_profiles,
        )
        assert [item.product_name for item in queue] == ["never", "errored", "clean-old", "clean-new"]

    def test_cap(self, make_item, vendor_profiles) -> None:
        items = [make_item(product_name=f"p{index}") for index in range(7)]
        assert len(build_verification_queue(items, cap=3, vendor_profiles=vendor_profiles)) == 3
        assert build_verification_queue(items, cap=0, vendor_profiles=vendor_profiles) == []

    def test_exclusions(self, make_item, vendor_profiles) -> None:
        restricted = make_item(supplier_slug="felix-chem", product_url="https://felixchem.is/p/1")
        tagged_restricted = make_item(stock_source=StockSource.ACCESS_RESTRICTED)
        dead = make_item(stock_source=StockSource.DEAD)
        no_url = make_item(product_url=None)
        eligible = make_item(stock_source=StockSource.STRUCTURED_STOREFRONT)

        for excluded in (restricted, tagged_restricted, dead, no_url):
            assert is_verifiable(excluded, vendor_profiles) is False
        assert is_verifiable(eligible, vendor_profiles) is True

        queue = build_verification_queue(
            [restricted, tagged_restricted, dead, no_url, eligible],
            cap=10,
            vendor_profiles=vendor_profiles,
        )
        assert queue == [eligible]
