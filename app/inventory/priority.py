"""
Tier-2 work selection: which listings the classifier looks at next.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone

from app.inventory.config.models import VendorProfiles
from app.inventory.types import StockSource, TrackableItem

NEVER_VERIFIED = datetime.min.replace(tzinfo=timezone.utc)


def verification_priority(item: TrackableItem) -> tuple[bool, bool, datetime]:
    """
    Ascending sort key: never verified, then Tier-1 errors, then oldest
    verification first.
    """
    return (
        item.ai_verified_at is not None,
        item.check_error is None,
        item.ai_verified_at or NEVER_VERIFIED,
    )


def is_verifiable(item: TrackableItem, vendor_profiles: VendorProfiles) -> bool:
    if not item.product_url:
        return False
    if item.stock_source in StockSource.EXCLUDED_FROM_QUEUES:
        return False
    return not vendor_profiles.is_access_restricted(item.supplier_slug)


def build_verification_queue(
    items: Iterable[TrackableItem],
    *,
    cap: int,
    vendor_profiles: VendorProfiles,
) -> list[TrackableItem]:
    eligible = [item for item in items if is_verifiable(item, vendor_profiles)]
    eligible.sort(key=verification_priority)
    return eligible[: max(cap, 0)]
