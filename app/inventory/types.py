"""
Shared inventory pipeline runtime data models.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime


class VendorFamily:
    STRUCTURED_STOREFRONT = "structured-storefront"
    JSON_API = "json-api"
    ACCESS_RESTRICTED = "access-restricted"

    ALL = frozenset({STRUCTURED_STOREFRONT, JSON_API, ACCESS_RESTRICTED})


class StockSource:
    STRUCTURED_STOREFRONT = VendorFamily.STRUCTURED_STOREFRONT
    JSON_API = VendorFamily.JSON_API
    ACCESS_RESTRICTED = VendorFamily.ACCESS_RESTRICTED
    ERROR = "error"
    TIMEOUT = "timeout"
    NO_URL = "no-url"
    # Set by Tier 2 only; never produced by a Tier-1 check.
    DEAD = "dead"

    TRANSPORT_FAILURES = frozenset({ERROR, TIMEOUT})
    EXCLUDED_FROM_QUEUES = frozenset({ACCESS_RESTRICTED, DEAD})


@dataclass(frozen=True)
class StockVerdict:
    """
    Result of one Tier-1 stock check.
    """

    in_stock: bool
    source: str
    checked_at: datetime
    error: str | None = None
    http_status: int | None = None

    @property
    def is_transport_failure(self) -> bool:
        return self.source in StockSource.TRANSPORT_FAILURES


@dataclass(frozen=True)
class FetchResult:
    """
    Outcome of one bounded HTTP GET. Never carries an exception.
    """

    url: str
    status_code: int = 0
    text: str | None = None
    content_type: str = ""
    error: str | None = None
    timed_out: bool = False

    @property
    def responded(self) -> bool:
        return self.status_code > 0 and self.text is not None


@dataclass(frozen=True)
class TrackableItem:
    """
    One catalog listing tracked for stock and price.
    """

    id: uuid.UUID
    product_url: str | None
    product_name: str
    product_slug: str
    supplier_name: str
    supplier_slug: str
    price: float
    in_stock: bool
    stock_source: str | None = None
    last_checked_at: datetime | None = None
    check_error: str | None = None
    ai_verified_at: datetime | None = None

    @property
    def label(self) -> str:
        return f"{self.supplier_slug}/{self.product_slug}"


@dataclass(frozen=True)
class StockStatusUpdate:
    """
    One row of the batched Tier-1 stock status write.
    """

    listing_id: uuid.UUID
    in_stock: bool
    source: str
    checked_at: datetime
    error: str | None = None

    @classmethod
    def from_verdict(cls, listing_id: uuid.UUID, verdict: StockVerdict) -> "StockStatusUpdate":
        return cls(
            listing_id=listing_id,
            in_stock=verdict.in_stock,
            source=verdict.source,
            checked_at=verdict.checked_at,
            error=verdict.error,
        )
