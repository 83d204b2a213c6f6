"""
Tier-1 checker for structured storefronts (WooCommerce-style HTML product pages).
"""

from __future__ import annotations

import logging
from datetime import datetime

from app.inventory.checkers.base import StockCheckerBase
from app.inventory.logging_utils import log_event
from app.inventory.types import StockSource, StockVerdict, VendorFamily

logger = logging.getLogger(__name__)

# Ordered: the first match wins and is reported.
OUT_OF_STOCK_SIGNALS: tuple[str, ...] = (
    'class="stock out-of-stock"',
    '"stock out-of-stock"',
    "class='stock out-of-stock'",
    ">Out of stock<",
    ">Out Of Stock<",
    "Out of stock</p>",
    '"availability":"OutOfStock"',
    '"availability": "OutOfStock"',
    'out-of-stock"',
    # Backorders cannot be bought now.
    '"availability":"BackOrder"',
)

DISABLED_PURCHASE_SIGNALS: tuple[str, ...] = (
    "single_add_to_cart_button button disabled",
    '"is_in_stock":false',
    '"is_in_stock": false',
    "soldOut",
    "sold_out",
    '"sold_out":true',
)


def match_absence_signal(body: str) -> str | None:
    """
    Return the first out-of-stock or disabled-purchase signal found in ``body``.
    """

    for signal in OUT_OF_STOCK_SIGNALS:
        if signal in body:
            return signal
    for signal in DISABLED_PURCHASE_SIGNALS:
        if signal in body:
            return signal
    return None


def classify_storefront_page(
    *,
    status_code: int,
    body: str,
    checked_at: datetime,
) -> StockVerdict:
    """
    Map one storefront HTTP response to a stock verdict.

    404 is positive evidence the listing was removed. Any other error status
    is ambiguous and keeps the listing in stock.
    """

    if status_code == 404:
        return StockVerdict(
            in_stock=False,
            source=StockSource.STRUCTURED_STOREFRONT,
            error="Product page not found (404)",
            http_status=status_code,
            checked_at=checked_at,
        )

    if status_code >= 400:
        return StockVerdict(
            in_stock=True,
            source=StockSource.ERROR,
            error=f"HTTP {status_code}",
            http_status=status_code,
            checked_at=checked_at,
        )

    return StockVerdict(
        in_stock=match_absence_signal(body) is None,
        source=StockSource.STRUCTURED_STOREFRONT,
        http_status=status_code,
        checked_at=checked_at,
    )


class StructuredStorefrontChecker(StockCheckerBase):
    family = VendorFamily.STRUCTURED_STOREFRONT

    async def check_url(self, product_url: str, *, checked_at: datetime) -> StockVerdict:
        fetched = await self._require_fetcher().fetch(product_url)
        if not fetched.responded:
            return self.transport_failure_verdict(fetched, checked_at=checked_at)

        body = fetched.text or ""
        verdict = classify_storefront_page(
            status_code=fetched.status_code,
            body=body,
            checked_at=checked_at,
        )
        if not verdict.in_stock and verdict.error is None:
            log_event(
                logger,
                logging.DEBUG,
                "absence_signal_matched",
                product_url=product_url,
                signal=match_absence_signal(body),
            )
        return verdict
