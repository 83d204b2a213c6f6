"""
Tier-1 checker for vendors exposing a structured product endpoint
(Shopify-style ``/products/<handle>.json``).
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any

from app.inventory.checkers.base import StockCheckerBase
from app.inventory.fetcher import JSON_ACCEPT
from app.inventory.types import StockSource, StockVerdict, VendorFamily


def product_json_url(product_page_url: str) -> str:
    """
    ``https://shop/products/bpc-157`` -> ``https://shop/products/bpc-157.json``.
    """

    if product_page_url.endswith(".json"):
        return product_page_url
    return product_page_url.rstrip("/") + ".json"


def classify_product_payload(payload: Any, *, http_status: int, checked_at: datetime) -> StockVerdict:
    """
    In stock iff the product is published and at least one variant is available.
    """

    product = payload.get("product") if isinstance(payload, dict) else None
    if not isinstance(product, dict):
        return StockVerdict(
            in_stock=False,
            source=StockSource.JSON_API,
            error="No product in response",
            http_status=http_status,
            checked_at=checked_at,
        )

    # Missing key means the field was not exposed; an explicit null means hidden.
    if "published_at" in product and product["published_at"] is None:
        return StockVerdict(
            in_stock=False,
            source=StockSource.JSON_API,
            error="Product unpublished",
            http_status=http_status,
            checked_at=checked_at,
        )

    variants = product.get("variants") or []
    any_available = any(
        isinstance(variant, dict) and variant.get("available") is True
        for variant in variants
    )
    return StockVerdict(
        in_stock=any_available,
        source=StockSource.JSON_API,
        http_status=http_status,
        checked_at=checked_at,
    )


def classify_json_api_response(
    *,
    status_code: int,
    content_type: str,
    body: str,
    checked_at: datetime,
) -> StockVerdict:
    if status_code == 404:
        return StockVerdict(
            in_stock=False,
            source=StockSource.JSON_API,
            error="Product not found (404)",
            http_status=status_code,
            checked_at=checked_at,
        )

    if not 200 <= status_code < 300:
        return StockVerdict(
            in_stock=True,
            source=StockSource.ERROR,
            error=f"HTTP {status_code}",
            http_status=status_code,
            checked_at=checked_at,
        )

    if "json" not in content_type.lower():
        # Usually a redirect to a login or storefront page.
        return StockVerdict(
            in_stock=True,
            source=StockSource.ERROR,
            error="Non-JSON response from product endpoint",
            http_status=status_code,
            checked_at=checked_at,
        )

    return classify_product_payload(json.loads(body), http_status=status_code, checked_at=checked_at)


class JSONAPIChecker(StockCheckerBase):
    family = VendorFamily.JSON_API

    async def check_url(self, product_url: str, *, checked_at: datetime) -> StockVerdict:
        fetched = await self._require_fetcher().fetch(product_json_url(product_url), accept=JSON_ACCEPT)
        if not fetched.responded:
            return self.transport_failure_verdict(fetched, checked_at=checked_at)

        return classify_json_api_response(
            status_code=fetched.status_code,
            content_type=fetched.content_type,
            body=fetched.text or "",
            checked_at=checked_at,
        )
