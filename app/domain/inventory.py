"""
app/domain/inventory.py

Domain models for inventory verification runs and their audit records.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class DecisionLogEntry:
    """
    One Tier-2 decision as written to, or read back from, the decision log.
    """

    listing_id: uuid.UUID | None
    product_name: str
    supplier_slug: str
    product_url: str | None
    action: str
    proposed_action: str
    confidence: float | None
    reasoning: str | None
    page_title: str | None = None
    detected_price: float | None = None
    detected_stock: bool | None = None
    detected_product_name: str | None = None
    html_excerpt: str | None = None
    was_overridden: bool = False
    id: uuid.UUID | None = None
    created_at: datetime | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id) if self.id else None,
            "listing_id": str(self.listing_id) if self.listing_id else None,
            "product_name": self.product_name,
            "supplier_slug": self.supplier_slug,
            "product_url": self.product_url,
            "action": self.action,
            "proposed_action": self.proposed_action,
            "confidence": self.confidence,
            "reasoning": self.reasoning,
            "page_title": self.page_title,
            "detected_price": self.detected_price,
            "detected_stock": self.detected_stock,
            "detected_product_name": self.detected_product_name,
            "was_overridden": self.was_overridden,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class RunLogEntry:
    """
    Aggregate counters of one pipeline run.
    """

    total: int
    in_stock: int
    out_of_stock: int
    errors: int
    duration_ms: int
    triggered_by: str
    flagged: int = 0
    id: int | None = None
    created_at: datetime | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "total": self.total,
            "in_stock": self.in_stock,
            "out_of_stock": self.out_of_stock,
            "errors": self.errors,
            "flagged": self.flagged,
            "duration_ms": self.duration_ms,
            "triggered_by": self.triggered_by,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class LearningNoteRecord:
    note: str
    source: str
    id: int | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class InventoryStats:
    """
    Snapshot of stock state across all listings.
    """

    total: int
    in_stock: int
    out_of_stock: int
    with_errors: int
    never_checked: int
    never_ai_verified: int
    dead: int


@dataclass(frozen=True)
class SyncRunSummary:
    """
    Summary for one Tier-1 sync run.
    """

    checked: int
    updated: int
    in_stock: int
    out_of_stock: int
    errors: int
    duration_ms: int
    triggered_by: str
    failed_chunks: int = 0


@dataclass(frozen=True)
class VerificationRunSummary:
    """
    Summary for one Tier-2 verification run.
    """

    processed: int
    keep: int
    marked_oos: int
    marked_instock: int
    price_updated: int
    flagged_wrong: int
    removed_dead: int
    skipped: int
    errors: int
    duration_ms: int
    triggered_by: str
    reconciled: int = 0
    learning_notes_used: int = 0
    results: list[dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class SelfReviewSummary:
    """
    Outcome of one learning-loop pass.
    """

    notes: list[str]
    persisted: int
    decisions_reviewed: int
    summary: str | None
    duration_ms: int
    triggered_by: str
