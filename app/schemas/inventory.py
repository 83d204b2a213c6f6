"""
app/schemas/inventory.py

Request and response schemas for inventory job and admin endpoints.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class SyncRunResponse(BaseModel):
    """
    API response for one Tier-1 sync run.
    """

    success: bool = True
    type: Literal["inventory_sync"] = "inventory_sync"
    checked: int = Field(..., ge=0)
    updated: int = Field(..., ge=0)
    in_stock: int = Field(..., ge=0)
    out_of_stock: int = Field(..., ge=0)
    errors: int = Field(..., ge=0)
    failed_chunks: int = Field(default=0, ge=0)
    duration_ms: int = Field(..., ge=0)
    triggered_by: str
    timestamp: datetime


class VerificationActionCounts(BaseModel):
    keep: int = Field(..., ge=0)
    mark_oos: int = Field(..., ge=0)
    mark_instock: int = Field(..., ge=0)
    update_price: int = Field(..., ge=0)
    flag_wrong: int = Field(..., ge=0)
    remove_dead: int = Field(..., ge=0)
    skipped: int = Field(..., ge=0)
    errors: int = Field(..., ge=0)


class VerificationItemResponse(BaseModel):
    listing_id: str
    listing: str
    status: Literal["applied", "skipped", "error"]
    action: str | None = None
    proposed_action: str | None = None
    confidence: float | None = None
    error: str | None = None


class VerificationRunResponse(BaseModel):
    """
    API response for one Tier-2 verification run.
    """

    success: bool = True
    type: Literal["ai_scraper"] = "ai_scraper"
    processed: int = Field(..., ge=0)
    actions: VerificationActionCounts
    reconciled: int = Field(default=0, ge=0)
    learning_notes_used: int = Field(default=0, ge=0)
    results: list[VerificationItemResponse] = Field(default_factory=list)
    duration_ms: int = Field(..., ge=0)
    triggered_by: str
    timestamp: datetime


class SelfReviewResponse(BaseModel):
    """
    API response for one learning-loop pass.
    """

    success: bool = True
    type: Literal["ai_self_review"] = "ai_self_review"
    notes_generated: int = Field(..., ge=0)
    notes: list[str]
    persisted: int = Field(..., ge=0)
    decisions_reviewed: int = Field(..., ge=0)
    summary: str | None = None
    duration_ms: int = Field(..., ge=0)
    triggered_by: str
    timestamp: datetime


class InventoryStatsResponse(BaseModel):
    total: int = Field(..., ge=0)
    in_stock: int = Field(..., ge=0)
    out_of_stock: int = Field(..., ge=0)
    with_errors: int = Field(..., ge=0)
    never_checked: int = Field(..., ge=0)
    never_ai_verified: int = Field(..., ge=0)
    dead: int = Field(..., ge=0)


class RunLogResponse(BaseModel):
    id: int | None = None
    total: int
    in_stock: int
    out_of_stock: int
    errors: int
    flagged: int
    duration_ms: int
    triggered_by: str
    created_at: datetime | None = None


class InventoryOverviewResponse(BaseModel):
    stats: InventoryStatsResponse
    recent_runs: list[RunLogResponse]


class DecisionResponse(BaseModel):
    """
    One decision log entry as shown on the admin surface.
    """

    id: str | None = None
    listing_id: str | None = None
    product_name: str
    supplier_slug: str
    product_url: str | None = None
    action: str
    proposed_action: str
    confidence: float | None = None
    reasoning: str | None = None
    page_title: str | None = None
    detected_price: float | None = None
    detected_stock: bool | None = None
    detected_product_name: str | None = None
    was_overridden: bool = False
    created_at: datetime | None = None


class OverrideRequest(BaseModel):
    overridden: bool = True


class OverrideResponse(BaseModel):
    id: str
    was_overridden: bool


class LearningNoteResponse(BaseModel):
    id: int | None = None
    note: str
    source: str
    created_at: datetime | None = None


class TriggerSyncRequest(BaseModel):
    secret: str | None = None
