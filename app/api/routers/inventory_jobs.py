"""
app/api/routers/inventory_jobs.py

Scheduled job endpoints for the inventory verification pipeline.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.dependencies import get_triggered_by, require_cron_auth
from app.inventory.errors import InventoryListUnavailableError
from app.inventory.logging_utils import log_event
from app.schemas.inventory import (
    SelfReviewResponse,
    SyncRunResponse,
    VerificationActionCounts,
    VerificationItemResponse,
    VerificationRunResponse,
)
from app.services.inventory_jobs_service import InventoryJobsService, get_inventory_jobs_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/cron",
    tags=["inventory-jobs"],
    dependencies=[Depends(require_cron_auth)],
)


@router.get("/sync-inventory", response_model=SyncRunResponse)
async def sync_inventory(
    triggered_by: str = Depends(get_triggered_by),
    service: InventoryJobsService = Depends(get_inventory_jobs_service),
) -> SyncRunResponse:
    """
    Run the deterministic Tier-1 stock check over every trackable listing.
    """

    try:
        summary = await service.run_sync(triggered_by=triggered_by)
    except InventoryListUnavailableError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc),
        ) from exc

    return SyncRunResponse(
        checked=summary.checked,
        updated=summary.updated,
        in_stock=summary.in_stock,
        out_of_stock=summary.out_of_stock,
        errors=summary.errors,
        failed_chunks=summary.failed_chunks,
        duration_ms=summary.duration_ms,
        triggered_by=summary.triggered_by,
        timestamp=datetime.now(timezone.utc),
    )


@router.get("/ai-scraper", response_model=VerificationRunResponse)
async def ai_scraper(
    triggered_by: str = Depends(get_triggered_by),
    service: InventoryJobsService = Depends(get_inventory_jobs_service),
) -> VerificationRunResponse:
    """
    Run Tier-2 AI verification over the priority queue.
    """

    try:
        summary = await service.run_ai_verification(triggered_by=triggered_by)
    except InventoryListUnavailableError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc),
        ) from exc

    return VerificationRunResponse(
        processed=summary.processed,
        actions=VerificationActionCounts(
            keep=summary.keep,
            mark_oos=summary.marked_oos,
            mark_instock=summary.marked_instock,
            update_price=summary.price_updated,
            flag_wrong=summary.flagged_wrong,
            remove_dead=summary.removed_dead,
            skipped=summary.skipped,
            errors=summary.errors,
        ),
        reconciled=summary.reconciled,
        learning_notes_used=summary.learning_notes_used,
        results=[VerificationItemResponse(**result) for result in summary.results],
        duration_ms=summary.duration_ms,
        triggered_by=summary.triggered_by,
        timestamp=datetime.now(timezone.utc),
    )


@router.get("/ai-self-review", response_model=SelfReviewResponse)
async def ai_self_review(
    triggered_by: str = Depends(get_triggered_by),
    service: InventoryJobsService = Depends(get_inventory_jobs_service),
) -> SelfReviewResponse:
    """
    Review recent AI decisions and append new learning notes.
    """

    try:
        summary = await service.run_self_review(triggered_by=triggered_by)
    except Exception as exc:
        log_event(
            logger,
            logging.ERROR,
            "self_review_failed",
            error_type=type(exc).__name__,
            error=str(exc),
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc) or "Self-review failed.",
        ) from exc

    return SelfReviewResponse(
        notes_generated=len(summary.notes),
        notes=summary.notes,
        persisted=summary.persisted,
        decisions_reviewed=summary.decisions_reviewed,
        summary=summary.summary,
        duration_ms=summary.duration_ms,
        triggered_by=summary.triggered_by,
        timestamp=datetime.now(timezone.utc),
    )
