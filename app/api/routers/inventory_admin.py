"""
app/api/routers/inventory_admin.py

Admin endpoints: manual job trigger and read access to the audit tables.
"""

from __future__ import annotations

import logging
import uuid
from typing import Literal

import httpx
from fastapi import APIRouter, Body, Depends, Header, HTTPException, Query, status
from fastapi.responses import JSONResponse

from app.api.dependencies import is_secret_authorized, require_admin_secret
from app.config import JobAuthSettings, get_job_auth_settings
from app.inventory.errors import DecisionNotFoundError, InventoryStoreError
from app.inventory.logging_utils import log_event
from app.schemas.inventory import (
    DecisionResponse,
    InventoryOverviewResponse,
    InventoryStatsResponse,
    LearningNoteResponse,
    OverrideRequest,
    OverrideResponse,
    RunLogResponse,
    TriggerSyncRequest,
)
from app.services.inventory_jobs_service import InventoryJobsService, get_inventory_jobs_service
from app.services.job_forwarder import JobForwarder, get_job_forwarder

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["inventory-admin"])

JobName = Literal["sync-inventory", "ai-scraper", "ai-self-review"]


@router.post("/trigger-sync")
async def trigger_sync(
    payload: TriggerSyncRequest | None = Body(default=None),
    job: JobName = Query(default="sync-inventory"),
    x_admin_secret: str | None = Header(default=None),
    settings: JobAuthSettings = Depends(get_job_auth_settings),
    forwarder: JobForwarder = Depends(get_job_forwarder),
) -> JSONResponse:
    """
    Forward a manual trigger to a job endpoint and relay its response.
    """

    provided = (payload.secret if payload else None) or x_admin_secret
    if not is_secret_authorized(provided, settings):
        return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content={"error": "Unauthorized"})

    try:
        status_code, body = await forwarder.forward(job)
    except httpx.HTTPError as exc:
        log_event(logger, logging.ERROR, "manual_trigger_failed", job=job, error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to trigger sync", "details": str(exc) or type(exc).__name__},
        )

    log_event(logger, logging.INFO, "manual_trigger_forwarded", job=job, status_code=status_code)
    return JSONResponse(status_code=status_code, content=body)


@router.get(
    "/inventory",
    response_model=InventoryOverviewResponse,
    dependencies=[Depends(require_admin_secret)],
)
async def inventory_overview(
    service: InventoryJobsService = Depends(get_inventory_jobs_service),
) -> InventoryOverviewResponse:
    try:
        stats, runs = await service.overview()
    except InventoryStoreError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc

    return InventoryOverviewResponse(
        stats=InventoryStatsResponse(
            total=stats.total,
            in_stock=stats.in_stock,
            out_of_stock=stats.out_of_stock,
            with_errors=stats.with_errors,
            never_checked=stats.never_checked,
            never_ai_verified=stats.never_ai_verified,
            dead=stats.dead,
        ),
        recent_runs=[RunLogResponse(**run.as_dict()) for run in runs],
    )


@router.get(
    "/inventory/decisions",
    response_model=list[DecisionResponse],
    dependencies=[Depends(require_admin_secret)],
)
async def list_decisions(
    limit: int = Query(default=50, ge=1, le=500),
    service: InventoryJobsService = Depends(get_inventory_jobs_service),
) -> list[DecisionResponse]:
    try:
        decisions = await service.recent_decisions(limit=limit)
    except InventoryStoreError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc
    return [DecisionResponse(**decision.as_dict()) for decision in decisions]


@router.post(
    "/inventory/decisions/{decision_id}/override",
    response_model=OverrideResponse,
    dependencies=[Depends(require_admin_secret)],
)
async def override_decision(
    decision_id: uuid.UUID,
    payload: OverrideRequest | None = Body(default=None),
    service: InventoryJobsService = Depends(get_inventory_jobs_service),
) -> OverrideResponse:
    """
    Mark a decision as overridden by an admin so the next self-review sees it.
    """

    overridden = payload.overridden if payload else True
    try:
        await service.override_decision(decision_id, overridden=overridden)
    except DecisionNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except InventoryStoreError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc

    log_event(logger, logging.INFO, "decision_overridden", decision_id=str(decision_id), overridden=overridden)
    return OverrideResponse(id=str(decision_id), was_overridden=overridden)


@router.get(
    "/inventory/learning-notes",
    response_model=list[LearningNoteResponse],
    dependencies=[Depends(require_admin_secret)],
)
async def list_learning_notes(
    service: InventoryJobsService = Depends(get_inventory_jobs_service),
) -> list[LearningNoteResponse]:
    try:
        notes = await service.learning_notes()
    except InventoryStoreError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc
    return [
        LearningNoteResponse(id=note.id, note=note.note, source=note.source, created_at=note.created_at)
        for note in notes
    ]
