"""
app/scheduler/jobs.py

APScheduler-based scheduler for the inventory verification jobs.

Schedule (all times UTC)
--------------------------
  inventory_sync: every 6 hours
  ai_verification: 03:00 every day
  ai_self_review: 04:00 every Sunday

Lifecycle
----------
Call ``build_scheduler()`` once to get a configured ``AsyncIOScheduler``.
Start it inside the running event loop on app boot; shut it down on app
shutdown. The scheduler is wired into FastAPI via the ``lifespan`` context
in main.py. Jobs run in-process on the same event loop as the API, so a
scheduled run and a manual trigger share the per-host rate limiter.
"""

from __future__ import annotations

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from app.inventory.errors import InventoryListUnavailableError
from app.services.inventory_jobs_service import get_inventory_jobs_service

logger = logging.getLogger(__name__)

SCHEDULED_TRIGGER = "cron"


# ---------------------------------------------------------------------------
# Job: Tier-1 inventory sync
# ---------------------------------------------------------------------------


async def run_inventory_sync() -> None:
    logger.info("Scheduler: inventory_sync starting")
    try:
        summary = await get_inventory_jobs_service().run_sync(triggered_by=SCHEDULED_TRIGGER)
    except InventoryListUnavailableError as exc:
        logger.error("Scheduler: inventory_sync aborted: %s", exc)
        return
    logger.info(
        "Scheduler: inventory_sync complete checked=%d in_stock=%d out_of_stock=%d errors=%d",
        summary.checked,
        summary.in_stock,
        summary.out_of_stock,
        summary.errors,
    )


# ---------------------------------------------------------------------------
# Job: Tier-2 AI verification
# ---------------------------------------------------------------------------


async def run_ai_verification() -> None:
    logger.info("Scheduler: ai_verification starting")
    try:
        summary = await get_inventory_jobs_service().run_ai_verification(triggered_by=SCHEDULED_TRIGGER)
    except InventoryListUnavailableError as exc:
        logger.error("Scheduler: ai_verification aborted: %s", exc)
        return
    logger.info(
        "Scheduler: ai_verification complete processed=%d skipped=%d errors=%d",
        summary.processed,
        summary.skipped,
        summary.errors,
    )


# ---------------------------------------------------------------------------
# Job: Weekly self-review
# ---------------------------------------------------------------------------


async def run_ai_self_review() -> None:
    logger.info("Scheduler: ai_self_review starting")
    try:
        summary = await get_inventory_jobs_service().run_self_review(triggered_by=SCHEDULED_TRIGGER)
    except Exception as exc:  # noqa: BLE001
        logger.warning("Scheduler: ai_self_review failed: %s", exc)
        return
    logger.info(
        "Scheduler: ai_self_review complete reviewed=%d persisted=%d",
        summary.decisions_reviewed,
        summary.persisted,
    )


# ---------------------------------------------------------------------------
# Scheduler factory
# ---------------------------------------------------------------------------


def build_scheduler() -> AsyncIOScheduler:
    """
    Build and register all periodic jobs.

    Returns a configured but *not yet started* ``AsyncIOScheduler``.
    ``max_instances=1`` keeps a slow run from overlapping with the next one.
    """
    scheduler = AsyncIOScheduler(timezone="UTC")

    scheduler.add_job(
        run_inventory_sync,
        trigger="cron",
        hour="*/6",
        minute=0,
        id="inventory_sync",
        name="Tier-1 inventory sync",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        misfire_grace_time=1800,
    )
    scheduler.add_job(
        run_ai_verification,
        trigger="cron",
        hour=3,
        minute=0,
        id="ai_verification",
        name="Tier-2 AI verification",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        misfire_grace_time=3600,
    )
    scheduler.add_job(
        run_ai_self_review,
        trigger="cron",
        day_of_week="sun",
        hour=4,
        minute=0,
        id="ai_self_review",
        name="Weekly AI self-review",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        misfire_grace_time=7200,
    )

    return scheduler
