"""
Tier-1 inventory sync: deterministic stock check over the whole catalog.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence

from app.domain.inventory import RunLogEntry, SyncRunSummary
from app.inventory.checkers.base import utc_now
from app.inventory.concurrency import run_with_concurrency
from app.inventory.config.models import InventorySettings
from app.inventory.errors import InventoryListUnavailableError, InventoryStoreError
from app.inventory.logging_utils import log_event
from app.inventory.stock_check import StockChecker
from app.inventory.storage import InventoryStore
from app.inventory.types import StockSource, StockStatusUpdate, StockVerdict, TrackableItem

logger = logging.getLogger(__name__)


class InventorySyncEngine:
    """
    Checks every trackable listing and writes the verdicts back in chunks.
    """

    def __init__(
        self,
        *,
        settings: InventorySettings,
        store: InventoryStore,
        stock_checker: StockChecker,
    ) -> None:
        self._settings = settings
        self._store = store
        self._stock_checker = stock_checker

    async def run(self, *, triggered_by: str = "cron") -> SyncRunSummary:
        started = time.monotonic()

        try:
            items = await self._store.list_trackable_items()
        except InventoryStoreError as exc:
            log_event(logger, logging.ERROR, "inventory_sync_list_failed", error=str(exc))
            raise InventoryListUnavailableError(f"Failed to fetch trackable listings: {exc}") from exc

        vendor_profiles = self._stock_checker.vendor_profiles
        targets = [
            item
            for item in items
            if item.stock_source not in StockSource.EXCLUDED_FROM_QUEUES
            and not vendor_profiles.is_access_restricted(item.supplier_slug)
        ]
        log_event(
            logger,
            logging.INFO,
            "inventory_sync_started",
            listings=len(targets),
            excluded=len(items) - len(targets),
            triggered_by=triggered_by,
        )

        verdicts = await run_with_concurrency(
            targets,
            self._check_item,
            max_concurrent=self._settings.sync_concurrency,
        )

        in_stock = out_of_stock = errors = 0
        updates: list[StockStatusUpdate] = []
        for item, verdict in zip(targets, verdicts):
            if verdict.is_transport_failure:
                errors += 1
            elif verdict.in_stock:
                in_stock += 1
            else:
                out_of_stock += 1
            updates.append(StockStatusUpdate.from_verdict(item.id, verdict))

        updated, failed_chunks = await self._write_updates(updates)
        duration_ms = int((time.monotonic() - started) * 1000)

        await self._log_run(
            RunLogEntry(
                total=len(targets),
                in_stock=in_stock,
                out_of_stock=out_of_stock,
                errors=errors,
                duration_ms=duration_ms,
                triggered_by=triggered_by,
            )
        )

        summary = SyncRunSummary(
            checked=len(targets),
            updated=updated,
            in_stock=in_stock,
            out_of_stock=out_of_stock,
            errors=errors,
            duration_ms=duration_ms,
            triggered_by=triggered_by,
            failed_chunks=failed_chunks,
        )
        log_event(
            logger,
            logging.INFO,
            "inventory_sync_completed",
            checked=summary.checked,
            updated=summary.updated,
            in_stock=summary.in_stock,
            out_of_stock=summary.out_of_stock,
            errors=summary.errors,
            failed_chunks=summary.failed_chunks,
            duration_ms=summary.duration_ms,
        )
        return summary

    async def _check_item(self, item: TrackableItem) -> StockVerdict:
        try:
            verdict = await self._stock_checker.check_product_stock(item.product_url, item.supplier_slug)
        except Exception as exc:
            verdict = StockVerdict(
                in_stock=True,
                source=StockSource.ERROR,
                checked_at=utc_now(),
                error=str(exc) or type(exc).__name__,
            )
        log_event(
            logger,
            logging.INFO if not verdict.is_transport_failure else logging.WARNING,
            "inventory_item_checked",
            listing=item.label,
            in_stock=verdict.in_stock,
            source=verdict.source,
            error=verdict.error,
        )
        return verdict

    async def _write_updates(self, updates: Sequence[StockStatusUpdate]) -> tuple[int, int]:
        chunk_size = max(1, self._settings.update_chunk_size)
        updated = 0
        failed_chunks = 0
        for start in range(0, len(updates), chunk_size):
            chunk = updates[start : start + chunk_size]
            try:
                updated += await self._store.update_price_stock_status(chunk)
            except InventoryStoreError as exc:
                failed_chunks += 1
                log_event(
                    logger,
                    logging.ERROR,
                    "inventory_sync_chunk_failed",
                    chunk_start=start,
                    chunk_size=len(chunk),
                    error=str(exc),
                )
        return updated, failed_chunks

    async def _log_run(self, entry: RunLogEntry) -> None:
        try:
            await self._store.log_inventory_run(entry)
        except InventoryStoreError as exc:
            log_event(logger, logging.ERROR, "inventory_run_log_failed", triggered_by=entry.triggered_by, error=str(exc))
