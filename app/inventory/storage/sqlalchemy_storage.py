"""
SQLAlchemy-backed inventory store.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping, Sequence
from decimal import Decimal
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.domain.inventory import DecisionLogEntry, InventoryStats, LearningNoteRecord, RunLogEntry
from app.inventory.actions import stock_status_changes
from app.inventory.errors import InventoryStoreError
from app.inventory.storage.base import InventoryStore
from app.inventory.types import StockStatusUpdate, TrackableItem
from app.repositories.inventory_repository import InventoryRepository
from db.models.inventory_logs import AIDecisionLog, InventoryRunLog, LearningNote
from db.models.listing import Listing


def _to_decimal(value: float | None) -> Decimal | None:
    if value is None:
        return None
    return Decimal(str(round(value, 2)))


def _to_float(value: Decimal | float | None) -> float | None:
    return float(value) if value is not None else None


class SQLAlchemyInventoryStore(InventoryStore):
    """
    Persist pipeline state through the repository, one session and one
    transaction per operation.
    """

    def __init__(self, *, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def list_trackable_items(self) -> list[TrackableItem]:
        try:
            async with self._session_factory() as session:
                rows = await InventoryRepository(session).list_trackable_listings()
                return [self._to_item(row) for row in rows]
        except SQLAlchemyError as exc:
            raise InventoryStoreError(f"Failed to load trackable listings: {exc}") from exc

    async def update_price_stock_status(self, updates: Sequence[StockStatusUpdate]) -> int:
        if not updates:
            return 0
        try:
            async with self._session_factory() as session, session.begin():
                repository = InventoryRepository(session)
                updated = 0
                for update in updates:
                    updated += await repository.update_listing(update.listing_id, stock_status_changes(update))
                return updated
        except SQLAlchemyError as exc:
            raise InventoryStoreError(f"Failed to write {len(updates)} stock updates: {exc}") from exc

    async def apply_ai_action(self, listing_id: uuid.UUID, changes: Mapping[str, Any]) -> bool:
        values = dict(changes)
        if "price" in values:
            values["price"] = _to_decimal(values["price"])
        try:
            async with self._session_factory() as session, session.begin():
                return await InventoryRepository(session).update_listing(listing_id, values) > 0
        except SQLAlchemyError as exc:
            raise InventoryStoreError(f"Failed to apply AI action to listing {listing_id}: {exc}") from exc

    async def log_ai_decision(self, entry: DecisionLogEntry) -> uuid.UUID:
        row = AIDecisionLog(
            listing_id=entry.listing_id,
            product_name=entry.product_name,
            supplier_slug=entry.supplier_slug,
            product_url=entry.product_url or "",
            action=entry.action,
            proposed_action=entry.proposed_action,
            confidence=entry.confidence if entry.confidence is not None else 0.0,
            reasoning=entry.reasoning or "",
            page_title=entry.page_title,
            detected_price=_to_decimal(entry.detected_price),
            detected_stock=entry.detected_stock,
            detected_product_name=entry.detected_product_name,
            html_excerpt=entry.html_excerpt,
            was_overridden=entry.was_overridden,
        )
        try:
            async with self._session_factory() as session, session.begin():
                await InventoryRepository(session).add_decision(row)
                return row.id
        except SQLAlchemyError as exc:
            raise InventoryStoreError(f"Failed to log AI decision: {exc}") from exc

    async def log_inventory_run(self, entry: RunLogEntry) -> None:
        row = InventoryRunLog(
            total=entry.total,
            in_stock=entry.in_stock,
            out_of_stock=entry.out_of_stock,
            errors=entry.errors,
            flagged=entry.flagged,
            duration_ms=entry.duration_ms,
            triggered_by=entry.triggered_by,
        )
        try:
            async with self._session_factory() as session, session.begin():
                await InventoryRepository(session).add_run(row)
        except SQLAlchemyError as exc:
            raise InventoryStoreError(f"Failed to log inventory run: {exc}") from exc

    async def add_learning_note(self, note: str, source: str) -> LearningNoteRecord:
        row = LearningNote(note=note, source=source)
        try:
            async with self._session_factory() as session, session.begin():
                await InventoryRepository(session).add_note(row)
                return LearningNoteRecord(note=row.note, source=row.source, id=row.id, created_at=row.created_at)
        except SQLAlchemyError as exc:
            raise InventoryStoreError(f"Failed to add learning note: {exc}") from exc

    async def list_learning_notes(self) -> list[LearningNoteRecord]:
        try:
            async with self._session_factory() as session:
                rows = await InventoryRepository(session).list_notes()
                return [
                    LearningNoteRecord(note=row.note, source=row.source, id=row.id, created_at=row.created_at)
                    for row in rows
                ]
        except SQLAlchemyError as exc:
            raise InventoryStoreError(f"Failed to load learning notes: {exc}") from exc

    async def count_decisions(self) -> int:
        try:
            async with self._session_factory() as session:
                return await InventoryRepository(session).count_decisions()
        except SQLAlchemyError as exc:
            raise InventoryStoreError(f"Failed to count AI decisions: {exc}") from exc

    async def recent_decisions(self, limit: int) -> list[DecisionLogEntry]:
        try:
            async with self._session_factory() as session:
                rows = await InventoryRepository(session).recent_decisions(limit)
                return [self._to_decision(row) for row in rows]
        except SQLAlchemyError as exc:
            raise InventoryStoreError(f"Failed to load AI decisions: {exc}") from exc

    async def set_decision_overridden(self, decision_id: uuid.UUID, overridden: bool = True) -> bool:
        try:
            async with self._session_factory() as session, session.begin():
                return await InventoryRepository(session).set_decision_overridden(decision_id, overridden) > 0
        except SQLAlchemyError as exc:
            raise InventoryStoreError(f"Failed to override decision {decision_id}: {exc}") from exc

    async def recent_runs(self, limit: int) -> list[RunLogEntry]:
        try:
            async with self._session_factory() as session:
                rows = await InventoryRepository(session).recent_runs(limit)
                return [
                    RunLogEntry(
                        id=row.id,
                        total=row.total,
                        in_stock=row.in_stock,
                        out_of_stock=row.out_of_stock,
                        errors=row.errors,
                        flagged=row.flagged,
                        duration_ms=row.duration_ms,
                        triggered_by=row.triggered_by,
                        created_at=row.created_at,
                    )
                    for row in rows
                ]
        except SQLAlchemyError as exc:
            raise InventoryStoreError(f"Failed to load inventory runs: {exc}") from exc

    async def inventory_stats(self) -> InventoryStats:
        try:
            async with self._session_factory() as session:
                counts = await InventoryRepository(session).stock_counts()
        except SQLAlchemyError as exc:
            raise InventoryStoreError(f"Failed to compute inventory stats: {exc}") from exc
        return InventoryStats(**counts)

    @staticmethod
    def _to_item(row: Listing) -> TrackableItem:
        return TrackableItem(
            id=row.id,
            product_url=row.product_url,
            product_name=row.product.name,
            product_slug=row.product.slug,
            supplier_name=row.supplier.name,
            supplier_slug=row.supplier.slug,
            price=float(row.price),
            in_stock=row.in_stock,
            stock_source=row.stock_source,
            last_checked_at=row.last_checked_at,
            check_error=row.check_error,
            ai_verified_at=row.ai_verified_at,
        )

    @staticmethod
    def _to_decision(row: AIDecisionLog) -> DecisionLogEntry:
        return DecisionLogEntry(
            id=row.id,
            listing_id=row.listing_id,
            product_name=row.product_name,
            supplier_slug=row.supplier_slug,
            product_url=row.product_url,
            action=row.action,
            proposed_action=row.proposed_action,
            confidence=row.confidence,
            reasoning=row.reasoning,
            page_title=row.page_title,
            detected_price=_to_float(row.detected_price),
            detected_stock=row.detected_stock,
            detected_product_name=row.detected_product_name,
            html_excerpt=row.html_excerpt,
            was_overridden=row.was_overridden,
            created_at=row.created_at,
        )
