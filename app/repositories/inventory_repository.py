"""
app/repositories/inventory_repository.py

Persistence layer for listings and the inventory audit tables.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.inventory.types import StockSource
from db.models.inventory_logs import AIDecisionLog, InventoryRunLog, LearningNote
from db.models.listing import Listing


class InventoryRepository:
    """
    Query and statement helpers bound to one async session.

    The caller owns the transaction; nothing here commits.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_trackable_listings(self) -> list[Listing]:
        stmt = (
            select(Listing)
            .where(Listing.product_url.is_not(None), Listing.product_url != "")
            .order_by(Listing.created_at.asc())
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def update_listing(self, listing_id: uuid.UUID, values: Mapping[str, Any]) -> int:
        if not values:
            return 0
        stmt = update(Listing).where(Listing.id == listing_id).values(**values)
        result = await self._session.execute(stmt)
        return int(result.rowcount or 0)

    async def add_decision(self, row: AIDecisionLog) -> AIDecisionLog:
        self._session.add(row)
        await self._session.flush()
        return row

    async def add_run(self, row: InventoryRunLog) -> InventoryRunLog:
        self._session.add(row)
        await self._session.flush()
        return row

    async def add_note(self, row: LearningNote) -> LearningNote:
        self._session.add(row)
        await self._session.flush()
        await self._session.refresh(row)
        return row

    async def list_notes(self) -> list[LearningNote]:
        stmt = select(LearningNote).order_by(LearningNote.created_at.asc(), LearningNote.id.asc())
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def count_decisions(self) -> int:
        result = await self._session.execute(select(func.count()).select_from(AIDecisionLog))
        return int(result.scalar_one())

    async def recent_decisions(self, limit: int) -> list[AIDecisionLog]:
        stmt = select(AIDecisionLog).order_by(AIDecisionLog.created_at.desc()).limit(limit)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def set_decision_overridden(self, decision_id: uuid.UUID, overridden: bool) -> int:
        stmt = (
            update(AIDecisionLog)
            .where(AIDecisionLog.id == decision_id)
            .values(was_overridden=overridden)
        )
        result = await self._session.execute(stmt)
        return int(result.rowcount or 0)

    async def recent_runs(self, limit: int) -> list[InventoryRunLog]:
        stmt = select(InventoryRunLog).order_by(InventoryRunLog.created_at.desc()).limit(limit)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def stock_counts(self) -> dict[str, int]:
        stmt = select(
            func.count(Listing.id).label("total"),
            func.count(Listing.id).filter(Listing.in_stock.is_(True)).label("in_stock"),
            func.count(Listing.id).filter(Listing.in_stock.is_(False)).label("out_of_stock"),
            func.count(Listing.id).filter(Listing.check_error.is_not(None)).label("with_errors"),
            func.count(Listing.id).filter(Listing.last_checked_at.is_(None)).label("never_checked"),
            func.count(Listing.id).filter(Listing.ai_verified_at.is_(None)).label("never_ai_verified"),
            func.count(Listing.id).filter(Listing.stock_source == StockSource.DEAD).label("dead"),
        ).where(Listing.product_url.is_not(None))
        result = await self._session.execute(stmt)
        row = result.one()
        return {key: int(value or 0) for key, value in row._mapping.items()}
