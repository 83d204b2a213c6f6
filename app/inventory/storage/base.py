"""
Storage layer interfaces for inventory verification state.
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Any

from app.domain.inventory import DecisionLogEntry, InventoryStats, LearningNoteRecord, RunLogEntry
from app.inventory.types import StockStatusUpdate, TrackableItem


class InventoryStore(ABC):
    """
    The only path by which the pipeline reads or mutates persisted state.

    Each operation runs in its own transaction. Implementations raise
    `InventoryStoreError` on persistence failures.
    """

    @abstractmethod
    async def list_trackable_items(self) -> list[TrackableItem]:
        """
        Return every listing with a product URL, joined to product and supplier.
        """

    @abstractmethod
    async def update_price_stock_status(self, updates: Sequence[StockStatusUpdate]) -> int:
        """
        Write one batch of Tier-1 verdicts and return the number of rows updated.
        """

    @abstractmethod
    async def apply_ai_action(self, listing_id: uuid.UUID, changes: Mapping[str, Any]) -> bool:
        """
        Write the column changes of one Tier-2 action. Returns False when the
        listing no longer exists.
        """

    @abstractmethod
    async def log_ai_decision(self, entry: DecisionLogEntry) -> uuid.UUID:
        ...

    @abstractmethod
    async def log_inventory_run(self, entry: RunLogEntry) -> None:
        ...

    @abstractmethod
    async def add_learning_note(self, note: str, source: str) -> LearningNoteRecord:
        ...

    @abstractmethod
    async def list_learning_notes(self) -> list[LearningNoteRecord]:
        """
        Return every learning note, oldest first.
        """

    @abstractmethod
    async def count_decisions(self) -> int:
        ...

    @abstractmethod
    async def recent_decisions(self, limit: int) -> list[DecisionLogEntry]:
        """
        Return the most recent decisions, newest first.
        """

    @abstractmethod
    async def set_decision_overridden(self, decision_id: uuid.UUID, overridden: bool = True) -> bool:
        """
        Flip the override flag of one decision. Returns False when it does not exist.
        """

    @abstractmethod
    async def recent_runs(self, limit: int) -> list[RunLogEntry]:
        ...

    @abstractmethod
    async def inventory_stats(self) -> InventoryStats:
        ...
