"""
db/models/inventory_logs.py

Append-only observability and learning tables written by the pipeline.
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from sqlalchemy import Boolean, Float, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, CreatedAtMixin


class AIDecisionLog(Base, CreatedAtMixin):
    """
    One Tier-2 decision. Immutable except for `was_overridden`.
    """

    __tablename__ = "ai_decision_log"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    listing_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("listings.id", ondelete="SET NULL"),
        nullable=True,
    )
    product_name: Mapped[str] = mapped_column(String(255), nullable=False)
    supplier_slug: Mapped[str] = mapped_column(String(100), nullable=False)
    product_url: Mapped[str] = mapped_column(Text, nullable=False)
    action: Mapped[str] = mapped_column(String(32), nullable=False)
    proposed_action: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        comment="Action returned by the model before reconciliation",
    )
    confidence: Mapped[float] = mapped_column(Float, nullable=False)
    reasoning: Mapped[str] = mapped_column(Text, nullable=False, default="")
    page_title: Mapped[str | None] = mapped_column(Text, nullable=True)
    detected_price: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    detected_stock: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    detected_product_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    html_excerpt: Mapped[str | None] = mapped_column(Text, nullable=True)
    was_overridden: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        Index("ix_ai_decision_log_created_at", "created_at"),
        Index("ix_ai_decision_log_listing_id", "listing_id"),
    )


class LearningNote(Base, CreatedAtMixin):
    """
    Heuristic injected into the Tier-2 system prompt. Never deleted automatically.
    """

    __tablename__ = "scraper_learning_notes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    note: Mapped[str] = mapped_column(Text, nullable=False)
    source: Mapped[str] = mapped_column(String(50), nullable=False, default="ai_self_review")

    __table_args__ = (Index("ix_scraper_learning_notes_created_at", "created_at"),)


class InventoryRunLog(Base, CreatedAtMixin):
    __tablename__ = "inventory_run_log"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    total: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    in_stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    out_of_stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    errors: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    flagged: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    duration_ms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    triggered_by: Mapped[str] = mapped_column(String(64), nullable=False, default="cron")

    __table_args__ = (Index("ix_inventory_run_log_created_at", "created_at"),)
