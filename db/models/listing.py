"""
db/models/listing.py

Trackable vendor listing: one product offered by one supplier at one URL.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Index, Numeric, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin
from db.models.catalog import Product, Supplier


class Listing(Base, TimestampMixin):
    __tablename__ = "listings"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    product_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
    )
    supplier_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("suppliers.id", ondelete="CASCADE"),
        nullable=False,
    )
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    product_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    in_stock: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    stock_source: Mapped[str | None] = mapped_column(
        String(32),
        nullable=True,
        comment="Tier-1 verdict source, or 'dead' once Tier 2 retires the listing",
    )
    last_checked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    check_error: Mapped[str | None] = mapped_column(Text, nullable=True)
    ai_verified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    ai_action: Mapped[str | None] = mapped_column(String(32), nullable=True)
    ai_confidence: Mapped[float | None] = mapped_column(Float, nullable=True)

    product: Mapped[Product] = relationship(lazy="joined")
    supplier: Mapped[Supplier] = relationship(lazy="joined")

    __table_args__ = (
        Index("ix_listings_supplier_id", "supplier_id"),
        Index("ix_listings_last_checked_at", "last_checked_at"),
        Index("ix_listings_ai_verified_at", "ai_verified_at"),
    )
