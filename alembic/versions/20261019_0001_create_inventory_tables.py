"""create catalog, listing and inventory audit tables

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "products",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("slug", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("slug"),
    )
    op.create_table(
        "suppliers",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column(
            "slug",
            sa.String(length=100),
            nullable=False,
            comment="Vendor identifier; keys the vendor integration profile",
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("slug"),
    )
    op.create_table(
        "listings",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("product_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("supplier_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("price", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("product_url", sa.Text(), nullable=True),
        sa.Column("in_stock", sa.Boolean(), nullable=False),
        sa.Column(
            "stock_source",
            sa.String(length=32),
            nullable=True,
            comment="Tier-1 verdict source, or 'dead' once Tier 2 retires the listing",
        ),
        sa.Column("last_checked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("check_error", sa.Text(), nullable=True),
        sa.Column("ai_verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("ai_action", sa.String(length=32), nullable=True),
        sa.Column("ai_confidence", sa.Float(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["supplier_id"], ["suppliers.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_listings_supplier_id", "listings", ["supplier_id"], unique=False)
    op.create_index("ix_listings_last_checked_at", "listings", ["last_checked_at"], unique=False)
    op.create_index("ix_listings_ai_verified_at", "listings", ["ai_verified_at"], unique=False)

    op.create_table(
        "ai_decision_log",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("listing_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("product_name", sa.String(length=255), nullable=False),
        sa.Column("supplier_slug", sa.String(length=100), nullable=False),
        sa.Column("product_url", sa.Text(), nullable=False),
        sa.Column("action", sa.String(length=32), nullable=False),
        sa.Column(
            "proposed_action",
            sa.String(length=32),
            nullable=False,
            comment="Action returned by the model before reconciliation",
        ),
        sa.Column("confidence", sa.Float(), nullable=False),
        sa.Column("reasoning", sa.Text(), nullable=False),
        sa.Column("page_title", sa.Text(), nullable=True),
        sa.Column("detected_price", sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column("detected_stock", sa.Boolean(), nullable=True),
        sa.Column("detected_product_name", sa.Text(), nullable=True),
        sa.Column("html_excerpt", sa.Text(), nullable=True),
        sa.Column("was_overridden", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["listing_id"], ["listings.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_ai_decision_log_created_at", "ai_decision_log", ["created_at"], unique=False)
    op.create_index("ix_ai_decision_log_listing_id", "ai_decision_log", ["listing_id"], unique=False)

    op.create_table(
        "scraper_learning_notes",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("note", sa.Text(), nullable=False),
        sa.Column("source", sa.String(length=50), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_scraper_learning_notes_created_at",
        "scraper_learning_notes",
        ["created_at"],
        unique=False,
    )

    op.create_table(
        "inventory_run_log",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("total", sa.Integer(), nullable=False),
        sa.Column("in_stock", sa.Integer(), nullable=False),
        sa.Column("out_of_stock", sa.Integer(), nullable=False),
        sa.Column("errors", sa.Integer(), nullable=False),
        sa.Column("flagged", sa.Integer(), nullable=False),
        sa.Column("duration_ms", sa.Integer(), nullable=False),
        sa.Column("triggered_by", sa.String(length=64), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_inventory_run_log_created_at", "inventory_run_log", ["created_at"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_inventory_run_log_created_at", table_name="inventory_run_log")
    op.drop_table("inventory_run_log")
    op.drop_index("ix_scraper_learning_notes_created_at", table_name="scraper_learning_notes")
    op.drop_table("scraper_learning_notes")
    op.drop_index("ix_ai_decision_log_listing_id", table_name="ai_decision_log")
    op.drop_index("ix_ai_decision_log_created_at", table_name="ai_decision_log")
    op.drop_table("ai_decision_log")
    op.drop_index("ix_listings_ai_verified_at", table_name="listings")
    op.drop_index("ix_listings_last_checked_at", table_name="listings")
    op.drop_index("ix_listings_supplier_id", table_name="listings")
    op.drop_table("listings")
    op.drop_table("suppliers")
    op.drop_table("products")
