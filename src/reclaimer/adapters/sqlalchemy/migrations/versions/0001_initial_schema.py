"""Initial reconciliation schema.

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-09-28 09:00:00

"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _id() -> sa.Column[object]:
    return sa.Column("id", sa.Uuid(), nullable=False)


def _timestamps() -> list[sa.Column[object]]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def _money(name: str) -> sa.Column[object]:
    return sa.Column(name, sa.Numeric(12, 2), nullable=True)


def _count(name: str) -> sa.Column[object]:
    return sa.Column(name, sa.Integer(), nullable=False)


def upgrade() -> None:
    op.create_table(
        "ledger_event",
        _id(),
        sa.Column("fnsku", sa.String(32), nullable=False),
        sa.Column("asin", sa.String(32), nullable=False),
        sa.Column("sku", sa.String(128), nullable=False),
        sa.Column("product_title", sa.Text(), nullable=False),
        sa.Column("event_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("event_type", sa.String(64), nullable=False),
        sa.Column("reference_id", sa.String(128), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("fulfillment_center", sa.String(32), nullable=True),
        sa.Column("disposition", sa.String(64), nullable=True),
        sa.Column("reason", sa.String(64), nullable=True),
        _count("reconciled_quantity"),
        _count("unreconciled_quantity"),
        sa.Column("country", sa.String(8), nullable=False),
        sa.Column("raw_timestamp", sa.String(64), nullable=True),
        sa.Column("status", sa.String(32), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_ledger_event"),
        sa.UniqueConstraint(
            "fnsku",
            "asin",
            "event_date",
            "event_type",
            "reference_id",
            "fulfillment_center",
            name="uq_ledger_event_natural_key",
        ),
    )
    op.create_index("ix_ledger_event_status", "ledger_event", ["status"])
    op.create_index("ix_ledger_event_event_type", "ledger_event", ["event_type"])
    op.create_index("ix_ledger_event_event_date", "ledger_event", ["event_date"])
    op.create_index("ix_ledger_event_fnsku", "ledger_event", ["fnsku"])

    op.create_table(
        "reimbursed_item",
        _id(),
        sa.Column("reimbursement_id", sa.String(64), nullable=False),
        sa.Column("case_id", sa.String(64), nullable=True),
        sa.Column("amazon_order_id", sa.String(64), nullable=True),
        sa.Column("reason", sa.String(128), nullable=True),
        sa.Column("fnsku", sa.String(32), nullable=False),
        sa.Column("asin", sa.String(32), nullable=False),
        sa.Column("sku", sa.String(128), nullable=False),
        sa.Column("product_name", sa.Text(), nullable=False),
        sa.Column("condition", sa.String(32), nullable=False),
        sa.Column("currency_unit", sa.String(8), nullable=False),
        sa.Column("approval_date", sa.DateTime(timezone=True), nullable=False),
        _money("amount_per_unit"),
        _money("amount_total"),
        _count("quantity_reimbursed_cash"),
        _count("quantity_reimbursed_inventory"),
        _count("quantity_reimbursed_total"),
        sa.Column("original_reimbursement_id", sa.String(64), nullable=True),
        sa.Column("original_reimbursement_type", sa.String(64), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_reimbursed_item"),
        sa.UniqueConstraint("reimbursement_id", name="uq_reimbursed_item_reimbursement_id"),
    )
    op.create_index("ix_reimbursed_item_fnsku", "reimbursed_item", ["fnsku"])

    op.create_table(
        "customer_return",
        _id(),
        sa.Column("order_id", sa.String(64), nullable=False),
        sa.Column("fnsku", sa.String(32), nullable=False),
        sa.Column("asin", sa.String(32), nullable=False),
        sa.Column("sku", sa.String(128), nullable=False),
        sa.Column("product_name", sa.Text(), nullable=True),
        sa.Column("return_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("fulfillment_center_id", sa.String(32), nullable=True),
        sa.Column("detailed_disposition", sa.String(64), nullable=True),
        sa.Column("reason", sa.String(128), nullable=True),
        sa.Column("status", sa.String(128), nullable=True),
        sa.Column("license_plate_number", sa.String(64), nullable=True),
        sa.Column("customer_comments", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_customer_return"),
        sa.UniqueConstraint(
            "order_id", "fnsku", "return_date", name="uq_customer_return_order_fnsku_date"
        ),
    )
    op.create_index("ix_customer_return_fnsku", "customer_return", ["fnsku"])

    op.create_table(
        "unsuppressed_inventory",
        _id(),
        sa.Column("fnsku", sa.String(32), nullable=False),
        sa.Column("asin", sa.String(32), nullable=False),
        sa.Column("sku", sa.String(128), nullable=False),
        sa.Column("product_name", sa.Text(), nullable=True),
        sa.Column("condition", sa.String(32), nullable=False),
        _money("your_price"),
        sa.Column("mfn_listing_exists", sa.Boolean(), nullable=False),
        sa.Column("mfn_fulfillable_quantity", sa.Integer(), nullable=True),
        sa.Column("afn_listing_exists", sa.Boolean(), nullable=False),
        _count("afn_warehouse_quantity"),
        _count("afn_fulfillable_quantity"),
        _count("afn_unsellable_quantity"),
        _count("afn_reserved_quantity"),
        _count("afn_total_quantity"),
        sa.Column("per_unit_volume", sa.Numeric(12, 4), nullable=True),
        _count("afn_inbound_working_quantity"),
        _count("afn_inbound_shipped_quantity"),
        _count("afn_inbound_receiving_quantity"),
        _count("afn_researching_quantity"),
        _count("afn_reserved_future_supply"),
        _count("afn_future_supply_buyable"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_unsuppressed_inventory"),
    )
    op.create_index("ix_unsuppressed_inventory_fnsku", "unsuppressed_inventory", ["fnsku"])

    op.create_table(
        "claimable_item",
        _id(),
        sa.Column("fnsku", sa.String(32), nullable=False),
        sa.Column("asin", sa.String(32), nullable=False),
        sa.Column("sku", sa.String(128), nullable=False),
        sa.Column("product_name", sa.Text(), nullable=False),
        sa.Column("category", sa.String(64), nullable=False),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        _money("estimated_value"),
        sa.Column("currency", sa.String(8), nullable=False),
        sa.Column("fulfillment_center", sa.String(32), nullable=True),
        sa.Column("event_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("reference_id", sa.String(128), nullable=True),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("claim_submitted_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reimbursement_date", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_claimable_item"),
    )
    op.create_index(
        "ix_claimable_item_fnsku_category", "claimable_item", ["fnsku", "category"]
    )
    op.create_index("ix_claimable_item_status", "claimable_item", ["status"])

    op.create_table(
        "sync_log",
        _id(),
        sa.Column("sync_type", sa.String(64), nullable=False),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(32), nullable=False),
        _count("records_processed"),
        _count("records_added"),
        _count("records_updated"),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_sync_log"),
    )
    op.create_index("ix_sync_log_completed_at", "sync_log", ["completed_at"])


def downgrade() -> None:
    op.drop_index("ix_sync_log_completed_at", table_name="sync_log")
    op.drop_table("sync_log")
    op.drop_index("ix_claimable_item_status", table_name="claimable_item")
    op.drop_index("ix_claimable_item_fnsku_category", table_name="claimable_item")
    op.drop_table("claimable_item")
    op.drop_index("ix_unsuppressed_inventory_fnsku", table_name="unsuppressed_inventory")
    op.drop_table("unsuppressed_inventory")
    op.drop_index("ix_customer_return_fnsku", table_name="customer_return")
    op.drop_table("customer_return")
    op.drop_index("ix_reimbursed_item_fnsku", table_name="reimbursed_item")
    op.drop_table("reimbursed_item")
    for index in (
        "ix_ledger_event_fnsku",
        "ix_ledger_event_event_date",
        "ix_ledger_event_event_type",
        "ix_ledger_event_status",
    ):
        op.drop_index(index, table_name="ledger_event")
    op.drop_table("ledger_event")
