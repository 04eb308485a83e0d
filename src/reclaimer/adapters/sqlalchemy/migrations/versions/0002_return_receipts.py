"""Store CustomerReturns ledger rows as return receipts.

Revision ID: 0002_return_receipts
Revises: 0001_initial_schema
Create Date: 2026-10-16 09:00:00

"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0002_return_receipts"
down_revision = "0001_initial_schema"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "return_receipt",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("fnsku", sa.String(32), nullable=False),
        sa.Column("asin", sa.String(32), nullable=False),
        sa.Column("event_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("reference_id", sa.String(128), nullable=True),
        sa.Column("fulfillment_center", sa.String(32), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_return_receipt"),
        sa.UniqueConstraint(
            "fnsku",
            "event_date",
            "reference_id",
            "fulfillment_center",
            name="uq_return_receipt_natural_key",
        ),
    )
    op.create_index(
        "ix_return_receipt_fnsku_event_date", "return_receipt", ["fnsku", "event_date"]
    )


def downgrade() -> None:
    op.drop_index("ix_return_receipt_fnsku_event_date", table_name="return_receipt")
    op.drop_table("return_receipt")
