"""SQLAlchemy mapping metadata for the reconciliation records."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Dialect,
    Enum,
    Index,
    Integer,
    Numeric,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)
from sqlalchemy.orm import configure_mappers

from reclaimer.domain.model import (
    ClaimableItem,
    ClaimCategory,
    ClaimStatus,
    CustomerReturn,
    LedgerEvent,
    LedgerEventStatus,
    ReimbursedItem,
    ReturnReceipt,
    SyncLog,
    SyncStatus,
    UnsuppressedInventoryRecord,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]
MoneyType = Numeric(12, 2, asdecimal=True)


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


def _timestamps() -> tuple[Column[datetime], Column[datetime]]:
    return (
        Column("created_at", UTCDateTime(), nullable=False),
        Column("updated_at", UTCDateTime(), nullable=False),
    )


ledger_event_table = Table(
    "ledger_event",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("fnsku", String(32), nullable=False),
    Column("asin", String(32), nullable=False),
    Column("sku", String(128), nullable=False),
    Column("product_title", Text, nullable=False, default=""),
    Column("event_date", UTCDateTime(), nullable=False),
    Column("event_type", String(64), nullable=False),
    Column("reference_id", String(128), nullable=True),
    Column("quantity", Integer, nullable=False),
    Column("fulfillment_center", String(32), nullable=True),
    Column("disposition", String(64), nullable=True),
    Column("reason", String(64), nullable=True),
    Column("reconciled_quantity", Integer, nullable=False, default=0),
    Column("unreconciled_quantity", Integer, nullable=False, default=0),
    Column("country", String(8), nullable=False, default="US"),
    Column("raw_timestamp", String(64), nullable=True),
    Column(
        "status",
        Enum(LedgerEventStatus, native_enum=False, length=32),
        nullable=False,
        default=LedgerEventStatus.WAITING,
    ),
    *_timestamps(),
    UniqueConstraint(
        "fnsku",
        "asin",
        "event_date",
        "event_type",
        "reference_id",
        "fulfillment_center",
        name="uq_ledger_event_natural_key",
    ),
    Index("ix_ledger_event_status", "status"),
    Index("ix_ledger_event_event_type", "event_type"),
    Index("ix_ledger_event_event_date", "event_date"),
    Index("ix_ledger_event_fnsku", "fnsku"),
)

reimbursed_item_table = Table(
    "reimbursed_item",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("reimbursement_id", String(64), nullable=False),
    Column("case_id", String(64), nullable=True),
    Column("amazon_order_id", String(64), nullable=True),
    Column("reason", String(128), nullable=True),
    Column("fnsku", String(32), nullable=False),
    Column("asin", String(32), nullable=False),
    Column("sku", String(128), nullable=False),
    Column("product_name", Text, nullable=False, default=""),
    Column("condition", String(32), nullable=False, default="NewItem"),
    Column("currency_unit", String(8), nullable=False, default="USD"),
    Column("approval_date", UTCDateTime(), nullable=False),
    Column("amount_per_unit", MoneyType, nullable=True),
    Column("amount_total", MoneyType, nullable=True),
    Column("quantity_reimbursed_cash", Integer, nullable=False, default=0),
    Column("quantity_reimbursed_inventory", Integer, nullable=False, default=0),
    Column("quantity_reimbursed_total", Integer, nullable=False, default=0),
    Column("original_reimbursement_id", String(64), nullable=True),
    Column("original_reimbursement_type", String(64), nullable=True),
    *_timestamps(),
    UniqueConstraint("reimbursement_id", name="uq_reimbursed_item_reimbursement_id"),
    Index("ix_reimbursed_item_fnsku", "fnsku"),
)

customer_return_table = Table(
    "customer_return",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("order_id", String(64), nullable=False),
    Column("fnsku", String(32), nullable=False),
    Column("asin", String(32), nullable=False),
    Column("sku", String(128), nullable=False),
    Column("product_name", Text, nullable=True),
    Column("return_date", UTCDateTime(), nullable=False),
    Column("quantity", Integer, nullable=False, default=1),
    Column("fulfillment_center_id", String(32), nullable=True),
    Column("detailed_disposition", String(64), nullable=True),
    Column("reason", String(128), nullable=True),
    Column("status", String(128), nullable=True),
    Column("license_plate_number", String(64), nullable=True),
    Column("customer_comments", Text, nullable=True),
    *_timestamps(),
    UniqueConstraint(
        "order_id", "fnsku", "return_date", name="uq_customer_return_order_fnsku_date"
    ),
    Index("ix_customer_return_fnsku", "fnsku"),
)

return_receipt_table = Table(
    "return_receipt",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("fnsku", String(32), nullable=False),
    Column("asin", String(32), nullable=False),
    Column("event_date", UTCDateTime(), nullable=False),
    Column("quantity", Integer, nullable=False),
    Column("reference_id", String(128), nullable=True),
    Column("fulfillment_center", String(32), nullable=True),
    *_timestamps(),
    UniqueConstraint(
        "fnsku",
        "event_date",
        "reference_id",
        "fulfillment_center",
        name="uq_return_receipt_natural_key",
    ),
    Index("ix_return_receipt_fnsku_event_date", "fnsku", "event_date"),
)

unsuppressed_inventory_table = Table(
    "unsuppressed_inventory",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("fnsku", String(32), nullable=False),
    Column("asin", String(32), nullable=False),
    Column("sku", String(128), nullable=False),
    Column("product_name", Text, nullable=True),
    Column("condition", String(32), nullable=False, default="New"),
    Column("your_price", MoneyType, nullable=True),
    Column("mfn_listing_exists", Boolean, nullable=False, default=False),
    Column("mfn_fulfillable_quantity", Integer, nullable=True),
    Column("afn_listing_exists", Boolean, nullable=False, default=False),
    Column("afn_warehouse_quantity", Integer, nullable=False, default=0),
    Column("afn_fulfillable_quantity", Integer, nullable=False, default=0),
    Column("afn_unsellable_quantity", Integer, nullable=False, default=0),
    Column("afn_reserved_quantity", Integer, nullable=False, default=0),
    Column("afn_total_quantity", Integer, nullable=False, default=0),
    Column("per_unit_volume", Numeric(12, 4, asdecimal=True), nullable=True),
    Column("afn_inbound_working_quantity", Integer, nullable=False, default=0),
    Column("afn_inbound_shipped_quantity", Integer, nullable=False, default=0),
    Column("afn_inbound_receiving_quantity", Integer, nullable=False, default=0),
    Column("afn_researching_quantity", Integer, nullable=False, default=0),
    Column("afn_reserved_future_supply", Integer, nullable=False, default=0),
    Column("afn_future_supply_buyable", Integer, nullable=False, default=0),
    *_timestamps(),
    Index("ix_unsuppressed_inventory_fnsku", "fnsku"),
)

claimable_item_table = Table(
    "claimable_item",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("fnsku", String(32), nullable=False),
    Column("asin", String(32), nullable=False),
    Column("sku", String(128), nullable=False),
    Column("product_name", Text, nullable=False),
    Column("category", Enum(ClaimCategory, native_enum=False, length=64), nullable=False),
    Column(
        "status",
        Enum(ClaimStatus, native_enum=False, length=32),
        nullable=False,
        default=ClaimStatus.PENDING,
    ),
    Column("quantity", Integer, nullable=False),
    Column("estimated_value", MoneyType, nullable=True),
    Column("currency", String(8), nullable=False, default="USD"),
    Column("fulfillment_center", String(32), nullable=True),
    Column("event_date", UTCDateTime(), nullable=False),
    Column("reference_id", String(128), nullable=True),
    Column("reason", Text, nullable=False),
    Column("notes", Text, nullable=True),
    Column("claim_submitted_date", UTCDateTime(), nullable=True),
    Column("reimbursement_date", UTCDateTime(), nullable=True),
    *_timestamps(),
    Index("ix_claimable_item_fnsku_category", "fnsku", "category"),
    Index("ix_claimable_item_status", "status"),
)

sync_log_table = Table(
    "sync_log",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("sync_type", String(64), nullable=False),
    Column("start_date", UTCDateTime(), nullable=False),
    Column("end_date", UTCDateTime(), nullable=False),
    Column("status", Enum(SyncStatus, native_enum=False, length=32), nullable=False),
    Column("records_processed", Integer, nullable=False, default=0),
    Column("records_added", Integer, nullable=False, default=0),
    Column("records_updated", Integer, nullable=False, default=0),
    Column("error_message", Text, nullable=True),
    Column("completed_at", UTCDateTime(), nullable=False),
    Index("ix_sync_log_completed_at", "completed_at"),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(LedgerEvent, ledger_event_table)
    mapper_registry.map_imperatively(ReimbursedItem, reimbursed_item_table)
    mapper_registry.map_imperatively(CustomerReturn, customer_return_table)
    mapper_registry.map_imperatively(ReturnReceipt, return_receipt_table)
    mapper_registry.map_imperatively(UnsuppressedInventoryRecord, unsuppressed_inventory_table)
    mapper_registry.map_imperatively(ClaimableItem, claimable_item_table)
    mapper_registry.map_imperatively(SyncLog, sync_log_table)

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
