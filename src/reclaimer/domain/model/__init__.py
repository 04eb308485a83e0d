"""Domain model for inventory reconciliation."""

from __future__ import annotations

from .entities import (
    DEFAULT_COUNTRY,
    DEFAULT_CURRENCY,
    ClaimableItem,
    CustomerReturn,
    LedgerEvent,
    LedgerEventKey,
    Record,
    ReimbursedItem,
    ReturnKey,
    ReturnReceipt,
    ReturnReceiptKey,
    SyncLog,
    UnsuppressedInventoryRecord,
    new_id,
)
from .enums import (
    ClaimCategory,
    ClaimStatus,
    EventType,
    LedgerEventStatus,
    ReportStatus,
    ReportType,
    StepStatus,
    SyncStatus,
    TicketPriority,
)

__all__ = [
    "DEFAULT_COUNTRY",
    "DEFAULT_CURRENCY",
    "ClaimCategory",
    "ClaimStatus",
    "ClaimableItem",
    "CustomerReturn",
    "EventType",
    "LedgerEvent",
    "LedgerEventKey",
    "LedgerEventStatus",
    "Record",
    "ReimbursedItem",
    "ReportStatus",
    "ReportType",
    "ReturnKey",
    "ReturnReceipt",
    "ReturnReceiptKey",
    "StepStatus",
    "SyncLog",
    "SyncStatus",
    "TicketPriority",
    "UnsuppressedInventoryRecord",
    "new_id",
]
