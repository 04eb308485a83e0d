"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class EventType(StrEnum):
    """Ledger event types as reported by the warehouse provider."""

    SHIPMENTS = "Shipments"
    WHSE_TRANSFERS = "WhseTransfers"
    ADJUSTMENTS = "Adjustments"
    RECEIPTS = "Receipts"
    CUSTOMER_RETURNS = "CustomerReturns"
    VENDOR_RETURNS = "VendorReturns"


class LedgerEventStatus(StrEnum):
    WAITING = "WAITING"
    CLAIMABLE = "CLAIMABLE"
    CLAIM_INITIATED = "CLAIM_INITIATED"
    CLAIMED = "CLAIMED"
    PAID = "PAID"
    INVALID = "INVALID"
    RESOLVED = "RESOLVED"


class ClaimCategory(StrEnum):
    LOST_WAREHOUSE = "LOST_WAREHOUSE"
    DAMAGED_WAREHOUSE = "DAMAGED_WAREHOUSE"
    CUSTOMER_RETURN_NOT_RECEIVED = "CUSTOMER_RETURN_NOT_RECEIVED"
    CUSTOMER_RETURN_DAMAGED = "CUSTOMER_RETURN_DAMAGED"


class ClaimStatus(StrEnum):
    PENDING = "PENDING"
    CLAIMABLE = "CLAIMABLE"
    CLAIMED = "CLAIMED"
    REIMBURSED = "REIMBURSED"
    DENIED = "DENIED"
    EXPIRED = "EXPIRED"


class ReportStatus(StrEnum):
    IN_QUEUE = "IN_QUEUE"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"
    FATAL = "FATAL"
    CANCELLED = "CANCELLED"


class ReportType(StrEnum):
    REIMBURSEMENTS = "GET_FBA_REIMBURSEMENTS_DATA"
    CUSTOMER_RETURNS = "GET_FBA_FULFILLMENT_CUSTOMER_RETURNS_DATA"
    INVENTORY_LEDGER = "GET_LEDGER_DETAIL_VIEW_DATA"
    UNSUPPRESSED_INVENTORY = "GET_FBA_MYI_UNSUPPRESSED_INVENTORY_DATA"


class SyncStatus(StrEnum):
    SUCCESS = "SUCCESS"
    PARTIAL_SUCCESS = "PARTIAL_SUCCESS"
    FAILED = "FAILED"


class StepStatus(StrEnum):
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


class TicketPriority(StrEnum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
