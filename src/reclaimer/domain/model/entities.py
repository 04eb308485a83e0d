"""Persistent reconciliation records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, NamedTuple
from uuid import UUID, uuid4

from .enums import ClaimCategory, ClaimStatus, LedgerEventStatus, SyncStatus

if TYPE_CHECKING:
    from decimal import Decimal

DEFAULT_COUNTRY = "US"
DEFAULT_CURRENCY = "USD"


def new_id() -> UUID:
    return uuid4()


def _utcnow() -> datetime:
    return datetime.now(UTC)


class LedgerEventKey(NamedTuple):
    """Natural key of a ledger event; ``None`` parts only match ``None``."""

    fnsku: str
    asin: str
    event_date: datetime
    event_type: str
    reference_id: str | None
    fulfillment_center: str | None


class ReturnKey(NamedTuple):
    order_id: str
    fnsku: str
    return_date: datetime


class ReturnReceiptKey(NamedTuple):
    fnsku: str
    event_date: datetime
    reference_id: str | None
    fulfillment_center: str | None


@dataclass(eq=False, kw_only=True)
class Record:
    id: UUID = field(default_factory=new_id)
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)


@dataclass(eq=False, kw_only=True)
class LedgerEvent(Record):
    """A single inventory movement from the ledger detail report."""

    fnsku: str
    asin: str
    sku: str
    product_title: str
    event_date: datetime
    event_type: str
    quantity: int
    reference_id: str | None = None
    fulfillment_center: str | None = None
    disposition: str | None = None
    reason: str | None = None
    reconciled_quantity: int = 0
    unreconciled_quantity: int = 0
    country: str = DEFAULT_COUNTRY
    raw_timestamp: str | None = None
    status: LedgerEventStatus = LedgerEventStatus.WAITING

    @property
    def natural_key(self) -> LedgerEventKey:
        return LedgerEventKey(
            fnsku=self.fnsku,
            asin=self.asin,
            event_date=self.event_date,
            event_type=self.event_type,
            reference_id=self.reference_id,
            fulfillment_center=self.fulfillment_center,
        )


@dataclass(eq=False, kw_only=True)
class ReimbursedItem(Record):
    """A reimbursement already granted by the provider."""

    reimbursement_id: str
    fnsku: str
    asin: str
    sku: str
    product_name: str
    approval_date: datetime
    case_id: str | None = None
    amazon_order_id: str | None = None
    reason: str | None = None
    condition: str = "NewItem"
    currency_unit: str = DEFAULT_CURRENCY
    amount_per_unit: Decimal | None = None
    amount_total: Decimal | None = None
    quantity_reimbursed_cash: int = 0
    quantity_reimbursed_inventory: int = 0
    quantity_reimbursed_total: int = 0
    original_reimbursement_id: str | None = None
    original_reimbursement_type: str | None = None


@dataclass(eq=False, kw_only=True)
class CustomerReturn(Record):
    order_id: str
    fnsku: str
    asin: str
    sku: str
    return_date: datetime
    product_name: str | None = None
    quantity: int = 1
    fulfillment_center_id: str | None = None
    detailed_disposition: str | None = None
    reason: str | None = None
    status: str | None = None
    license_plate_number: str | None = None
    customer_comments: str | None = None

    @property
    def dedup_key(self) -> ReturnKey:
        return ReturnKey(self.order_id, self.fnsku, self.return_date)


@dataclass(eq=False, kw_only=True)
class ReturnReceipt(Record):
    """A CustomerReturns ledger row: the unit arrived back in a fulfillment center.

    Kept apart from ledger events so it never enters the claim lifecycle.
    """

    fnsku: str
    asin: str
    event_date: datetime
    quantity: int
    reference_id: str | None = None
    fulfillment_center: str | None = None

    @property
    def natural_key(self) -> ReturnReceiptKey:
        return ReturnReceiptKey(
            self.fnsku, self.event_date, self.reference_id, self.fulfillment_center
        )

    @classmethod
    def from_ledger_event(cls, event: LedgerEvent) -> ReturnReceipt:
        return cls(
            fnsku=event.fnsku,
            asin=event.asin,
            event_date=event.event_date,
            quantity=event.quantity,
            reference_id=event.reference_id,
            fulfillment_center=event.fulfillment_center,
        )


@dataclass(eq=False, kw_only=True)
class UnsuppressedInventoryRecord(Record):
    """Snapshot row of the current inventory listing, used for valuation only."""

    fnsku: str
    asin: str
    sku: str
    product_name: str | None = None
    condition: str = "New"
    your_price: Decimal | None = None
    mfn_listing_exists: bool = False
    mfn_fulfillable_quantity: int | None = None
    afn_listing_exists: bool = False
    afn_warehouse_quantity: int = 0
    afn_fulfillable_quantity: int = 0
    afn_unsellable_quantity: int = 0
    afn_reserved_quantity: int = 0
    afn_total_quantity: int = 0
    per_unit_volume: Decimal | None = None
    afn_inbound_working_quantity: int = 0
    afn_inbound_shipped_quantity: int = 0
    afn_inbound_receiving_quantity: int = 0
    afn_researching_quantity: int = 0
    afn_reserved_future_supply: int = 0
    afn_future_supply_buyable: int = 0


@dataclass(eq=False, kw_only=True)
class ClaimableItem(Record):
    """A candidate reimbursement claim derived by the claim analyzer."""

    fnsku: str
    asin: str
    sku: str
    product_name: str
    category: ClaimCategory
    quantity: int
    event_date: datetime
    reason: str
    status: ClaimStatus = ClaimStatus.PENDING
    estimated_value: Decimal | None = None
    currency: str = DEFAULT_CURRENCY
    fulfillment_center: str | None = None
    reference_id: str | None = None
    notes: str | None = None
    claim_submitted_date: datetime | None = None
    reimbursement_date: datetime | None = None


@dataclass(eq=False, kw_only=True)
class SyncLog:
    """Append-only audit entry for one sync run."""

    sync_type: str
    start_date: datetime
    end_date: datetime
    status: SyncStatus
    records_processed: int = 0
    records_added: int = 0
    records_updated: int = 0
    error_message: str | None = None
    completed_at: datetime = field(default_factory=_utcnow)
    id: UUID = field(default_factory=new_id)
