"""Claim detection passes.

Each pass is a pure function from a ``ClaimSnapshot`` to the new claimable items
it would create. Candidates are checked against existing claims and against
reimbursements already granted, and against each other within the same pass.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

from reclaimer.domain.model import ClaimableItem, ClaimCategory, EventType
from reclaimer.domain.time_windows import start_of_day

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from datetime import datetime

    from reclaimer.domain.model import CustomerReturn, LedgerEvent

    from .snapshot import ClaimSnapshot

LOST_REASON_CODES = frozenset({"M", "5"})
DAMAGED_REASON_CODES = frozenset({"D", "W"})
RETURNED_TO_INVENTORY = "Unit returned to inventory"
CUSTOMER_DAMAGED = "CUSTOMER_DAMAGED"
UNKNOWN_PRODUCT = "Unknown Product"

_CENTS = Decimal("0.01")

type ClaimDetector = Callable[[ClaimSnapshot], list[ClaimableItem]]


def estimate_value(unit_price: Decimal | None, quantity: int) -> Decimal | None:
    if unit_price is None:
        return None
    return (unit_price * quantity).quantize(_CENTS, rounding=ROUND_HALF_UP)


def _claimed_since(
    claims: Iterable[ClaimableItem],
    fnsku: str,
    since: datetime,
) -> bool:
    return any(claim.fnsku == fnsku and claim.event_date >= since for claim in claims)


def _claimed(claims: Iterable[ClaimableItem], fnsku: str) -> bool:
    return any(claim.fnsku == fnsku for claim in claims)


def _from_ledger_event(
    event: LedgerEvent,
    *,
    category: ClaimCategory,
    quantity: int,
    reason: str,
    snapshot: ClaimSnapshot,
) -> ClaimableItem:
    return ClaimableItem(
        fnsku=event.fnsku,
        asin=event.asin,
        sku=event.sku,
        product_name=event.product_title,
        category=category,
        quantity=quantity,
        estimated_value=estimate_value(snapshot.unit_prices.get(event.fnsku), quantity),
        fulfillment_center=event.fulfillment_center,
        event_date=event.event_date,
        reference_id=event.reference_id,
        reason=reason,
    )


def _from_customer_return(
    customer_return: CustomerReturn,
    *,
    category: ClaimCategory,
    reason: str,
    snapshot: ClaimSnapshot,
) -> ClaimableItem:
    return ClaimableItem(
        fnsku=customer_return.fnsku,
        asin=customer_return.asin,
        sku=customer_return.sku,
        product_name=customer_return.product_name or UNKNOWN_PRODUCT,
        category=category,
        quantity=customer_return.quantity,
        estimated_value=estimate_value(
            snapshot.unit_prices.get(customer_return.fnsku), customer_return.quantity
        ),
        fulfillment_center=customer_return.fulfillment_center_id,
        event_date=customer_return.return_date,
        reference_id=customer_return.order_id,
        reason=reason,
    )


def detect_lost_warehouse(snapshot: ClaimSnapshot) -> list[ClaimableItem]:
    """Adjustments coded as lost (M, 5) that still carry unreconciled units.

    The event status is not consulted: a freshly ingested WAITING event is a
    candidate as soon as its reason code and unreconciled quantity qualify.
    """

    category = ClaimCategory.LOST_WAREHOUSE
    known = snapshot.claims_in(category)
    created: list[ClaimableItem] = []
    for event in snapshot.events_of_type(EventType.ADJUSTMENTS):
        if event.reason not in LOST_REASON_CODES or event.unreconciled_quantity < 1:
            continue
        if any(
            item.fnsku == event.fnsku and item.asin == event.asin
            for item in snapshot.reimbursed_items
        ):
            continue
        if _claimed_since([*known, *created], event.fnsku, start_of_day(event.event_date)):
            continue
        created.append(
            _from_ledger_event(
                event,
                category=category,
                quantity=abs(event.unreconciled_quantity),
                reason=f"Lost in warehouse. Reason: {event.reason}",
                snapshot=snapshot,
            )
        )
    return created


def detect_damaged_warehouse(snapshot: ClaimSnapshot) -> list[ClaimableItem]:
    """Adjustments coded as warehouse damage (D, W), regardless of quantity."""

    category = ClaimCategory.DAMAGED_WAREHOUSE
    known = snapshot.claims_in(category)
    created: list[ClaimableItem] = []
    for event in snapshot.events_of_type(EventType.ADJUSTMENTS):
        if event.reason not in DAMAGED_REASON_CODES:
            continue
        if any(
            item.fnsku == event.fnsku and item.approval_date >= event.event_date
            for item in snapshot.reimbursed_items
        ):
            continue
        if _claimed_since([*known, *created], event.fnsku, start_of_day(event.event_date)):
            continue
        created.append(
            _from_ledger_event(
                event,
                category=category,
                quantity=abs(event.quantity),
                reason=f"Damaged in warehouse. Reason: {event.reason}",
                snapshot=snapshot,
            )
        )
    return created


def detect_refund_without_return(snapshot: ClaimSnapshot) -> list[ClaimableItem]:
    """Refunds issued without the unit coming back.

    Not implemented: detecting these needs order refund data, which no synced
    report provides yet. The pass is kept so the analyzer reports it as run.
    """

    _ = snapshot
    return []


def _reimbursed_for_order(snapshot: ClaimSnapshot, customer_return: CustomerReturn) -> bool:
    return any(
        item.fnsku == customer_return.fnsku and item.amazon_order_id == customer_return.order_id
        for item in snapshot.reimbursed_items
    )


def detect_lost_customer_returns(snapshot: ClaimSnapshot) -> list[ClaimableItem]:
    """Returns marked as restocked that never show up as a stored return receipt."""

    category = ClaimCategory.CUSTOMER_RETURN_NOT_RECEIVED
    known = snapshot.claims_in(category)
    created: list[ClaimableItem] = []
    for customer_return in snapshot.customer_returns:
        if customer_return.status != RETURNED_TO_INVENTORY:
            continue
        if any(
            receipt.fnsku == customer_return.fnsku
            and receipt.event_date >= customer_return.return_date
            for receipt in snapshot.return_receipts
        ):
            continue
        if _reimbursed_for_order(snapshot, customer_return):
            continue
        if _claimed([*known, *created], customer_return.fnsku):
            continue
        created.append(
            _from_customer_return(
                customer_return,
                category=category,
                reason="Customer return not received by Amazon warehouse",
                snapshot=snapshot,
            )
        )
    return created


def detect_damaged_customer_returns(snapshot: ClaimSnapshot) -> list[ClaimableItem]:
    category = ClaimCategory.CUSTOMER_RETURN_DAMAGED
    known = snapshot.claims_in(category)
    created: list[ClaimableItem] = []
    for customer_return in snapshot.customer_returns:
        if customer_return.detailed_disposition != CUSTOMER_DAMAGED:
            continue
        if _reimbursed_for_order(snapshot, customer_return):
            continue
        if _claimed([*known, *created], customer_return.fnsku):
            continue
        created.append(
            _from_customer_return(
                customer_return,
                category=category,
                reason=f"Customer returned item damaged: {customer_return.detailed_disposition}",
                snapshot=snapshot,
            )
        )
    return created


@dataclass(frozen=True, slots=True)
class ClaimPass:
    name: str
    detect: ClaimDetector
    category: ClaimCategory | None = None
    needs_synced_ledger: bool = False


CLAIM_PASSES: tuple[ClaimPass, ...] = (
    ClaimPass("lost_warehouse", detect_lost_warehouse, ClaimCategory.LOST_WAREHOUSE),
    ClaimPass("damaged_warehouse", detect_damaged_warehouse, ClaimCategory.DAMAGED_WAREHOUSE),
    ClaimPass("refund_without_return", detect_refund_without_return),
    ClaimPass(
        "lost_customer_return",
        detect_lost_customer_returns,
        ClaimCategory.CUSTOMER_RETURN_NOT_RECEIVED,
        needs_synced_ledger=True,
    ),
    ClaimPass(
        "damaged_customer_return",
        detect_damaged_customer_returns,
        ClaimCategory.CUSTOMER_RETURN_DAMAGED,
    ),
)
