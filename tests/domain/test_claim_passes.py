from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from reclaimer.domain.claims import (
    ClaimSnapshot,
    detect_damaged_customer_returns,
    detect_damaged_warehouse,
    detect_lost_customer_returns,
    detect_lost_warehouse,
    detect_refund_without_return,
    estimate_value,
    latest_unit_prices,
)
from reclaimer.domain.model import ClaimCategory, EventType
from tests.helpers.reconciliation import (
    days_ago,
    make_claim,
    make_customer_return,
    make_inventory_record,
    make_ledger_event,
    make_reimbursement,
    make_return_receipt,
)


def test_estimate_value_rounds_to_cents() -> None:
    assert estimate_value(Decimal("19.99"), 3) == Decimal("59.97")
    assert estimate_value(Decimal("0.125"), 1) == Decimal("0.13")
    assert estimate_value(None, 3) is None


def test_latest_unit_prices_uses_most_recent_priced_record() -> None:
    older = make_inventory_record(your_price=Decimal("10.00"), updated_at=days_ago(5))
    newer = make_inventory_record(your_price=Decimal("12.00"), updated_at=days_ago(1))
    unpriced = make_inventory_record(fnsku="X00NOPRICE", your_price=None)

    prices = latest_unit_prices([older, newer, unpriced])

    assert prices == {"X00TEST001": Decimal("12.00")}


def test_lost_warehouse_creates_claim_for_unreconciled_units() -> None:
    event = make_ledger_event(quantity=-5, unreconciled_quantity=5, reason="M")
    snapshot = ClaimSnapshot(
        ledger_events=(event,), unit_prices={"X00TEST001": Decimal("8.00")}
    )

    [claim] = detect_lost_warehouse(snapshot)

    assert claim.category is ClaimCategory.LOST_WAREHOUSE
    assert claim.quantity == 5
    assert claim.estimated_value == Decimal("40.00")
    assert claim.reason == "Lost in warehouse. Reason: M"
    assert claim.fulfillment_center == "PHX7"
    assert claim.reference_id == "REF-1"
    assert claim.event_date == event.event_date


def test_lost_warehouse_requires_lost_reason_and_open_units() -> None:
    snapshot = ClaimSnapshot(
        ledger_events=(
            make_ledger_event(reference_id="A", reason="D"),
            make_ledger_event(reference_id="B", reason="5", unreconciled_quantity=0),
            make_ledger_event(
                reference_id="C",
                event_type=EventType.SHIPMENTS.value,
                reason="M",
            ),
        )
    )

    assert detect_lost_warehouse(snapshot) == []


def test_lost_warehouse_suppressed_by_existing_reimbursement() -> None:
    snapshot = ClaimSnapshot(
        ledger_events=(make_ledger_event(),),
        reimbursed_items=(make_reimbursement(approval_date=days_ago(400)),),
    )

    assert detect_lost_warehouse(snapshot) == []


def test_lost_warehouse_dedups_against_known_and_new_claims() -> None:
    first = make_ledger_event(reference_id="A")
    same_day = make_ledger_event(
        reference_id="B", event_date=first.event_date + timedelta(hours=3)
    )
    later = make_ledger_event(reference_id="C", event_date=days_ago(5))
    other_sku = make_ledger_event(reference_id="D", fnsku="X00OTHER")

    created = detect_lost_warehouse(ClaimSnapshot(ledger_events=(first, same_day, later)))
    assert [claim.reference_id for claim in created] == ["A", "C"]

    known = ClaimSnapshot(
        ledger_events=(first, same_day, later, other_sku),
        claims=(make_claim(event_date=days_ago(5)),),
    )
    assert [claim.fnsku for claim in detect_lost_warehouse(known)] == ["X00OTHER"]


def test_damaged_warehouse_uses_absolute_quantity() -> None:
    event = make_ledger_event(reason="D", quantity=-3, unreconciled_quantity=0)

    [claim] = detect_damaged_warehouse(ClaimSnapshot(ledger_events=(event,)))

    assert claim.category is ClaimCategory.DAMAGED_WAREHOUSE
    assert claim.quantity == 3
    assert claim.estimated_value is None
    assert claim.reason == "Damaged in warehouse. Reason: D"


def test_damaged_warehouse_suppressed_only_by_later_reimbursement() -> None:
    event = make_ledger_event(reason="W", event_date=days_ago(20))
    earlier = make_reimbursement(approval_date=days_ago(40))
    later = make_reimbursement(reimbursement_id="R-2", approval_date=days_ago(10))

    before = ClaimSnapshot(ledger_events=(event,), reimbursed_items=(earlier,))
    after = ClaimSnapshot(ledger_events=(event,), reimbursed_items=(later,))

    assert len(detect_damaged_warehouse(before)) == 1
    assert detect_damaged_warehouse(after) == []


def test_refund_without_return_is_a_placeholder() -> None:
    snapshot = ClaimSnapshot(
        ledger_events=(make_ledger_event(),),
        customer_returns=(make_customer_return(),),
    )

    assert detect_refund_without_return(snapshot) == []


def test_lost_customer_return_without_ledger_receipt() -> None:
    customer_return = make_customer_return(product_name=None)

    [claim] = detect_lost_customer_returns(ClaimSnapshot(customer_returns=(customer_return,)))

    assert claim.category is ClaimCategory.CUSTOMER_RETURN_NOT_RECEIVED
    assert claim.product_name == "Unknown Product"
    assert claim.reference_id == customer_return.order_id
    assert claim.fulfillment_center == "PHX7"
    assert claim.event_date == customer_return.return_date


def test_lost_customer_return_matched_by_receipt() -> None:
    customer_return = make_customer_return(return_date=days_ago(20))
    receipt = make_return_receipt(event_date=days_ago(18))
    stale_receipt = make_return_receipt(event_date=days_ago(25))
    other_fnsku = make_return_receipt(fnsku="X00OTHER", event_date=days_ago(18))

    matched = ClaimSnapshot(return_receipts=(receipt,), customer_returns=(customer_return,))
    unmatched = ClaimSnapshot(
        return_receipts=(stale_receipt, other_fnsku), customer_returns=(customer_return,)
    )

    assert detect_lost_customer_returns(matched) == []
    assert len(detect_lost_customer_returns(unmatched)) == 1


def test_lost_customer_return_ignores_other_statuses_and_reimbursed_orders() -> None:
    pending = make_customer_return(status="Reimbursed")
    reimbursed = make_customer_return(order_id="111-0000000-0000002", fnsku="X00PAID")
    snapshot = ClaimSnapshot(
        customer_returns=(pending, reimbursed),
        reimbursed_items=(
            make_reimbursement(fnsku="X00PAID", amazon_order_id="111-0000000-0000002"),
        ),
    )

    assert detect_lost_customer_returns(snapshot) == []


def test_damaged_customer_return_once_per_fnsku() -> None:
    first = make_customer_return(detailed_disposition="CUSTOMER_DAMAGED")
    second = make_customer_return(
        order_id="111-0000000-0000009", detailed_disposition="CUSTOMER_DAMAGED"
    )
    sellable = make_customer_return(fnsku="X00SELLABLE")

    created = detect_damaged_customer_returns(
        ClaimSnapshot(customer_returns=(first, second, sellable))
    )

    assert len(created) == 1
    assert created[0].category is ClaimCategory.CUSTOMER_RETURN_DAMAGED
    assert created[0].reason == "Customer returned item damaged: CUSTOMER_DAMAGED"

    known = ClaimSnapshot(
        customer_returns=(first,),
        claims=(make_claim(category=ClaimCategory.CUSTOMER_RETURN_DAMAGED),),
    )
    assert detect_damaged_customer_returns(known) == []


def test_claims_in_other_categories_do_not_suppress() -> None:
    snapshot = ClaimSnapshot(
        ledger_events=(make_ledger_event(),),
        claims=(make_claim(category=ClaimCategory.DAMAGED_WAREHOUSE),),
    )

    assert len(detect_lost_warehouse(snapshot)) == 1
