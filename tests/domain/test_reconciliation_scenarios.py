"""End-to-end ledger scenarios: ingest a row, then run the claim passes."""

from __future__ import annotations

from reclaimer.domain.claims import ClaimAnalyzer
from reclaimer.domain.ingest import EventIngestor
from reclaimer.domain.model import ClaimCategory, EventType, LedgerEventStatus
from tests.helpers.reconciliation import (
    InMemoryStore,
    days_ago,
    fixed_clock,
    make_ledger_event,
    make_reimbursement,
)


def _ingest_and_analyze(store: InMemoryStore, **row: object) -> None:
    EventIngestor(store.ledger_events, clock=fixed_clock()).ingest([make_ledger_event(**row)])
    ClaimAnalyzer(store.factory(), clock=fixed_clock()).run()


def test_aged_lost_adjustment_becomes_claim(store: InMemoryStore) -> None:
    _ingest_and_analyze(
        store,
        event_type=EventType.ADJUSTMENTS.value,
        quantity=-5,
        unreconciled_quantity=5,
        reason="M",
        event_date=days_ago(10),
    )

    [event] = store.ledger_events.items
    assert event.status is LedgerEventStatus.CLAIMABLE
    [claim] = store.claimable_items.items
    assert claim.category is ClaimCategory.LOST_WAREHOUSE
    assert claim.quantity == 5


def test_recent_lost_adjustment_is_claimed_while_waiting(
    store: InMemoryStore,
) -> None:
    _ingest_and_analyze(
        store,
        event_type=EventType.ADJUSTMENTS.value,
        quantity=-5,
        unreconciled_quantity=5,
        reason="M",
        event_date=days_ago(2),
    )

    [event] = store.ledger_events.items
    assert event.status is LedgerEventStatus.WAITING
    # the lost-warehouse pass looks at reason and unreconciled units, not status
    [claim] = store.claimable_items.items
    assert claim.category is ClaimCategory.LOST_WAREHOUSE
    assert claim.quantity == 5


def test_receipt_is_resolved_and_never_claimed(store: InMemoryStore) -> None:
    _ingest_and_analyze(
        store,
        event_type=EventType.RECEIPTS.value,
        quantity=10,
        unreconciled_quantity=10,
        reason=None,
        event_date=days_ago(30),
    )

    [event] = store.ledger_events.items
    assert event.status is LedgerEventStatus.RESOLVED
    assert store.claimable_items.items == []


def test_lost_warehouse_pass_dedups_across_runs(store: InMemoryStore) -> None:
    store.ledger_events.add(make_ledger_event(reference_id="A"))
    store.ledger_events.add(make_ledger_event(reference_id="B", fnsku="X00SECOND"))
    analyzer = ClaimAnalyzer(store.factory(), clock=fixed_clock())

    analyzer.run()
    after_first = len(store.claimable_items.items)
    analyzer.run()

    assert after_first == 2
    assert len(store.claimable_items.items) == after_first


def test_reimbursed_fnsku_is_never_claimed_again(store: InMemoryStore) -> None:
    store.reimbursed_items.add(make_reimbursement())
    _ingest_and_analyze(store, quantity=-3, unreconciled_quantity=3, event_date=days_ago(15))

    assert store.claimable_items.items == []


def test_negative_unreconciled_adjustment_is_never_claimable(store: InMemoryStore) -> None:
    _ingest_and_analyze(
        store,
        event_type=EventType.ADJUSTMENTS.value,
        quantity=-3,
        unreconciled_quantity=-3,
        reason="M",
        event_date=days_ago(10),
    )

    [event] = store.ledger_events.items
    assert event.status is LedgerEventStatus.RESOLVED
    assert store.claimable_items.items == []
