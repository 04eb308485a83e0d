from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

import pytest

from reclaimer.adapters.sqlalchemy.repositories import (
    SqlAlchemyClaimableItemRepository,
    SqlAlchemyCustomerReturnRepository,
    SqlAlchemyLedgerEventRepository,
    SqlAlchemyReimbursedItemRepository,
    SqlAlchemyReturnReceiptRepository,
    SqlAlchemySyncLogRepository,
    SqlAlchemyUnsuppressedInventoryRepository,
)
from reclaimer.domain.errors import DuplicateKeyError
from reclaimer.domain.model import (
    ClaimCategory,
    ClaimStatus,
    LedgerEventStatus,
    SyncLog,
    SyncStatus,
)
from reclaimer.domain.ports.persistence import ClaimQuery, LedgerEventQuery
from tests.helpers.reconciliation import (
    days_ago,
    make_claim,
    make_customer_return,
    make_inventory_record,
    make_ledger_event,
    make_reimbursement,
    make_return_receipt,
)

if TYPE_CHECKING:
    from sqlalchemy.orm import Session


def test_natural_key_lookup_treats_null_parts_as_equal(sqlite_session: Session) -> None:
    repo = SqlAlchemyLedgerEventRepository(sqlite_session)
    event = make_ledger_event(reference_id=None, fulfillment_center=None)
    repo.add(event)
    sqlite_session.flush()

    same_key = make_ledger_event(reference_id=None, fulfillment_center=None).natural_key
    other_key = make_ledger_event(reference_id="REF-1", fulfillment_center=None).natural_key

    found = repo.get_by_natural_key(same_key)
    missing = repo.get_by_natural_key(other_key)

    assert found is event
    assert missing is None


def test_duplicate_natural_key_raises_and_keeps_session_usable(sqlite_session: Session) -> None:
    repo = SqlAlchemyLedgerEventRepository(sqlite_session)
    repo.add(make_ledger_event())
    sqlite_session.flush()

    with pytest.raises(DuplicateKeyError):
        repo.add(make_ledger_event())

    repo.add(make_ledger_event(reference_id="REF-2"))
    sqlite_session.commit()
    assert repo.search(LedgerEventQuery()).total == 2


def test_ledger_search_filters_and_pages(sqlite_session: Session) -> None:
    repo = SqlAlchemyLedgerEventRepository(sqlite_session)
    for index, (status, center) in enumerate(
        [
            (LedgerEventStatus.CLAIMABLE, "PHX7"),
            (LedgerEventStatus.CLAIMABLE, "LGB8"),
            (LedgerEventStatus.CLAIMABLE, "PHX7"),
            (LedgerEventStatus.WAITING, "PHX7"),
        ]
    ):
        repo.add(
            make_ledger_event(
                reference_id=f"REF-{index}",
                status=status,
                fulfillment_center=center,
                unreconciled_quantity=index + 1,
                event_date=days_ago(10 + index),
            )
        )
    sqlite_session.flush()

    page = repo.search(
        LedgerEventQuery(
            statuses=(LedgerEventStatus.CLAIMABLE,),
            fulfillment_centers=("PHX7",),
            sort_by="unreconciled_quantity",
            descending=True,
            limit=1,
        )
    )
    assert page.total == 2
    assert [event.reference_id for event in page.items] == ["REF-2"]

    ranged = repo.search(
        LedgerEventQuery(date_from=days_ago(11.5), date_to=days_ago(9), descending=False)
    )
    assert [event.reference_id for event in ranged.items] == ["REF-1", "REF-0"]

    counted = repo.search(LedgerEventQuery(statuses=(LedgerEventStatus.WAITING,), limit=0))
    assert counted.total == 1
    assert counted.items == []


def test_delete_resolved_before(sqlite_session: Session) -> None:
    repo = SqlAlchemyLedgerEventRepository(sqlite_session)
    stale = make_ledger_event(reference_id="OLD", status=LedgerEventStatus.RESOLVED)
    stale.updated_at = days_ago(100)
    fresh = make_ledger_event(reference_id="NEW", status=LedgerEventStatus.RESOLVED)
    open_event = make_ledger_event(reference_id="OPEN", status=LedgerEventStatus.CLAIMABLE)
    open_event.updated_at = days_ago(100)
    for event in (stale, fresh, open_event):
        repo.add(event)
    sqlite_session.flush()

    deleted = repo.delete_resolved_before(days_ago(90))

    assert deleted == 1
    remaining = repo.search(LedgerEventQuery())
    assert {event.reference_id for event in remaining.items} == {"NEW", "OPEN"}


def test_reimbursements_and_returns_round_trip(sqlite_session: Session) -> None:
    reimbursements = SqlAlchemyReimbursedItemRepository(sqlite_session)
    returns = SqlAlchemyCustomerReturnRepository(sqlite_session)
    reimbursements.add(make_reimbursement(amount_total=Decimal("12.50")))
    customer_return = make_customer_return()
    returns.add(customer_return)
    sqlite_session.commit()

    stored = reimbursements.get_by_reimbursement_id("R-1")
    assert stored is not None
    assert stored.amount_total == Decimal("12.50")
    assert reimbursements.get_by_reimbursement_id("R-404") is None
    assert returns.get_by_key(customer_return.dedup_key) is customer_return
    assert [item.order_id for item in returns.list_all()] == [customer_return.order_id]


def test_return_receipts_match_null_key_parts(sqlite_session: Session) -> None:
    repo = SqlAlchemyReturnReceiptRepository(sqlite_session)
    later = make_return_receipt(event_date=days_ago(5), fulfillment_center=None)
    earlier = make_return_receipt(event_date=days_ago(10))
    repo.add(later)
    repo.add(earlier)
    sqlite_session.commit()

    assert repo.get_by_natural_key(later.natural_key) is later
    assert repo.get_by_natural_key(make_return_receipt(event_date=days_ago(5)).natural_key) is None
    assert repo.list_all() == [earlier, later]


def test_replace_all_swaps_the_inventory_snapshot(sqlite_session: Session) -> None:
    repo = SqlAlchemyUnsuppressedInventoryRepository(sqlite_session)
    repo.replace_all([make_inventory_record(), make_inventory_record(fnsku="X00OTHER")])
    sqlite_session.commit()

    replaced = repo.replace_all([make_inventory_record(fnsku="X00NEW", your_price=Decimal(5))])
    sqlite_session.commit()

    assert replaced == 1
    [record] = repo.list_all()
    assert record.fnsku == "X00NEW"
    assert record.your_price == Decimal("5.00")


def test_claim_search_and_sync_logs(sqlite_session: Session) -> None:
    claims = SqlAlchemyClaimableItemRepository(sqlite_session)
    claims.add(make_claim(estimated_value=Decimal("10.00")))
    claims.add(make_claim(category=ClaimCategory.DAMAGED_WAREHOUSE, status=ClaimStatus.CLAIMED))
    logs = SqlAlchemySyncLogRepository(sqlite_session)
    for status, age in ((SyncStatus.SUCCESS, 2), (SyncStatus.FAILED, 1)):
        logs.add(
            SyncLog(
                sync_type="REIMBURSEMENT_FULL_SYNC",
                start_date=days_ago(90),
                end_date=days_ago(3),
                status=status,
                completed_at=days_ago(age),
            )
        )
    sqlite_session.commit()

    page = claims.search(ClaimQuery(categories=(ClaimCategory.LOST_WAREHOUSE,)))
    assert page.total == 1
    assert page.items[0].estimated_value == Decimal("10.00")
    assert claims.search(ClaimQuery(statuses=(ClaimStatus.CLAIMED,))).total == 1
    assert [entry.status for entry in logs.recent(limit=1)] == [SyncStatus.FAILED]
