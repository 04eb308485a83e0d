"""Read-only view of the store that the claim passes evaluate."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from reclaimer.domain.model import EventType
from reclaimer.domain.ports.persistence import LedgerEventQuery

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from decimal import Decimal

    from reclaimer.domain.model import (
        ClaimableItem,
        ClaimCategory,
        CustomerReturn,
        LedgerEvent,
        ReimbursedItem,
        ReturnReceipt,
        UnsuppressedInventoryRecord,
    )
    from reclaimer.domain.ports.unit_of_work import ReconciliationRepositories


@dataclass(frozen=True, slots=True)
class ClaimSnapshot:
    ledger_events: tuple[LedgerEvent, ...] = ()
    reimbursed_items: tuple[ReimbursedItem, ...] = ()
    customer_returns: tuple[CustomerReturn, ...] = ()
    return_receipts: tuple[ReturnReceipt, ...] = ()
    claims: tuple[ClaimableItem, ...] = ()
    unit_prices: Mapping[str, Decimal] = field(default_factory=dict)

    def events_of_type(self, event_type: str) -> list[LedgerEvent]:
        return [event for event in self.ledger_events if event.event_type == event_type]

    def claims_in(self, category: ClaimCategory) -> list[ClaimableItem]:
        return [claim for claim in self.claims if claim.category is category]


def latest_unit_prices(records: Iterable[UnsuppressedInventoryRecord]) -> dict[str, Decimal]:
    """Map fnsku to the most recently recorded listing price."""

    by_fnsku: dict[str, list[UnsuppressedInventoryRecord]] = defaultdict(list)
    for record in records:
        if record.your_price is not None:
            by_fnsku[record.fnsku].append(record)
    prices: dict[str, Decimal] = {}
    for fnsku, priced in by_fnsku.items():
        latest = max(priced, key=lambda record: record.updated_at)
        if latest.your_price is not None:
            prices[fnsku] = latest.your_price
    return prices


def load_snapshot(repositories: ReconciliationRepositories) -> ClaimSnapshot:
    stored = repositories.ledger_events.search(
        LedgerEventQuery(
            event_types=(EventType.ADJUSTMENTS,),
            sort_by="event_date",
            descending=False,
        )
    )
    return ClaimSnapshot(
        ledger_events=tuple(stored.items),
        reimbursed_items=tuple(repositories.reimbursed_items.list_all()),
        customer_returns=tuple(repositories.customer_returns.list_all()),
        return_receipts=tuple(repositories.return_receipts.list_all()),
        claims=tuple(repositories.claimable_items.list_all()),
        unit_prices=latest_unit_prices(repositories.unsuppressed_inventory.list_all()),
    )
