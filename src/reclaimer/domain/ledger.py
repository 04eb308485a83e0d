"""Ledger event queries, claim text and retention."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal
from logging import getLogger
from typing import TYPE_CHECKING, cast

from reclaimer.domain.model import LedgerEvent, LedgerEventStatus
from reclaimer.domain.ports.persistence import LEDGER_SORT_FIELDS, LedgerEventQuery
from reclaimer.domain.time_windows import utcnow

if TYPE_CHECKING:
    from reclaimer.domain.model import ClaimableItem
    from reclaimer.domain.ports.persistence import LedgerEventRepository, LedgerSortField, Page
    from reclaimer.domain.ports.unit_of_work import ReconciliationUnitOfWork
    from reclaimer.domain.time_windows import Clock

log = getLogger(__name__)

DEFAULT_RETENTION_DAYS = 90
UNKNOWN_FULFILLMENT_CENTER = "Unknown"


def generate_claim_text(subject: LedgerEvent | ClaimableItem) -> str:
    """Render the case text an operator pastes into a reimbursement request."""

    if isinstance(subject, LedgerEvent):
        quantity = abs(subject.unreconciled_quantity)
    else:
        quantity = abs(subject.quantity)
    center = subject.fulfillment_center or UNKNOWN_FULFILLMENT_CENTER
    return (
        f"FNSKU {subject.fnsku} (ASIN {subject.asin}) lost in FC {center} "
        f"on {subject.event_date.date().isoformat()}. "
        f"Quantity unreconciled: {quantity}. Please review and reimburse."
    )


def list_claimable_events(
    repository: LedgerEventRepository,
    *,
    sort_by: str = "event_date",
    descending: bool = True,
    limit: int | None = None,
    offset: int = 0,
) -> Page[LedgerEvent]:
    if sort_by not in LEDGER_SORT_FIELDS:
        raise ValueError(
            f"Cannot sort by {sort_by!r}; expected one of: {', '.join(sorted(LEDGER_SORT_FIELDS))}"
        )
    return repository.search(
        LedgerEventQuery(
            statuses=(LedgerEventStatus.CLAIMABLE,),
            sort_by=cast("LedgerSortField", sort_by),
            descending=descending,
            limit=limit,
            offset=offset,
        )
    )


@dataclass(slots=True)
class LedgerStats:
    total_claimable_units: int = 0
    total_waiting_units: int = 0
    total_resolved: int = 0
    total_claimed: int = 0
    total_paid: int = 0
    claimable_events: int = 0
    waiting_events: int = 0
    # valuation needs cost data that no report provides
    total_estimated_value: Decimal = Decimal(0)


def _count(repository: LedgerEventRepository, status: LedgerEventStatus) -> int:
    return repository.search(LedgerEventQuery(statuses=(status,), limit=0)).total


def get_ledger_stats(repository: LedgerEventRepository) -> LedgerStats:
    claimable = repository.search(LedgerEventQuery(statuses=(LedgerEventStatus.CLAIMABLE,)))
    waiting = repository.search(LedgerEventQuery(statuses=(LedgerEventStatus.WAITING,)))
    return LedgerStats(
        total_claimable_units=sum(abs(event.unreconciled_quantity) for event in claimable.items),
        total_waiting_units=sum(abs(event.unreconciled_quantity) for event in waiting.items),
        total_resolved=_count(repository, LedgerEventStatus.RESOLVED),
        total_claimed=_count(repository, LedgerEventStatus.CLAIMED),
        total_paid=_count(repository, LedgerEventStatus.PAID),
        claimable_events=claimable.total,
        waiting_events=waiting.total,
    )


def cleanup_resolved_events(
    uow: ReconciliationUnitOfWork,
    *,
    days_old: int = DEFAULT_RETENTION_DAYS,
    clock: Clock = utcnow,
) -> int:
    """Delete RESOLVED events not touched for ``days_old`` days."""

    if days_old < 0:
        raise ValueError("days_old must be non-negative")
    cutoff = clock() - timedelta(days=days_old)
    deleted = uow.repositories.ledger_events.delete_resolved_before(cutoff)
    log.info(f"Removed {deleted} resolved ledger event(s) older than {cutoff.date().isoformat()}")
    return deleted


__all__ = [
    "DEFAULT_RETENTION_DAYS",
    "LedgerStats",
    "cleanup_resolved_events",
    "generate_claim_text",
    "get_ledger_stats",
    "list_claimable_events",
]
