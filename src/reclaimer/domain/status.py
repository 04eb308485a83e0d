"""Ledger event lifecycle: initial classification and periodic promotion."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from logging import getLogger
from typing import TYPE_CHECKING

from reclaimer.domain.model import EventType, LedgerEventStatus
from reclaimer.domain.ports.persistence import LedgerEventQuery
from reclaimer.domain.time_windows import utcnow

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from reclaimer.domain.model import LedgerEvent
    from reclaimer.domain.ports.unit_of_work import ReconciliationUnitOfWork
    from reclaimer.domain.time_windows import Clock

log = getLogger(__name__)

WAITING_PERIOD = timedelta(days=7)

# Set only by an operator; automatic recomputation leaves these alone.
OPERATOR_STATUSES: frozenset[LedgerEventStatus] = frozenset(
    {
        LedgerEventStatus.CLAIM_INITIATED,
        LedgerEventStatus.CLAIMED,
        LedgerEventStatus.PAID,
        LedgerEventStatus.INVALID,
    }
)


def classify_event_status(
    *,
    event_type: str,
    quantity: int,
    unreconciled_quantity: int,
    event_date: datetime,
    now: datetime,
    waiting_period: timedelta = WAITING_PERIOD,
) -> LedgerEventStatus:
    """Return the computed status of a ledger event.

    Inbound movements (positive transfers and receipts) and events with no
    outstanding units are resolved; everything else waits out ``waiting_period`` before it becomes
    claimable.
    """

    if event_type == EventType.WHSE_TRANSFERS and quantity > 0:
        return LedgerEventStatus.RESOLVED
    if event_type == EventType.RECEIPTS and quantity > 0:
        return LedgerEventStatus.RESOLVED
    if unreconciled_quantity <= 0:
        return LedgerEventStatus.RESOLVED
    if now - event_date < waiting_period:
        return LedgerEventStatus.WAITING
    return LedgerEventStatus.CLAIMABLE


def classify_event(
    event: LedgerEvent,
    *,
    now: datetime,
    waiting_period: timedelta = WAITING_PERIOD,
) -> LedgerEventStatus:
    return classify_event_status(
        event_type=event.event_type,
        quantity=event.quantity,
        unreconciled_quantity=event.unreconciled_quantity,
        event_date=event.event_date,
        now=now,
        waiting_period=waiting_period,
    )


def promoted_status(
    event: LedgerEvent,
    *,
    now: datetime,
    waiting_period: timedelta = WAITING_PERIOD,
) -> LedgerEventStatus | None:
    """Return the forward transition due for ``event``, or ``None``."""

    if event.status is LedgerEventStatus.WAITING:
        if event.unreconciled_quantity <= 0:
            return LedgerEventStatus.RESOLVED
        if event.event_date <= now - waiting_period:
            return LedgerEventStatus.CLAIMABLE
        return None
    if event.status is LedgerEventStatus.CLAIMABLE and event.unreconciled_quantity <= 0:
        return LedgerEventStatus.RESOLVED
    return None


@dataclass(slots=True)
class StatusRefreshResult:
    updated: int = 0
    waiting_to_claimable: int = 0
    claimable_to_resolved: int = 0
    waiting_to_resolved: int = 0


def refresh_event_statuses(
    *,
    unit_of_work_factory: Callable[[], ReconciliationUnitOfWork],
    clock: Clock = utcnow,
    waiting_period: timedelta = WAITING_PERIOD,
) -> StatusRefreshResult:
    """Promote WAITING and CLAIMABLE events whose conditions changed."""

    now = clock()
    result = StatusRefreshResult()
    with unit_of_work_factory() as uow:
        candidates = uow.repositories.ledger_events.search(
            LedgerEventQuery(
                statuses=(LedgerEventStatus.WAITING, LedgerEventStatus.CLAIMABLE),
                sort_by="event_date",
                descending=False,
            )
        )
        for event in candidates.items:
            target = promoted_status(event, now=now, waiting_period=waiting_period)
            if target is None:
                continue
            if event.status is LedgerEventStatus.WAITING:
                if target is LedgerEventStatus.CLAIMABLE:
                    result.waiting_to_claimable += 1
                else:
                    result.waiting_to_resolved += 1
            else:
                result.claimable_to_resolved += 1
            event.status = target
            event.updated_at = now
            result.updated += 1
        uow.commit()

    log.info(
        f"Status refresh: updated={result.updated}, "
        f"waiting->claimable={result.waiting_to_claimable}, "
        f"claimable->resolved={result.claimable_to_resolved}"
    )
    return result
