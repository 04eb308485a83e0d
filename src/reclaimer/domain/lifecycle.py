"""Operator-driven status transitions for claims and ledger events."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from reclaimer.domain.errors import InvalidStatusError, NotFoundError
from reclaimer.domain.model import ClaimStatus, LedgerEventStatus
from reclaimer.domain.time_windows import utcnow

if TYPE_CHECKING:
    from uuid import UUID

    from reclaimer.domain.model import ClaimableItem, LedgerEvent
    from reclaimer.domain.ports.unit_of_work import ReconciliationUnitOfWork
    from reclaimer.domain.time_windows import Clock

log = getLogger(__name__)


def parse_claim_status(value: str | ClaimStatus) -> ClaimStatus:
    try:
        return ClaimStatus(value)
    except ValueError:
        raise InvalidStatusError(value, tuple(ClaimStatus)) from None


def parse_event_status(value: str | LedgerEventStatus) -> LedgerEventStatus:
    try:
        return LedgerEventStatus(value)
    except ValueError:
        raise InvalidStatusError(value, tuple(LedgerEventStatus)) from None


def update_claim_status(
    uow: ReconciliationUnitOfWork,
    claim_id: UUID,
    status: str | ClaimStatus,
    *,
    notes: str | None = None,
    clock: Clock = utcnow,
) -> ClaimableItem:
    """Move a claim to ``status``; any transition is allowed.

    The submission and reimbursement dates are stamped the first time the claim
    enters CLAIMED or REIMBURSED respectively.
    """

    target = parse_claim_status(status)
    claim = uow.repositories.claimable_items.get(claim_id)
    if claim is None:
        raise NotFoundError("Claimable item", claim_id)

    now = clock()
    previous = claim.status
    claim.status = target
    claim.updated_at = now
    if notes is not None:
        claim.notes = notes
    if target is ClaimStatus.CLAIMED and claim.claim_submitted_date is None:
        claim.claim_submitted_date = now
    if target is ClaimStatus.REIMBURSED and claim.reimbursement_date is None:
        claim.reimbursement_date = now
    log.info(f"Claim {claim_id}: {previous.value} -> {target.value}")
    return claim


def update_event_status(
    uow: ReconciliationUnitOfWork,
    event_id: UUID,
    status: str | LedgerEventStatus,
    *,
    clock: Clock = utcnow,
) -> LedgerEvent:
    target = parse_event_status(status)
    event = uow.repositories.ledger_events.get(event_id)
    if event is None:
        raise NotFoundError("Ledger event", event_id)
    previous = event.status
    event.status = target
    event.updated_at = clock()
    log.info(f"Ledger event {event_id}: {previous.value} -> {target.value}")
    return event
