"""Ledger event ingestion with natural-key deduplication."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from reclaimer.domain.errors import DuplicateKeyError, RowParseError
from reclaimer.domain.model import EventType
from reclaimer.domain.status import OPERATOR_STATUSES, WAITING_PERIOD, classify_event
from reclaimer.domain.time_windows import utcnow

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import timedelta

    from reclaimer.domain.model import LedgerEvent
    from reclaimer.domain.ports.persistence import LedgerEventRepository
    from reclaimer.domain.ports.reports import ReportRow, RowTranslator
    from reclaimer.domain.time_windows import Clock

log = getLogger(__name__)

ELIGIBLE_EVENT_TYPES: frozenset[str] = frozenset(
    {
        EventType.SHIPMENTS,
        EventType.WHSE_TRANSFERS,
        EventType.ADJUSTMENTS,
        EventType.RECEIPTS,
    }
)

# A change in any of these marks a stored event as stale.
TRACKED_FIELDS = (
    "quantity",
    "reconciled_quantity",
    "unreconciled_quantity",
    "disposition",
    "product_title",
)
_REFRESHED_FIELDS = (*TRACKED_FIELDS, "sku", "reason", "country", "raw_timestamp")


class IngestOutcome(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    IGNORED = "ignored"
    SKIPPED = "skipped"


@dataclass(slots=True)
class IngestResult:
    processed: int = 0
    created: int = 0
    updated: int = 0
    skipped: int = 0
    ignored: int = 0

    def record(self, outcome: IngestOutcome) -> None:
        match outcome:
            case IngestOutcome.CREATED:
                self.created += 1
            case IngestOutcome.UPDATED:
                self.updated += 1
            case IngestOutcome.IGNORED:
                self.ignored += 1
                return
            case IngestOutcome.SKIPPED:
                self.skipped += 1
                return
            case IngestOutcome.UNCHANGED:
                pass
        self.processed += 1


def is_eligible(event_type: str, quantity: int) -> bool:
    """Return whether a ledger row describes a movement worth tracking."""

    if event_type not in ELIGIBLE_EVENT_TYPES:
        return False
    if event_type in (EventType.ADJUSTMENTS, EventType.SHIPMENTS):
        return quantity < 0
    if event_type == EventType.RECEIPTS:
        return quantity > 0
    return True


def translate_rows[T](
    rows: Iterable[tuple[int, ReportRow]],
    translator: RowTranslator[T],
    *,
    report: str,
) -> tuple[list[T], int]:
    """Translate numbered rows, logging and counting the ones that fail to parse."""

    records: list[T] = []
    skipped = 0
    for row_number, row in rows:
        try:
            records.append(translator(row))
        except RowParseError as exc:
            skipped += 1
            log.warning(f"Skipping {report} row {row_number}: {exc.reason}")
    return records, skipped


def has_changed(stored: LedgerEvent, incoming: LedgerEvent) -> bool:
    return any(getattr(stored, name) != getattr(incoming, name) for name in TRACKED_FIELDS)


class EventIngestor:
    """Create or refresh ledger events, keyed by their natural key."""

    def __init__(
        self,
        repository: LedgerEventRepository,
        *,
        clock: Clock = utcnow,
        waiting_period: timedelta = WAITING_PERIOD,
    ) -> None:
        self.repository = repository
        self._clock = clock
        self._waiting_period = waiting_period

    def ingest(self, events: Iterable[LedgerEvent]) -> IngestResult:
        result = IngestResult()
        for event in events:
            result.record(self.ingest_one(event))
        return result

    def ingest_one(self, incoming: LedgerEvent) -> IngestOutcome:
        if not is_eligible(incoming.event_type, incoming.quantity):
            return IngestOutcome.IGNORED

        now = self._clock()
        stored = self.repository.get_by_natural_key(incoming.natural_key)
        if stored is None:
            incoming.status = classify_event(
                incoming, now=now, waiting_period=self._waiting_period
            )
            incoming.created_at = now
            incoming.updated_at = now
            try:
                self.repository.add(incoming)
            except DuplicateKeyError as exc:
                log.warning(f"Ledger event already stored, skipping: {exc}")
                return IngestOutcome.SKIPPED
            return IngestOutcome.CREATED

        if not has_changed(stored, incoming):
            return IngestOutcome.UNCHANGED

        for name in _REFRESHED_FIELDS:
            setattr(stored, name, getattr(incoming, name))
        if stored.status not in OPERATOR_STATUSES:
            stored.status = classify_event(stored, now=now, waiting_period=self._waiting_period)
        stored.updated_at = now
        return IngestOutcome.UPDATED
