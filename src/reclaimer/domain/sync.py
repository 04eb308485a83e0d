"""Full reimbursement sync: four report steps followed by claim analysis."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field, fields
from logging import getLogger
from typing import TYPE_CHECKING

from reclaimer.domain.claims import ClaimAnalyzer
from reclaimer.domain.ingest import EventIngestor, translate_rows
from reclaimer.domain.model import (
    EventType,
    ReportType,
    ReturnReceipt,
    StepStatus,
    SyncLog,
    SyncStatus,
)
from reclaimer.domain.status import WAITING_PERIOD
from reclaimer.domain.time_windows import ensure_aware, utcnow

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime, timedelta

    from reclaimer.domain.model import (
        CustomerReturn,
        LedgerEvent,
        ReimbursedItem,
        UnsuppressedInventoryRecord,
    )
    from reclaimer.domain.ports.reports import RowTranslator
    from reclaimer.domain.ports.unit_of_work import ReconciliationUnitOfWork
    from reclaimer.domain.reports import FetchedReport, ReportFetcher
    from reclaimer.domain.time_windows import Clock

log = getLogger(__name__)

SYNC_TYPE = "REIMBURSEMENT_FULL_SYNC"

# Fields copied onto an already stored reimbursement when it reappears.
_REIMBURSEMENT_FIELDS = (
    "case_id",
    "amazon_order_id",
    "reason",
    "fnsku",
    "asin",
    "sku",
    "product_name",
    "condition",
    "currency_unit",
    "approval_date",
    "amount_per_unit",
    "amount_total",
    "quantity_reimbursed_cash",
    "quantity_reimbursed_inventory",
    "quantity_reimbursed_total",
    "original_reimbursement_id",
    "original_reimbursement_type",
)


class CancellationToken:
    """Cooperative cancellation, checked between sync steps."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass(frozen=True, slots=True)
class ReportTranslators:
    reimbursement: RowTranslator[ReimbursedItem]
    customer_return: RowTranslator[CustomerReturn]
    ledger_event: RowTranslator[LedgerEvent]
    unsuppressed_inventory: RowTranslator[UnsuppressedInventoryRecord]


@dataclass(slots=True)
class StepOutcome:
    name: str
    report_type: ReportType
    status: StepStatus
    report_id: str | None = None
    processed: int = 0
    added: int = 0
    updated: int = 0
    skipped: int = 0
    error: str | None = None


@dataclass(slots=True)
class ProcessedCounts:
    reimbursed: int = 0
    returns: int = 0
    ledger_events: int = 0
    inventory: int = 0
    claimable: int = 0

    def as_dict(self) -> dict[str, int]:
        return {item.name: getattr(self, item.name) for item in fields(self)}


@dataclass(slots=True)
class SyncResult:
    start: datetime
    end: datetime
    status: SyncStatus = SyncStatus.SUCCESS
    steps: list[StepOutcome] = field(default_factory=list)
    processed_counts: ProcessedCounts = field(default_factory=ProcessedCounts)
    errors: list[str] = field(default_factory=list)
    cancelled: bool = False

    @property
    def success(self) -> bool:
        return self.status is not SyncStatus.FAILED

    @property
    def claimable_items_created(self) -> int:
        return self.processed_counts.claimable

    @property
    def failed_steps(self) -> list[str]:
        return [step.name for step in self.steps if step.status is StepStatus.FAILED]


@dataclass(slots=True)
class _StepCounts:
    processed: int = 0
    added: int = 0
    updated: int = 0
    skipped: int = 0


@dataclass(slots=True)
class _RunState:
    ledger_synced: bool = False


@dataclass(frozen=True, slots=True)
class _Step:
    name: str
    report_type: ReportType
    count_key: str
    handler: Callable[[FetchedReport, _RunState], _StepCounts]


class ReimbursementSyncOrchestrator:
    """Sync the four provider reports sequentially, isolating each step's failure."""

    def __init__(
        self,
        fetcher: ReportFetcher,
        unit_of_work_factory: Callable[[], ReconciliationUnitOfWork],
        translators: ReportTranslators,
        *,
        analyzer: ClaimAnalyzer | None = None,
        clock: Clock = utcnow,
        waiting_period: timedelta = WAITING_PERIOD,
    ) -> None:
        self.fetcher = fetcher
        self.unit_of_work_factory = unit_of_work_factory
        self.translators = translators
        self.analyzer = analyzer or ClaimAnalyzer(unit_of_work_factory, clock=clock)
        self._clock = clock
        self._waiting_period = waiting_period
        self.steps: tuple[_Step, ...] = (
            _Step(
                "reimbursements",
                ReportType.REIMBURSEMENTS,
                "reimbursed",
                self._sync_reimbursements,
            ),
            _Step(
                "customer_returns",
                ReportType.CUSTOMER_RETURNS,
                "returns",
                self._sync_customer_returns,
            ),
            _Step(
                "inventory_ledger",
                ReportType.INVENTORY_LEDGER,
                "ledger_events",
                self._sync_ledger,
            ),
            _Step(
                "unsuppressed_inventory",
                ReportType.UNSUPPRESSED_INVENTORY,
                "inventory",
                self._sync_unsuppressed_inventory,
            ),
        )

    def run(
        self,
        start: datetime,
        end: datetime,
        *,
        cancellation: CancellationToken | None = None,
    ) -> SyncResult:
        start_utc = ensure_aware(start)
        end_utc = ensure_aware(end)
        if start_utc is None or end_utc is None or start_utc >= end_utc:
            raise ValueError("Sync window start must be before end")

        log.info(f"Starting reimbursement sync: {start_utc.isoformat()}..{end_utc.isoformat()}")
        result = SyncResult(start=start_utc, end=end_utc)
        state = _RunState()

        for step in self.steps:
            if cancellation is not None and cancellation.cancelled:
                result.cancelled = True
                result.steps.append(
                    StepOutcome(step.name, step.report_type, StepStatus.SKIPPED, error="cancelled")
                )
                continue
            outcome = self._run_step(step, state, start_utc, end_utc)
            result.steps.append(outcome)
            if outcome.error is not None:
                result.errors.append(f"{step.name}: {outcome.error}")
            setattr(result.processed_counts, step.count_key, outcome.processed)

        if cancellation is not None and cancellation.cancelled:
            result.cancelled = True
            log.warning("Sync cancelled; claim analysis skipped")
        else:
            self._analyze(result, state)

        result.status = _overall_status(result)
        self._write_log(result)
        log.info(
            f"Finished reimbursement sync: status={result.status.value}, "
            f"counts={result.processed_counts.as_dict()}, errors={len(result.errors)}"
        )
        return result

    def _run_step(
        self,
        step: _Step,
        state: _RunState,
        start: datetime,
        end: datetime,
    ) -> StepOutcome:
        outcome = StepOutcome(step.name, step.report_type, StepStatus.FAILED)
        try:
            report = self.fetcher.fetch(step.report_type, start, end)
            outcome.report_id = report.report_id
            for rejected in report.rejected:
                log.warning(f"Skipping {rejected}")
            counts = step.handler(report, state)
        except Exception as exc:
            log.exception(f"Sync step {step.name} failed")
            outcome.error = str(exc) or type(exc).__name__
            return outcome
        outcome.status = StepStatus.SUCCESS
        outcome.processed = counts.processed
        outcome.added = counts.added
        outcome.updated = counts.updated
        outcome.skipped = counts.skipped + len(report.rejected)
        log.info(
            f"Sync step {step.name} done: processed={outcome.processed}, "
            f"added={outcome.added}, updated={outcome.updated}, skipped={outcome.skipped}"
        )
        return outcome

    def _analyze(self, result: SyncResult, state: _RunState) -> None:
        try:
            analysis = self.analyzer.run(ledger_synced=state.ledger_synced)
        except Exception as exc:
            log.exception("Claim analysis failed")
            result.errors.append(f"claim_analysis: {exc}")
            return
        result.processed_counts.claimable = analysis.total_created
        result.errors.extend(f"claim_analysis: {error}" for error in analysis.errors)

    def _sync_reimbursements(self, report: FetchedReport, state: _RunState) -> _StepCounts:
        _ = state
        items, skipped = translate_rows(
            report.rows, self.translators.reimbursement, report=report.report_type.value
        )
        counts = _StepCounts(skipped=skipped)
        now = self._clock()
        with self.unit_of_work_factory() as uow:
            repository = uow.repositories.reimbursed_items
            for item in items:
                stored = repository.get_by_reimbursement_id(item.reimbursement_id)
                if stored is None:
                    item.created_at = item.updated_at = now
                    repository.add(item)
                    counts.added += 1
                else:
                    for name in _REIMBURSEMENT_FIELDS:
                        setattr(stored, name, getattr(item, name))
                    stored.updated_at = now
                    counts.updated += 1
                counts.processed += 1
            uow.commit()
        return counts

    def _sync_customer_returns(self, report: FetchedReport, state: _RunState) -> _StepCounts:
        _ = state
        returns, skipped = translate_rows(
            report.rows, self.translators.customer_return, report=report.report_type.value
        )
        counts = _StepCounts(skipped=skipped)
        now = self._clock()
        with self.unit_of_work_factory() as uow:
            repository = uow.repositories.customer_returns
            for customer_return in returns:
                if repository.get_by_key(customer_return.dedup_key) is not None:
                    continue
                customer_return.created_at = customer_return.updated_at = now
                repository.add(customer_return)
                counts.added += 1
            uow.commit()
        counts.processed = counts.added
        return counts

    def _sync_ledger(self, report: FetchedReport, state: _RunState) -> _StepCounts:
        events, skipped = translate_rows(
            report.rows, self.translators.ledger_event, report=report.report_type.value
        )
        with self.unit_of_work_factory() as uow:
            ingestor = EventIngestor(
                uow.repositories.ledger_events,
                clock=self._clock,
                waiting_period=self._waiting_period,
            )
            ingested = ingestor.ingest(events)
            receipts = _store_return_receipts(uow, events, now=self._clock())
            uow.commit()
        state.ledger_synced = True
        log.debug(f"Stored {receipts} new return receipt(s)")
        return _StepCounts(
            processed=ingested.processed,
            added=ingested.created,
            updated=ingested.updated,
            skipped=skipped + ingested.skipped,
        )

    def _sync_unsuppressed_inventory(self, report: FetchedReport, state: _RunState) -> _StepCounts:
        _ = state
        records, skipped = translate_rows(
            report.rows, self.translators.unsuppressed_inventory, report=report.report_type.value
        )
        now = self._clock()
        for record in records:
            record.created_at = record.updated_at = now
        with self.unit_of_work_factory() as uow:
            replaced = uow.repositories.unsuppressed_inventory.replace_all(records)
            uow.commit()
        return _StepCounts(processed=replaced, added=replaced, skipped=skipped)

    def _write_log(self, result: SyncResult) -> None:
        counts = result.processed_counts
        ledger_step = next(
            (step for step in result.steps if step.report_type is ReportType.INVENTORY_LEDGER),
            None,
        )
        entry = SyncLog(
            sync_type=SYNC_TYPE,
            start_date=result.start,
            end_date=result.end,
            status=result.status,
            records_processed=counts.reimbursed + counts.returns + counts.inventory,
            records_added=counts.claimable,
            records_updated=ledger_step.updated if ledger_step is not None else 0,
            error_message="; ".join(result.errors) or None,
            completed_at=self._clock(),
        )
        try:
            with self.unit_of_work_factory() as uow:
                uow.repositories.sync_logs.add(entry)
                uow.commit()
        except Exception:
            log.exception("Failed to record sync log")


def _store_return_receipts(
    uow: ReconciliationUnitOfWork,
    events: list[LedgerEvent],
    *,
    now: datetime,
) -> int:
    repository = uow.repositories.return_receipts
    stored = 0
    for event in events:
        if event.event_type != EventType.CUSTOMER_RETURNS:
            continue
        receipt = ReturnReceipt.from_ledger_event(event)
        if repository.get_by_natural_key(receipt.natural_key) is not None:
            continue
        receipt.created_at = receipt.updated_at = now
        repository.add(receipt)
        stored += 1
    return stored


def _overall_status(result: SyncResult) -> SyncStatus:
    succeeded = sum(1 for step in result.steps if step.status is StepStatus.SUCCESS)
    if succeeded == 0:
        return SyncStatus.FAILED
    if result.errors or result.cancelled:
        return SyncStatus.PARTIAL_SUCCESS
    return SyncStatus.SUCCESS
