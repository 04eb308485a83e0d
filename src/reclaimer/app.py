"""Application entry points wiring the reconciliation engine to its adapters."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from reclaimer.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyReconciliationUnitOfWork,
    is_started,
    startup,
)
from reclaimer.config import get_sync_config
from reclaimer.domain import ledger, lifecycle, reporting
from reclaimer.domain.claims import ClaimAnalyzer
from reclaimer.domain.errors import NotFoundError
from reclaimer.domain.ports.persistence import ClaimQuery, LedgerEventQuery
from reclaimer.domain.ports.unit_of_work import ReconciliationUnitOfWork
from reclaimer.domain.reports import ReportFetcher
from reclaimer.domain.status import refresh_event_statuses
from reclaimer.domain.sync import ReimbursementSyncOrchestrator
from reclaimer.domain.time_windows import TimeWindow, utcnow

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from reclaimer.config import SyncConfig
    from reclaimer.domain.ledger import LedgerStats
    from reclaimer.domain.model import (
        ClaimableItem,
        ClaimStatus,
        LedgerEvent,
        LedgerEventStatus,
        SyncLog,
    )
    from reclaimer.domain.ports.persistence import Page
    from reclaimer.domain.ports.reports import ReportProvider
    from reclaimer.domain.reporting import CategoryCount, CategoryStats, ClaimTicket
    from reclaimer.domain.status import StatusRefreshResult
    from reclaimer.domain.sync import CancellationToken, ReportTranslators, SyncResult
    from reclaimer.domain.time_windows import Clock

UnitOfWorkFactory = Callable[[], ReconciliationUnitOfWork]

log = getLogger(__name__)


def _unit_of_work_factory(factory: UnitOfWorkFactory | None) -> UnitOfWorkFactory:
    if factory is not None:
        return factory
    if not is_started():
        startup()
    return SqlAlchemyReconciliationUnitOfWork


def _default_provider() -> ReportProvider:
    # imported lazily so commands that never talk to the provider need no credentials
    from reclaimer.adapters.spapi import SellingPartnerReportProvider  # noqa: PLC0415

    return SellingPartnerReportProvider()


def _default_translators() -> ReportTranslators:
    from reclaimer.adapters.spapi import build_report_translators  # noqa: PLC0415

    return build_report_translators()


def run_sync(
    start: datetime | None = None,
    end: datetime | None = None,
    *,
    cancellation: CancellationToken | None = None,
    provider: ReportProvider | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    translators: ReportTranslators | None = None,
    config: SyncConfig | None = None,
    clock: Clock = utcnow,
) -> SyncResult:
    """Run the full reimbursement sync over ``[start, end)``.

    Without explicit bounds the window ends ``settle`` days ago and spans
    ``lookback`` days, both taken from ``SyncConfig``.
    """

    sync_config = config or get_sync_config()
    window_start, window_end = TimeWindow(
        start=start,
        end=end,
        lookback=sync_config.lookback,
        settle=sync_config.settle,
    ).resolve(clock=clock)

    effective_uow = _unit_of_work_factory(unit_of_work_factory)
    fetcher = ReportFetcher(
        provider or _default_provider(),
        poll_interval=sync_config.poll_interval_seconds,
        timeout=sync_config.poll_timeout_seconds,
    )
    orchestrator = ReimbursementSyncOrchestrator(
        fetcher,
        effective_uow,
        translators or _default_translators(),
        analyzer=ClaimAnalyzer(effective_uow, clock=clock),
        clock=clock,
        waiting_period=sync_config.waiting_period,
    )
    return orchestrator.run(window_start, window_end, cancellation=cancellation)


def refresh_statuses(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: SyncConfig | None = None,
    clock: Clock = utcnow,
) -> StatusRefreshResult:
    sync_config = config or get_sync_config()
    return refresh_event_statuses(
        unit_of_work_factory=_unit_of_work_factory(unit_of_work_factory),
        clock=clock,
        waiting_period=sync_config.waiting_period,
    )


def list_claimable_items(
    query: ClaimQuery | None = None,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Page[ClaimableItem]:
    with _unit_of_work_factory(unit_of_work_factory)() as uow:
        return uow.repositories.claimable_items.search(query or ClaimQuery())


def update_claim_status(
    claim_id: UUID,
    status: str | ClaimStatus,
    notes: str | None = None,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    clock: Clock = utcnow,
) -> ClaimableItem:
    with _unit_of_work_factory(unit_of_work_factory)() as uow:
        claim = lifecycle.update_claim_status(uow, claim_id, status, notes=notes, clock=clock)
        uow.commit()
    return claim


def get_stats(*, unit_of_work_factory: UnitOfWorkFactory | None = None) -> list[CategoryStats]:
    with _unit_of_work_factory(unit_of_work_factory)() as uow:
        return reporting.get_stats(uow.repositories)


def get_categories(
    *, unit_of_work_factory: UnitOfWorkFactory | None = None
) -> list[CategoryCount]:
    with _unit_of_work_factory(unit_of_work_factory)() as uow:
        return reporting.get_categories(uow.repositories)


def get_claim_tickets(
    query: ClaimQuery | None = None,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[ClaimTicket]:
    with _unit_of_work_factory(unit_of_work_factory)() as uow:
        page = uow.repositories.claimable_items.search(query or ClaimQuery())
        return reporting.to_tickets(page)


def list_ledger_events(
    query: LedgerEventQuery | None = None,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Page[LedgerEvent]:
    with _unit_of_work_factory(unit_of_work_factory)() as uow:
        return uow.repositories.ledger_events.search(query or LedgerEventQuery())


def list_claimable_events(
    *,
    sort_by: str = "event_date",
    descending: bool = True,
    limit: int | None = None,
    offset: int = 0,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Page[LedgerEvent]:
    with _unit_of_work_factory(unit_of_work_factory)() as uow:
        return ledger.list_claimable_events(
            uow.repositories.ledger_events,
            sort_by=sort_by,
            descending=descending,
            limit=limit,
            offset=offset,
        )


def get_ledger_stats(*, unit_of_work_factory: UnitOfWorkFactory | None = None) -> LedgerStats:
    with _unit_of_work_factory(unit_of_work_factory)() as uow:
        return ledger.get_ledger_stats(uow.repositories.ledger_events)


def update_event_status(
    event_id: UUID,
    status: str | LedgerEventStatus,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    clock: Clock = utcnow,
) -> LedgerEvent:
    with _unit_of_work_factory(unit_of_work_factory)() as uow:
        event = lifecycle.update_event_status(uow, event_id, status, clock=clock)
        uow.commit()
    return event


def generate_claim_text(
    event_id: UUID,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> str:
    """Render claim text for a stored ledger event."""

    with _unit_of_work_factory(unit_of_work_factory)() as uow:
        event = uow.repositories.ledger_events.get(event_id)
        if event is None:
            raise NotFoundError("Ledger event", event_id)
        return ledger.generate_claim_text(event)


def cleanup_resolved_events(
    days_old: int | None = None,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: SyncConfig | None = None,
    clock: Clock = utcnow,
) -> int:
    retention = days_old if days_old is not None else (config or get_sync_config()).retention_days
    with _unit_of_work_factory(unit_of_work_factory)() as uow:
        deleted = ledger.cleanup_resolved_events(uow, days_old=retention, clock=clock)
        uow.commit()
    return deleted


def recent_sync_logs(
    limit: int = 20,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[SyncLog]:
    with _unit_of_work_factory(unit_of_work_factory)() as uow:
        return uow.repositories.sync_logs.recent(limit)
