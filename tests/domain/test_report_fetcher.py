from __future__ import annotations

import pytest

from reclaimer.domain.errors import (
    ErrorKind,
    UpstreamProcessingError,
    UpstreamTimeoutError,
)
from reclaimer.domain.model import ReportStatus, ReportType
from reclaimer.domain.reports import ReportFetcher, parse_report_table
from tests.helpers.reconciliation import FakeReportProvider, days_ago


class FakeTimer:
    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds

    def monotonic(self) -> float:
        return self.now


def _fetcher(
    provider: FakeReportProvider, timer: FakeTimer, *, timeout: float = 60.0
) -> ReportFetcher:
    return ReportFetcher(
        provider,
        poll_interval=10.0,
        timeout=timeout,
        sleep=timer.sleep,
        monotonic=timer.monotonic,
    )


def test_fetch_polls_until_done_and_parses_rows() -> None:
    provider = FakeReportProvider(
        {ReportType.REIMBURSEMENTS: "reimbursement-id\tsku\nR-1\tSKU-1\nR-2\tSKU-2\n"},
        pending={ReportType.REIMBURSEMENTS: [ReportStatus.IN_QUEUE, ReportStatus.IN_PROGRESS]},
    )
    timer = FakeTimer()

    report = _fetcher(provider, timer).fetch(ReportType.REIMBURSEMENTS, days_ago(10), days_ago(1))

    assert report.report_id == "report-1"
    assert report.document_id == "doc-report-1"
    assert [row for _, row in report.rows] == [
        {"reimbursement-id": "R-1", "sku": "SKU-1"},
        {"reimbursement-id": "R-2", "sku": "SKU-2"},
    ]
    assert [number for number, _ in report.rows] == [1, 2]
    assert report.rejected == []
    assert timer.sleeps == [10.0, 10.0]
    assert len(provider.status_calls) == 3


def test_fetch_requires_a_report_id() -> None:
    provider = FakeReportProvider({ReportType.CUSTOMER_RETURNS: None})

    with pytest.raises(UpstreamProcessingError) as exc:
        _fetcher(provider, FakeTimer()).fetch(
            ReportType.CUSTOMER_RETURNS, days_ago(10), days_ago(1)
        )

    assert exc.value.kind is ErrorKind.PROCESSING
    assert provider.status_calls == []


@pytest.mark.parametrize("status", [ReportStatus.FATAL, ReportStatus.CANCELLED])
def test_fetch_fails_on_terminal_status(status: ReportStatus) -> None:
    provider = FakeReportProvider(
        {ReportType.INVENTORY_LEDGER: "Date\n"},
        pending={ReportType.INVENTORY_LEDGER: [ReportStatus.IN_PROGRESS, status]},
    )

    with pytest.raises(UpstreamProcessingError, match=status.value):
        _fetcher(provider, FakeTimer()).fetch(
            ReportType.INVENTORY_LEDGER, days_ago(10), days_ago(1)
        )

    assert provider.downloads == []


def test_fetch_times_out_when_report_never_finishes() -> None:
    provider = FakeReportProvider(
        {ReportType.UNSUPPRESSED_INVENTORY: "sku\n"},
        pending={ReportType.UNSUPPRESSED_INVENTORY: [ReportStatus.IN_PROGRESS] * 50},
    )
    timer = FakeTimer()

    with pytest.raises(UpstreamTimeoutError) as exc:
        _fetcher(provider, timer, timeout=30.0).fetch(
            ReportType.UNSUPPRESSED_INVENTORY, days_ago(10), days_ago(1)
        )

    assert exc.value.kind is ErrorKind.TIMEOUT
    assert exc.value.kind.is_transient
    assert timer.now >= 30.0
    assert len(provider.status_calls) == 4


def test_parse_report_table_strips_bom_and_collects_bad_rows() -> None:
    text = "\ufeffsku\tfnsku\tasin\r\nSKU-1\tX1\tB1\r\nbroken\trow\r\n\r\nSKU-2\tX2\tB2\r\n\r\n"

    table = parse_report_table(text, report="GET_FBA_MYI_UNSUPPRESSED_INVENTORY_DATA")

    assert [row for _, row in table.rows] == [
        {"sku": "SKU-1", "fnsku": "X1", "asin": "B1"},
        {"sku": "SKU-2", "fnsku": "X2", "asin": "B2"},
    ]
    assert [number for number, _ in table.rows] == [1, 4]
    assert len(table.rejected) == 1
    assert table.rejected[0].row_number == 2
    assert "expected 3 fields, got 2" in table.rejected[0].reason


def test_parse_report_table_handles_empty_documents() -> None:
    assert parse_report_table("", report="GET_FBA_REIMBURSEMENTS_DATA").rows == []
    assert parse_report_table("sku\tfnsku\n", report="GET_FBA_REIMBURSEMENTS_DATA").rows == []
