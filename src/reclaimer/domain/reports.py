"""Request, poll and download provider reports."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from reclaimer.domain.errors import RowParseError, UpstreamProcessingError, UpstreamTimeoutError
from reclaimer.domain.model import ReportStatus

if TYPE_CHECKING:
    from datetime import datetime

    from reclaimer.domain.model import ReportType
    from reclaimer.domain.ports.reports import ReportProvider, ReportRow

log = getLogger(__name__)

DEFAULT_POLL_INTERVAL_SECONDS = 10.0
DEFAULT_POLL_TIMEOUT_SECONDS = 300.0

_FAILED_STATUSES = frozenset({ReportStatus.FATAL, ReportStatus.CANCELLED})

Sleeper = Callable[[float], None]
Monotonic = Callable[[], float]


@dataclass(slots=True)
class ParsedTable:
    rows: list[tuple[int, ReportRow]] = field(default_factory=list)
    rejected: list[RowParseError] = field(default_factory=list)


@dataclass(slots=True)
class FetchedReport:
    """Downloaded report body, split into header-indexed rows."""

    report_type: ReportType
    report_id: str
    document_id: str
    rows: list[tuple[int, ReportRow]]
    rejected: list[RowParseError]


def parse_report_table(text: str, *, report: str) -> ParsedTable:
    """Parse a tab-separated report whose first line holds the column headers.

    Rows are returned with their 1-based data row number. Rows whose field count
    does not match the header are collected in ``rejected`` instead of aborting.
    """

    lines = text.splitlines()
    while lines and not lines[-1].strip():
        lines.pop()
    parsed = ParsedTable()
    if not lines:
        return parsed

    headers = [name.strip() for name in lines[0].lstrip("\ufeff").split("\t")]
    for row_number, line in enumerate(lines[1:], start=1):
        if not line.strip():
            continue
        values = line.split("\t")
        if len(values) != len(headers):
            parsed.rejected.append(
                RowParseError(
                    report,
                    row_number,
                    f"expected {len(headers)} fields, got {len(values)}",
                )
            )
            continue
        parsed.rows.append((row_number, dict(zip(headers, values, strict=True))))
    return parsed


class ReportFetcher:
    """Drive one report through create, poll and download.

    Retries are left to the caller; every failure surfaces as an ``UpstreamError``.
    """

    def __init__(
        self,
        provider: ReportProvider,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
        timeout: float = DEFAULT_POLL_TIMEOUT_SECONDS,
        sleep: Sleeper = time.sleep,
        monotonic: Monotonic = time.monotonic,
    ) -> None:
        self.provider = provider
        self.poll_interval = poll_interval
        self.timeout = timeout
        self._sleep = sleep
        self._monotonic = monotonic

    def fetch(self, report_type: ReportType, start: datetime, end: datetime) -> FetchedReport:
        report_id = self.request(report_type, start, end)
        document_id = self.wait_until_done(report_id)
        text = self.provider.download_report(document_id)
        table = parse_report_table(text, report=report_type.value)
        log.info(
            f"Downloaded {report_type.value}: report={report_id}, rows={len(table.rows)}, "
            f"rejected={len(table.rejected)}"
        )
        return FetchedReport(
            report_type=report_type,
            report_id=report_id,
            document_id=document_id,
            rows=table.rows,
            rejected=table.rejected,
        )

    def request(self, report_type: ReportType, start: datetime, end: datetime) -> str:
        report_id = self.provider.create_report(report_type, start, end)
        if not report_id:
            raise UpstreamProcessingError(f"No report id returned for {report_type.value}")
        log.info(f"Requested {report_type.value} for {start.isoformat()}..{end.isoformat()}")
        return report_id

    def wait_until_done(self, report_id: str) -> str:
        deadline = self._monotonic() + self.timeout
        while True:
            result = self.provider.get_report_status(report_id)
            if result.status is ReportStatus.DONE:
                if not result.document_id:
                    raise UpstreamProcessingError(
                        f"Report {report_id} finished without a document id"
                    )
                return result.document_id
            if result.status in _FAILED_STATUSES:
                raise UpstreamProcessingError(
                    f"Report {report_id} ended with status {result.status.value}"
                )
            if self._monotonic() >= deadline:
                raise UpstreamTimeoutError(
                    f"Report {report_id} not ready after {self.timeout:.0f}s "
                    f"(last status {result.status.value})"
                )
            log.debug(f"Report {report_id} is {result.status.value}; waiting {self.poll_interval}s")
            self._sleep(self.poll_interval)
