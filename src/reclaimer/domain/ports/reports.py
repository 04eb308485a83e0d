"""Ports for requesting and downloading provider reports."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from datetime import datetime

    from reclaimer.domain.model import ReportStatus, ReportType

type ReportRow = Mapping[str, str]
type RowTranslator[T] = Callable[[ReportRow], T]


@dataclass(frozen=True, slots=True)
class ReportStatusResult:
    status: ReportStatus
    document_id: str | None = None


@runtime_checkable
class ReportProvider(Protocol):
    """Collaborator that generates and serves raw provider reports."""

    def create_report(
        self,
        report_type: ReportType,
        start: datetime,
        end: datetime,
    ) -> str | None: ...

    def get_report_status(self, report_id: str) -> ReportStatusResult: ...

    def download_report(self, document_id: str) -> str: ...
