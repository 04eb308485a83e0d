from __future__ import annotations

import argparse
from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

from reclaimer import app as app_module
from reclaimer.domain.model import (
    ClaimCategory,
    ClaimStatus,
    ReportType,
    StepStatus,
    SyncStatus,
)
from reclaimer.domain.ports.persistence import ClaimQuery, Page
from reclaimer.domain.sync import StepOutcome, SyncResult
from reclaimer.ui import cli
from tests.helpers.reconciliation import make_claim


def _sync_result(status: SyncStatus) -> SyncResult:
    return SyncResult(
        start=datetime(2025, 1, 1, tzinfo=UTC),
        end=datetime(2025, 1, 2, tzinfo=UTC),
        status=status,
        steps=[
            StepOutcome(
                name="reimbursements",
                report_type=ReportType.REIMBURSEMENTS,
                status=StepStatus.SUCCESS if status is not SyncStatus.FAILED else StepStatus.FAILED,
            )
        ],
    )


def test_sync_with_explicit_window(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_sync(start: datetime | None, end: datetime | None) -> SyncResult:
        captured.update(start=start, end=end)
        return _sync_result(SyncStatus.SUCCESS)

    monkeypatch.setattr(app_module, "run_sync", fake_sync)

    cli.main(["sync", "--start", "2025-01-01T03:00:00+03:00", "--end", "2025-01-02T00:00:00Z"])

    assert captured["start"] == datetime(2025, 1, 1, 0, 0, tzinfo=UTC)
    assert captured["end"] == datetime(2025, 1, 2, 0, 0, tzinfo=UTC)


def test_sync_defaults_leave_window_to_the_app(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_sync(start: datetime | None, end: datetime | None) -> SyncResult:
        captured.update(start=start, end=end)
        return _sync_result(SyncStatus.PARTIAL_SUCCESS)

    monkeypatch.setattr(app_module, "run_sync", fake_sync)

    cli.main(["sync"])

    assert captured == {"start": None, "end": None}


def test_failed_sync_exits_with_one(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(app_module, "run_sync", lambda *_: _sync_result(SyncStatus.FAILED))

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["sync"])

    assert excinfo.value.code == 1


def test_invalid_timestamp_exits_with_two(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(app_module, "run_sync", lambda *_: pytest.fail("sync must not run"))

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["sync", "--start", "not-a-date"])

    assert excinfo.value.code == 2


def test_lookback_days_anchor_at_end() -> None:
    args = argparse.Namespace(start=None, end="2025-01-10T00:00:00Z", lookback_days=2.5)

    start, end = cli._compute_time_bounds(args)  # noqa: SLF001  # type: ignore[reportPrivateUsage]

    assert end == datetime(2025, 1, 10, tzinfo=UTC)
    assert start == datetime(2025, 1, 7, 12, tzinfo=UTC)


def test_lookback_days_anchor_at_settled_now(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("RECLAIMER_SETTLE_DAYS", raising=False)
    now = datetime(2025, 6, 30, tzinfo=UTC)
    args = argparse.Namespace(start=None, end=None, lookback_days=1)

    start, end = cli._compute_time_bounds(args, now_provider=lambda: now)  # noqa: SLF001  # type: ignore[reportPrivateUsage]

    assert end == now - timedelta(days=3)
    assert start == end - timedelta(days=1)


@pytest.mark.parametrize(
    "args",
    [
        argparse.Namespace(start=None, end=None, lookback_days=0),
        argparse.Namespace(start="2025-01-02", end="2025-01-01", lookback_days=None),
    ],
)
def test_invalid_windows_are_rejected(args: argparse.Namespace) -> None:
    with pytest.raises(ValueError):  # noqa: PT011
        cli._compute_time_bounds(args)  # noqa: SLF001  # type: ignore[reportPrivateUsage]


def test_claims_list_builds_query(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    captured: list[ClaimQuery] = []
    claim = make_claim()

    def fake_list(query: ClaimQuery) -> Page:
        captured.append(query)
        return Page(items=[claim], total=1, limit=query.limit)

    monkeypatch.setattr(app_module, "list_claimable_items", fake_list)

    cli.main(
        [
            "claims",
            "list",
            "--category",
            "lost_warehouse",
            "--status",
            "pending",
            "--sort-by",
            "estimated_value",
            "--asc",
            "--limit",
            "10",
        ]
    )

    [query] = captured
    assert query.categories == (ClaimCategory.LOST_WAREHOUSE,)
    assert query.statuses == (ClaimStatus.PENDING,)
    assert query.sort_by == "estimated_value"
    assert query.descending is False
    assert query.limit == 10
    output = capsys.readouterr().out
    assert str(claim.id) in output
    assert "page 1/1, 1 total" in output


def test_unknown_category_exits_with_two(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(app_module, "list_claimable_items", lambda _: pytest.fail("must not run"))

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["claims", "list", "--category", "misplaced"])

    assert excinfo.value.code == 2


def test_set_status_with_bad_uuid_exits_with_two() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["claims", "set-status", "not-a-uuid", "CLAIMED"])

    assert excinfo.value.code == 2


def test_set_status_passes_parsed_values(monkeypatch: pytest.MonkeyPatch) -> None:
    claim = make_claim()
    captured: dict[str, object] = {}

    def fake_update(claim_id: object, status: ClaimStatus, notes: str | None) -> object:
        captured.update(claim_id=claim_id, status=status, notes=notes)
        claim.status = status
        return claim

    monkeypatch.setattr(app_module, "update_claim_status", fake_update)

    cli.main(["claims", "set-status", str(claim.id), "reimbursed", "--notes", "paid out"])

    assert captured == {"claim_id": claim.id, "status": ClaimStatus.REIMBURSED, "notes": "paid out"}


def test_unexpected_errors_exit_with_one(monkeypatch: pytest.MonkeyPatch) -> None:
    def explode(_: object) -> str:
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(app_module, "generate_claim_text", explode)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["ledger", "claim-text", str(uuid4())])

    assert excinfo.value.code == 1


def test_cleanup_forwards_retention(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    captured: list[int | None] = []

    def fake_cleanup(days_old: int | None) -> int:
        captured.append(days_old)
        return 4

    monkeypatch.setattr(app_module, "cleanup_resolved_events", fake_cleanup)

    cli.main(["cleanup", "--days-old", "30"])

    assert captured == [30]
    assert "deleted 4" in capsys.readouterr().out
