# ruff: noqa: T201

from __future__ import annotations

import argparse
import logging
import sys
from datetime import UTC, datetime, timedelta
from signal import SIGINT, signal
from typing import TYPE_CHECKING
from uuid import UUID

from dotenv import load_dotenv

from reclaimer import app
from reclaimer.config import configure_logging, get_sync_config
from reclaimer.domain.lifecycle import parse_claim_status, parse_event_status
from reclaimer.domain.model import ClaimCategory, SyncStatus
from reclaimer.domain.ports.persistence import (
    CLAIM_SORT_FIELDS,
    LEDGER_SORT_FIELDS,
    ClaimQuery,
    LedgerEventQuery,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence
    from types import FrameType

    from reclaimer.domain.model import ClaimableItem, LedgerEvent
    from reclaimer.domain.ports.persistence import Page

log = logging.getLogger(__name__)


def _add_paging(
    parser: argparse.ArgumentParser, *, sort_fields: Iterable[str], default: str
) -> None:
    parser.add_argument(
        "--sort-by",
        choices=sorted(sort_fields),
        default=default,
        help="Sort field (default: %(default)s)",
    )
    parser.add_argument("--asc", action="store_true", help="Sort ascending instead of descending")
    parser.add_argument("--limit", type=int, default=50, help="Page size (default: %(default)s)")
    parser.add_argument("--offset", type=int, default=0, help="Rows to skip")


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile FBA inventory reimbursements")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    sync = subparsers.add_parser("sync", help="Fetch reports and derive claimable items")
    sync.add_argument("--start", type=str, help="ISO-8601 timestamp (UTC), inclusive")
    sync.add_argument("--end", type=str, help="ISO-8601 timestamp (UTC), exclusive")
    sync.add_argument(
        "--lookback-days",
        type=float,
        help="Relative window length in days, anchored at --end or the default end",
    )

    subparsers.add_parser("refresh-statuses", help="Promote waiting and claimable ledger events")

    claims = subparsers.add_parser("claims", help="Claimable item commands")
    claims_sub = claims.add_subparsers(dest="claims_command", required=True)
    claims_list = claims_sub.add_parser("list", help="List claimable items")
    claims_list.add_argument(
        "--category", action="append", default=[], help="Filter by category (repeatable)"
    )
    claims_list.add_argument(
        "--status", action="append", default=[], help="Filter by status (repeatable)"
    )
    _add_paging(claims_list, sort_fields=CLAIM_SORT_FIELDS, default="created_at")
    claims_set = claims_sub.add_parser("set-status", help="Change the status of a claim")
    claims_set.add_argument("claim_id", type=str)
    claims_set.add_argument("status", type=str)
    claims_set.add_argument("--notes", type=str, help="Operator notes stored on the claim")
    claims_tickets = claims_sub.add_parser("tickets", help="List claims as prioritised tickets")
    claims_tickets.add_argument("--limit", type=int, default=50)

    ledger = subparsers.add_parser("ledger", help="Inventory ledger commands")
    ledger_sub = ledger.add_subparsers(dest="ledger_command", required=True)
    ledger_list = ledger_sub.add_parser("list", help="List stored ledger events")
    ledger_list.add_argument("--status", action="append", default=[])
    ledger_list.add_argument("--event-type", action="append", default=[])
    ledger_list.add_argument("--fc", action="append", default=[], help="Fulfillment center")
    ledger_list.add_argument("--from", dest="date_from", type=str, help="ISO-8601 lower bound")
    ledger_list.add_argument("--to", dest="date_to", type=str, help="ISO-8601 upper bound")
    _add_paging(ledger_list, sort_fields=LEDGER_SORT_FIELDS, default="event_date")
    ledger_claimable = ledger_sub.add_parser("claimable", help="List CLAIMABLE ledger events")
    _add_paging(ledger_claimable, sort_fields=LEDGER_SORT_FIELDS, default="event_date")
    ledger_set = ledger_sub.add_parser("set-status", help="Override a ledger event status")
    ledger_set.add_argument("event_id", type=str)
    ledger_set.add_argument("status", type=str)
    ledger_text = ledger_sub.add_parser("claim-text", help="Print reimbursement claim text")
    ledger_text.add_argument("event_id", type=str)
    ledger_sub.add_parser("stats", help="Summarise ledger event statuses")

    subparsers.add_parser("stats", help="Summarise claims and recovered reimbursements")

    cleanup = subparsers.add_parser("cleanup", help="Delete old RESOLVED ledger events")
    cleanup.add_argument(
        "--days-old",
        type=int,
        help="Retention in days (defaults to RECLAIMER_RETENTION_DAYS or 90)",
    )

    sync_logs = subparsers.add_parser("sync-logs", help="Show recent sync runs")
    sync_logs.add_argument("--limit", type=int, default=20)

    return parser.parse_args(list(argv))


def _parse_iso_datetime(value: str) -> datetime:
    try:
        normalized = value.strip()
        if normalized.endswith("Z"):
            normalized = normalized[:-1] + "+00:00"
        dt = datetime.fromisoformat(normalized)
    except ValueError as exc:
        raise ValueError(f"Invalid ISO timestamp: {value}") from exc
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _parse_uuid(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError as exc:
        raise ValueError(f"Invalid UUID: {value}") from exc


def _parse_category(value: str) -> ClaimCategory:
    try:
        return ClaimCategory(value.upper())
    except ValueError as exc:
        allowed = ", ".join(ClaimCategory)
        raise ValueError(f"Invalid category {value!r}; expected one of: {allowed}") from exc


def _compute_time_bounds(
    args: argparse.Namespace,
    *,
    now_provider: Callable[[], datetime] = _utcnow,
) -> tuple[datetime | None, datetime | None]:
    start = _parse_iso_datetime(args.start) if args.start else None
    end = _parse_iso_datetime(args.end) if args.end else None

    if args.lookback_days is not None:
        if args.lookback_days <= 0:
            raise ValueError("Lookback days must be positive")
        if start is None:
            anchor = end or now_provider() - get_sync_config().settle
            start = anchor - timedelta(days=args.lookback_days)
            end = anchor

    if start and end and start >= end:
        raise ValueError("Time window start must be before end")

    return start, end


def _claim_query(args: argparse.Namespace) -> ClaimQuery:
    return ClaimQuery(
        categories=tuple(_parse_category(value) for value in args.category),
        statuses=tuple(parse_claim_status(value.upper()) for value in args.status),
        sort_by=args.sort_by,
        descending=not args.asc,
        limit=args.limit,
        offset=args.offset,
    )


def _ledger_query(args: argparse.Namespace) -> LedgerEventQuery:
    return LedgerEventQuery(
        statuses=tuple(parse_event_status(value.upper()) for value in args.status),
        event_types=tuple(args.event_type),
        fulfillment_centers=tuple(args.fc),
        date_from=_parse_iso_datetime(args.date_from) if args.date_from else None,
        date_to=_parse_iso_datetime(args.date_to) if args.date_to else None,
        sort_by=args.sort_by,
        descending=not args.asc,
        limit=args.limit,
        offset=args.offset,
    )


def _print_page_footer[T](page: Page[T]) -> None:
    print(f"-- page {page.page}/{max(page.total_pages, 1)}, {page.total} total")


def _print_claims(page: Page[ClaimableItem]) -> None:
    for claim in page.items:
        value = "-"
        if claim.estimated_value is not None:
            value = f"{claim.estimated_value} {claim.currency}"
        print(
            f"{claim.id}\t{claim.category.value}\t{claim.status.value}\t{claim.fnsku}\t"
            f"{claim.quantity}\t{value}\t{claim.event_date.date().isoformat()}"
        )
    _print_page_footer(page)


def _print_events(page: Page[LedgerEvent]) -> None:
    for event in page.items:
        print(
            f"{event.id}\t{event.event_date.date().isoformat()}\t{event.event_type}\t"
            f"{event.fnsku}\t{event.quantity}\t{event.unreconciled_quantity}\t"
            f"{event.fulfillment_center or '-'}\t{event.status.value}"
        )
    _print_page_footer(page)


def _run_sync(args: argparse.Namespace, start: datetime | None, end: datetime | None) -> int:
    _ = args
    result = app.run_sync(start, end)
    for step in result.steps:
        detail = f" ({step.error})" if step.error else ""
        print(
            f"{step.name}: {step.status.value} processed={step.processed} "
            f"added={step.added} updated={step.updated} skipped={step.skipped}{detail}"
        )
    print(f"claimable items created: {result.claimable_items_created}")
    print(f"status: {result.status.value}")
    return 1 if result.status is SyncStatus.FAILED else 0


def _run_claims(args: argparse.Namespace) -> int:
    match args.claims_command:
        case "list":
            _print_claims(app.list_claimable_items(_claim_query(args)))
        case "set-status":
            claim = app.update_claim_status(
                _parse_uuid(args.claim_id), parse_claim_status(args.status.upper()), args.notes
            )
            print(f"{claim.id}\t{claim.status.value}")
        case "tickets":
            for ticket in app.get_claim_tickets(ClaimQuery(limit=args.limit)):
                print(
                    f"{ticket.ticket_id}\t{ticket.priority.value}\t{ticket.status.value}\t"
                    f"{ticket.sku}\t{ticket.estimated_amount}\t{ticket.product_title}"
                )
        case _:
            raise ValueError(f"Unsupported claims command: {args.claims_command}")
    return 0


def _run_ledger(args: argparse.Namespace) -> int:
    match args.ledger_command:
        case "list":
            _print_events(app.list_ledger_events(_ledger_query(args)))
        case "claimable":
            _print_events(
                app.list_claimable_events(
                    sort_by=args.sort_by,
                    descending=not args.asc,
                    limit=args.limit,
                    offset=args.offset,
                )
            )
        case "set-status":
            event = app.update_event_status(
                _parse_uuid(args.event_id), parse_event_status(args.status.upper())
            )
            print(f"{event.id}\t{event.status.value}")
        case "claim-text":
            print(app.generate_claim_text(_parse_uuid(args.event_id)))
        case "stats":
            stats = app.get_ledger_stats()
            print(
                f"claimable events: {stats.claimable_events} "
                f"({stats.total_claimable_units} units)"
            )
            print(f"waiting events: {stats.waiting_events} ({stats.total_waiting_units} units)")
            print(f"resolved: {stats.total_resolved}")
            print(f"claimed: {stats.total_claimed}")
            print(f"paid: {stats.total_paid}")
        case _:
            raise ValueError(f"Unsupported ledger command: {args.ledger_command}")
    return 0


def _dispatch(args: argparse.Namespace, start: datetime | None, end: datetime | None) -> int:
    match args.command:
        case "sync":
            return _run_sync(args, start, end)
        case "refresh-statuses":
            refreshed = app.refresh_statuses()
            print(
                f"updated={refreshed.updated} "
                f"waiting->claimable={refreshed.waiting_to_claimable} "
                f"waiting->resolved={refreshed.waiting_to_resolved} "
                f"claimable->resolved={refreshed.claimable_to_resolved}"
            )
        case "claims":
            return _run_claims(args)
        case "ledger":
            return _run_ledger(args)
        case "stats":
            for row in app.get_stats():
                print(
                    f"{row.category}\t{row.item_count}\t{row.total_quantity}\t"
                    f"{row.total_value} {row.currency}"
                )
        case "cleanup":
            deleted = app.cleanup_resolved_events(args.days_old)
            print(f"deleted {deleted} resolved ledger event(s)")
        case "sync-logs":
            for entry in app.recent_sync_logs(args.limit):
                print(
                    f"{entry.completed_at.isoformat()}\t{entry.status.value}\t"
                    f"processed={entry.records_processed} added={entry.records_added} "
                    f"updated={entry.records_updated}\t{entry.error_message or ''}"
                )
        case _:
            raise ValueError(f"Unsupported command: {args.command}")
    return 0


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)
    try:
        start, end = (None, None)
        if parsed_args.command == "sync":
            start, end = _compute_time_bounds(parsed_args)
        if parsed_args.command == "claims" and parsed_args.claims_command == "list":
            _claim_query(parsed_args)
        if parsed_args.command == "ledger" and parsed_args.ledger_command == "list":
            _ledger_query(parsed_args)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        exit_code = _dispatch(parsed_args, start, end)
    except ValueError:
        log.exception("Invalid request")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error")
        sys.exit(1)
    if exit_code:
        sys.exit(exit_code)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
