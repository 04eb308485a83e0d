"""Translate Selling Partner report rows into domain records."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import ValidationError

from reclaimer.domain.errors import RowParseError
from reclaimer.domain.model import (
    CustomerReturn,
    LedgerEvent,
    ReimbursedItem,
    ReportType,
    UnsuppressedInventoryRecord,
)
from reclaimer.domain.sync import ReportTranslators

from .schema import (
    CustomerReturnRow,
    LedgerEventRow,
    ReimbursementRow,
    ReportRowModel,
    UnsuppressedInventoryRow,
)

if TYPE_CHECKING:
    from reclaimer.domain.ports.reports import ReportRow


def _describe(exc: ValidationError) -> str:
    problems: list[str] = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "row"
        problems.append(f"{location}: {error['msg']}")
    return "; ".join(problems)


def _validate[TRow: ReportRowModel](
    model: type[TRow], row: ReportRow, report: ReportType
) -> TRow:
    try:
        return model.model_validate(dict(row))
    except ValidationError as exc:
        raise RowParseError(report.value, None, _describe(exc)) from exc


def parse_reimbursement(row: ReportRow) -> ReimbursedItem:
    payload = _validate(ReimbursementRow, row, ReportType.REIMBURSEMENTS)
    return ReimbursedItem(
        reimbursement_id=payload.reimbursement_id,
        case_id=payload.case_id,
        amazon_order_id=payload.amazon_order_id,
        reason=payload.reason,
        fnsku=payload.fnsku,
        asin=payload.asin,
        sku=payload.sku,
        product_name=payload.product_name,
        condition=payload.condition,
        currency_unit=payload.currency_unit,
        approval_date=payload.approval_date,
        amount_per_unit=payload.amount_per_unit,
        amount_total=payload.amount_total,
        quantity_reimbursed_cash=payload.quantity_reimbursed_cash,
        quantity_reimbursed_inventory=payload.quantity_reimbursed_inventory,
        quantity_reimbursed_total=payload.quantity_reimbursed_total,
        original_reimbursement_id=payload.original_reimbursement_id,
        original_reimbursement_type=payload.original_reimbursement_type,
    )


def parse_customer_return(row: ReportRow) -> CustomerReturn:
    payload = _validate(CustomerReturnRow, row, ReportType.CUSTOMER_RETURNS)
    return CustomerReturn(
        order_id=payload.order_id,
        fnsku=payload.fnsku,
        asin=payload.asin,
        sku=payload.sku,
        product_name=payload.product_name,
        return_date=payload.return_date,
        quantity=payload.quantity,
        fulfillment_center_id=payload.fulfillment_center_id,
        detailed_disposition=payload.detailed_disposition,
        reason=payload.reason,
        status=payload.status,
        license_plate_number=payload.license_plate_number,
        customer_comments=payload.customer_comments,
    )


def parse_ledger_event(row: ReportRow) -> LedgerEvent:
    payload = _validate(LedgerEventRow, row, ReportType.INVENTORY_LEDGER)
    return LedgerEvent(
        fnsku=payload.fnsku,
        asin=payload.asin,
        sku=payload.sku,
        product_title=payload.product_title,
        event_date=payload.event_date,
        event_type=payload.event_type,
        reference_id=payload.reference_id,
        quantity=payload.quantity,
        fulfillment_center=payload.fulfillment_center,
        disposition=payload.disposition,
        reason=payload.reason,
        reconciled_quantity=payload.reconciled_quantity,
        unreconciled_quantity=payload.unreconciled_quantity,
        country=payload.country,
        raw_timestamp=payload.raw_timestamp,
    )


def parse_unsuppressed_inventory(row: ReportRow) -> UnsuppressedInventoryRecord:
    payload = _validate(UnsuppressedInventoryRow, row, ReportType.UNSUPPRESSED_INVENTORY)
    return UnsuppressedInventoryRecord(**payload.model_dump())


def build_report_translators() -> ReportTranslators:
    return ReportTranslators(
        reimbursement=parse_reimbursement,
        customer_return=parse_customer_return,
        ledger_event=parse_ledger_event,
        unsuppressed_inventory=parse_unsuppressed_inventory,
    )
