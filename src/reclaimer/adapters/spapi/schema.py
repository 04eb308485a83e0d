"""Pydantic models for Selling Partner API payloads and report rows."""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from reclaimer.domain.model import ReportStatus

_DATE_FORMATS = ("%m/%d/%Y", "%m/%d/%Y %H:%M:%S", "%d.%m.%Y")


def field_aliases(name: str, *headings: str) -> AliasChoices:
    """Aliases for a report column: kebab-case, then camelCase, then display headings."""

    head, *rest = name.split("-")
    camel = head + "".join(part.capitalize() for part in rest)
    choices = dict.fromkeys((name, camel, *headings))
    return AliasChoices(*choices)


def parse_report_datetime(value: object) -> object:
    if not isinstance(value, str):
        return value
    text = value.strip()
    if not text:
        return None
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        for fmt in _DATE_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)  # noqa: DTZ007
                break
            except ValueError:
                continue
        else:
            raise ValueError(f"unrecognised date {text!r}") from None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _blank_to_zero(value: object) -> object:
    if isinstance(value, str) and not value.strip():
        return 0
    return value


def _parse_decimal(value: object) -> object:
    if not isinstance(value, str):
        return value
    text = value.strip().replace(",", "")
    if not text:
        return None
    try:
        return Decimal(text)
    except InvalidOperation:
        raise ValueError(f"not a number: {value!r}") from None


def _parse_flag(value: object) -> object:
    if isinstance(value, str):
        return value.strip().lower() in {"yes", "y", "true", "1"}
    return value


class SellingPartnerModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


# API payloads -----------------------------------------------------------------


class TokenResponse(SellingPartnerModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int = 3600


class ApiError(SellingPartnerModel):
    code: str
    message: str = ""
    details: str | None = None


class ErrorList(SellingPartnerModel):
    errors: list[ApiError] = Field(default_factory=list)

    def describe(self) -> str:
        return "; ".join(f"{error.code}: {error.message}" for error in self.errors)


class CreateReportResponse(SellingPartnerModel):
    report_id: str | None = Field(default=None, alias="reportId")


class ReportPayload(SellingPartnerModel):
    report_id: str = Field(alias="reportId")
    report_type: str = Field(alias="reportType")
    processing_status: ReportStatus = Field(alias="processingStatus")
    report_document_id: str | None = Field(default=None, alias="reportDocumentId")
    created_time: datetime | None = Field(default=None, alias="createdTime")


class ReportDocumentPayload(SellingPartnerModel):
    report_document_id: str = Field(alias="reportDocumentId")
    url: str
    compression_algorithm: str | None = Field(default=None, alias="compressionAlgorithm")


# Report rows ------------------------------------------------------------------


class ReportRowModel(SellingPartnerModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, str_strip_whitespace=True)


class ReimbursementRow(ReportRowModel):
    approval_date: datetime = Field(validation_alias=field_aliases("approval-date"))
    reimbursement_id: str = Field(
        min_length=1, validation_alias=field_aliases("reimbursement-id", "Reimbursement ID")
    )
    case_id: str | None = Field(default=None, validation_alias=field_aliases("case-id", "Case ID"))
    amazon_order_id: str | None = Field(
        default=None, validation_alias=field_aliases("amazon-order-id", "Amazon Order ID")
    )
    reason: str | None = Field(default=None, validation_alias=field_aliases("reason", "Reason"))
    sku: str = Field(min_length=1, validation_alias=field_aliases("sku", "SKU", "MSKU"))
    fnsku: str = Field(min_length=1, validation_alias=field_aliases("fnsku", "FNSKU"))
    asin: str = Field(min_length=1, validation_alias=field_aliases("asin", "ASIN"))
    product_name: str = Field(
        default="", validation_alias=field_aliases("product-name", "Product Name", "Title")
    )
    condition: str = Field(default="NewItem", validation_alias=field_aliases("condition"))
    currency_unit: str = Field(
        default="USD", validation_alias=field_aliases("currency-unit", "Currency Unit")
    )
    amount_per_unit: Decimal | None = Field(
        default=None, validation_alias=field_aliases("amount-per-unit", "Amount per Unit")
    )
    amount_total: Decimal | None = Field(
        default=None, validation_alias=field_aliases("amount-total", "Amount Total")
    )
    quantity_reimbursed_cash: int = Field(
        default=0, validation_alias=field_aliases("quantity-reimbursed-cash")
    )
    quantity_reimbursed_inventory: int = Field(
        default=0,
        validation_alias=field_aliases("quantity-reimbursed-inventory"),
    )
    quantity_reimbursed_total: int = Field(
        default=0,
        validation_alias=field_aliases("quantity-reimbursed-total"),
    )
    original_reimbursement_id: str | None = Field(
        default=None,
        validation_alias=field_aliases("original-reimbursement-id"),
    )
    original_reimbursement_type: str | None = Field(
        default=None,
        validation_alias=field_aliases("original-reimbursement-type"),
    )

    _parse_approval_date = field_validator("approval_date", mode="before")(parse_report_datetime)
    _parse_amounts = field_validator("amount_per_unit", "amount_total", mode="before")(
        _parse_decimal
    )
    _parse_counts = field_validator(
        "quantity_reimbursed_cash",
        "quantity_reimbursed_inventory",
        "quantity_reimbursed_total",
        mode="before",
    )(_blank_to_zero)
    _normalize_optional = field_validator(
        "case_id",
        "amazon_order_id",
        "reason",
        "original_reimbursement_id",
        "original_reimbursement_type",
        mode="before",
    )(_blank_to_none)


class CustomerReturnRow(ReportRowModel):
    return_date: datetime = Field(validation_alias=field_aliases("return-date", "Return Date"))
    order_id: str = Field(min_length=1, validation_alias=field_aliases("order-id", "Order ID"))
    sku: str = Field(min_length=1, validation_alias=field_aliases("sku", "SKU", "MSKU"))
    asin: str = Field(min_length=1, validation_alias=field_aliases("asin", "ASIN"))
    fnsku: str = Field(min_length=1, validation_alias=field_aliases("fnsku", "FNSKU"))
    product_name: str | None = Field(
        default=None, validation_alias=field_aliases("product-name", "Product Name")
    )
    quantity: int = Field(default=1, validation_alias=field_aliases("quantity", "Quantity"))
    fulfillment_center_id: str | None = Field(
        default=None,
        validation_alias=field_aliases("fulfillment-center-id", "Fulfillment Center ID"),
    )
    detailed_disposition: str | None = Field(
        default=None, validation_alias=field_aliases("detailed-disposition", "Detailed Disposition")
    )
    reason: str | None = Field(default=None, validation_alias=field_aliases("reason", "Reason"))
    status: str | None = Field(default=None, validation_alias=field_aliases("status", "Status"))
    license_plate_number: str | None = Field(
        default=None, validation_alias=field_aliases("license-plate-number", "License Plate Number")
    )
    customer_comments: str | None = Field(
        default=None, validation_alias=field_aliases("customer-comments", "Customer Comments")
    )

    _parse_return_date = field_validator("return_date", mode="before")(parse_report_datetime)
    _normalize_optional = field_validator(
        "product_name",
        "fulfillment_center_id",
        "detailed_disposition",
        "reason",
        "status",
        "license_plate_number",
        "customer_comments",
        mode="before",
    )(_blank_to_none)

    @field_validator("quantity", mode="before")
    @classmethod
    def _default_quantity(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return 1
        return value


class LedgerEventRow(ReportRowModel):
    event_date: datetime = Field(validation_alias=field_aliases("date", "Date"))
    fnsku: str = Field(min_length=1, validation_alias=field_aliases("fnsku", "FNSKU"))
    asin: str = Field(min_length=1, validation_alias=field_aliases("asin", "ASIN"))
    sku: str = Field(min_length=1, validation_alias=field_aliases("msku", "sku", "MSKU", "SKU"))
    product_title: str = Field(default="", validation_alias=field_aliases("title", "Title"))
    event_type: str = Field(
        min_length=1, validation_alias=field_aliases("event-type", "Event Type")
    )
    reference_id: str | None = Field(
        default=None, validation_alias=field_aliases("reference-id", "Reference ID")
    )
    quantity: int = Field(validation_alias=field_aliases("quantity", "Quantity"))
    fulfillment_center: str | None = Field(
        default=None, validation_alias=field_aliases("fulfillment-center", "Fulfillment Center")
    )
    disposition: str | None = Field(
        default=None, validation_alias=field_aliases("disposition", "Disposition")
    )
    reason: str | None = Field(default=None, validation_alias=field_aliases("reason", "Reason"))
    country: str = Field(default="US", validation_alias=field_aliases("country", "Country"))
    reconciled_quantity: int = Field(
        default=0,
        ge=0,
        validation_alias=field_aliases("reconciled-quantity", "Reconciled Quantity"),
    )
    unreconciled_quantity: int = Field(
        default=0,
        ge=0,
        validation_alias=field_aliases("unreconciled-quantity", "Unreconciled Quantity"),
    )
    raw_timestamp: str | None = Field(
        default=None, validation_alias=field_aliases("date-and-time", "Date and Time")
    )

    _parse_event_date = field_validator("event_date", mode="before")(parse_report_datetime)
    _parse_counts = field_validator(
        "reconciled_quantity", "unreconciled_quantity", mode="before"
    )(_blank_to_zero)
    _normalize_optional = field_validator(
        "reference_id",
        "fulfillment_center",
        "disposition",
        "reason",
        "raw_timestamp",
        mode="before",
    )(_blank_to_none)

    @field_validator("country", mode="before")
    @classmethod
    def _default_country(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return "US"
        return value


class UnsuppressedInventoryRow(ReportRowModel):
    sku: str = Field(min_length=1, validation_alias=field_aliases("sku", "SKU"))
    fnsku: str = Field(min_length=1, validation_alias=field_aliases("fnsku", "FNSKU"))
    asin: str = Field(min_length=1, validation_alias=field_aliases("asin", "ASIN"))
    product_name: str | None = Field(
        default=None, validation_alias=field_aliases("product-name", "Product Name")
    )
    condition: str = Field(default="New", validation_alias=field_aliases("condition", "Condition"))
    your_price: Decimal | None = Field(
        default=None, validation_alias=field_aliases("your-price", "Your Price")
    )
    mfn_listing_exists: bool = Field(
        default=False, validation_alias=field_aliases("mfn-listing-exists")
    )
    mfn_fulfillable_quantity: int | None = Field(
        default=None, validation_alias=field_aliases("mfn-fulfillable-quantity")
    )
    afn_listing_exists: bool = Field(
        default=False, validation_alias=field_aliases("afn-listing-exists")
    )
    afn_warehouse_quantity: int = Field(
        default=0, validation_alias=field_aliases("afn-warehouse-quantity")
    )
    afn_fulfillable_quantity: int = Field(
        default=0, validation_alias=field_aliases("afn-fulfillable-quantity")
    )
    afn_unsellable_quantity: int = Field(
        default=0, validation_alias=field_aliases("afn-unsellable-quantity")
    )
    afn_reserved_quantity: int = Field(
        default=0, validation_alias=field_aliases("afn-reserved-quantity")
    )
    afn_total_quantity: int = Field(default=0, validation_alias=field_aliases("afn-total-quantity"))
    per_unit_volume: Decimal | None = Field(
        default=None, validation_alias=field_aliases("per-unit-volume")
    )
    afn_inbound_working_quantity: int = Field(
        default=0, validation_alias=field_aliases("afn-inbound-working-quantity")
    )
    afn_inbound_shipped_quantity: int = Field(
        default=0, validation_alias=field_aliases("afn-inbound-shipped-quantity")
    )
    afn_inbound_receiving_quantity: int = Field(
        default=0, validation_alias=field_aliases("afn-inbound-receiving-quantity")
    )
    afn_researching_quantity: int = Field(
        default=0, validation_alias=field_aliases("afn-researching-quantity")
    )
    afn_reserved_future_supply: int = Field(
        default=0, validation_alias=field_aliases("afn-reserved-future-supply")
    )
    afn_future_supply_buyable: int = Field(
        default=0, validation_alias=field_aliases("afn-future-supply-buyable")
    )

    _parse_decimals = field_validator("your_price", "per_unit_volume", mode="before")(
        _parse_decimal
    )
    _parse_flags = field_validator("mfn_listing_exists", "afn_listing_exists", mode="before")(
        _parse_flag
    )
    _normalize_product_name = field_validator("product_name", mode="before")(_blank_to_none)
    _parse_optional_count = field_validator("mfn_fulfillable_quantity", mode="before")(
        _blank_to_none
    )
    _parse_counts = field_validator(
        "afn_warehouse_quantity",
        "afn_fulfillable_quantity",
        "afn_unsellable_quantity",
        "afn_reserved_quantity",
        "afn_total_quantity",
        "afn_inbound_working_quantity",
        "afn_inbound_shipped_quantity",
        "afn_inbound_receiving_quantity",
        "afn_researching_quantity",
        "afn_reserved_future_supply",
        "afn_future_supply_buyable",
        mode="before",
    )(_blank_to_zero)
