"""Public interface for the Selling Partner API adapter."""

from __future__ import annotations

from .client import SellingPartnerReportProvider, should_cache_payload
from .translator import (
    build_report_translators,
    parse_customer_return,
    parse_ledger_event,
    parse_reimbursement,
    parse_unsuppressed_inventory,
)

__all__ = [
    "SellingPartnerReportProvider",
    "build_report_translators",
    "parse_customer_return",
    "parse_ledger_event",
    "parse_reimbursement",
    "parse_unsuppressed_inventory",
    "should_cache_payload",
]
