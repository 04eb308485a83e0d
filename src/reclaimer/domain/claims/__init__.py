"""Derivation of claimable reimbursement items."""

from __future__ import annotations

from .analyzer import AnalysisResult, ClaimAnalyzer
from .passes import (
    CLAIM_PASSES,
    ClaimPass,
    detect_damaged_customer_returns,
    detect_damaged_warehouse,
    detect_lost_customer_returns,
    detect_lost_warehouse,
    detect_refund_without_return,
    estimate_value,
)
from .snapshot import ClaimSnapshot, latest_unit_prices, load_snapshot

__all__ = [
    "CLAIM_PASSES",
    "AnalysisResult",
    "ClaimAnalyzer",
    "ClaimPass",
    "ClaimSnapshot",
    "detect_damaged_customer_returns",
    "detect_damaged_warehouse",
    "detect_lost_customer_returns",
    "detect_lost_warehouse",
    "detect_refund_without_return",
    "estimate_value",
    "latest_unit_prices",
    "load_snapshot",
]
