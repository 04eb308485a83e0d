"""Aggregate views over claims and recovered reimbursements."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Final

from reclaimer.domain.model import ClaimCategory, TicketPriority

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime
    from uuid import UUID

    from reclaimer.domain.model import ClaimableItem, ClaimStatus, ReimbursedItem
    from reclaimer.domain.ports.persistence import Page
    from reclaimer.domain.ports.unit_of_work import ReconciliationRepositories

RECOVERED: Final[str] = "RECOVERED"

CATEGORY_LABELS: Final[dict[str, str]] = {
    RECOVERED: "Recovered",
    ClaimCategory.LOST_WAREHOUSE: "Lost in Warehouse",
    ClaimCategory.DAMAGED_WAREHOUSE: "Damaged in Warehouse",
    ClaimCategory.CUSTOMER_RETURN_NOT_RECEIVED: "Customer Return Not Received",
    ClaimCategory.CUSTOMER_RETURN_DAMAGED: "Customer Return Damaged",
}

HIGH_PRIORITY_VALUE = Decimal(500)
MEDIUM_PRIORITY_VALUE = Decimal(100)


@dataclass(frozen=True, slots=True)
class CategoryStats:
    category: str
    item_count: int
    total_quantity: int
    total_value: Decimal
    currency: str


@dataclass(frozen=True, slots=True)
class CategoryCount:
    category: str
    count: int
    label: str


@dataclass(frozen=True, slots=True)
class ClaimTicket:
    ticket_id: UUID
    product_title: str
    sku: str
    asin: str
    status: ClaimStatus
    priority: TicketPriority
    category: ClaimCategory
    estimated_amount: Decimal
    currency: str
    submitted_date: datetime


def category_label(category: str) -> str:
    return CATEGORY_LABELS.get(category, category)


def recovered_stats(items: Iterable[ReimbursedItem]) -> list[CategoryStats]:
    grouped: dict[str, list[ReimbursedItem]] = defaultdict(list)
    for item in items:
        grouped[item.currency_unit].append(item)
    return [
        CategoryStats(
            category=RECOVERED,
            item_count=len(group),
            total_quantity=sum(item.quantity_reimbursed_total for item in group),
            total_value=sum((item.amount_total or Decimal(0) for item in group), Decimal(0)),
            currency=currency,
        )
        for currency, group in sorted(grouped.items())
    ]


def claim_stats(claims: Iterable[ClaimableItem]) -> list[CategoryStats]:
    grouped: dict[tuple[str, str], list[ClaimableItem]] = defaultdict(list)
    for claim in claims:
        grouped[claim.category.value, claim.currency].append(claim)
    return [
        CategoryStats(
            category=category,
            item_count=len(group),
            total_quantity=sum(claim.quantity for claim in group),
            total_value=sum(
                (claim.estimated_value or Decimal(0) for claim in group), Decimal(0)
            ),
            currency=currency,
        )
        for (category, currency), group in sorted(grouped.items())
    ]


def get_stats(repositories: ReconciliationRepositories) -> list[CategoryStats]:
    """Recovered totals per currency, then open claims per category and currency."""

    return [
        *recovered_stats(repositories.reimbursed_items.list_all()),
        *claim_stats(repositories.claimable_items.list_all()),
    ]


def get_categories(repositories: ReconciliationRepositories) -> list[CategoryCount]:
    counts: dict[str, int] = defaultdict(int)
    for claim in repositories.claimable_items.list_all():
        counts[claim.category.value] += 1
    recovered = len(repositories.reimbursed_items.list_all())
    return [
        CategoryCount(RECOVERED, recovered, category_label(RECOVERED)),
        *(
            CategoryCount(category, count, category_label(category))
            for category, count in sorted(counts.items())
        ),
    ]


def determine_priority(estimated_value: Decimal | None) -> TicketPriority:
    value = estimated_value or Decimal(0)
    if value >= HIGH_PRIORITY_VALUE:
        return TicketPriority.HIGH
    if value >= MEDIUM_PRIORITY_VALUE:
        return TicketPriority.MEDIUM
    return TicketPriority.LOW


def to_ticket(claim: ClaimableItem) -> ClaimTicket:
    return ClaimTicket(
        ticket_id=claim.id,
        product_title=claim.product_name,
        sku=claim.sku,
        asin=claim.asin,
        status=claim.status,
        priority=determine_priority(claim.estimated_value),
        category=claim.category,
        estimated_amount=claim.estimated_value or Decimal(0),
        currency=claim.currency,
        submitted_date=claim.event_date,
    )


def to_tickets(page: Page[ClaimableItem]) -> list[ClaimTicket]:
    return [to_ticket(claim) for claim in page.items]
