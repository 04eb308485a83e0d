"""Ports for persisting reconciliation records."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal, Protocol, get_args, runtime_checkable

from reclaimer.domain.model import (
    ClaimableItem,
    ClaimCategory,
    ClaimStatus,
    CustomerReturn,
    LedgerEvent,
    LedgerEventKey,
    LedgerEventStatus,
    ReimbursedItem,
    ReturnKey,
    ReturnReceipt,
    ReturnReceiptKey,
    SyncLog,
    UnsuppressedInventoryRecord,
)

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime
    from uuid import UUID

type LedgerSortField = Literal[
    "event_date",
    "fnsku",
    "asin",
    "sku",
    "event_type",
    "fulfillment_center",
    "unreconciled_quantity",
]
type ClaimSortField = Literal[
    "created_at",
    "event_date",
    "fnsku",
    "category",
    "quantity",
    "estimated_value",
]

LEDGER_SORT_FIELDS: frozenset[str] = frozenset(get_args(LedgerSortField.__value__))
CLAIM_SORT_FIELDS: frozenset[str] = frozenset(get_args(ClaimSortField.__value__))


@dataclass(frozen=True, slots=True)
class LedgerEventQuery:
    statuses: tuple[LedgerEventStatus, ...] = ()
    event_types: tuple[str, ...] = ()
    fulfillment_centers: tuple[str, ...] = ()
    date_from: datetime | None = None
    date_to: datetime | None = None
    sort_by: LedgerSortField = "event_date"
    descending: bool = True
    limit: int | None = None
    offset: int = 0


@dataclass(frozen=True, slots=True)
class ClaimQuery:
    categories: tuple[ClaimCategory, ...] = ()
    statuses: tuple[ClaimStatus, ...] = ()
    sort_by: ClaimSortField = "created_at"
    descending: bool = True
    limit: int | None = None
    offset: int = 0


@dataclass(slots=True)
class Page[T]:
    items: list[T] = field(default_factory=list)
    total: int = 0
    limit: int | None = None
    offset: int = 0

    @property
    def page(self) -> int:
        if not self.limit:
            return 1
        return self.offset // self.limit + 1

    @property
    def total_pages(self) -> int:
        if not self.limit:
            return 1 if self.total else 0
        return math.ceil(self.total / self.limit)


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent record store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class LedgerEventRepository(Repository[LedgerEvent], Protocol):
    def get(self, event_id: UUID) -> LedgerEvent | None: ...

    def get_by_natural_key(self, key: LedgerEventKey) -> LedgerEvent | None: ...

    def search(self, query: LedgerEventQuery) -> Page[LedgerEvent]: ...

    def delete_resolved_before(self, cutoff: datetime) -> int: ...


@runtime_checkable
class ReimbursedItemRepository(Repository[ReimbursedItem], Protocol):
    def get_by_reimbursement_id(self, reimbursement_id: str) -> ReimbursedItem | None: ...

    def list_all(self) -> list[ReimbursedItem]: ...


@runtime_checkable
class CustomerReturnRepository(Repository[CustomerReturn], Protocol):
    def get_by_key(self, key: ReturnKey) -> CustomerReturn | None: ...

    def list_all(self) -> list[CustomerReturn]: ...


@runtime_checkable
class ReturnReceiptRepository(Repository[ReturnReceipt], Protocol):
    def get_by_natural_key(self, key: ReturnReceiptKey) -> ReturnReceipt | None: ...

    def list_all(self) -> list[ReturnReceipt]: ...


@runtime_checkable
class UnsuppressedInventoryRepository(Protocol):
    """Snapshot store; every sync replaces the previous contents."""

    def replace_all(self, records: Iterable[UnsuppressedInventoryRecord]) -> int: ...

    def list_all(self) -> list[UnsuppressedInventoryRecord]: ...


@runtime_checkable
class ClaimableItemRepository(Repository[ClaimableItem], Protocol):
    def get(self, claim_id: UUID) -> ClaimableItem | None: ...

    def search(self, query: ClaimQuery) -> Page[ClaimableItem]: ...

    def list_all(self) -> list[ClaimableItem]: ...


@runtime_checkable
class SyncLogRepository(Repository[SyncLog], Protocol):
    def recent(self, limit: int = 20) -> list[SyncLog]: ...
