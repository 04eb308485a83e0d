"""Domain ports (protocols) implemented by adapters."""

from __future__ import annotations

from .persistence import (
    CLAIM_SORT_FIELDS,
    LEDGER_SORT_FIELDS,
    ClaimableItemRepository,
    ClaimQuery,
    ClaimSortField,
    CustomerReturnRepository,
    LedgerEventQuery,
    LedgerEventRepository,
    LedgerSortField,
    Page,
    ReimbursedItemRepository,
    Repository,
    ReturnReceiptRepository,
    SyncLogRepository,
    UnsuppressedInventoryRepository,
)
from .reports import ReportProvider, ReportRow, ReportStatusResult, RowTranslator
from .unit_of_work import (
    ReconciliationRepositories,
    ReconciliationUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "CLAIM_SORT_FIELDS",
    "LEDGER_SORT_FIELDS",
    "ClaimQuery",
    "ClaimSortField",
    "ClaimableItemRepository",
    "CustomerReturnRepository",
    "LedgerEventQuery",
    "LedgerEventRepository",
    "LedgerSortField",
    "Page",
    "ReconciliationRepositories",
    "ReconciliationUnitOfWork",
    "ReimbursedItemRepository",
    "ReportProvider",
    "ReportRow",
    "ReportStatusResult",
    "Repository",
    "RepositoryCollection",
    "ReturnReceiptRepository",
    "RowTranslator",
    "SyncLogRepository",
    "UnitOfWork",
    "UnsuppressedInventoryRepository",
]
