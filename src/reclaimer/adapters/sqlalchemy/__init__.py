"""SQLAlchemy adapter package for reclaimer."""

from __future__ import annotations

from .mappings import create_all_tables, mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyClaimableItemRepository,
    SqlAlchemyCustomerReturnRepository,
    SqlAlchemyLedgerEventRepository,
    SqlAlchemyReimbursedItemRepository,
    SqlAlchemyReturnReceiptRepository,
    SqlAlchemySyncLogRepository,
    SqlAlchemyUnsuppressedInventoryRepository,
)
from .unit_of_work import (
    SqlAlchemyReconciliationUnitOfWork,
    configured_engine,
    enable_sqlite_transactions,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyClaimableItemRepository",
    "SqlAlchemyCustomerReturnRepository",
    "SqlAlchemyLedgerEventRepository",
    "SqlAlchemyReconciliationUnitOfWork",
    "SqlAlchemyReimbursedItemRepository",
    "SqlAlchemyReturnReceiptRepository",
    "SqlAlchemySyncLogRepository",
    "SqlAlchemyUnsuppressedInventoryRepository",
    "configured_engine",
    "create_all_tables",
    "enable_sqlite_transactions",
    "is_started",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
