"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, OperationalError

from reclaimer.adapters.sqlalchemy.mappings import (
    claimable_item_table,
    customer_return_table,
    ledger_event_table,
    reimbursed_item_table,
    return_receipt_table,
    sync_log_table,
)
from reclaimer.domain.errors import DuplicateKeyError, ErrorKind, StoreError
from reclaimer.domain.model import (
    ClaimableItem,
    CustomerReturn,
    LedgerEvent,
    LedgerEventStatus,
    ReimbursedItem,
    ReturnReceipt,
    SyncLog,
    UnsuppressedInventoryRecord,
)
from reclaimer.domain.ports.persistence import Page

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator
    from datetime import datetime
    from uuid import UUID

    from sqlalchemy import ColumnElement, Select
    from sqlalchemy.orm import Session

    from reclaimer.domain.model import LedgerEventKey, ReturnKey, ReturnReceiptKey
    from reclaimer.domain.ports.persistence import ClaimQuery, LedgerEventQuery


@contextmanager
def _store_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except IntegrityError as exc:
        raise DuplicateKeyError(f"{operation}: {exc.orig}") from exc
    except OperationalError as exc:
        raise StoreError(f"{operation}: {exc.orig}", kind=ErrorKind.CONNECTION) from exc


def _matches(column: ColumnElement[Any], value: object) -> ColumnElement[bool]:
    # NULL key parts only match NULL
    return column.is_(None) if value is None else column == value


def _paginate[T](
    session: Session,
    stmt: Select[tuple[T]],
    *,
    order_by: ColumnElement[Any],
    tiebreaker: ColumnElement[Any],
    descending: bool,
    limit: int | None,
    offset: int,
) -> Page[T]:
    count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
    total = session.execute(count_stmt).scalar_one()
    ordered = stmt.order_by(
        order_by.desc() if descending else order_by.asc(),
        tiebreaker.desc() if descending else tiebreaker.asc(),
    )
    if offset:
        ordered = ordered.offset(offset)
    if limit is not None:
        ordered = ordered.limit(limit)
    items = list(session.execute(ordered).scalars())
    return Page(items=items, total=total, limit=limit, offset=offset)


class SqlAlchemyLedgerEventRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: LedgerEvent) -> None:
        with _store_errors("add ledger event"), self.session.begin_nested():
            self.session.add(entity)

    def get(self, event_id: UUID) -> LedgerEvent | None:
        with _store_errors("get ledger event"):
            return self.session.get(LedgerEvent, event_id)

    def get_by_natural_key(self, key: LedgerEventKey) -> LedgerEvent | None:
        columns = ledger_event_table.c
        stmt = (
            select(LedgerEvent)
            .where(columns.fnsku == key.fnsku)
            .where(columns.asin == key.asin)
            .where(columns.event_date == key.event_date)
            .where(columns.event_type == key.event_type)
            .where(_matches(columns.reference_id, key.reference_id))
            .where(_matches(columns.fulfillment_center, key.fulfillment_center))
            .limit(1)
        )
        with _store_errors("look up ledger event"):
            return self.session.execute(stmt).scalar_one_or_none()

    def search(self, query: LedgerEventQuery) -> Page[LedgerEvent]:
        columns = ledger_event_table.c
        stmt = select(LedgerEvent)
        if query.statuses:
            stmt = stmt.where(columns.status.in_(query.statuses))
        if query.event_types:
            stmt = stmt.where(columns.event_type.in_(query.event_types))
        if query.fulfillment_centers:
            stmt = stmt.where(columns.fulfillment_center.in_(query.fulfillment_centers))
        if query.date_from is not None:
            stmt = stmt.where(columns.event_date >= query.date_from)
        if query.date_to is not None:
            stmt = stmt.where(columns.event_date <= query.date_to)
        with _store_errors("search ledger events"):
            return _paginate(
                self.session,
                stmt,
                order_by=columns[query.sort_by],
                tiebreaker=columns.id,
                descending=query.descending,
                limit=query.limit,
                offset=query.offset,
            )

    def delete_resolved_before(self, cutoff: datetime) -> int:
        columns = ledger_event_table.c
        stmt = (
            delete(LedgerEvent)
            .where(columns.status == LedgerEventStatus.RESOLVED)
            .where(columns.updated_at < cutoff)
            .execution_options(synchronize_session="fetch")
        )
        with _store_errors("delete resolved ledger events"):
            result = self.session.execute(stmt)
        return result.rowcount


class SqlAlchemyReimbursedItemRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: ReimbursedItem) -> None:
        self.session.add(entity)

    def get_by_reimbursement_id(self, reimbursement_id: str) -> ReimbursedItem | None:
        stmt = select(ReimbursedItem).where(
            reimbursed_item_table.c.reimbursement_id == reimbursement_id
        )
        with _store_errors("look up reimbursement"):
            return self.session.execute(stmt).scalar_one_or_none()

    def list_all(self) -> list[ReimbursedItem]:
        stmt = select(ReimbursedItem).order_by(reimbursed_item_table.c.approval_date)
        with _store_errors("list reimbursements"):
            return list(self.session.execute(stmt).scalars())


class SqlAlchemyCustomerReturnRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: CustomerReturn) -> None:
        self.session.add(entity)

    def get_by_key(self, key: ReturnKey) -> CustomerReturn | None:
        columns = customer_return_table.c
        stmt = (
            select(CustomerReturn)
            .where(columns.order_id == key.order_id)
            .where(columns.fnsku == key.fnsku)
            .where(columns.return_date == key.return_date)
            .limit(1)
        )
        with _store_errors("look up customer return"):
            return self.session.execute(stmt).scalar_one_or_none()

    def list_all(self) -> list[CustomerReturn]:
        stmt = select(CustomerReturn).order_by(customer_return_table.c.return_date)
        with _store_errors("list customer returns"):
            return list(self.session.execute(stmt).scalars())


class SqlAlchemyReturnReceiptRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: ReturnReceipt) -> None:
        self.session.add(entity)

    def get_by_natural_key(self, key: ReturnReceiptKey) -> ReturnReceipt | None:
        columns = return_receipt_table.c
        stmt = (
            select(ReturnReceipt)
            .where(columns.fnsku == key.fnsku)
            .where(columns.event_date == key.event_date)
            .where(_matches(columns.reference_id, key.reference_id))
            .where(_matches(columns.fulfillment_center, key.fulfillment_center))
            .limit(1)
        )
        with _store_errors("look up return receipt"):
            return self.session.execute(stmt).scalar_one_or_none()

    def list_all(self) -> list[ReturnReceipt]:
        stmt = select(ReturnReceipt).order_by(return_receipt_table.c.event_date)
        with _store_errors("list return receipts"):
            return list(self.session.execute(stmt).scalars())


class SqlAlchemyUnsuppressedInventoryRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def replace_all(self, records: Iterable[UnsuppressedInventoryRecord]) -> int:
        batch = list(records)
        with _store_errors("replace unsuppressed inventory"):
            self.session.execute(
                delete(UnsuppressedInventoryRecord).execution_options(
                    synchronize_session=False
                )
            )
            self.session.add_all(batch)
            self.session.flush()
        return len(batch)

    def list_all(self) -> list[UnsuppressedInventoryRecord]:
        stmt = select(UnsuppressedInventoryRecord)
        with _store_errors("list unsuppressed inventory"):
            return list(self.session.execute(stmt).scalars())


class SqlAlchemyClaimableItemRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: ClaimableItem) -> None:
        self.session.add(entity)

    def get(self, claim_id: UUID) -> ClaimableItem | None:
        with _store_errors("get claimable item"):
            return self.session.get(ClaimableItem, claim_id)

    def search(self, query: ClaimQuery) -> Page[ClaimableItem]:
        columns = claimable_item_table.c
        stmt = select(ClaimableItem)
        if query.categories:
            stmt = stmt.where(columns.category.in_(query.categories))
        if query.statuses:
            stmt = stmt.where(columns.status.in_(query.statuses))
        with _store_errors("search claimable items"):
            return _paginate(
                self.session,
                stmt,
                order_by=columns[query.sort_by],
                tiebreaker=columns.id,
                descending=query.descending,
                limit=query.limit,
                offset=query.offset,
            )

    def list_all(self) -> list[ClaimableItem]:
        stmt = select(ClaimableItem).order_by(claimable_item_table.c.created_at)
        with _store_errors("list claimable items"):
            return list(self.session.execute(stmt).scalars())


class SqlAlchemySyncLogRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: SyncLog) -> None:
        self.session.add(entity)

    def recent(self, limit: int = 20) -> list[SyncLog]:
        stmt = select(SyncLog).order_by(sync_log_table.c.completed_at.desc()).limit(limit)
        with _store_errors("list sync logs"):
            return list(self.session.execute(stmt).scalars())
