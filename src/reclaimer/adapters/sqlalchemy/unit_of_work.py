"""SQLAlchemy-backed unit of work for the reconciliation store."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Any, Literal

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from reclaimer.adapters.sqlalchemy.mappings import start_mappers
from reclaimer.adapters.sqlalchemy.migrations import upgrade_head
from reclaimer.adapters.sqlalchemy.repositories import (
    SqlAlchemyClaimableItemRepository,
    SqlAlchemyCustomerReturnRepository,
    SqlAlchemyLedgerEventRepository,
    SqlAlchemyReimbursedItemRepository,
    SqlAlchemyReturnReceiptRepository,
    SqlAlchemySyncLogRepository,
    SqlAlchemyUnsuppressedInventoryRepository,
)
from reclaimer.config import default_database_uri
from reclaimer.domain.ports.unit_of_work import ReconciliationRepositories, RepositoryCollection

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Connection, Engine

log = getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when a SQLAlchemy unit of work is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    _engine: Engine | None = None
    _session_factory: sessionmaker[Session] | None = None

    @property
    def engine(self) -> Engine | None:
        return self._engine

    @engine.setter
    def engine(self, value: Engine | None) -> None:
        self._session_factory = None
        self._engine = value

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._engine is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call reclaimer.adapters.sqlalchemy."
                "unit_of_work.startup() before requesting a unit of work."
            )
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        return self._session_factory


_STATE = _AdapterState()


def _disable_pysqlite_begin(dbapi_connection: Any, connection_record: object) -> None:
    _ = connection_record
    dbapi_connection.isolation_level = None


def _begin_sqlite_transaction(connection: Connection) -> None:
    connection.exec_driver_sql("BEGIN")


def enable_sqlite_transactions(engine: Engine) -> None:
    """Let SQLAlchemy emit BEGIN on SQLite connections.

    pysqlite defers BEGIN until the first DML statement, so a SAVEPOINT would open
    the outer transaction and its RELEASE would commit it.
    """

    if engine.dialect.name != "sqlite":
        return
    if event.contains(engine, "begin", _begin_sqlite_transaction):
        return
    event.listen(engine, "connect", _disable_pysqlite_begin)
    event.listen(engine, "begin", _begin_sqlite_transaction)


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Initialise the engine, run migrations, and prepare the session factory."""

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )

    resolved_engine = engine or create_engine(
        database_uri or default_database_uri(), future=True
    )
    log.info(f"Starting SQLAlchemy adapter on {resolved_engine.url.render_as_string()}")
    enable_sqlite_transactions(resolved_engine)
    start_mappers()
    upgrade_head(engine=resolved_engine)
    _STATE.engine = resolved_engine


def configured_engine() -> Engine | None:
    """Return the engine currently managed by the adapter (if any)."""

    return _STATE.engine


def is_started() -> bool:
    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the managed engine and reset state."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None


class BaseSqlAlchemyUnitOfWork[TRepositories: RepositoryCollection](ABC):
    """Generic SQLAlchemy unit of work with pluggable repository collections."""

    def __init__(self) -> None:
        self.session_factory: sessionmaker[Session] = _STATE.session_factory
        self._session: Session | None = None

    @abstractmethod
    def _build_repositories(self, session: Session) -> TRepositories: ...

    def __enter__(self) -> BaseSqlAlchemyUnitOfWork[TRepositories]:
        self.session = self.session_factory()
        self._repositories = self._build_repositories(self.session)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self.rollback()
        self.session.close()
        self.session = None
        return False

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    @property
    def repositories(self) -> TRepositories:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._repositories

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session

    @session.setter
    def session(self, session: Session | None) -> None:
        if self._session is not None and session is not None:
            raise StartupError("Unit of work session already initialised")
        self._session = session


class SqlAlchemyReconciliationUnitOfWork(BaseSqlAlchemyUnitOfWork[ReconciliationRepositories]):
    """Unit of work spanning every reconciliation repository."""

    def _build_repositories(self, session: Session) -> ReconciliationRepositories:
        return ReconciliationRepositories(
            ledger_events=SqlAlchemyLedgerEventRepository(session),
            reimbursed_items=SqlAlchemyReimbursedItemRepository(session),
            customer_returns=SqlAlchemyCustomerReturnRepository(session),
            return_receipts=SqlAlchemyReturnReceiptRepository(session),
            unsuppressed_inventory=SqlAlchemyUnsuppressedInventoryRepository(session),
            claimable_items=SqlAlchemyClaimableItemRepository(session),
            sync_logs=SqlAlchemySyncLogRepository(session),
        )


if TYPE_CHECKING:
    from reclaimer.domain.ports.unit_of_work import ReconciliationUnitOfWork

    _uow_check: ReconciliationUnitOfWork = SqlAlchemyReconciliationUnitOfWork()
