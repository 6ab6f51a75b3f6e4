"""Engine lifecycle and the unit of work used by reconciliation passes."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from seatledger.adapters.sqlalchemy.mappings import create_all_tables, start_mappers
from seatledger.adapters.sqlalchemy.repositories import (
    SqlAlchemyAccountRepository,
    SqlAlchemyEventRepository,
    SqlAlchemyInvoiceRepository,
    SqlAlchemyListingRepository,
    SqlAlchemyPurchaseRepository,
    SqlAlchemySaleRepository,
    SqlAlchemyTicketRepository,
)
from seatledger.config.storage import DatabaseConfig, get_database_config
from seatledger.domain.ports import ReconciliationRepositories

if TYPE_CHECKING:
    from sqlite3 import Connection as SQLiteConnection
    from types import TracebackType

    from sqlalchemy.engine import Engine
    from sqlalchemy.pool import ConnectionPoolEntry

log = logging.getLogger(__name__)

SQLITE_BUSY_TIMEOUT_MS = 5000


class StartupError(RuntimeError):
    """Raised when the database layer is used before ``startup()`` or twice without force."""


_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def _sqlite_busy_timeout(
    dbapi_connection: SQLiteConnection, _record: ConnectionPoolEntry
) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute(f"PRAGMA busy_timeout={SQLITE_BUSY_TIMEOUT_MS}")
    cursor.close()


def build_engine(config: DatabaseConfig) -> Engine:
    engine = create_engine(config.uri, echo=config.echo)
    if config.is_sqlite:
        event.listen(engine, "connect", _sqlite_busy_timeout)
    return engine


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Create the engine (unless one is given), map the entities and create missing tables."""

    global _engine, _session_factory  # noqa: PLW0603
    if _engine is not None and not force:
        raise StartupError("Database already started; pass force=True to reconfigure")

    if engine is None:
        config = DatabaseConfig(uri=database_uri) if database_uri else get_database_config()
        engine = build_engine(config)
    start_mappers()
    create_all_tables(engine)
    _engine = engine
    _session_factory = sessionmaker(bind=engine, expire_on_commit=False)
    log.debug(f"Database ready at {engine.url.render_as_string(hide_password=True)}")


def is_started() -> bool:
    return _engine is not None


def shutdown() -> None:
    global _engine, _session_factory  # noqa: PLW0603
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None


def _current_session_factory() -> sessionmaker[Session]:
    if _session_factory is None:
        raise StartupError("Database not started; call startup() before opening a unit of work")
    return _session_factory


class SqlAlchemyReconciliationUnitOfWork:
    """One session per pass; leaving the block without ``commit()`` discards the changes."""

    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        self.session_factory = session_factory or _current_session_factory()
        self._session: Session | None = None
        self._repositories: ReconciliationRepositories | None = None

    def __enter__(self) -> SqlAlchemyReconciliationUnitOfWork:
        if self._session is not None:
            raise StartupError("Unit of work already entered")
        session = self.session_factory()
        self._session = session
        self._repositories = ReconciliationRepositories(
            events=SqlAlchemyEventRepository(session),
            purchases=SqlAlchemyPurchaseRepository(session),
            listings=SqlAlchemyListingRepository(session),
            sales=SqlAlchemySaleRepository(session),
            invoices=SqlAlchemyInvoiceRepository(session),
            tickets=SqlAlchemyTicketRepository(session),
            accounts=SqlAlchemyAccountRepository(session),
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        session = self.session
        try:
            if exc_type is not None:
                session.rollback()
        finally:
            session.close()
            self._session = None
            self._repositories = None
        return False

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work used outside a with block")
        return self._session

    @property
    def repositories(self) -> ReconciliationRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work used outside a with block")
        return self._repositories

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


if TYPE_CHECKING:
    from seatledger.domain.ports import ReconciliationUnitOfWork

    _uow_check: ReconciliationUnitOfWork = SqlAlchemyReconciliationUnitOfWork()
