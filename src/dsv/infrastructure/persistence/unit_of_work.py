"""SQLAlchemy unit of work and engine factory."""

from __future__ import annotations

from pathlib import Path

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from dsv.application.unit_of_work import PersistenceError, UnitOfWork
from dsv.infrastructure.persistence.sql_cart_repository import SqlCartRepository
from dsv.infrastructure.persistence.sql_order_repository import SqlOrderRepository
from dsv.infrastructure.persistence.sql_payment_discrepancy_repository import (
    SqlPaymentDiscrepancyRepository,
)
from dsv.infrastructure.persistence.sql_product_repository import SqlProductRepository
from dsv.infrastructure.persistence.tables import Base

SQLITE_BUSY_TIMEOUT = 30


def make_engine(url: str) -> Engine:
    """Create an engine for *url*.

    SQLite ignores ``SELECT ... FOR UPDATE``, so every SQLite transaction is
    opened with ``BEGIN IMMEDIATE`` instead: writers queue on the database
    lock rather than racing between their read and their write.
    """
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite":
        return create_engine(url)

    database = parsed.database
    if not database or database == ":memory:":
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        Path(database).parent.mkdir(parents=True, exist_ok=True)
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False, "timeout": SQLITE_BUSY_TIMEOUT},
        )

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


def create_schema(engine: Engine) -> None:
    Base.metadata.create_all(engine)


def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, expire_on_commit=False)


class SqlAlchemyUnitOfWork(UnitOfWork):

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory
        self._session: Session | None = None

    def __enter__(self) -> SqlAlchemyUnitOfWork:
        self._session = self._session_factory()
        self.orders = SqlOrderRepository(self._session)
        self.products = SqlProductRepository(self._session)
        self.carts = SqlCartRepository(self._session)
        self.discrepancies = SqlPaymentDiscrepancyRepository(self._session)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            super().__exit__(exc_type, exc, tb)
        finally:
            self._session.close()
        if isinstance(exc, SQLAlchemyError):
            raise PersistenceError(str(exc)) from exc

    def commit(self) -> None:
        try:
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise PersistenceError(str(exc)) from exc

    def rollback(self) -> None:
        self._session.rollback()
