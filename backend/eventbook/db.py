# backend/eventbook/db.py
import logging
from typing import AsyncIterator

from fastapi import Request
from sqlalchemy import event, inspect, text
from sqlalchemy.engine.url import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from eventbook.models import Base

logger = logging.getLogger(__name__)

# connection execution option set by write paths before their first statement
WRITE_INTENT_OPTION = "eventbook_write_intent"

# plain backend name -> async DBAPI used with SQLAlchemy asyncio
ASYNC_DRIVERS = {
    "postgresql": "asyncpg",
    "mysql": "aiomysql",
    "sqlite": "aiosqlite",
}


def ensure_async_driver(url: str) -> str:
    """
    Ensure the URL uses an async DBAPI for SQLAlchemy asyncio.
    If the URL already names a driver (contains '+'), return as-is.
    Plain 'postgresql://', 'mysql://' and 'sqlite://' URLs get the matching async driver.
    """
    parsed = make_url(url)
    if "+" in parsed.drivername:
        return url
    backend = parsed.get_backend_name()
    driver = ASYNC_DRIVERS.get(backend)
    if driver is None:
        return url
    return url.replace(parsed.drivername, f"{backend}+{driver}", 1)


def _install_sqlite_locking(engine: AsyncEngine) -> None:
    """
    SQLite has no row locks. Transactions that claimed write intent start with
    BEGIN IMMEDIATE, so writers are serialized on the database lock instead of the
    event row. Reads use a plain deferred BEGIN; WAL keeps them from blocking commits.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # stop the driver from emitting its own deferred BEGIN
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        if conn.get_execution_options().get(WRITE_INTENT_OPTION):
            conn.exec_driver_sql("BEGIN IMMEDIATE")
        else:
            conn.exec_driver_sql("BEGIN")


class Database:
    """Owns the engine and session factory for one application instance."""

    def __init__(self, url: str, pool_size: int = 10, max_overflow: int = 20, echo: bool = False):
        self.url = ensure_async_driver(url)
        parsed = make_url(self.url)
        options = {"echo": echo}
        if parsed.get_backend_name() != "sqlite":
            options.update(pool_size=pool_size, max_overflow=max_overflow, pool_pre_ping=True)
        self.engine: AsyncEngine = create_async_engine(self.url, **options)
        if parsed.get_backend_name() == "sqlite":
            _install_sqlite_locking(self.engine)
        self.sessionmaker = async_sessionmaker(bind=self.engine, class_=AsyncSession, expire_on_commit=False)

    @classmethod
    def from_settings(cls, settings) -> "Database":
        return cls(
            settings.database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            echo=settings.db_echo,
        )

    async def create_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def ping(self) -> dict:
        """Round-trip to the database and report whether the events table exists."""
        async with self.engine.connect() as conn:
            ok = (await conn.execute(text("SELECT 1"))).scalar_one() == 1
            has_events = await conn.run_sync(lambda sync_conn: inspect(sync_conn).has_table("events"))
        return {"db": ok, "tables": {"events": has_events}}

    async def dispose(self) -> None:
        await self.engine.dispose()


async def get_session(request: Request) -> AsyncIterator[AsyncSession]:
    database: Database = request.app.state.database
    async with database.sessionmaker() as session:
        yield session


async def end_implicit_transaction(session: AsyncSession) -> None:
    # an earlier read may have autobegun a transaction; clear it before session.begin()
    if session.in_transaction():
        await session.rollback()


async def claim_write_lock(session: AsyncSession) -> None:
    """
    Procure the transaction's connection with write intent. Call first inside
    session.begin(); on SQLite this turns the BEGIN into BEGIN IMMEDIATE.
    """
    await session.connection(execution_options={WRITE_INTENT_OPTION: True})
