# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Records database connection management using SQLAlchemy async.

This module owns the process-wide engine and sessionmaker for the records
database. Domain code never touches them directly: every unit of work goes
through the TransactionCoordinator, which opens one session per call.

Uses SQLAlchemy 2.0 async API with the asyncpg driver in production and
aiosqlite for development and tests.

Example:
    from src.infrastructure.database.connection import (
        init_database,
        get_sessionmaker,
    )

    # Initialize at application startup
    await init_database(settings)
    coordinator = TransactionCoordinator(get_sessionmaker())
"""

from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from src.infrastructure.database.models import Base

if TYPE_CHECKING:
    from src.core.config.settings import Settings

# Module-level state for the records database connection
_engine: Optional[AsyncEngine] = None
_sessionmaker: Optional[async_sessionmaker[AsyncSession]] = None


class InfrastructureError(Exception):
    """Raised when the storage backend fails.

    Covers connection loss, failed commits, rollbacks and timeouts. The
    TransactionCoordinator guarantees the transaction was rolled back before
    this error reaches the caller.

    Attributes:
        message: Human-readable error description.
        original_error: The underlying SQLAlchemy or driver error.
    """

    def __init__(self, message: str, original_error: Optional[BaseException] = None) -> None:
        """Initialize the infrastructure error.

        Args:
            message: Human-readable error description.
            original_error: The underlying exception that caused this error.
        """
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message


def configure_sqlite_engine(engine: AsyncEngine) -> None:
    """Make a SQLite engine safe for concurrent read-modify-write units.

    SQLite has no row locks, so every transaction is opened with
    ``BEGIN IMMEDIATE`` to take the write lock up front. Concurrent units of
    work then queue on the busy timeout instead of interleaving. Foreign key
    enforcement is switched on for every connection.

    Args:
        engine: Async engine bound to a sqlite+aiosqlite URL.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection: Any, connection_record: Any) -> None:
        # Stop the driver from emitting its own deferred BEGIN
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(settings: "Settings") -> AsyncEngine:
    """Create an async engine for the configured backend.

    Args:
        settings: Application settings containing database configuration.

    Returns:
        A new AsyncEngine. SQLite engines are configured for serialized
        writers via configure_sqlite_engine().
    """
    db = settings.database
    if db.is_sqlite:
        engine = create_async_engine(
            db.url,
            echo=settings.debug and settings.log_level == "DEBUG",
            connect_args={"timeout": db.transaction_timeout_seconds},
        )
        configure_sqlite_engine(engine)
        return engine

    return create_async_engine(
        db.url,
        pool_size=db.pool_size,
        max_overflow=db.max_overflow,
        pool_pre_ping=True,
        pool_recycle=1800,
        echo=settings.debug and settings.log_level == "DEBUG",
    )


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create the sessionmaker used for units of work.

    ``expire_on_commit`` is off so committed ORM rows can still be read to
    build response models after the session closes.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def init_database(settings: "Settings") -> None:
    """Initialize the records database connection pool.

    This should be called once at application startup.

    Args:
        settings: Application settings containing database configuration.

    Raises:
        InfrastructureError: If engine creation fails.
    """
    global _engine, _sessionmaker

    try:
        _engine = build_engine(settings)
        _sessionmaker = build_sessionmaker(_engine)
    except SQLAlchemyError as e:
        raise InfrastructureError("Failed to initialize records database connection", e) from e


async def close_database() -> None:
    """Close the records database connection pool."""
    global _engine, _sessionmaker

    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _sessionmaker = None


def get_engine() -> AsyncEngine:
    """Get the records database async engine.

    Raises:
        InfrastructureError: If the database has not been initialized.
    """
    if _engine is None:
        raise InfrastructureError(
            "Records database not initialized. Call init_database() first."
        )
    return _engine


def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    """Get the records database sessionmaker.

    Raises:
        InfrastructureError: If the database has not been initialized.
    """
    if _sessionmaker is None:
        raise InfrastructureError(
            "Records database not initialized. Call init_database() first."
        )
    return _sessionmaker


async def create_schema(engine: AsyncEngine) -> None:
    """Create all records tables that do not exist yet.

    Args:
        engine: Engine to create the tables on.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def check_database_connection() -> bool:
    """Check if the records database is reachable.

    Returns:
        True if the database is reachable, False otherwise.
    """
    if _engine is None:
        return False

    try:
        async with _engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError:
        return False
