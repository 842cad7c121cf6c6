# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database infrastructure for the records database.

This package provides SQLAlchemy async access to PostgreSQL (asyncpg) or
SQLite (aiosqlite):
- connection: Process-wide engine and sessionmaker
- transaction: TransactionCoordinator running units of work
- repositories: Per-entity repositories taking an explicit session

Example:
    from src.infrastructure.database import (
        TransactionCoordinator,
        get_sessionmaker,
        init_database,
    )

    await init_database(settings)
    coordinator = TransactionCoordinator(
        get_sessionmaker(),
        timeout=settings.database.transaction_timeout_seconds,
    )
"""

from src.infrastructure.database.connection import (
    InfrastructureError,
    build_engine,
    build_sessionmaker,
    check_database_connection,
    close_database,
    configure_sqlite_engine,
    create_schema,
    get_engine,
    get_sessionmaker,
    init_database,
)
from src.infrastructure.database.transaction import (
    NestedUnitOfWorkError,
    TransactionCoordinator,
    UnitOfWork,
)

__all__ = [
    # Connection
    "InfrastructureError",
    "build_engine",
    "build_sessionmaker",
    "check_database_connection",
    "close_database",
    "configure_sqlite_engine",
    "create_schema",
    "get_engine",
    "get_sessionmaker",
    "init_database",
    # Units of work
    "NestedUnitOfWorkError",
    "TransactionCoordinator",
    "UnitOfWork",
]
