# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Fixtures for unit tests running services against a mocked session."""

from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.infrastructure.database.transaction import TransactionCoordinator


@pytest.fixture
def mock_db():
    """Create mock database session."""
    db = AsyncMock()
    db.add = MagicMock()
    db.flush = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.execute = AsyncMock()
    db.get = AsyncMock()
    return db


@pytest.fixture
def mock_sessionmaker(mock_db):
    """Create a sessionmaker whose sessions are always mock_db."""
    factory = MagicMock()
    factory.return_value.__aenter__ = AsyncMock(return_value=mock_db)
    factory.return_value.__aexit__ = AsyncMock(return_value=False)
    return factory


@pytest.fixture
def coordinator(mock_sessionmaker):
    """Create a transaction coordinator over the mocked session."""
    return TransactionCoordinator(mock_sessionmaker)


def mock_repository(first_id: int = 1) -> MagicMock:
    """Create a repository double whose insert assigns ids like a flush would."""
    repository = MagicMock()
    next_id = iter(range(first_id, first_id + 1000))

    async def insert(session, record):
        record.id = next(next_id)
        if hasattr(type(record), "created_at") and record.created_at is None:
            record.created_at = datetime.now(timezone.utc)
        if hasattr(type(record), "fine_amount") and record.fine_amount is None:
            record.fine_amount = Decimal("0")
        return record.id

    repository.insert = AsyncMock(side_effect=insert)
    repository.find = AsyncMock(return_value=None)
    repository.update = AsyncMock()
    repository.delete = AsyncMock(return_value=True)
    repository.delete_by = AsyncMock(return_value=0)
    repository.update_by = AsyncMock(return_value=0)
    repository.exists = AsyncMock(return_value=False)
    repository.count = AsyncMock(return_value=0)
    return repository


@pytest.fixture
def make_repository():
    """Provide the repository double factory."""
    return mock_repository
