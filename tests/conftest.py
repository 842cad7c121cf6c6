# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Unit tests
- Integration tests
"""

from datetime import date

import pytest

from src.core.config.settings import (
    DatabaseSettings,
    LendingSettings,
    SecuritySettings,
    Settings,
)
from src.domains.identity.credentials import BcryptHasher


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (uses a real database)"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


# =============================================================================
# Environment Fixtures
# =============================================================================


@pytest.fixture
def today() -> date:
    """Provide the fixed calendar day domain services treat as today."""
    return date(2024, 1, 20)


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Provide settings pointing at a throwaway SQLite file.

    Uses the cheapest bcrypt cost so credential hashing stays fast.
    """
    return Settings(
        environment="development",
        debug=False,
        log_level="INFO",
        database=DatabaseSettings(
            url_override=f"sqlite+aiosqlite:///{tmp_path / 'records.db'}",
            transaction_timeout_seconds=30.0,
        ),
        lending=LendingSettings(per_diem_rate=5.0, default_loan_days=14),
        security=SecuritySettings(bcrypt_rounds=4, min_password_length=6),
    )


@pytest.fixture
def fast_hasher() -> BcryptHasher:
    """Provide a bcrypt hasher with the minimum cost factor."""
    return BcryptHasher(rounds=4)
