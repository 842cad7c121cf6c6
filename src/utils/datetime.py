# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""DateTime utilities for the campus records backend.

All timestamps are timezone-aware UTC. Calendar dates (borrow dates, due
dates, attendance days) are plain ``date`` values and "today" is the UTC
calendar day, so date-relation checks do not depend on the host timezone.

Usage:
------
    from src.utils.datetime import utc_now, utc_today

    # For SQLAlchemy model defaults
    created_at = mapped_column(DateTime(timezone=True), default=utc_now)
"""

from datetime import date, datetime, timezone


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime.

    Returns:
        Timezone-aware datetime representing current UTC time.
    """
    return datetime.now(timezone.utc)


def utc_today() -> date:
    """Get the current UTC calendar day."""
    return utc_now().date()


def days_between(start: date, end: date) -> int:
    """Count whole days from start to end (negative when end is earlier).

    Example:
        >>> days_between(date(2024, 1, 10), date(2024, 1, 13))
        3
    """
    return (end - start).days
