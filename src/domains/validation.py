# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Field-level validation helpers.

Pure functions with no I/O. Each either returns the (normalized) value or
raises ValidationError naming the field. Domain operations call them in
order and stop at the first failure, so the reported error is deterministic.

Example:
    >>> require_text("title", "  Dune ")
    'Dune'
    >>> require_choice("status", "present", AttendanceStatus)
    'Present'
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import date, time
from decimal import Decimal
from enum import Enum
from typing import TypeVar

from src.core.errors import ValidationError

N = TypeVar("N", int, float, Decimal)

EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9_+&*-]+(?:\.[a-zA-Z0-9_+&*-]+)*@(?:[a-zA-Z0-9-]+\.)+[a-zA-Z]{2,7}$"
)

# bcrypt input limit
MAX_PASSWORD_BYTES = 72


def require_text(field: str, value: str | None) -> str:
    """Trim a text field and require it to be non-empty."""
    if value is None or not value.strip():
        raise ValidationError(field, "cannot be empty")
    return value.strip()


def optional_text(value: str | None) -> str | None:
    """Trim an optional text field, mapping blank to None."""
    if value is None:
        return None
    return value.strip() or None


def require_id(field: str, value: int | None) -> int:
    """Require a positive entity id."""
    if value is None or value <= 0:
        raise ValidationError(field, "must be a positive id")
    return value


def require_range(field: str, value: N | None, low: N, high: N) -> N:
    """Require low <= value <= high (inclusive)."""
    if value is None or not low <= value <= high:
        raise ValidationError(field, f"must be between {low} and {high}")
    return value


def require_positive(field: str, value: N | None) -> N:
    """Require value > 0."""
    if value is None or value <= 0:
        raise ValidationError(field, "must be positive")
    return value


def require_non_negative(field: str, value: N | None) -> N:
    """Require value >= 0."""
    if value is None or value < 0:
        raise ValidationError(field, "cannot be negative")
    return value


def require_choice(field: str, value: str | None, choices: type[Enum] | Iterable[str]) -> str:
    """Match value case-insensitively against an enumeration.

    Returns:
        The canonical spelling of the matching choice.
    """
    options = [c.value for c in choices] if isinstance(choices, type) else list(choices)
    if value is not None:
        for option in options:
            if option.lower() == value.strip().lower():
                return option
    raise ValidationError(field, f"must be one of {', '.join(options)}")


def require_date(field: str, value: date | None) -> date:
    """Require a date to be present."""
    if value is None:
        raise ValidationError(field, "is required")
    return value


def require_not_future(field: str, value: date | None, today: date) -> date:
    """Require value <= today."""
    value = require_date(field, value)
    if value > today:
        raise ValidationError(field, "cannot be in the future")
    return value


def require_not_past(field: str, value: date | None, today: date) -> date:
    """Require value >= today."""
    value = require_date(field, value)
    if value < today:
        raise ValidationError(field, "cannot be in the past")
    return value


def require_on_or_after(field: str, value: date | None, earliest: date, earliest_field: str) -> date:
    """Require value >= earliest."""
    value = require_date(field, value)
    if value < earliest:
        raise ValidationError(field, f"cannot be before {earliest_field}")
    return value


def require_before(field: str, start: time | None, end: time | None) -> tuple[time, time]:
    """Require both times and start < end."""
    if start is None or end is None:
        raise ValidationError(field, "start and end are required")
    if start >= end:
        raise ValidationError(field, "start must be before end")
    return start, end


def require_email(field: str, value: str | None) -> str:
    """Require a syntactically valid email address."""
    if value is None or not EMAIL_PATTERN.match(value.strip()):
        raise ValidationError(field, "invalid email format")
    return value.strip()


def require_password(field: str, value: str | None, min_length: int) -> str:
    """Require a non-blank password of min_length characters up to 72 bytes."""
    if value is None or not value.strip() or len(value) < min_length:
        raise ValidationError(field, f"must be at least {min_length} characters")
    if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(field, f"must be at most {MAX_PASSWORD_BYTES} bytes")
    return value
