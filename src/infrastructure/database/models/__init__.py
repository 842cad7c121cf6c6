# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SQLAlchemy models for the records database.

Importing this package registers every table on ``Base.metadata``.
"""

from src.infrastructure.database.models.academic import (
    Assignment,
    Attendance,
    Course,
    Enrollment,
    Program,
    Result,
    Routine,
    Submission,
)
from src.infrastructure.database.models.base import Base, TimestampMixin
from src.infrastructure.database.models.finance import Fee
from src.infrastructure.database.models.identity import (
    Account,
    Faculty,
    Librarian,
    Student,
)
from src.infrastructure.database.models.library import Item, Loan

__all__ = [
    "Base",
    "TimestampMixin",
    # Identity
    "Account",
    "Student",
    "Faculty",
    "Librarian",
    # Academic
    "Program",
    "Course",
    "Enrollment",
    "Attendance",
    "Result",
    "Assignment",
    "Submission",
    "Routine",
    # Library
    "Item",
    "Loan",
    # Finance
    "Fee",
]
