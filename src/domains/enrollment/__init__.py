# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment domain package.

This package provides student enrollment management functionality including:
- Student enrollment in courses
- Grade updates
- Enrollment removal
"""

from src.domains.enrollment.service import EnrollmentService

__all__ = [
    "EnrollmentService",
]
