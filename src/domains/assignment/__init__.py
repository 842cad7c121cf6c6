# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Coursework assignment domain package.

This package provides assignment management functionality including:
- Assignment creation for courses
- Student submissions
- Submission grading
"""

from src.domains.assignment.service import AssignmentService

__all__ = [
    "AssignmentService",
]
