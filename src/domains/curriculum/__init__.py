# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Curriculum domain services.

This package provides the catalog of programs, courses and routines:
- Program creation and renaming
- Course creation per program semester
- Class and exam timetable slots
"""

from src.domains.curriculum.service import CurriculumService

__all__ = [
    "CurriculumService",
]
