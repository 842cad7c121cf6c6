# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Fixed enumerations shared by records and validation."""

from enum import Enum


class Role(str, Enum):
    """Account role tag. Profiles exist for every role except Admin."""

    ADMIN = "Admin"
    STUDENT = "Student"
    FACULTY = "Faculty"
    LIBRARIAN = "Librarian"


class AttendanceStatus(str, Enum):
    """Attendance mark for one student, course and day."""

    PRESENT = "Present"
    ABSENT = "Absent"
    LATE = "Late"
    EXCUSED = "Excused"


class ResultStatus(str, Enum):
    """Outcome of a course result."""

    PASS = "Pass"
    FAIL = "Fail"
    INCOMPLETE = "Incomplete"


class FeeStatus(str, Enum):
    """Fee lifecycle: Due -> (Overdue) -> Paid, or -> Waived."""

    DUE = "Due"
    OVERDUE = "Overdue"
    PAID = "Paid"
    WAIVED = "Waived"


class RoutineType(str, Enum):
    """Kind of timetable slot."""

    CLASS = "Class"
    EXAM = "Exam"


class Weekday(str, Enum):
    """Day of week for timetable slots."""

    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"
