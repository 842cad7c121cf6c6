# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Attendance service.

One attendance mark exists per student, course and day. The duplicate check
and the insert share a unit of work; the unique constraint on the table
catches concurrent marks that slip past it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.errors import ConflictError, NotFoundError
from src.core.result import OperationResult, rejects_as_failure
from src.domains.guards import attendance_exists
from src.domains.references import resolve_optional_reference, resolve_reference
from src.domains.validation import require_choice, require_id, require_not_future
from src.infrastructure.database.models import Attendance
from src.infrastructure.database.repositories import attendance, courses, faculty, students
from src.infrastructure.database.transaction import TransactionCoordinator
from src.models.academic import AttendanceCreateRequest, AttendanceResponse
from src.models.common import AttendanceStatus
from src.utils.datetime import utc_today

logger = logging.getLogger(__name__)


class AttendanceService:
    """Service for attendance marks.

    Attributes:
        _coordinator: Runs each operation atomically.
        _today: Returns the current calendar day.
    """

    def __init__(
        self,
        coordinator: TransactionCoordinator,
        today: Callable[[], date] = utc_today,
    ) -> None:
        self._coordinator = coordinator
        self._today = today

    @rejects_as_failure
    async def add_attendance(
        self,
        request: AttendanceCreateRequest,
    ) -> OperationResult[AttendanceResponse]:
        """Record an attendance mark.

        Args:
            request: Student, course, day, status and optional marking faculty.

        Returns:
            Success with the mark, or Failure with ValidationError,
            ReferenceNotFoundError or ConflictError (already marked).
        """
        student_id = require_id("student_id", request.student_id)
        course_id = require_id("course_id", request.course_id)
        attendance_date = require_not_future(
            "attendance_date", request.attendance_date, self._today()
        )
        status = require_choice("status", request.status, AttendanceStatus)
        faculty_id = request.taken_by_faculty_id
        if faculty_id is not None:
            faculty_id = require_id("taken_by_faculty_id", faculty_id)

        async def work(session: AsyncSession) -> AttendanceResponse:
            await resolve_reference(session, students, "Student", student_id)
            await resolve_reference(session, courses, "Course", course_id)
            await resolve_optional_reference(session, faculty, "Faculty", faculty_id)
            if await attendance_exists(session, student_id, course_id, attendance_date):
                raise ConflictError(
                    "Attendance for this student in this course on this date "
                    "has already been marked"
                )

            record = Attendance(
                student_id=student_id,
                course_id=course_id,
                attendance_date=attendance_date,
                status=status,
                taken_by_faculty_id=faculty_id,
            )
            await attendance.insert(session, record)
            return AttendanceResponse.model_validate(record)

        result = await self._coordinator.run_atomic(work, operation="add_attendance")
        if result.ok:
            logger.info(
                "Attendance marked: student=%s, course=%s, date=%s, status=%s",
                student_id,
                course_id,
                attendance_date,
                status,
            )
        return result

    @rejects_as_failure
    async def update_attendance_status(
        self,
        attendance_id: int,
        status: str,
    ) -> OperationResult[AttendanceResponse]:
        """Change the status of an existing mark."""
        attendance_id = require_id("attendance_id", attendance_id)
        status = require_choice("status", status, AttendanceStatus)

        async def work(session: AsyncSession) -> AttendanceResponse:
            record = await attendance.find(session, attendance_id, for_update=True)
            if record is None:
                raise NotFoundError("Attendance", attendance_id)
            record.status = status
            await attendance.update(session, record)
            return AttendanceResponse.model_validate(record)

        return await self._coordinator.run_atomic(work, operation="update_attendance_status")

    @rejects_as_failure
    async def delete_attendance(self, attendance_id: int) -> OperationResult[None]:
        attendance_id = require_id("attendance_id", attendance_id)

        async def work(session: AsyncSession) -> None:
            if not await attendance.delete(session, attendance_id):
                raise NotFoundError("Attendance", attendance_id)

        return await self._coordinator.run_atomic(work, operation="delete_attendance")
