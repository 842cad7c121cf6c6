# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment service for managing student course enrollments.

This module provides the EnrollmentService class for:
- Student enrollment in courses (one enrollment per student and course)
- Grade updates
- Enrollment removal
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.errors import ConflictError, NotFoundError
from src.core.result import OperationResult, rejects_as_failure
from src.domains.guards import enrollment_exists
from src.domains.references import resolve_reference
from src.domains.validation import optional_text, require_id, require_not_future
from src.infrastructure.database.models import Enrollment
from src.infrastructure.database.repositories import courses, enrollments, students
from src.infrastructure.database.transaction import TransactionCoordinator
from src.models.academic import EnrollmentResponse
from src.utils.datetime import utc_today

logger = logging.getLogger(__name__)


class EnrollmentService:
    """Service for managing student enrollments.

    Attributes:
        _coordinator: Runs each operation atomically.
        _today: Returns the current calendar day.
    """

    def __init__(
        self,
        coordinator: TransactionCoordinator,
        today: Callable[[], date] = utc_today,
    ) -> None:
        """Initialize enrollment service.

        Args:
            coordinator: Transaction coordinator for the records database.
            today: Clock used for enrollment date checks.
        """
        self._coordinator = coordinator
        self._today = today

    @rejects_as_failure
    async def enroll_student(
        self,
        student_id: int,
        course_id: int,
        enrollment_date: date,
        grade: str | None = None,
    ) -> OperationResult[EnrollmentResponse]:
        """Enroll a student in a course.

        Args:
            student_id: Student identifier.
            course_id: Course identifier.
            enrollment_date: Day of enrollment, not in the future.
            grade: Optional initial grade.

        Returns:
            Success with the enrollment, or Failure with ValidationError,
            ReferenceNotFoundError (student or course) or ConflictError
            (already enrolled).
        """
        student_id = require_id("student_id", student_id)
        course_id = require_id("course_id", course_id)
        enrollment_date = require_not_future("enrollment_date", enrollment_date, self._today())
        grade = optional_text(grade)

        async def work(session: AsyncSession) -> EnrollmentResponse:
            await resolve_reference(session, students, "Student", student_id)
            await resolve_reference(session, courses, "Course", course_id)
            if await enrollment_exists(session, student_id, course_id):
                raise ConflictError("Student is already enrolled in this course")

            enrollment = Enrollment(
                student_id=student_id,
                course_id=course_id,
                enrollment_date=enrollment_date,
                grade=grade,
            )
            await enrollments.insert(session, enrollment)
            return EnrollmentResponse.model_validate(enrollment)

        result = await self._coordinator.run_atomic(work, operation="enroll_student")
        if result.ok:
            logger.info("Enrolled student: student=%s, course=%s", student_id, course_id)
        return result

    @rejects_as_failure
    async def update_grade(
        self,
        enrollment_id: int,
        grade: str | None,
    ) -> OperationResult[EnrollmentResponse]:
        """Set or clear the grade of an enrollment.

        Returns:
            Success with the enrollment, or Failure(NotFoundError).
        """
        enrollment_id = require_id("enrollment_id", enrollment_id)
        grade = optional_text(grade)

        async def work(session: AsyncSession) -> EnrollmentResponse:
            enrollment = await enrollments.find(session, enrollment_id, for_update=True)
            if enrollment is None:
                raise NotFoundError("Enrollment", enrollment_id)
            enrollment.grade = grade
            await enrollments.update(session, enrollment)
            return EnrollmentResponse.model_validate(enrollment)

        return await self._coordinator.run_atomic(work, operation="update_grade")

    @rejects_as_failure
    async def remove_enrollment(self, enrollment_id: int) -> OperationResult[None]:
        """Remove an enrollment.

        Returns:
            Success(None), or Failure(NotFoundError).
        """
        enrollment_id = require_id("enrollment_id", enrollment_id)

        async def work(session: AsyncSession) -> None:
            if not await enrollments.delete(session, enrollment_id):
                raise NotFoundError("Enrollment", enrollment_id)

        result = await self._coordinator.run_atomic(work, operation="remove_enrollment")
        if result.ok:
            logger.info("Removed enrollment: enrollment=%s", enrollment_id)
        return result
