# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course result service.

This module provides the ResultService class for:
- Recording one result per student, course and academic year
- Updating marks, grade and status of a recorded result
"""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.errors import ConflictError, NotFoundError
from src.core.result import OperationResult, rejects_as_failure
from src.domains.guards import result_exists
from src.domains.references import resolve_reference
from src.domains.validation import (
    optional_text,
    require_choice,
    require_id,
    require_range,
    require_text,
)
from src.infrastructure.database.models import Result
from src.infrastructure.database.repositories import courses, results, students
from src.infrastructure.database.transaction import TransactionCoordinator
from src.models.academic import ResultCreateRequest, ResultResponse, ResultUpdateRequest
from src.models.common import ResultStatus

logger = logging.getLogger(__name__)

MIN_SEMESTER = 1
MAX_SEMESTER = 8
MIN_MARKS = 0
MAX_MARKS = 100


def _check_marks(marks: int | None) -> int | None:
    if marks is None:
        return None
    return require_range("marks_obtained", marks, MIN_MARKS, MAX_MARKS)


class ResultService:
    """Service for course results.

    Attributes:
        _coordinator: Runs each operation atomically.
    """

    def __init__(self, coordinator: TransactionCoordinator) -> None:
        self._coordinator = coordinator

    @rejects_as_failure
    async def record_result(self, request: ResultCreateRequest) -> OperationResult[ResultResponse]:
        """Record a student's result for a course and academic year.

        Args:
            request: Result fields. Marks, when given, are 0-100.

        Returns:
            Success with the result, or Failure with ValidationError,
            ReferenceNotFoundError or ConflictError (result already recorded).
        """
        student_id = require_id("student_id", request.student_id)
        course_id = require_id("course_id", request.course_id)
        semester = require_range(
            "semester_number", request.semester_number, MIN_SEMESTER, MAX_SEMESTER
        )
        academic_year = require_text("academic_year", request.academic_year)
        marks = _check_marks(request.marks_obtained)
        status = require_choice("result_status", request.result_status, ResultStatus)

        async def work(session: AsyncSession) -> ResultResponse:
            await resolve_reference(session, students, "Student", student_id)
            await resolve_reference(session, courses, "Course", course_id)
            if await result_exists(session, student_id, course_id, academic_year):
                raise ConflictError(
                    f"Result for this student in this course for academic year "
                    f"'{academic_year}' already exists"
                )

            record = Result(
                student_id=student_id,
                course_id=course_id,
                semester_number=semester,
                academic_year=academic_year,
                marks_obtained=marks,
                grade=optional_text(request.grade),
                result_status=status,
            )
            await results.insert(session, record)
            return ResultResponse.model_validate(record)

        result = await self._coordinator.run_atomic(work, operation="record_result")
        if result.ok:
            logger.info(
                "Result recorded: student=%s, course=%s, year=%s",
                student_id,
                course_id,
                academic_year,
            )
        return result

    @rejects_as_failure
    async def update_result(
        self,
        result_id: int,
        request: ResultUpdateRequest,
    ) -> OperationResult[ResultResponse]:
        """Update marks, grade or status. Key fields never change.

        Returns:
            Success with the result, or Failure with ValidationError or
            NotFoundError.
        """
        result_id = require_id("result_id", result_id)
        changes = request.model_dump(exclude_unset=True)
        if "marks_obtained" in changes:
            changes["marks_obtained"] = _check_marks(changes["marks_obtained"])
        if "grade" in changes:
            changes["grade"] = optional_text(changes["grade"])
        if "result_status" in changes:
            changes["result_status"] = require_choice(
                "result_status", changes["result_status"], ResultStatus
            )

        async def work(session: AsyncSession) -> ResultResponse:
            record = await results.find(session, result_id, for_update=True)
            if record is None:
                raise NotFoundError("Result", result_id)
            for name, value in changes.items():
                setattr(record, name, value)
            await results.update(session, record)
            return ResultResponse.model_validate(record)

        return await self._coordinator.run_atomic(work, operation="update_result")
