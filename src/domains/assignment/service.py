# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Coursework assignment service.

This module provides the AssignmentService class for:
- Assignment creation by faculty for a course
- Student submissions (one per assignment and student)
- Grading submissions against the assignment's maximum marks
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.errors import ConflictError, NotFoundError, ValidationError
from src.core.result import OperationResult, rejects_as_failure
from src.domains.guards import submission_exists
from src.domains.references import resolve_reference
from src.domains.validation import (
    optional_text,
    require_id,
    require_non_negative,
    require_not_past,
    require_positive,
    require_text,
)
from src.infrastructure.database.models import Assignment, Submission
from src.infrastructure.database.repositories import (
    assignments,
    courses,
    faculty,
    students,
    submissions,
)
from src.infrastructure.database.transaction import TransactionCoordinator
from src.models.academic import AssignmentCreateRequest, AssignmentResponse, SubmissionResponse
from src.utils.datetime import utc_now, utc_today

logger = logging.getLogger(__name__)


class AssignmentService:
    """Service for assignments and their submissions.

    Attributes:
        _coordinator: Runs each operation atomically.
        _today: Returns the current calendar day.
    """

    def __init__(
        self,
        coordinator: TransactionCoordinator,
        today: Callable[[], date] = utc_today,
    ) -> None:
        """Initialize assignment service.

        Args:
            coordinator: Transaction coordinator for the records database.
            today: Clock used for due date checks.
        """
        self._coordinator = coordinator
        self._today = today

    @rejects_as_failure
    async def create_assignment(
        self,
        request: AssignmentCreateRequest,
    ) -> OperationResult[AssignmentResponse]:
        """Create an assignment for a course.

        Args:
            request: Assignment fields. The due date may not be in the past
                and max marks must be positive.

        Returns:
            Success with the assignment, or Failure with ValidationError or
            ReferenceNotFoundError (course or faculty).
        """
        course_id = require_id("course_id", request.course_id)
        faculty_id = require_id("faculty_id", request.faculty_id)
        title = require_text("title", request.title)
        due_date = require_not_past("due_date", request.due_date, self._today())
        max_marks = require_positive("max_marks", request.max_marks)

        async def work(session: AsyncSession) -> AssignmentResponse:
            await resolve_reference(session, courses, "Course", course_id)
            await resolve_reference(session, faculty, "Faculty", faculty_id)
            assignment = Assignment(
                course_id=course_id,
                faculty_id=faculty_id,
                title=title,
                description=optional_text(request.description),
                due_date=due_date,
                max_marks=max_marks,
            )
            await assignments.insert(session, assignment)
            return AssignmentResponse.model_validate(assignment)

        result = await self._coordinator.run_atomic(work, operation="create_assignment")
        if result.ok:
            logger.info(
                "Created assignment: assignment=%s, course=%s, faculty=%s",
                result.value.id,
                course_id,
                faculty_id,
            )
        return result

    @rejects_as_failure
    async def submit_assignment(
        self,
        assignment_id: int,
        student_id: int,
        file_path: str,
    ) -> OperationResult[SubmissionResponse]:
        """Record a student's submission for an assignment.

        Args:
            assignment_id: Assignment identifier.
            student_id: Submitting student.
            file_path: Location of the submitted work.

        Returns:
            Success with the submission, or Failure with ValidationError,
            ReferenceNotFoundError or ConflictError (already submitted).
        """
        assignment_id = require_id("assignment_id", assignment_id)
        student_id = require_id("student_id", student_id)
        file_path = require_text("file_path", file_path)

        async def work(session: AsyncSession) -> SubmissionResponse:
            await resolve_reference(session, assignments, "Assignment", assignment_id)
            await resolve_reference(session, students, "Student", student_id)
            if await submission_exists(session, assignment_id, student_id):
                raise ConflictError("Student has already submitted for this assignment")

            submission = Submission(
                assignment_id=assignment_id,
                student_id=student_id,
                submitted_at=utc_now(),
                file_path=file_path,
            )
            await submissions.insert(session, submission)
            return SubmissionResponse.model_validate(submission)

        result = await self._coordinator.run_atomic(work, operation="submit_assignment")
        if result.ok:
            logger.info(
                "Submission received: assignment=%s, student=%s",
                assignment_id,
                student_id,
            )
        return result

    @rejects_as_failure
    async def grade_submission(
        self,
        submission_id: int,
        marks_obtained: int,
        feedback: str | None = None,
    ) -> OperationResult[SubmissionResponse]:
        """Grade a submission.

        Returns:
            Success with the submission, or Failure with ValidationError
            (negative marks or marks above the assignment's maximum) or
            NotFoundError.
        """
        submission_id = require_id("submission_id", submission_id)
        marks_obtained = require_non_negative("marks_obtained", marks_obtained)
        feedback = optional_text(feedback)

        async def work(session: AsyncSession) -> SubmissionResponse:
            submission = await submissions.find(session, submission_id, for_update=True)
            if submission is None:
                raise NotFoundError("Submission", submission_id)
            assignment = await resolve_reference(
                session, assignments, "Assignment", submission.assignment_id
            )
            if marks_obtained > assignment.max_marks:
                raise ValidationError(
                    "marks_obtained",
                    f"cannot exceed maximum marks ({assignment.max_marks})",
                )
            submission.marks_obtained = marks_obtained
            submission.feedback = feedback
            await submissions.update(session, submission)
            return SubmissionResponse.model_validate(submission)

        return await self._coordinator.run_atomic(work, operation="grade_submission")
