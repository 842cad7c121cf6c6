# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Curriculum service for programs, courses and timetable routines.

This module provides the CurriculumService class for:
- Program creation and renaming (names are unique, ignoring case)
- Course creation (codes are unique per program and semester)
- Routine scheduling for classes and exams
"""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.errors import ConflictError, NotFoundError
from src.core.result import OperationResult, rejects_as_failure
from src.domains.guards import course_code_taken, program_name_taken
from src.domains.references import resolve_optional_reference, resolve_reference
from src.domains.validation import (
    optional_text,
    require_before,
    require_choice,
    require_id,
    require_positive,
    require_range,
    require_text,
)
from src.infrastructure.database.models import Course, Program, Routine
from src.infrastructure.database.repositories import courses, faculty, programs, routines
from src.infrastructure.database.transaction import TransactionCoordinator
from src.models.academic import (
    CourseCreateRequest,
    CourseResponse,
    ProgramResponse,
    RoutineCreateRequest,
    RoutineResponse,
)
from src.models.common import RoutineType, Weekday

logger = logging.getLogger(__name__)

MIN_SEMESTER = 1
MAX_SEMESTER = 8


class CurriculumService:
    """Service for the program, course and routine catalog.

    Attributes:
        _coordinator: Runs each operation atomically.
    """

    def __init__(self, coordinator: TransactionCoordinator) -> None:
        self._coordinator = coordinator

    @rejects_as_failure
    async def create_program(self, name: str) -> OperationResult[ProgramResponse]:
        """Create a program.

        Returns:
            Success with the program, or Failure with ValidationError or
            ConflictError (name taken).
        """
        name = require_text("name", name)

        async def work(session: AsyncSession) -> ProgramResponse:
            if await program_name_taken(session, name):
                raise ConflictError(f"Program '{name}' already exists")
            program = Program(name=name)
            await programs.insert(session, program)
            return ProgramResponse.model_validate(program)

        result = await self._coordinator.run_atomic(work, operation="create_program")
        if result.ok:
            logger.info("Created program: program=%s, name=%s", result.value.id, name)
        return result

    @rejects_as_failure
    async def rename_program(self, program_id: int, name: str) -> OperationResult[ProgramResponse]:
        """Rename a program. Its own current name does not count as taken."""
        program_id = require_id("program_id", program_id)
        name = require_text("name", name)

        async def work(session: AsyncSession) -> ProgramResponse:
            program = await programs.find(session, program_id, for_update=True)
            if program is None:
                raise NotFoundError("Program", program_id)
            if await program_name_taken(session, name, exclude_program_id=program_id):
                raise ConflictError(f"Program '{name}' is already taken by another program")
            program.name = name
            await programs.update(session, program)
            return ProgramResponse.model_validate(program)

        return await self._coordinator.run_atomic(work, operation="rename_program")

    @rejects_as_failure
    async def create_course(self, request: CourseCreateRequest) -> OperationResult[CourseResponse]:
        """Create a course within a program semester.

        Returns:
            Success with the course, or Failure with ValidationError,
            ReferenceNotFoundError (program) or ConflictError (code taken in
            that program and semester).
        """
        program_id = require_id("program_id", request.program_id)
        semester = require_range(
            "semester_number", request.semester_number, MIN_SEMESTER, MAX_SEMESTER
        )
        course_code = require_text("course_code", request.course_code)
        course_name = require_text("course_name", request.course_name)
        credits = require_positive("credits", request.credits)
        department = require_text("department", request.department)

        async def work(session: AsyncSession) -> CourseResponse:
            program = await resolve_reference(session, programs, "Program", program_id)
            if await course_code_taken(session, program_id, semester, course_code):
                raise ConflictError(
                    f"Course with code '{course_code}' already exists for program "
                    f"'{program.name}' in semester {semester}"
                )
            course = Course(
                program_id=program_id,
                semester_number=semester,
                course_code=course_code,
                course_name=course_name,
                credits=credits,
                department=department,
                description=optional_text(request.description),
            )
            await courses.insert(session, course)
            return CourseResponse.model_validate(course)

        result = await self._coordinator.run_atomic(work, operation="create_course")
        if result.ok:
            logger.info(
                "Created course: course=%s, code=%s, program=%s",
                result.value.id,
                course_code,
                program_id,
            )
        return result

    @rejects_as_failure
    async def create_routine(
        self,
        request: RoutineCreateRequest,
    ) -> OperationResult[RoutineResponse]:
        """Schedule a class or exam slot for a course."""
        course_id = require_id("course_id", request.course_id)
        routine_type = require_choice("routine_type", request.routine_type, RoutineType)
        day_of_week = require_choice("day_of_week", request.day_of_week, Weekday)
        start_time, end_time = require_before("start_time", request.start_time, request.end_time)
        academic_year = require_text("academic_year", request.academic_year)
        semester = require_range(
            "semester_number", request.semester_number, MIN_SEMESTER, MAX_SEMESTER
        )
        room_location = require_text("room_location", request.room_location)
        faculty_id = request.faculty_id
        if faculty_id is not None:
            faculty_id = require_id("faculty_id", faculty_id)

        async def work(session: AsyncSession) -> RoutineResponse:
            await resolve_reference(session, courses, "Course", course_id)
            await resolve_optional_reference(session, faculty, "Faculty", faculty_id)
            routine = Routine(
                course_id=course_id,
                faculty_id=faculty_id,
                routine_type=routine_type,
                day_of_week=day_of_week,
                start_time=start_time,
                end_time=end_time,
                room_location=room_location,
                academic_year=academic_year,
                semester_number=semester,
            )
            await routines.insert(session, routine)
            return RoutineResponse.model_validate(routine)

        return await self._coordinator.run_atomic(work, operation="create_routine")
