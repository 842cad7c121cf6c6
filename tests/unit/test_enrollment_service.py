# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for Enrollment service."""

from datetime import date
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.domains.enrollment.service import EnrollmentService
from src.infrastructure.database.models import Enrollment

MODULE = "src.domains.enrollment.service"


@pytest.fixture
def repos(make_repository):
    doubles = MagicMock()
    doubles.students = make_repository()
    doubles.students.find = AsyncMock(return_value=MagicMock(id=7))
    doubles.courses = make_repository()
    doubles.courses.find = AsyncMock(return_value=MagicMock(id=3))
    doubles.enrollments = make_repository(first_id=50)
    doubles.enrollment_exists = AsyncMock(return_value=False)
    with (
        patch(f"{MODULE}.students", doubles.students),
        patch(f"{MODULE}.courses", doubles.courses),
        patch(f"{MODULE}.enrollments", doubles.enrollments),
        patch(f"{MODULE}.enrollment_exists", doubles.enrollment_exists),
    ):
        yield doubles


@pytest.fixture
def enrollment_service(coordinator, today):
    """Create enrollment service with mock database."""
    return EnrollmentService(coordinator, today=lambda: today)


class TestEnrollmentServiceEnroll:
    """Tests for student enrollment."""

    @pytest.mark.asyncio
    async def test_enroll_student_success(self, enrollment_service, repos, mock_db):
        """Test successful student enrollment."""
        result = await enrollment_service.enroll_student(7, 3, date(2024, 1, 15))

        assert result.ok
        assert result.value.id == 50
        assert result.value.grade is None
        repos.enrollment_exists.assert_awaited_once_with(mock_db, 7, 3)
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_enroll_student_course_not_found(self, enrollment_service, repos):
        """Test enrollment fails when course not found."""
        repos.courses.find.return_value = None

        result = await enrollment_service.enroll_student(7, 3, date(2024, 1, 15))

        assert result.error.code == "reference_not_found"
        assert result.error.entity == "Course"
        repos.enrollments.insert.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_enroll_student_not_found(self, enrollment_service, repos):
        """Test enrollment fails when student not found."""
        repos.students.find.return_value = None

        result = await enrollment_service.enroll_student(7, 3, date(2024, 1, 15))

        assert result.error.entity == "Student"

    @pytest.mark.asyncio
    async def test_enroll_student_already_enrolled(self, enrollment_service, repos, mock_db):
        """Test enrollment fails when already enrolled."""
        repos.enrollment_exists.return_value = True

        result = await enrollment_service.enroll_student(7, 3, date(2024, 1, 15))

        assert result.error.code == "conflict"
        repos.enrollments.insert.assert_not_awaited()
        mock_db.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_enroll_future_date(self, enrollment_service, repos, mock_sessionmaker):
        """Test enrollment date may not be in the future."""
        result = await enrollment_service.enroll_student(7, 3, date(2024, 2, 1))

        assert result.error.field == "enrollment_date"
        mock_sessionmaker.assert_not_called()


class TestEnrollmentServiceGrade:
    """Tests for grade updates."""

    @pytest.mark.asyncio
    async def test_update_grade(self, enrollment_service, repos):
        repos.enrollments.find.return_value = Enrollment(
            id=50, student_id=7, course_id=3, enrollment_date=date(2024, 1, 15)
        )

        result = await enrollment_service.update_grade(50, " A- ")

        assert result.value.grade == "A-"

    @pytest.mark.asyncio
    async def test_update_grade_not_found(self, enrollment_service, repos):
        result = await enrollment_service.update_grade(50, "B")

        assert result.error.code == "not_found"


class TestEnrollmentServiceRemove:
    """Tests for enrollment removal."""

    @pytest.mark.asyncio
    async def test_remove_enrollment(self, enrollment_service, repos, mock_db):
        result = await enrollment_service.remove_enrollment(50)

        assert result.ok
        repos.enrollments.delete.assert_awaited_once_with(mock_db, 50)

    @pytest.mark.asyncio
    async def test_remove_missing_enrollment(self, enrollment_service, repos):
        repos.enrollments.delete.return_value = False

        result = await enrollment_service.remove_enrollment(50)

        assert result.error.code == "not_found"
