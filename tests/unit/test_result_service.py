# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the course result service."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.domains.results.service import ResultService
from src.infrastructure.database.models import Result
from src.models.academic import ResultCreateRequest, ResultUpdateRequest

MODULE = "src.domains.results.service"


@pytest.fixture
def repos(make_repository):
    doubles = MagicMock()
    doubles.students = make_repository()
    doubles.students.find = AsyncMock(return_value=MagicMock(id=7))
    doubles.courses = make_repository()
    doubles.courses.find = AsyncMock(return_value=MagicMock(id=3))
    doubles.results = make_repository(first_id=60)
    doubles.result_exists = AsyncMock(return_value=False)
    with (
        patch(f"{MODULE}.students", doubles.students),
        patch(f"{MODULE}.courses", doubles.courses),
        patch(f"{MODULE}.results", doubles.results),
        patch(f"{MODULE}.result_exists", doubles.result_exists),
    ):
        yield doubles


@pytest.fixture
def result_service(coordinator):
    return ResultService(coordinator)


def request(**overrides) -> ResultCreateRequest:
    values = dict(
        student_id=7,
        course_id=3,
        semester_number=2,
        academic_year="2023-2024",
        result_status="Pass",
        marks_obtained=78,
        grade="B+",
    )
    values.update(overrides)
    return ResultCreateRequest(**values)


class TestRecordResult:
    """Tests for recording results."""

    @pytest.mark.asyncio
    async def test_record_success(self, result_service, repos, mock_db):
        result = await result_service.record_result(request())

        assert result.ok
        assert result.value.marks_obtained == 78
        repos.result_exists.assert_awaited_once_with(mock_db, 7, 3, "2023-2024")

    @pytest.mark.asyncio
    async def test_duplicate_year(self, result_service, repos):
        repos.result_exists.return_value = True

        result = await result_service.record_result(request())

        assert result.error.code == "conflict"
        assert "2023-2024" in result.error.message

    @pytest.mark.asyncio
    @pytest.mark.parametrize("marks", [-1, 101])
    async def test_marks_out_of_range(self, result_service, repos, marks):
        result = await result_service.record_result(request(marks_obtained=marks))

        assert result.error.field == "marks_obtained"

    @pytest.mark.asyncio
    async def test_semester_out_of_range(self, result_service, repos):
        result = await result_service.record_result(request(semester_number=9))

        assert result.error.field == "semester_number"

    @pytest.mark.asyncio
    async def test_marks_optional(self, result_service, repos):
        result = await result_service.record_result(
            request(marks_obtained=None, result_status="incomplete")
        )

        assert result.value.marks_obtained is None
        assert result.value.result_status == "Incomplete"


class TestUpdateResult:
    """Tests for result updates."""

    @pytest.mark.asyncio
    async def test_update_only_given_fields(self, result_service, repos):
        repos.results.find.return_value = Result(
            id=60,
            student_id=7,
            course_id=3,
            semester_number=2,
            academic_year="2023-2024",
            marks_obtained=35,
            grade="F",
            result_status="Fail",
        )

        result = await result_service.update_result(
            60, ResultUpdateRequest(marks_obtained=55, result_status="pass")
        )

        assert result.value.marks_obtained == 55
        assert result.value.result_status == "Pass"
        assert result.value.grade == "F"

    @pytest.mark.asyncio
    async def test_update_missing(self, result_service, repos):
        result = await result_service.update_result(60, ResultUpdateRequest(grade="A"))

        assert result.error.code == "not_found"
