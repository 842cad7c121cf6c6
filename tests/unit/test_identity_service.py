# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the identity lifecycle service."""

from datetime import date, datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.domains.identity.service import IdentityService
from src.infrastructure.database.models import Account, Faculty, Student
from src.models.identity import (
    FacultyProfileData,
    LibrarianProfileData,
    ProfileUpdate,
    StudentProfileData,
)

MODULE = "src.domains.identity.service"


@pytest.fixture
def repos(make_repository):
    """Patch every repository and guard the identity service touches."""
    doubles = MagicMock()
    doubles.accounts = make_repository(first_id=10)
    doubles.accounts.find_by_username = AsyncMock(return_value=None)
    doubles.programs = make_repository()
    doubles.programs.find = AsyncMock(return_value=MagicMock(id=1))
    doubles.students = make_repository(first_id=7)
    doubles.faculty = make_repository(first_id=3)
    doubles.librarians = make_repository(first_id=2)
    doubles.loans = make_repository()
    doubles.loans.count_open = AsyncMock(return_value=0)
    doubles.assignments = make_repository()
    doubles.username_taken = AsyncMock(return_value=False)
    doubles.email_taken = AsyncMock(return_value=False)
    cascaded = ["submissions", "attendance", "enrollments", "results", "fees", "routines"]
    for name in cascaded:
        setattr(doubles, name, make_repository())

    patches = [
        patch(f"{MODULE}.{name}", getattr(doubles, name))
        for name in [
            "accounts",
            "programs",
            "loans",
            "assignments",
            "username_taken",
            "email_taken",
            *cascaded,
        ]
    ]
    patches.append(
        patch.dict(
            f"{MODULE}._PROFILE_REPOSITORIES",
            {
                "Student": doubles.students,
                "Faculty": doubles.faculty,
                "Librarian": doubles.librarians,
            },
        )
    )
    for p in patches:
        p.start()
    yield doubles
    for p in reversed(patches):
        p.stop()


@pytest.fixture
def identity_service(coordinator, fast_hasher, test_settings, today):
    """Create identity service with a cheap hasher."""
    return IdentityService(
        coordinator,
        hasher=fast_hasher,
        settings=test_settings,
        today=lambda: today,
    )


@pytest.fixture
def student_data() -> StudentProfileData:
    return StudentProfileData(
        first_name="Ada",
        last_name="Lovelace",
        email="ada@campus.edu",
        date_of_birth=date(2002, 12, 10),
        enrollment_date=date(2023, 9, 1),
        program_id=1,
        major="Mathematics",
    )


def stored_account(fast_hasher, password="secret1", **overrides) -> Account:
    values = dict(
        id=10,
        username="ada",
        password_hash=fast_hasher.hash(password),
        role="Student",
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )
    values.update(overrides)
    return Account(**values)


class TestCreateRoleHolder:
    """Tests for paired account and profile creation."""

    @pytest.mark.asyncio
    async def test_create_student(self, identity_service, repos, student_data, mock_db):
        """Test the account and profile are inserted in one unit of work."""
        result = await identity_service.create_role_holder(student_data, "ada", "secret1")

        assert result.ok
        profile = result.value
        assert profile.kind == "Student"
        assert profile.id == 7
        assert profile.account.id == 10
        assert profile.account.role == "Student"
        assert profile.major == "Mathematics"

        account = repos.accounts.insert.await_args.args[1]
        assert account.password_hash != "secret1"
        student = repos.students.insert.await_args.args[1]
        assert student.account_id == 10
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_create_faculty_role_tag(self, identity_service, repos):
        data = FacultyProfileData(
            first_name="Alan", last_name="Turing", email="alan@campus.edu", department="CS"
        )

        result = await identity_service.create_role_holder(data, "alan", "secret1")

        assert result.value.kind == "Faculty"
        assert result.value.account.role == "Faculty"
        assert result.value.department == "CS"
        repos.programs.find.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_duplicate_username(self, identity_service, repos, student_data, mock_db):
        """Test a taken username creates nothing."""
        repos.username_taken.return_value = True

        result = await identity_service.create_role_holder(student_data, "ada", "secret1")

        assert result.error.code == "conflict"
        repos.accounts.insert.assert_not_awaited()
        repos.students.insert.assert_not_awaited()
        mock_db.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_duplicate_email(self, identity_service, repos):
        repos.email_taken.return_value = True
        data = LibrarianProfileData(first_name="Mel", last_name="Dewey", email="mel@campus.edu")

        result = await identity_service.create_role_holder(data, "mel", "secret1")

        assert result.error.code == "conflict"
        repos.accounts.insert.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_program(self, identity_service, repos, student_data):
        repos.programs.find.return_value = None

        result = await identity_service.create_role_holder(student_data, "ada", "secret1")

        assert result.error.code == "reference_not_found"
        repos.accounts.insert.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_short_password(self, identity_service, repos, student_data, mock_sessionmaker):
        """Test credential validation happens before the transaction."""
        result = await identity_service.create_role_holder(student_data, "ada", "12345")

        assert result.error.field == "password"
        mock_sessionmaker.assert_not_called()

    @pytest.mark.asyncio
    async def test_overlong_password(self, identity_service, repos, student_data, mock_sessionmaker):
        """Test a password bcrypt cannot hash is rejected as a validation failure."""
        result = await identity_service.create_role_holder(student_data, "ada", "x" * 80)

        assert result.error.field == "password"
        assert "72 bytes" in result.error.message
        mock_sessionmaker.assert_not_called()

    @pytest.mark.asyncio
    async def test_invalid_email(self, identity_service, repos, student_data):
        data = student_data.model_copy(update={"email": "not-an-email"})

        result = await identity_service.create_role_holder(data, "ada", "secret1")

        assert result.error.field == "email"

    @pytest.mark.asyncio
    async def test_future_birth_date(self, identity_service, repos, student_data):
        data = student_data.model_copy(update={"date_of_birth": date(2030, 1, 1)})

        result = await identity_service.create_role_holder(data, "ada", "secret1")

        assert result.error.field == "date_of_birth"


class TestDeleteRoleHolder:
    """Tests for paired deletion and explicit cascades."""

    @pytest.mark.asyncio
    async def test_delete_missing_profile(self, identity_service, repos):
        """Test NotFound is reported before anything is deleted."""
        result = await identity_service.delete_role_holder("Student", 7)

        assert result.error.code == "not_found"
        repos.students.delete.assert_not_awaited()
        repos.accounts.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_student_cascades(self, identity_service, repos, mock_db):
        """Test a student's dependents, profile and account go together."""
        repos.students.find.return_value = Student(id=7, account_id=10)

        result = await identity_service.delete_role_holder("student", 7)

        assert result.ok
        for name in ["loans", "submissions", "attendance", "enrollments", "results", "fees"]:
            getattr(repos, name).delete_by.assert_awaited_once_with(mock_db, student_id=7)
        repos.students.delete.assert_awaited_once_with(mock_db, 7)
        repos.accounts.delete.assert_awaited_once_with(mock_db, 10)

    @pytest.mark.asyncio
    async def test_delete_student_with_open_loans(self, identity_service, repos, mock_db):
        repos.students.find.return_value = Student(id=7, account_id=10)
        repos.loans.count_open.return_value = 2

        result = await identity_service.delete_role_holder("Student", 7)

        assert result.error.code == "conflict"
        repos.accounts.delete.assert_not_awaited()
        mock_db.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_delete_faculty_detaches_references(self, identity_service, repos, mock_db):
        repos.faculty.find.return_value = Faculty(id=3, account_id=11)

        result = await identity_service.delete_role_holder("Faculty", 3)

        assert result.ok
        repos.attendance.update_by.assert_awaited_once_with(
            mock_db, {"taken_by_faculty_id": None}, taken_by_faculty_id=3
        )
        repos.routines.update_by.assert_awaited_once_with(mock_db, {"faculty_id": None}, faculty_id=3)
        repos.accounts.delete.assert_awaited_once_with(mock_db, 11)

    @pytest.mark.asyncio
    async def test_delete_faculty_with_assignments(self, identity_service, repos):
        repos.faculty.find.return_value = Faculty(id=3, account_id=11)
        repos.assignments.exists.return_value = True

        result = await identity_service.delete_role_holder("Faculty", 3)

        assert result.error.code == "conflict"
        repos.faculty.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_unknown_kind(self, identity_service, repos):
        result = await identity_service.delete_role_holder("Admin", 1)

        assert result.error.field == "kind"


class TestUpdateProfile:
    """Tests for profile updates and account renames."""

    @pytest.mark.asyncio
    async def test_update_and_rename(self, identity_service, repos, fast_hasher):
        repos.faculty.find.return_value = Faculty(
            id=3, account_id=11, first_name="Alan", last_name="Turing",
            email="alan@campus.edu", department="CS",
        )
        account = stored_account(fast_hasher, id=11, username="alan", role="Faculty")
        repos.accounts.find.return_value = account

        result = await identity_service.update_profile(
            "Faculty", 3, ProfileUpdate(department="Mathematics"), username="aturing"
        )

        assert result.value.department == "Mathematics"
        assert result.value.account.username == "aturing"
        repos.username_taken.assert_awaited_once()
        assert repos.username_taken.await_args.kwargs["exclude_account_id"] == 11

    @pytest.mark.asyncio
    async def test_rename_to_taken_username(self, identity_service, repos, fast_hasher):
        repos.faculty.find.return_value = Faculty(id=3, account_id=11)
        repos.accounts.find.return_value = stored_account(fast_hasher, id=11, username="alan")
        repos.username_taken.return_value = True

        result = await identity_service.update_profile(
            "Faculty", 3, ProfileUpdate(), username="ada"
        )

        assert result.error.code == "conflict"

    @pytest.mark.asyncio
    async def test_field_from_other_kind_rejected(self, identity_service, repos):
        result = await identity_service.update_profile("Librarian", 2, ProfileUpdate(major="Art"))

        assert result.error.field == "major"

    @pytest.mark.asyncio
    async def test_email_checked_excluding_self(self, identity_service, repos, fast_hasher):
        repos.librarians.find.return_value = MagicMock(id=2, account_id=12)
        repos.accounts.find.return_value = stored_account(fast_hasher, id=12, role="Librarian")
        repos.email_taken.return_value = True

        result = await identity_service.update_profile(
            "Librarian", 2, ProfileUpdate(email="taken@campus.edu")
        )

        assert result.error.code == "conflict"
        assert repos.email_taken.await_args.kwargs == {
            "exclude_kind": "Librarian",
            "exclude_profile_id": 2,
        }


class TestCredentials:
    """Tests for authentication and password changes."""

    @pytest.mark.asyncio
    async def test_authenticate_success(self, identity_service, repos, fast_hasher):
        repos.accounts.find_by_username.return_value = stored_account(fast_hasher)

        result = await identity_service.authenticate("ada", "secret1")

        assert result.value.username == "ada"

    @pytest.mark.asyncio
    async def test_authenticate_wrong_password(self, identity_service, repos, fast_hasher):
        repos.accounts.find_by_username.return_value = stored_account(fast_hasher)

        result = await identity_service.authenticate("ada", "wrong-password")

        assert result.error.field == "credentials"

    @pytest.mark.asyncio
    async def test_authenticate_unknown_user(self, identity_service, repos):
        result = await identity_service.authenticate("nobody", "secret1")

        assert result.error.field == "credentials"

    @pytest.mark.asyncio
    async def test_change_password(self, identity_service, repos, fast_hasher):
        account = stored_account(fast_hasher)
        repos.accounts.find.return_value = account

        result = await identity_service.change_password(10, "secret1", "n3w-secret")

        assert result.ok
        assert fast_hasher.verify("n3w-secret", account.password_hash)

    @pytest.mark.asyncio
    async def test_change_password_wrong_current(self, identity_service, repos, fast_hasher):
        account = stored_account(fast_hasher)
        original_hash = account.password_hash
        repos.accounts.find.return_value = account

        result = await identity_service.change_password(10, "bad-guess", "n3w-secret")

        assert result.error.field == "current_password"
        assert account.password_hash == original_hash

    @pytest.mark.asyncio
    async def test_change_password_overlong(
        self, identity_service, repos, fast_hasher, mock_sessionmaker
    ):
        account = stored_account(fast_hasher)
        original_hash = account.password_hash
        repos.accounts.find.return_value = account

        result = await identity_service.change_password(10, "secret1", "x" * 80)

        assert result.error.field == "new_password"
        assert account.password_hash == original_hash
        mock_sessionmaker.assert_not_called()

    @pytest.mark.asyncio
    async def test_authenticate_overlong_password(self, identity_service, repos, fast_hasher):
        repos.accounts.find_by_username.return_value = stored_account(fast_hasher)

        result = await identity_service.authenticate("ada", "x" * 80)

        assert result.error.field == "credentials"
