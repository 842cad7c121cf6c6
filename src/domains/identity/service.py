# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Identity lifecycle service for role holders.

A role holder is a login Account paired with exactly one Student, Faculty or
Librarian profile. This module provides the IdentityService class for:
- Creating the account and profile together
- Deleting both, with the dependent records of the profile
- Updating a profile and renaming its account
- Authenticating and changing passwords
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import Settings, get_settings
from src.core.errors import ConflictError, NotFoundError, ReferenceNotFoundError, ValidationError
from src.core.result import Failure, OperationResult, Success, rejects_as_failure
from src.domains.guards import email_taken, username_taken
from src.domains.identity.credentials import BcryptHasher, CredentialHasher
from src.domains.validation import (
    optional_text,
    require_choice,
    require_email,
    require_id,
    require_not_future,
    require_password,
    require_text,
)
from src.infrastructure.database.models import Account, Faculty, Librarian, Student
from src.infrastructure.database.repositories import (
    Repository,
    accounts,
    assignments,
    attendance,
    enrollments,
    faculty,
    fees,
    librarians,
    loans,
    programs,
    results,
    routines,
    students,
    submissions,
)
from src.infrastructure.database.transaction import TransactionCoordinator
from src.models.common import Role
from src.models.identity import (
    AccountResponse,
    ProfileData,
    ProfileResponse,
    ProfileUpdate,
    StudentProfileData,
)
from src.utils.datetime import utc_today

logger = logging.getLogger(__name__)

PROFILE_KINDS = (Role.STUDENT.value, Role.FACULTY.value, Role.LIBRARIAN.value)

_PROFILE_MODELS: dict[str, type[Student | Faculty | Librarian]] = {
    Role.STUDENT.value: Student,
    Role.FACULTY.value: Faculty,
    Role.LIBRARIAN.value: Librarian,
}

_PROFILE_REPOSITORIES: dict[str, Repository[Any]] = {
    Role.STUDENT.value: students,
    Role.FACULTY.value: faculty,
    Role.LIBRARIAN.value: librarians,
}

# Fields each profile kind accepts on update
_UPDATABLE_FIELDS: dict[str, frozenset[str]] = {
    Role.STUDENT.value: frozenset(
        {
            "first_name",
            "last_name",
            "email",
            "phone_number",
            "date_of_birth",
            "enrollment_date",
            "program_id",
            "gender",
            "address",
            "major",
        }
    ),
    Role.FACULTY.value: frozenset(
        {"first_name", "last_name", "email", "phone_number", "department"}
    ),
    Role.LIBRARIAN.value: frozenset({"first_name", "last_name", "email", "phone_number"}),
}


class IdentityService:
    """Service for the paired account/profile lifecycle.

    Every write runs as a single unit of work, so an account never exists
    without its profile and a profile never outlives its account.

    Attributes:
        _coordinator: Runs each operation atomically.
        _hasher: Credential hashing collaborator.
        _min_password_length: Shortest accepted password.
        _today: Returns the current calendar day.
    """

    def __init__(
        self,
        coordinator: TransactionCoordinator,
        hasher: CredentialHasher | None = None,
        settings: Settings | None = None,
        today: Callable[[], date] = utc_today,
    ) -> None:
        """Initialize identity service.

        Args:
            coordinator: Transaction coordinator for the records database.
            hasher: Credential hasher. Defaults to bcrypt with the configured rounds.
            settings: Application settings. Defaults to get_settings().
            today: Clock used for date-of-birth and enrollment checks.
        """
        settings = settings or get_settings()
        self._coordinator = coordinator
        self._hasher = hasher or BcryptHasher(rounds=settings.security.bcrypt_rounds)
        self._min_password_length = settings.security.min_password_length
        self._today = today

    @rejects_as_failure
    async def create_role_holder(
        self,
        profile_data: ProfileData,
        username: str,
        password: str,
    ) -> OperationResult[ProfileResponse]:
        """Create an account and its profile as one unit.

        Args:
            profile_data: Student, faculty or librarian profile fields. Its
                kind decides the role tag of the account.
            username: Login name, unique across all accounts.
            password: Plain password, hashed before storage.

        Returns:
            Success with the new profile, or Failure with:
            ValidationError for malformed input, ConflictError when the
            username or email is taken, ReferenceNotFoundError when a
            student's program does not exist.
        """
        kind = profile_data.kind
        fields = self._validate_profile_fields(kind, profile_data.model_dump(exclude={"kind"}))
        username = require_text("username", username)
        password = require_password("password", password, self._min_password_length)
        credential_hash = self._hasher.hash(password)

        async def work(session: AsyncSession) -> ProfileResponse:
            if await username_taken(session, username):
                raise ConflictError(f"Username '{username}' is already taken")
            if await email_taken(session, fields["email"]):
                raise ConflictError(f"Email '{fields['email']}' is already registered")
            if isinstance(profile_data, StudentProfileData):
                if await programs.find(session, fields["program_id"]) is None:
                    raise ReferenceNotFoundError("Program", fields["program_id"])

            account = Account(username=username, password_hash=credential_hash, role=kind)
            await accounts.insert(session, account)
            profile = _PROFILE_MODELS[kind](account_id=account.id, **fields)
            await _PROFILE_REPOSITORIES[kind].insert(session, profile)
            return _profile_response(kind, profile, account)

        result = await self._coordinator.run_atomic(work, operation="create_role_holder")
        if result.ok:
            logger.info(
                "Created %s role holder: profile=%s, account=%s",
                kind,
                result.value.id,
                result.value.account.id,
            )
        return result

    @rejects_as_failure
    async def delete_role_holder(self, kind: str, profile_id: int) -> OperationResult[None]:
        """Delete a profile, its dependent records and its account as one unit.

        Students with open loans and faculty referenced by assignments are
        refused. Otherwise a student's closed loans, submissions, attendance,
        enrollments, results and fees are deleted, and a faculty member is
        detached from attendance marks and routines.

        Args:
            kind: Student, Faculty or Librarian.
            profile_id: Id of the profile to delete.

        Returns:
            Success(None), or Failure with NotFoundError when the profile
            does not exist or ConflictError when dependents block deletion.
        """
        kind = require_choice("kind", kind, PROFILE_KINDS)
        profile_id = require_id("profile_id", profile_id)
        repository = _PROFILE_REPOSITORIES[kind]

        async def work(session: AsyncSession) -> None:
            profile = await repository.find(session, profile_id, for_update=True)
            if profile is None:
                raise NotFoundError(kind, profile_id)

            if kind == Role.STUDENT.value:
                await _release_student(session, profile_id)
            elif kind == Role.FACULTY.value:
                await _release_faculty(session, profile_id)

            account_id = profile.account_id
            await repository.delete(session, profile_id)
            await accounts.delete(session, account_id)

        result = await self._coordinator.run_atomic(work, operation="delete_role_holder")
        if result.ok:
            logger.info("Deleted %s role holder: profile=%s", kind, profile_id)
        return result

    @rejects_as_failure
    async def update_profile(
        self,
        kind: str,
        profile_id: int,
        changes: ProfileUpdate,
        username: str | None = None,
    ) -> OperationResult[ProfileResponse]:
        """Update profile fields and optionally rename the linked account.

        Args:
            kind: Student, Faculty or Librarian.
            profile_id: Id of the profile to update.
            changes: Fields to change. Unset fields are left untouched.
            username: New login name for the linked account, if any.

        Returns:
            Success with the updated profile, or Failure with
            ValidationError, NotFoundError, ConflictError (email or username
            used by someone else) or ReferenceNotFoundError (program).
        """
        kind = require_choice("kind", kind, PROFILE_KINDS)
        profile_id = require_id("profile_id", profile_id)
        requested = changes.model_dump(exclude_unset=True)
        for name in requested:
            if name not in _UPDATABLE_FIELDS[kind]:
                raise ValidationError(name, f"does not apply to {kind} profiles")
        fields = self._validate_profile_fields(kind, requested, partial=True)
        if username is not None:
            username = require_text("username", username)
        repository = _PROFILE_REPOSITORIES[kind]

        async def work(session: AsyncSession) -> ProfileResponse:
            profile = await repository.find(session, profile_id, for_update=True)
            if profile is None:
                raise NotFoundError(kind, profile_id)
            if "email" in fields and await email_taken(
                session, fields["email"], exclude_kind=kind, exclude_profile_id=profile_id
            ):
                raise ConflictError(f"Email '{fields['email']}' is already used by another profile")
            if "program_id" in fields and await programs.find(session, fields["program_id"]) is None:
                raise ReferenceNotFoundError("Program", fields["program_id"])

            account = await accounts.find(session, profile.account_id, for_update=True)
            if account is None:
                raise NotFoundError("Account", profile.account_id)
            if username is not None and username != account.username:
                if await username_taken(session, username, exclude_account_id=account.id):
                    raise ConflictError(f"Username '{username}' is already taken")
                account.username = username

            for name, value in fields.items():
                setattr(profile, name, value)
            await repository.update(session, profile)
            return _profile_response(kind, profile, account)

        return await self._coordinator.run_atomic(work, operation="update_profile")

    @rejects_as_failure
    async def authenticate(self, username: str, password: str) -> OperationResult[AccountResponse]:
        """Check a username and password.

        Returns:
            Success with the account, or Failure(ValidationError) naming
            ``credentials`` when the account is unknown or the password
            does not match. The two cases are indistinguishable.
        """
        username = require_text("username", username)

        async def work(session: AsyncSession) -> Account | None:
            return await accounts.find_by_username(session, username)

        result = await self._coordinator.run_atomic(work, operation="authenticate")
        account = result.unwrap()
        if account is None or not self._hasher.verify(password, account.password_hash):
            logger.info("Authentication failed: username=%s", username)
            return Failure(ValidationError("credentials", "invalid username or password"))
        return Success(AccountResponse.model_validate(account))

    @rejects_as_failure
    async def change_password(
        self,
        account_id: int,
        current_password: str,
        new_password: str,
    ) -> OperationResult[None]:
        """Replace an account's password after checking the current one.

        Returns:
            Success(None), or Failure with ValidationError (weak new
            password or wrong current password) or NotFoundError.
        """
        account_id = require_id("account_id", account_id)
        new_password = require_password("new_password", new_password, self._min_password_length)
        new_hash = self._hasher.hash(new_password)

        async def work(session: AsyncSession) -> None:
            account = await accounts.find(session, account_id, for_update=True)
            if account is None:
                raise NotFoundError("Account", account_id)
            if not self._hasher.verify(current_password, account.password_hash):
                raise ValidationError("current_password", "does not match")
            account.password_hash = new_hash
            await accounts.update(session, account)

        result = await self._coordinator.run_atomic(work, operation="change_password")
        if result.ok:
            logger.info("Password changed: account=%s", account_id)
        return result

    def _validate_profile_fields(
        self,
        kind: str,
        data: dict[str, Any],
        partial: bool = False,
    ) -> dict[str, Any]:
        """Validate and normalize profile fields.

        With ``partial`` only the keys present in data are checked.
        """
        today = self._today()
        rules: dict[str, Callable[[str, Any], Any]] = {
            "first_name": require_text,
            "last_name": require_text,
            "email": require_email,
            "department": require_text,
            "program_id": require_id,
            "date_of_birth": lambda f, v: require_not_future(f, v, today),
            "enrollment_date": lambda f, v: require_not_future(f, v, today),
        }
        cleaned: dict[str, Any] = {}
        for name in sorted(_UPDATABLE_FIELDS[kind], key=_FIELD_ORDER.index):
            if partial and name not in data:
                continue
            value = data.get(name)
            rule = rules.get(name)
            cleaned[name] = rule(name, value) if rule else optional_text(value)
        return cleaned


# Validation order, so the first reported error is deterministic
_FIELD_ORDER = [
    "first_name",
    "last_name",
    "email",
    "date_of_birth",
    "enrollment_date",
    "program_id",
    "department",
    "phone_number",
    "gender",
    "address",
    "major",
]


async def _release_student(session: AsyncSession, student_id: int) -> None:
    """Delete a student's dependent records, refusing while loans are open."""
    open_loans = await loans.count_open(session, student_id=student_id)
    if open_loans:
        raise ConflictError(f"Student {student_id} still has {open_loans} open loan(s)")
    await loans.delete_by(session, student_id=student_id)
    await submissions.delete_by(session, student_id=student_id)
    await attendance.delete_by(session, student_id=student_id)
    await enrollments.delete_by(session, student_id=student_id)
    await results.delete_by(session, student_id=student_id)
    await fees.delete_by(session, student_id=student_id)


async def _release_faculty(session: AsyncSession, faculty_id: int) -> None:
    """Detach a faculty member from optional references, refusing while assignments exist."""
    if await assignments.exists(session, faculty_id=faculty_id):
        raise ConflictError(f"Faculty {faculty_id} is referenced by assignments")
    await attendance.update_by(
        session, {"taken_by_faculty_id": None}, taken_by_faculty_id=faculty_id
    )
    await routines.update_by(session, {"faculty_id": None}, faculty_id=faculty_id)


def _profile_response(
    kind: str,
    profile: Student | Faculty | Librarian,
    account: Account,
) -> ProfileResponse:
    values = {name: getattr(profile, name, None) for name in _UPDATABLE_FIELDS[kind]}
    return ProfileResponse(
        kind=kind,
        id=profile.id,
        account=AccountResponse.model_validate(account),
        **values,
    )
