# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Uniqueness guards for one-per-key records.

Each guard is a read against the session of the running unit of work and
must be called in the same unit of work as the insert it protects. The
matching unique constraint in the schema catches the remaining race, which
the TransactionCoordinator reports as a ConflictError.
"""

from datetime import date

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.database.models import Account, Faculty, Item, Librarian, Program, Student
from src.infrastructure.database.repositories import (
    accounts,
    attendance,
    courses,
    enrollments,
    faculty,
    items,
    librarians,
    programs,
    results,
    students,
    submissions,
)


async def attendance_exists(
    session: AsyncSession, student_id: int, course_id: int, attendance_date: date
) -> bool:
    return await attendance.exists(
        session,
        student_id=student_id,
        course_id=course_id,
        attendance_date=attendance_date,
    )


async def enrollment_exists(session: AsyncSession, student_id: int, course_id: int) -> bool:
    return await enrollments.exists(session, student_id=student_id, course_id=course_id)


async def result_exists(
    session: AsyncSession, student_id: int, course_id: int, academic_year: str
) -> bool:
    return await results.exists(
        session,
        student_id=student_id,
        course_id=course_id,
        academic_year=academic_year,
    )


async def submission_exists(session: AsyncSession, assignment_id: int, student_id: int) -> bool:
    return await submissions.exists(
        session, assignment_id=assignment_id, student_id=student_id
    )


async def username_taken(
    session: AsyncSession, username: str, exclude_account_id: int | None = None
) -> bool:
    """Check whether another account already uses a username."""
    clauses = [Account.username == username]
    if exclude_account_id is not None:
        clauses.append(Account.id != exclude_account_id)
    return await accounts.exists(session, *clauses)


async def isbn_taken(
    session: AsyncSession, isbn: str, exclude_item_id: int | None = None
) -> bool:
    """Check whether another catalog item already carries an ISBN."""
    clauses = [Item.isbn == isbn]
    if exclude_item_id is not None:
        clauses.append(Item.id != exclude_item_id)
    return await items.exists(session, *clauses)


async def program_name_taken(
    session: AsyncSession, name: str, exclude_program_id: int | None = None
) -> bool:
    """Check whether another program has the same name, ignoring case."""
    clauses = [func.lower(Program.name) == name.lower()]
    if exclude_program_id is not None:
        clauses.append(Program.id != exclude_program_id)
    return await programs.exists(session, *clauses)


async def course_code_taken(
    session: AsyncSession, program_id: int, semester_number: int, course_code: str
) -> bool:
    return await courses.exists(
        session,
        program_id=program_id,
        semester_number=semester_number,
        course_code=course_code,
    )


async def email_taken(
    session: AsyncSession,
    email: str,
    exclude_kind: str | None = None,
    exclude_profile_id: int | None = None,
) -> bool:
    """Check whether any profile of any kind already uses an email.

    Args:
        session: Transactional session.
        email: Address to look for, compared case-insensitively.
        exclude_kind: Profile kind of the row to ignore (on update).
        exclude_profile_id: Id of the row to ignore (on update).
    """
    repositories = (
        ("Student", students, Student),
        ("Faculty", faculty, Faculty),
        ("Librarian", librarians, Librarian),
    )
    for kind, repository, model in repositories:
        clauses = [func.lower(model.email) == email.lower()]
        if kind == exclude_kind and exclude_profile_id is not None:
            clauses.append(model.id != exclude_profile_id)
        if await repository.exists(session, *clauses):
            return True
    return False
