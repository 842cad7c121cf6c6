# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Per-entity repositories for the records database.

Repositories hold no session of their own. The transactional session of the
running unit of work is passed explicitly into every call, so a repository
call can never silently run outside the transaction it belongs to.

Example:
    async def work(session: AsyncSession) -> int:
        account = await accounts.find_by_username(session, "jdoe")
        ...
"""

from __future__ import annotations

from typing import Any, ClassVar, Generic, TypeVar

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.database.models import (
    Account,
    Assignment,
    Attendance,
    Base,
    Course,
    Enrollment,
    Faculty,
    Fee,
    Item,
    Librarian,
    Loan,
    Program,
    Result,
    Routine,
    Student,
    Submission,
)

ModelT = TypeVar("ModelT", bound=Base)


class Repository(Generic[ModelT]):
    """Generic point lookups, filtered scans and writes for one model."""

    model: ClassVar[type[Base]]

    async def find(
        self,
        session: AsyncSession,
        record_id: int,
        *,
        for_update: bool = False,
    ) -> ModelT | None:
        """Load a row by primary key.

        Args:
            session: Transactional session.
            record_id: Primary key.
            for_update: Lock the row until the transaction ends.
        """
        return await session.get(self.model, record_id, with_for_update=for_update)

    async def find_by_key(
        self,
        session: AsyncSession,
        *,
        for_update: bool = False,
        **key: Any,
    ) -> ModelT | None:
        """Load the single row matching a natural key."""
        query = select(self.model).filter_by(**key)
        if for_update:
            query = query.with_for_update()
        result = await session.execute(query)
        return result.scalar_one_or_none()

    async def list_by(self, session: AsyncSession, **criteria: Any) -> list[ModelT]:
        """Load every row matching equality criteria, ordered by id."""
        query = select(self.model).filter_by(**criteria).order_by(self.model.id)
        result = await session.execute(query)
        return list(result.scalars().all())

    async def exists(self, session: AsyncSession, *clauses: Any, **criteria: Any) -> bool:
        """Check whether any row matches the given clauses and criteria."""
        query = select(self.model.id).select_from(self.model).filter_by(**criteria)
        if clauses:
            query = query.where(*clauses)
        result = await session.execute(query.limit(1))
        return result.scalar_one_or_none() is not None

    async def count(self, session: AsyncSession, *clauses: Any, **criteria: Any) -> int:
        """Count rows matching the given clauses and criteria."""
        query = select(func.count()).select_from(self.model).filter_by(**criteria)
        if clauses:
            query = query.where(*clauses)
        result = await session.execute(query)
        return int(result.scalar_one())

    async def insert(self, session: AsyncSession, record: ModelT) -> int:
        """Insert a row and return its generated id."""
        session.add(record)
        await session.flush()
        return record.id

    async def update(self, session: AsyncSession, record: ModelT) -> None:
        """Write pending attribute changes of a loaded row."""
        await session.flush()

    async def delete(self, session: AsyncSession, record_id: int) -> bool:
        """Delete a row by primary key. Returns False if nothing was deleted."""
        result = await session.execute(
            delete(self.model)
            .where(self.model.id == record_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    async def delete_by(self, session: AsyncSession, **criteria: Any) -> int:
        """Delete every row matching equality criteria. Returns the row count."""
        query = delete(self.model).filter_by(**criteria)
        result = await session.execute(
            query.execution_options(synchronize_session=False)
        )
        return result.rowcount

    async def update_by(
        self,
        session: AsyncSession,
        values: dict[str, Any],
        **criteria: Any,
    ) -> int:
        """Bulk update rows matching equality criteria. Returns the row count."""
        query = update(self.model).filter_by(**criteria).values(**values)
        result = await session.execute(
            query.execution_options(synchronize_session=False)
        )
        return result.rowcount


class AccountRepository(Repository[Account]):
    model = Account

    async def find_by_username(self, session: AsyncSession, username: str) -> Account | None:
        return await self.find_by_key(session, username=username)


class StudentRepository(Repository[Student]):
    model = Student


class FacultyRepository(Repository[Faculty]):
    model = Faculty


class LibrarianRepository(Repository[Librarian]):
    model = Librarian


class ProgramRepository(Repository[Program]):
    model = Program


class CourseRepository(Repository[Course]):
    model = Course


class EnrollmentRepository(Repository[Enrollment]):
    model = Enrollment


class AttendanceRepository(Repository[Attendance]):
    model = Attendance


class ResultRepository(Repository[Result]):
    model = Result


class AssignmentRepository(Repository[Assignment]):
    model = Assignment


class SubmissionRepository(Repository[Submission]):
    model = Submission


class RoutineRepository(Repository[Routine]):
    model = Routine


class FeeRepository(Repository[Fee]):
    model = Fee


class ItemRepository(Repository[Item]):
    """Catalog items and their availability counter."""

    model = Item

    async def take_copy(self, session: AsyncSession, item_id: int) -> bool:
        """Decrement available copies by one if any are left.

        The check and the decrement are one conditional UPDATE, so two
        transactions can never both take the last copy.

        Returns:
            True if a copy was taken, False if none was available or the
            item does not exist.
        """
        result = await session.execute(
            update(Item)
            .where(Item.id == item_id, Item.available_copies > 0)
            .values(available_copies=Item.available_copies - 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def put_back_copy(self, session: AsyncSession, item_id: int) -> bool:
        """Increment available copies by one, never above total copies.

        Returns:
            True if the counter was incremented.
        """
        result = await session.execute(
            update(Item)
            .where(Item.id == item_id, Item.available_copies < Item.total_copies)
            .values(available_copies=Item.available_copies + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1


class LoanRepository(Repository[Loan]):
    """Loans against catalog items."""

    model = Loan

    async def count_open(self, session: AsyncSession, **criteria: Any) -> int:
        """Count loans with no return date matching the criteria."""
        return await self.count(session, Loan.return_date.is_(None), **criteria)


accounts = AccountRepository()
students = StudentRepository()
faculty = FacultyRepository()
librarians = LibrarianRepository()
programs = ProgramRepository()
courses = CourseRepository()
enrollments = EnrollmentRepository()
attendance = AttendanceRepository()
results = ResultRepository()
assignments = AssignmentRepository()
submissions = SubmissionRepository()
routines = RoutineRepository()
fees = FeeRepository()
items = ItemRepository()
loans = LoanRepository()
