# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Fixtures for integration tests against a real SQLite records database.

Each test gets a fresh database file under tmp_path with the full schema,
so tests never share rows.
"""

from collections.abc import AsyncIterator
from datetime import date

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from src.core.config.settings import Settings
from src.domains.attendance import AttendanceService
from src.domains.identity import BcryptHasher, IdentityService
from src.domains.library import LendingLedger
from src.infrastructure.database.connection import (
    build_engine,
    build_sessionmaker,
    create_schema,
)
from src.infrastructure.database.models import (
    Account,
    Base,
    Course,
    Item,
    Program,
    Student,
)
from src.infrastructure.database.transaction import TransactionCoordinator


@pytest.fixture
async def engine(test_settings: Settings) -> AsyncIterator[AsyncEngine]:
    """Provide an engine with the records schema created."""
    engine = build_engine(test_settings)
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return build_sessionmaker(engine)


@pytest.fixture
def coordinator(
    sessionmaker: async_sessionmaker[AsyncSession],
    test_settings: Settings,
) -> TransactionCoordinator:
    return TransactionCoordinator(
        sessionmaker,
        timeout=test_settings.database.transaction_timeout_seconds,
    )


@pytest.fixture
def ledger(coordinator, test_settings, today) -> LendingLedger:
    return LendingLedger(coordinator, settings=test_settings, today=lambda: today)


@pytest.fixture
def identity(coordinator, test_settings, today, fast_hasher: BcryptHasher) -> IdentityService:
    return IdentityService(
        coordinator,
        hasher=fast_hasher,
        settings=test_settings,
        today=lambda: today,
    )


@pytest.fixture
def attendance_service(coordinator, today) -> AttendanceService:
    return AttendanceService(coordinator, today=lambda: today)


class RecordSeeder:
    """Writes fixture rows directly, outside any domain operation."""

    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession], hasher: BcryptHasher) -> None:
        self._sessionmaker = sessionmaker
        self._hasher = hasher

    async def add(self, *records: Base) -> None:
        async with self._sessionmaker() as session:
            session.add_all(records)
            await session.commit()

    async def program(self, program_id: int = 1, name: str = "Computer Science") -> None:
        await self.add(Program(id=program_id, name=name))

    async def student(
        self,
        student_id: int = 7,
        program_id: int = 1,
        username: str | None = None,
    ) -> None:
        """Seed a student with its account. The program must exist."""
        username = username or f"student{student_id}"
        account = Account(
            id=1000 + student_id,
            username=username,
            password_hash=self._hasher.hash("secret-pass"),
            role="Student",
        )
        await self.add(account)
        await self.add(
            Student(
                id=student_id,
                account_id=account.id,
                program_id=program_id,
                first_name="Test",
                last_name=f"Student{student_id}",
                date_of_birth=date(2004, 5, 1),
                email=f"{username}@campus.example",
                enrollment_date=date(2023, 9, 1),
            )
        )

    async def course(self, course_id: int = 3, program_id: int = 1) -> None:
        await self.add(
            Course(
                id=course_id,
                program_id=program_id,
                semester_number=1,
                course_code=f"CS{course_id:03d}",
                course_name=f"Course {course_id}",
                credits=4,
                department="Computing",
            )
        )

    async def item(self, item_id: int = 1, copies: int = 1, title: str = "Dune") -> None:
        await self.add(
            Item(
                id=item_id,
                title=title,
                author="Frank Herbert",
                total_copies=copies,
                available_copies=copies,
            )
        )

    async def get(self, model: type[Base], record_id: int) -> Base | None:
        async with self._sessionmaker() as session:
            return await session.get(model, record_id)

    async def count(self, model: type[Base], *clauses) -> int:
        async with self._sessionmaker() as session:
            query = select(func.count()).select_from(model)
            if clauses:
                query = query.where(*clauses)
            return int((await session.execute(query)).scalar_one())


@pytest.fixture
def seed(sessionmaker, fast_hasher) -> RecordSeeder:
    """Provide the fixture row writer."""
    return RecordSeeder(sessionmaker, fast_hasher)
