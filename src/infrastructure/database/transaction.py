# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit-of-work execution with commit/rollback semantics.

Every domain operation that writes is exactly one ``run_atomic`` call. The
coordinator opens a session, hands it to the work coroutine, commits when
the work returns and rolls back on every other exit:

- OperationError raised by the work: rolled back, returned as Failure.
- IntegrityError (a unique constraint caught a race past a guard): rolled
  back, returned as Failure(ConflictError).
- Any other SQLAlchemyError or a timeout: rolled back, raised as
  InfrastructureError.
- Cancellation or programming errors: rolled back, re-raised unchanged.

The session is released on every path by ``async with``.

Example:
    >>> coordinator = TransactionCoordinator(get_sessionmaker())
    >>> async def work(session: AsyncSession) -> Loan:
    ...     ...
    >>> result = await coordinator.run_atomic(work, operation="borrow")
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from contextvars import ContextVar
from typing import TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.core.errors import ConflictError, OperationError
from src.core.result import Failure, OperationResult, Success
from src.infrastructure.database.connection import InfrastructureError
from src.utils.logging import get_logger

T = TypeVar("T")

UnitOfWork = Callable[[AsyncSession], Awaitable[T]]

logger = get_logger(__name__)

# Set while a unit of work is running in the current task
_active_unit: ContextVar[str | None] = ContextVar("active_unit_of_work", default=None)


class NestedUnitOfWorkError(RuntimeError):
    """Raised when run_atomic is called from inside another unit of work."""

    pass


class TransactionCoordinator:
    """Runs units of work atomically against the records database.

    Attributes:
        _sessionmaker: Factory for one AsyncSession per unit of work.
        _timeout: Seconds a unit of work may run before it is rolled back.
    """

    def __init__(
        self,
        sessionmaker: async_sessionmaker[AsyncSession],
        timeout: float | None = None,
    ) -> None:
        """Initialize the coordinator.

        Args:
            sessionmaker: Session factory bound to the records engine.
            timeout: Optional per-unit timeout in seconds.
        """
        self._sessionmaker = sessionmaker
        self._timeout = timeout

    async def run_atomic(
        self,
        work: UnitOfWork[T],
        operation: str = "unit_of_work",
    ) -> OperationResult[T]:
        """Execute work inside one transaction.

        Args:
            work: Coroutine function receiving the transactional session.
                All steps of the operation must happen inside it.
            operation: Name used in log records.

        Returns:
            Success with the work's return value, or Failure carrying the
            OperationError that caused the rollback.

        Raises:
            NestedUnitOfWorkError: If called from inside another unit of work.
            InfrastructureError: If the storage backend fails or times out.
        """
        outer = _active_unit.get()
        if outer is not None:
            raise NestedUnitOfWorkError(
                f"{operation} started inside running unit of work {outer}"
            )

        token = _active_unit.set(operation)
        try:
            async with self._sessionmaker() as session:
                try:
                    async with asyncio.timeout(self._timeout):
                        value = await work(session)
                        await session.commit()
                except OperationError as e:
                    await self._rollback(session, operation, e)
                    logger.info(
                        "unit_of_work_rejected",
                        operation=operation,
                        code=e.code,
                        reason=e.message,
                    )
                    return Failure(e)
                except IntegrityError as e:
                    await self._rollback(session, operation, e)
                    logger.info(
                        "unit_of_work_conflict",
                        operation=operation,
                        detail=str(e.orig),
                    )
                    return Failure(ConflictError(f"Duplicate or inconsistent record: {e.orig}"))
                except SQLAlchemyError as e:
                    await self._rollback(session, operation, e)
                    logger.error("unit_of_work_failed", operation=operation, exc_info=True)
                    raise InfrastructureError(f"{operation} failed", e) from e
                except TimeoutError as e:
                    await self._rollback(session, operation, e)
                    logger.error(
                        "unit_of_work_timeout",
                        operation=operation,
                        timeout=self._timeout,
                    )
                    raise InfrastructureError(
                        f"{operation} timed out after {self._timeout}s", e
                    ) from e
                except BaseException as e:
                    await self._rollback(session, operation, e)
                    raise
        finally:
            _active_unit.reset(token)

        logger.debug("unit_of_work_committed", operation=operation)
        return Success(value)

    async def _rollback(
        self,
        session: AsyncSession,
        operation: str,
        cause: BaseException,
    ) -> None:
        """Roll back, logging (not raising) a failed rollback.

        The caller always surfaces ``cause``, never the rollback error.
        """
        try:
            await session.rollback()
        except Exception:
            logger.error(
                "rollback_failed",
                operation=operation,
                cause=repr(cause),
                exc_info=True,
            )
