# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student fee service.

Fees move Due -> (Overdue) -> Paid, or to Waived from any unpaid state.
Paid and Waived are final. The payment date is set only when a fee is paid.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.errors import ConflictError, NotFoundError
from src.core.result import OperationResult, rejects_as_failure
from src.domains.references import resolve_reference
from src.domains.validation import (
    require_date,
    require_id,
    require_not_future,
    require_positive,
    require_text,
)
from src.infrastructure.database.models import Fee
from src.infrastructure.database.repositories import fees, students
from src.infrastructure.database.transaction import TransactionCoordinator
from src.models.common import FeeStatus
from src.models.finance import FeeCreateRequest, FeeResponse
from src.utils.datetime import utc_today

logger = logging.getLogger(__name__)

FINAL_STATUSES = frozenset({FeeStatus.PAID.value, FeeStatus.WAIVED.value})


class FeeService:
    """Service for student fees and their payment state.

    Attributes:
        _coordinator: Runs each operation atomically.
        _today: Returns the current calendar day.
    """

    def __init__(
        self,
        coordinator: TransactionCoordinator,
        today: Callable[[], date] = utc_today,
    ) -> None:
        self._coordinator = coordinator
        self._today = today

    @rejects_as_failure
    async def add_fee(self, request: FeeCreateRequest) -> OperationResult[FeeResponse]:
        """Charge a fee to a student. New fees are Due.

        Returns:
            Success with the fee, or Failure with ValidationError or
            ReferenceNotFoundError (student).
        """
        student_id = require_id("student_id", request.student_id)
        fee_type = require_text("fee_type", request.fee_type)
        amount = require_positive("amount", request.amount)
        due_date = require_date("due_date", request.due_date)

        async def work(session: AsyncSession) -> FeeResponse:
            await resolve_reference(session, students, "Student", student_id)
            fee = Fee(
                student_id=student_id,
                fee_type=fee_type,
                amount=Decimal(amount),
                due_date=due_date,
                payment_date=None,
                status=FeeStatus.DUE.value,
            )
            await fees.insert(session, fee)
            return FeeResponse.model_validate(fee)

        result = await self._coordinator.run_atomic(work, operation="add_fee")
        if result.ok:
            logger.info(
                "Fee added: fee=%s, student=%s, amount=%s",
                result.value.id,
                student_id,
                amount,
            )
        return result

    @rejects_as_failure
    async def mark_fee_paid(
        self,
        fee_id: int,
        payment_date: date | None = None,
    ) -> OperationResult[FeeResponse]:
        """Mark a fee paid on a given day (today by default).

        Returns:
            Success with the fee, or Failure with ValidationError,
            NotFoundError or ConflictError (already Paid or Waived).
        """
        fee_id = require_id("fee_id", fee_id)
        today = self._today()
        payment_date = require_not_future("payment_date", payment_date or today, today)

        async def work(session: AsyncSession) -> FeeResponse:
            fee = await self._load(session, fee_id)
            if fee.status in FINAL_STATUSES:
                raise ConflictError(f"Fee {fee_id} is already marked as {fee.status}")
            fee.status = FeeStatus.PAID.value
            fee.payment_date = payment_date
            await fees.update(session, fee)
            return FeeResponse.model_validate(fee)

        result = await self._coordinator.run_atomic(work, operation="mark_fee_paid")
        if result.ok:
            logger.info("Fee paid: fee=%s, date=%s", fee_id, payment_date)
        return result

    @rejects_as_failure
    async def mark_fee_overdue(self, fee_id: int) -> OperationResult[FeeResponse]:
        """Move a Due fee to Overdue. Any other state is a conflict."""
        fee_id = require_id("fee_id", fee_id)

        async def work(session: AsyncSession) -> FeeResponse:
            fee = await self._load(session, fee_id)
            if fee.status != FeeStatus.DUE.value:
                raise ConflictError(f"Fee {fee_id} is {fee.status}, only Due fees become Overdue")
            fee.status = FeeStatus.OVERDUE.value
            await fees.update(session, fee)
            return FeeResponse.model_validate(fee)

        return await self._coordinator.run_atomic(work, operation="mark_fee_overdue")

    @rejects_as_failure
    async def waive_fee(self, fee_id: int) -> OperationResult[FeeResponse]:
        """Waive an unpaid fee. Paid or already waived fees are a conflict."""
        fee_id = require_id("fee_id", fee_id)

        async def work(session: AsyncSession) -> FeeResponse:
            fee = await self._load(session, fee_id)
            if fee.status in FINAL_STATUSES:
                raise ConflictError(f"Fee {fee_id} is already marked as {fee.status}")
            fee.status = FeeStatus.WAIVED.value
            await fees.update(session, fee)
            return FeeResponse.model_validate(fee)

        result = await self._coordinator.run_atomic(work, operation="waive_fee")
        if result.ok:
            logger.info("Fee waived: fee=%s", fee_id)
        return result

    async def _load(self, session: AsyncSession, fee_id: int) -> Fee:
        fee = await fees.find(session, fee_id, for_update=True)
        if fee is None:
            raise NotFoundError("Fee", fee_id)
        return fee
