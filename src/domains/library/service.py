# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Lending ledger for library items.

This module provides the LendingLedger class for:
- Borrowing and returning items with late fines
- Deleting loan records
- Catalog maintenance (add, update, delete items)

The availability counter of an item always equals its total copies minus
its open loans. Every operation that touches both a loan and the counter
does so inside one unit of work.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import Settings, get_settings
from src.core.errors import (
    AlreadyReturnedError,
    ConflictError,
    NotFoundError,
    ReferenceNotFoundError,
    UnavailableError,
)
from src.core.result import OperationResult, rejects_as_failure
from src.domains.guards import isbn_taken
from src.domains.validation import (
    optional_text,
    require_id,
    require_non_negative,
    require_not_future,
    require_on_or_after,
    require_range,
    require_text,
)
from src.infrastructure.database.models import Item, Loan
from src.infrastructure.database.repositories import items, loans, students
from src.infrastructure.database.transaction import TransactionCoordinator
from src.models.library import (
    ItemCreateRequest,
    ItemResponse,
    ItemUpdateRequest,
    LoanResponse,
)
from src.utils.datetime import days_between, utc_today

logger = logging.getLogger(__name__)

EARLIEST_PUBLICATION_YEAR = 1000
CENTS = Decimal("0.01")


def compute_fine(due_date: date, return_date: date, per_diem_rate: Decimal) -> Decimal:
    """Late fine for a return: whole days past due times the daily rate.

    Example:
        >>> compute_fine(date(2024, 1, 10), date(2024, 1, 13), Decimal("5.0"))
        Decimal('15.00')
    """
    days_overdue = max(0, days_between(due_date, return_date))
    return (per_diem_rate * days_overdue).quantize(CENTS, rounding=ROUND_HALF_UP)


class LendingLedger:
    """Service for loans and the availability counter of catalog items.

    Attributes:
        _coordinator: Runs each operation atomically.
        _per_diem_rate: Fine charged per day overdue.
        _default_loan_days: Loan period when no due date is given.
        _today: Returns the current calendar day.
    """

    def __init__(
        self,
        coordinator: TransactionCoordinator,
        settings: Settings | None = None,
        today: Callable[[], date] = utc_today,
    ) -> None:
        """Initialize lending ledger.

        Args:
            coordinator: Transaction coordinator for the records database.
            settings: Application settings. Defaults to get_settings().
            today: Clock used for date checks.
        """
        settings = settings or get_settings()
        self._coordinator = coordinator
        self._per_diem_rate = Decimal(str(settings.lending.per_diem_rate))
        self._default_loan_days = settings.lending.default_loan_days
        self._today = today

    @rejects_as_failure
    async def borrow(
        self,
        item_id: int,
        student_id: int,
        borrow_date: date,
        due_date: date | None = None,
    ) -> OperationResult[LoanResponse]:
        """Lend one copy of an item to a student.

        Args:
            item_id: Catalog item to borrow.
            student_id: Borrowing student.
            borrow_date: Day of the loan, not in the future.
            due_date: Return deadline, not before borrow_date. Defaults to
                borrow_date plus the configured loan period.

        Returns:
            Success with the open loan, or Failure with ValidationError,
            NotFoundError (item), UnavailableError (no copies left) or
            ReferenceNotFoundError (student).
        """
        item_id = require_id("item_id", item_id)
        student_id = require_id("student_id", student_id)
        borrow_date = require_not_future("borrow_date", borrow_date, self._today())
        if due_date is None:
            due_date = borrow_date + timedelta(days=self._default_loan_days)
        due_date = require_on_or_after("due_date", due_date, borrow_date, "borrow_date")

        async def work(session: AsyncSession) -> LoanResponse:
            if not await items.take_copy(session, item_id):
                item = await items.find(session, item_id)
                if item is None:
                    raise NotFoundError("Item", item_id)
                raise UnavailableError(f"Item '{item.title}' has no copies available")
            if await students.find(session, student_id) is None:
                raise ReferenceNotFoundError("Student", student_id)

            loan = Loan(
                item_id=item_id,
                student_id=student_id,
                borrow_date=borrow_date,
                due_date=due_date,
                return_date=None,
                fine_amount=Decimal("0"),
            )
            await loans.insert(session, loan)
            return LoanResponse.model_validate(loan)

        result = await self._coordinator.run_atomic(work, operation="borrow")
        if result.ok:
            logger.info(
                "Item borrowed: loan=%s, item=%s, student=%s, due=%s",
                result.value.id,
                item_id,
                student_id,
                due_date,
            )
        return result

    @rejects_as_failure
    async def return_item(self, loan_id: int, return_date: date) -> OperationResult[LoanResponse]:
        """Close an open loan, charge any late fine and restore one copy.

        Args:
            loan_id: Loan to close.
            return_date: Day of return, not in the future and not before
                the borrow date.

        Returns:
            Success with the closed loan, or Failure with ValidationError,
            NotFoundError or AlreadyReturnedError.
        """
        loan_id = require_id("loan_id", loan_id)
        return_date = require_not_future("return_date", return_date, self._today())

        async def work(session: AsyncSession) -> LoanResponse:
            loan = await loans.find(session, loan_id, for_update=True)
            if loan is None:
                raise NotFoundError("Loan", loan_id)
            if not loan.is_open:
                raise AlreadyReturnedError(loan_id)
            require_on_or_after("return_date", return_date, loan.borrow_date, "borrow_date")

            loan.return_date = return_date
            loan.fine_amount = compute_fine(loan.due_date, return_date, self._per_diem_rate)
            await loans.update(session, loan)
            if not await items.put_back_copy(session, loan.item_id):
                raise ConflictError(f"Item {loan.item_id} has no borrowed copy to restore")
            return LoanResponse.model_validate(loan)

        result = await self._coordinator.run_atomic(work, operation="return_item")
        if result.ok:
            logger.info(
                "Item returned: loan=%s, fine=%s",
                loan_id,
                result.value.fine_amount,
            )
        return result

    @rejects_as_failure
    async def delete_loan(self, loan_id: int) -> OperationResult[None]:
        """Delete a loan record without touching the availability counter.

        Returns:
            Success(None), or Failure(NotFoundError).
        """
        loan_id = require_id("loan_id", loan_id)

        async def work(session: AsyncSession) -> None:
            if not await loans.delete(session, loan_id):
                raise NotFoundError("Loan", loan_id)

        return await self._coordinator.run_atomic(work, operation="delete_loan")

    @rejects_as_failure
    async def add_item(self, request: ItemCreateRequest) -> OperationResult[ItemResponse]:
        """Add an item to the catalog with every copy available.

        Returns:
            Success with the item, or Failure with ValidationError or
            ConflictError (ISBN already in the catalog).
        """
        title = require_text("title", request.title)
        author = require_text("author", request.author)
        total_copies = require_non_negative("total_copies", request.total_copies)
        publication_year = self._check_publication_year(request.publication_year)
        isbn = optional_text(request.isbn)

        async def work(session: AsyncSession) -> ItemResponse:
            if isbn is not None and await isbn_taken(session, isbn):
                raise ConflictError(f"An item with ISBN '{isbn}' already exists")
            item = Item(
                isbn=isbn,
                title=title,
                author=author,
                publisher=optional_text(request.publisher),
                publication_year=publication_year,
                genre=optional_text(request.genre),
                total_copies=total_copies,
                available_copies=total_copies,
            )
            await items.insert(session, item)
            return ItemResponse.model_validate(item)

        result = await self._coordinator.run_atomic(work, operation="add_item")
        if result.ok:
            logger.info("Item added: item=%s, copies=%s", result.value.id, total_copies)
        return result

    @rejects_as_failure
    async def update_item(
        self,
        item_id: int,
        request: ItemUpdateRequest,
    ) -> OperationResult[ItemResponse]:
        """Update catalog fields of an item.

        A new total may not drop below the copies currently on loan; the
        available counter is recomputed from it.

        Returns:
            Success with the item, or Failure with ValidationError,
            NotFoundError or ConflictError.
        """
        item_id = require_id("item_id", item_id)
        changes = request.model_dump(exclude_unset=True)
        if "title" in changes:
            changes["title"] = require_text("title", changes["title"])
        if "author" in changes:
            changes["author"] = require_text("author", changes["author"])
        if "total_copies" in changes:
            changes["total_copies"] = require_non_negative("total_copies", changes["total_copies"])
        if "publication_year" in changes:
            changes["publication_year"] = self._check_publication_year(changes["publication_year"])
        for name in ("isbn", "publisher", "genre"):
            if name in changes:
                changes[name] = optional_text(changes[name])

        async def work(session: AsyncSession) -> ItemResponse:
            item = await items.find(session, item_id, for_update=True)
            if item is None:
                raise NotFoundError("Item", item_id)
            isbn = changes.get("isbn")
            if isbn is not None and await isbn_taken(session, isbn, exclude_item_id=item_id):
                raise ConflictError(f"ISBN '{isbn}' is already assigned to another item")

            if "total_copies" in changes:
                on_loan = item.total_copies - item.available_copies
                if changes["total_copies"] < on_loan:
                    raise ConflictError(
                        f"Total copies cannot be less than the {on_loan} copies on loan"
                    )
                changes["available_copies"] = changes["total_copies"] - on_loan

            for name, value in changes.items():
                setattr(item, name, value)
            await items.update(session, item)
            return ItemResponse.model_validate(item)

        return await self._coordinator.run_atomic(work, operation="update_item")

    @rejects_as_failure
    async def delete_item(self, item_id: int) -> OperationResult[None]:
        """Remove an item and its closed loans from the catalog.

        Returns:
            Success(None), or Failure with NotFoundError or ConflictError
            (copies still on loan).
        """
        item_id = require_id("item_id", item_id)

        async def work(session: AsyncSession) -> None:
            item = await items.find(session, item_id, for_update=True)
            if item is None:
                raise NotFoundError("Item", item_id)
            open_loans = await loans.count_open(session, item_id=item_id)
            if open_loans:
                raise ConflictError(f"Item {item_id} has {open_loans} copies on loan")
            await loans.delete_by(session, item_id=item_id)
            await items.delete(session, item_id)

        result = await self._coordinator.run_atomic(work, operation="delete_item")
        if result.ok:
            logger.info("Item deleted: item=%s", item_id)
        return result

    def _check_publication_year(self, year: int | None) -> int | None:
        if year is None:
            return None
        return require_range(
            "publication_year", year, EARLIEST_PUBLICATION_YEAR, self._today().year
        )
