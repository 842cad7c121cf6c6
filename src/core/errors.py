# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Business error taxonomy shared by all domain operations.

Every expected failure of a domain operation is an OperationError subclass.
Domain code raises them inside a unit of work so the transaction is rolled
back; the TransactionCoordinator then hands them back to the caller as a
Failure value instead of letting them unwind further.

Storage failures are not part of this hierarchy. They are raised as
InfrastructureError from src.infrastructure.database.connection.
"""

from __future__ import annotations


class OperationError(Exception):
    """Base exception for expected domain operation failures.

    Attributes:
        code: Stable machine-readable error code.
        message: Human-readable error description.
    """

    code = "operation_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(OperationError):
    """Raised when caller-supplied data is malformed or out of range.

    Attributes:
        field: Name of the offending field.
        reason: Why the value was rejected.
    """

    code = "validation_error"

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(f"{field}: {reason}")
        self.field = field
        self.reason = reason


class NotFoundError(OperationError):
    """Raised when the entity an operation targets does not exist."""

    code = "not_found"

    def __init__(self, entity: str, entity_id: object) -> None:
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class ReferenceNotFoundError(NotFoundError):
    """Raised when an entity referenced by a write does not exist."""

    code = "reference_not_found"


class ConflictError(OperationError):
    """Raised when a business precondition fails (duplicate key, bad state)."""

    code = "conflict"


class AlreadyReturnedError(ConflictError):
    """Raised when returning a loan that is already closed."""

    code = "already_returned"

    def __init__(self, loan_id: int) -> None:
        super().__init__(f"Loan {loan_id} has already been returned")
        self.loan_id = loan_id


class UnavailableError(OperationError):
    """Raised when a shared resource is exhausted (no copies left)."""

    code = "unavailable"
