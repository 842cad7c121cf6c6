# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Discriminated success/failure values returned by domain operations.

Example:
    >>> result = await ledger.borrow(item_id=1, student_id=7, ...)
    >>> if result.ok:
    ...     loan = result.value
    ... else:
    ...     print(result.error.code)
"""

from __future__ import annotations

import functools
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, Literal, NoReturn, ParamSpec, TypeVar

from src.core.errors import OperationError

T = TypeVar("T")
P = ParamSpec("P")


@dataclass(frozen=True)
class Success(Generic[T]):
    """Operation committed and produced a value."""

    value: T
    ok: Literal[True] = True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Failure:
    """Operation was rolled back because of an expected business failure."""

    error: OperationError
    ok: Literal[False] = False

    def unwrap(self) -> NoReturn:
        raise self.error


OperationResult = Success[T] | Failure


def rejects_as_failure(
    func: Callable[P, Awaitable[OperationResult[T]]],
) -> Callable[P, Awaitable[OperationResult[T]]]:
    """Return OperationErrors raised before the unit of work as Failure.

    Domain operations validate their input before opening a transaction.
    This decorator lets them raise ValidationError from that phase and still
    hand the caller a Failure, the same way errors raised inside the unit
    of work come back.
    """

    @functools.wraps(func)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> OperationResult[T]:
        try:
            return await func(*args, **kwargs)
        except OperationError as e:
            return Failure(e)

    return wrapper
