# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Referential precondition checks.

Called inside the unit of work of the dependent write, so the referenced row
is read in the same transaction that inserts the reference.
"""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.errors import ReferenceNotFoundError
from src.infrastructure.database.repositories import Repository


async def resolve_reference(
    session: AsyncSession,
    repository: Repository[Any],
    entity: str,
    record_id: int,
) -> Any:
    """Load a referenced row or fail.

    Args:
        session: Transactional session of the running unit of work.
        repository: Repository of the referenced entity.
        entity: Entity name used in the error.
        record_id: Referenced primary key.

    Returns:
        The referenced row.

    Raises:
        ReferenceNotFoundError: If no such row exists.
    """
    record = await repository.find(session, record_id)
    if record is None:
        raise ReferenceNotFoundError(entity, record_id)
    return record


async def resolve_optional_reference(
    session: AsyncSession,
    repository: Repository[Any],
    entity: str,
    record_id: int | None,
) -> Any:
    """Like resolve_reference, but a missing id resolves to None."""
    if record_id is None:
        return None
    return await resolve_reference(session, repository, entity, record_id)
