# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Value records for catalog items and loans."""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class ItemCreateRequest(BaseModel):
    """New catalog item. Available copies start equal to total copies."""

    title: str
    author: str
    total_copies: int
    isbn: str | None = None
    publisher: str | None = None
    publication_year: int | None = None
    genre: str | None = None


class ItemUpdateRequest(BaseModel):
    """Catalog changes. Unset fields are left untouched."""

    title: str | None = None
    author: str | None = None
    total_copies: int | None = None
    isbn: str | None = None
    publisher: str | None = None
    publication_year: int | None = None
    genre: str | None = None


class ItemResponse(BaseModel):
    """Catalog item with its availability counter."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    isbn: str | None
    title: str
    author: str
    publisher: str | None
    publication_year: int | None
    genre: str | None
    total_copies: int
    available_copies: int


class LoanResponse(BaseModel):
    """Loan state. ``is_open`` is True until the item is returned."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    item_id: int
    student_id: int
    borrow_date: date
    due_date: date
    return_date: date | None
    fine_amount: Decimal
    is_open: bool
