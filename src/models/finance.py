# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Value records for student fees."""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class FeeCreateRequest(BaseModel):
    student_id: int
    fee_type: str
    amount: Decimal
    due_date: date


class FeeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    student_id: int
    fee_type: str
    amount: Decimal
    due_date: date
    payment_date: date | None
    status: str
