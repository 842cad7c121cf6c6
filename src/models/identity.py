# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Value records for role holders (account + profile pairs).

Request records only carry types. Range and format rules are enforced by
the identity service so failures come back as ValidationError results
naming the offending field.
"""

from datetime import date, datetime
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class StudentProfileData(BaseModel):
    """Profile fields for a new student."""

    kind: Literal["Student"] = "Student"
    first_name: str
    last_name: str
    email: str
    date_of_birth: date
    enrollment_date: date
    program_id: int
    gender: str | None = None
    phone_number: str | None = None
    address: str | None = None
    major: str | None = None


class FacultyProfileData(BaseModel):
    """Profile fields for a new faculty member."""

    kind: Literal["Faculty"] = "Faculty"
    first_name: str
    last_name: str
    email: str
    department: str
    phone_number: str | None = None


class LibrarianProfileData(BaseModel):
    """Profile fields for a new librarian."""

    kind: Literal["Librarian"] = "Librarian"
    first_name: str
    last_name: str
    email: str
    phone_number: str | None = None


ProfileData = Annotated[
    StudentProfileData | FacultyProfileData | LibrarianProfileData,
    Field(discriminator="kind"),
]


class ProfileUpdate(BaseModel):
    """Changes to an existing profile. Unset fields are left untouched.

    ``account_id`` is deliberately absent: the owning account never changes.
    Fields that do not apply to the profile kind are rejected.
    """

    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone_number: str | None = None
    department: str | None = None
    date_of_birth: date | None = None
    enrollment_date: date | None = None
    program_id: int | None = None
    gender: str | None = None
    address: str | None = None
    major: str | None = None


class AccountResponse(BaseModel):
    """Login account without its credential hash."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    role: str
    created_at: datetime


class ProfileResponse(BaseModel):
    """Profile of any kind together with its account."""

    kind: Literal["Student", "Faculty", "Librarian"]
    id: int
    account: AccountResponse
    first_name: str
    last_name: str
    email: str
    phone_number: str | None = None
    department: str | None = None
    program_id: int | None = None
    date_of_birth: date | None = None
    enrollment_date: date | None = None
    gender: str | None = None
    address: str | None = None
    major: str | None = None
