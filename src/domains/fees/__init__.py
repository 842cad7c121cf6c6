# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student fee domain package."""

from src.domains.fees.service import FeeService

__all__ = [
    "FeeService",
]
