# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Library domain package.

This package provides the lending ledger:
- Borrowing and returning items with late fines
- Catalog maintenance that keeps availability consistent with open loans
"""

from src.domains.library.service import LendingLedger, compute_fine

__all__ = [
    "LendingLedger",
    "compute_fine",
]
