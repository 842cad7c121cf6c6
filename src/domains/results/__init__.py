# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course result domain package."""

from src.domains.results.service import ResultService

__all__ = [
    "ResultService",
]
