# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Infrastructure layer for storage integration.

This package contains the records database: engine and session management,
ORM models, repositories and the transaction coordinator.
"""
