# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Core package for the campus records backend.

This package contains the pieces shared by every domain:
- config: Application configuration and settings
- errors: Business error taxonomy
- result: Success/Failure values returned by domain operations
"""
