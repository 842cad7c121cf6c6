# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Identity domain package.

This package provides the role-holder lifecycle:
- Paired account and profile creation and deletion
- Profile updates and account renames
- Authentication and password changes
"""

from src.domains.identity.credentials import BcryptHasher, CredentialHasher
from src.domains.identity.service import PROFILE_KINDS, IdentityService

__all__ = [
    "BcryptHasher",
    "CredentialHasher",
    "IdentityService",
    "PROFILE_KINDS",
]
