# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Credential hashing collaborator for the identity lifecycle.

The identity service only depends on the CredentialHasher protocol. The
bcrypt implementation is the default; tests may pass a cheaper one.
"""

import logging
from typing import Protocol

import bcrypt

from src.domains.validation import MAX_PASSWORD_BYTES

logger = logging.getLogger(__name__)


class CredentialHasher(Protocol):
    """Turns a plain password into an opaque hash and checks it later."""

    def hash(self, password: str) -> str: ...

    def verify(self, password: str, credential_hash: str) -> bool: ...


class BcryptHasher:
    """CredentialHasher backed by bcrypt with an embedded salt.

    Attributes:
        _rounds: bcrypt cost factor.
    """

    def __init__(self, rounds: int = 12) -> None:
        self._rounds = rounds

    def hash(self, password: str) -> str:
        """Hash a password.

        Raises:
            ValueError: If password is empty or longer than 72 bytes.
        """
        if not password:
            raise ValueError("Password cannot be empty")
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password cannot be longer than {MAX_PASSWORD_BYTES} bytes")
        digest = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=self._rounds))
        return digest.decode("utf-8")

    def verify(self, password: str, credential_hash: str) -> bool:
        """Check a password against a stored hash.

        Malformed hashes and passwords bcrypt cannot hash never match.
        """
        if not password or not credential_hash:
            return False
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            return False
        try:
            return bcrypt.checkpw(password.encode("utf-8"), credential_hash.encode("utf-8"))
        except ValueError as e:
            logger.warning("Credential hash rejected by bcrypt: %s", e)
            return False
