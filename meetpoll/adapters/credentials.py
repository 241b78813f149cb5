"""
Room password hashing using bcrypt.
"""

from __future__ import annotations

import logging

import bcrypt

logger = logging.getLogger(__name__)


class BcryptCredentialService:
    """
    Derives and checks room credentials.

    The stored credential is a bcrypt hash string; the plaintext secret is
    never kept. ``bcrypt.checkpw`` compares in constant time.
    """

    DEFAULT_ROUNDS = 10

    def __init__(self, rounds: int = DEFAULT_ROUNDS):
        """
        Initialize the service.

        Args:
            rounds: bcrypt cost factor (4-31)
        """
        if not 4 <= rounds <= 31:
            raise ValueError(f"bcrypt rounds must be between 4 and 31, got {rounds}")
        self.rounds = rounds

    def hash(self, secret: str) -> str:
        """Return a salted bcrypt hash of ``secret``."""
        hashed = bcrypt.hashpw(secret.encode("utf-8"), bcrypt.gensalt(rounds=self.rounds))
        return hashed.decode("utf-8")

    def verify(self, secret: str, credential: str) -> bool:
        """
        Check ``secret`` against a stored credential.

        A malformed credential never matches.
        """
        try:
            return bcrypt.checkpw(secret.encode("utf-8"), credential.encode("utf-8"))
        except ValueError as exc:
            logger.warning("Could not verify credential: %s", exc)
            return False
