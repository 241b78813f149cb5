"""
Short-lived session tokens handed out after a successful room login.
"""

from __future__ import annotations

import logging
import secrets
import threading
from dataclasses import dataclass
from typing import Callable, Dict

import pendulum
from pendulum import DateTime, Duration

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Session:
    code: str
    expires_at: DateTime


class SessionManager:
    """
    Issues random bearer tokens bound to one room code.

    Tokens live in memory only and expire after ``ttl``. They are unrelated
    to the room's stored credential.
    """

    TOKEN_BYTES = 32

    def __init__(
        self,
        ttl: Duration,
        clock: Callable[[], DateTime] = pendulum.now,
    ) -> None:
        if ttl.total_seconds() <= 0:
            raise ValueError("Session ttl must be positive")
        self._ttl = ttl
        self._clock = clock
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def issue(self, code: str) -> str:
        """
        Mint a token for ``code``.

        Expired sessions are dropped first so the table stays bounded by the
        number of logins within one ttl.
        """
        token = secrets.token_urlsafe(self.TOKEN_BYTES)
        now = self._clock()
        expires_at = now + self._ttl
        with self._lock:
            self._drop_expired(now)
            self._sessions[token] = Session(code=code, expires_at=expires_at)
        logger.debug("Issued session for room %s, expires %s", code, expires_at)
        return token

    def validate(self, code: str, token: str | None) -> bool:
        """Return True if ``token`` is live and belongs to ``code``."""
        if not token:
            return False

        with self._lock:
            session = self._sessions.get(token)
            if session is None:
                return False
            if session.expires_at <= self._clock():
                del self._sessions[token]
                logger.debug("Session for room %s expired", session.code)
                return False

        return secrets.compare_digest(session.code.encode("utf-8"), code.encode("utf-8"))

    def revoke(self, token: str) -> None:
        """Forget a token. Unknown tokens are ignored."""
        with self._lock:
            self._sessions.pop(token, None)

    def purge_expired(self) -> int:
        """Drop every expired session and return how many were removed."""
        now = self._clock()
        with self._lock:
            return self._drop_expired(now)

    def _drop_expired(self, now: DateTime) -> int:
        # Caller holds the lock
        expired = [t for t, s in self._sessions.items() if s.expires_at <= now]
        for token in expired:
            del self._sessions[token]
        if expired:
            logger.debug("Purged %d expired sessions", len(expired))
        return len(expired)
