"""
Domain-specific exception hierarchy for meetpoll.
"""


class MeetpollError(Exception):
    """Base class for all application-level errors."""


class ValidationError(MeetpollError):
    """Raised when a field violates its length or format rules."""


class NotFoundError(MeetpollError):
    """Raised when no room matches the requested code."""


class AlreadyExistsError(MeetpollError):
    """Raised when creating a room whose code is already taken."""


class AuthenticationError(MeetpollError):
    """Raised when a secret or session token does not match."""


class PersistenceError(MeetpollError):
    """Raised when the snapshot cannot be read or written."""
