"""
Application service for creating rooms, collecting forms and viewing overlap.

The service validates input, checks credentials through a protocol, keeps
session tokens, mutates the ``RoomStore`` and runs the domain-level
``AvailabilityAggregator``. Recoverable failures come back as response
models; callers never have to catch domain exceptions.
"""

from __future__ import annotations

import logging
import secrets
from typing import Optional, Protocol, Sequence, Tuple
from urllib.parse import quote

from ..config import LimitsConfig
from ..domain.aggregator import AvailabilityAggregator
from ..domain.exceptions import (
    AlreadyExistsError,
    AuthenticationError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from ..domain.models import Form, Interval, TimestampLike
from ..store.room_store import RoomStore
from .schemas import (
    AuthenticateResponse,
    CreateRoomResponse,
    FormPayload,
    JoinRoomResponse,
    RangePayload,
    ShutdownResponse,
    SubmissionPayload,
    SubmitFormResponse,
    ViewRoomResponse,
)
from .sessions import SessionManager

logger = logging.getLogger(__name__)

HOME_PATH = "/"

# bcrypt only looks at the first 72 bytes of a secret
MAX_SECRET_BYTES = 72


class CredentialServiceProtocol(Protocol):
    """Protocol describing the credential behaviour needed by the service."""

    def hash(self, secret: str) -> str:
        """Derive a one-way credential from ``secret``."""

    def verify(self, secret: str, credential: str) -> bool:
        """Check ``secret`` against a credential in constant time."""


def submit_path(code: str) -> str:
    return f"/submit?code={quote(code, safe='')}"


def view_path(code: str) -> str:
    return f"/view?code={quote(code, safe='')}"


class RoomService:
    """
    Orchestrates room lifecycle, form submission and availability views.
    """

    def __init__(
        self,
        store: RoomStore,
        credentials: CredentialServiceProtocol,
        sessions: SessionManager,
        limits: Optional[LimitsConfig] = None,
        admin_password: Optional[str] = None,
        aggregator: Optional[AvailabilityAggregator] = None,
        timezone: str = "UTC",
    ) -> None:
        self._store = store
        self._credentials = credentials
        self._sessions = sessions
        self._limits = limits or LimitsConfig()
        self._admin_password = admin_password
        self._aggregator = aggregator or AvailabilityAggregator()
        self._timezone = timezone

    def create_room(self, code: str, password: str) -> CreateRoomResponse:
        """
        Create a room protected by ``password``.

        On success the caller is sent to the room's submission page.
        """
        try:
            self._validate_code(code)
            self._validate_password(password)
            # Checked before hashing so a taken code costs no bcrypt work
            if code in self._store:
                raise AlreadyExistsError(code)
            self._store.create_room(code, self._credentials.hash(password))
        except ValidationError as exc:
            return CreateRoomResponse(error=str(exc))
        except AlreadyExistsError:
            logger.info("Room creation refused, %s already exists", code)
            return CreateRoomResponse(
                error="Room already exists. Please choose a different name."
            )

        return CreateRoomResponse(redirect=submit_path(code))

    def join_room(self, code: str) -> JoinRoomResponse:
        """Check that a room exists and point the caller at it."""
        try:
            self._validate_code(code)
        except ValidationError as exc:
            return JoinRoomResponse(error=str(exc))

        if self._store.lookup_room(code) is None:
            return JoinRoomResponse(error="That room doesn't exist.")

        return JoinRoomResponse(redirect=submit_path(code))

    def authenticate(self, code: str, password: str) -> AuthenticateResponse:
        """
        Log into a room.

        Returns a fresh session token and the room's forms on success. An
        unknown room redirects home; a wrong password just reports failure.
        """
        room = self._store.lookup_room(code)
        if room is None:
            return AuthenticateResponse(redirect=HOME_PATH)

        try:
            self._check_secret(password, room.credential)
        except AuthenticationError:
            logger.warning("Failed login for room %s", code)
            return AuthenticateResponse(success=False)

        forms = self._store.list_forms(code)
        return AuthenticateResponse(
            success=True,
            token=self._sessions.issue(code),
            forms=[FormPayload.from_domain(form) for form in forms],
        )

    def submit_form(
        self,
        code: str,
        auth_token: Optional[str],
        name: Optional[str],
        other: Optional[str],
        events: Sequence[Tuple[TimestampLike, TimestampLike]],
    ) -> SubmitFormResponse:
        """
        Append one participant's availability to a room.

        Requires a session token issued for this room by ``authenticate``.
        """
        if not self._sessions.validate(code, auth_token) or code not in self._store:
            logger.warning("Rejected submission to room %s", code)
            return SubmitFormResponse(success=False, redirect=HOME_PATH)

        try:
            form = self._build_form(name, other, events)
            self._store.append_form(code, form)
        except ValidationError as exc:
            return SubmitFormResponse(success=False, redirect=submit_path(code), error=str(exc))
        except NotFoundError:
            return SubmitFormResponse(success=False, redirect=HOME_PATH)

        return SubmitFormResponse(success=True, redirect=view_path(code))

    def view_room(self, code: str, auth_token: Optional[str]) -> ViewRoomResponse:
        """Rank the room's overlapping availability for display."""
        if not self._sessions.validate(code, auth_token):
            return ViewRoomResponse(success=False, redirect=HOME_PATH)

        try:
            forms = self._store.list_forms(code)
        except NotFoundError:
            return ViewRoomResponse(success=False, redirect=HOME_PATH)

        ranges = self._aggregator.aggregate([form.availability for form in forms])
        optimal = set(self._aggregator.optimal_ranges(ranges))

        return ViewRoomResponse(
            success=True,
            ranges=[RangePayload.from_domain(r, optimal=r in optimal) for r in ranges],
            submissions=[
                SubmissionPayload(name=form.participant_name or "", other=form.note or "")
                for form in forms
            ],
        )

    def checkpoint(self) -> bool:
        """
        Persist the store.

        Returns False if the write failed; the in-memory state is kept and
        stays unsaved until the next successful checkpoint.
        """
        try:
            self._store.persist()
        except PersistenceError as exc:
            logger.warning("Checkpoint failed, changes since the last save are at risk: %s", exc)
            return False
        return True

    def shutdown(self, admin_password: Optional[str]) -> ShutdownResponse:
        """Save everything before an administrative shutdown."""
        if not self._is_admin(admin_password):
            logger.warning("Rejected shutdown request")
            return ShutdownResponse(success=False, message="Incorrect password.")

        if not self.checkpoint():
            return ShutdownResponse(success=False, message="Could not save data.")

        self._sessions.purge_expired()
        logger.info("Store saved for shutdown")
        return ShutdownResponse(success=True, message="Server closed.")

    def _is_admin(self, admin_password: Optional[str]) -> bool:
        if not self._admin_password or not admin_password:
            return False
        return secrets.compare_digest(
            admin_password.encode("utf-8"), self._admin_password.encode("utf-8")
        )

    def _check_secret(self, password: Optional[str], credential: str) -> None:
        if not password or not self._credentials.verify(password, credential):
            raise AuthenticationError("Invalid password")

    def _build_form(
        self,
        name: Optional[str],
        other: Optional[str],
        events: Sequence[Tuple[TimestampLike, TimestampLike]],
    ) -> Form:
        name = (name or "").strip()
        other = (other or "").strip()

        if len(name) > self._limits.name_max_length:
            raise ValidationError(
                f"Name must be less than {self._limits.name_max_length} characters"
            )
        if len(other) > self._limits.note_max_length:
            raise ValidationError(
                f"Additional information must be less than {self._limits.note_max_length} characters"
            )

        availability = []
        for event in events:
            if len(event) != 2:
                raise ValidationError(f"Each event needs a start and an end, got {event!r}")
            start, end = event
            availability.append(Interval.from_pair(start, end, tz=self._timezone))

        return Form(
            participant_name=name or None,
            note=other or None,
            availability=tuple(availability),
        )

    def _validate_code(self, code: Optional[str]) -> None:
        if not code or not code.strip():
            raise ValidationError("Please fill out all fields")
        if code != code.strip():
            raise ValidationError("Name must not start or end with whitespace")
        if len(code) > self._limits.code_max_length:
            raise ValidationError(
                f"Name must be less than {self._limits.code_max_length} characters"
            )

    def _validate_password(self, password: Optional[str]) -> None:
        if not password:
            raise ValidationError("Please fill out all fields")
        if len(password) < self._limits.password_min_length:
            raise ValidationError(
                f"Password must be at least {self._limits.password_min_length} characters"
            )
        if len(password) > self._limits.password_max_length:
            raise ValidationError(
                f"Password must be less than {self._limits.password_max_length} characters"
            )
        if len(password.encode("utf-8")) > MAX_SECRET_BYTES:
            raise ValidationError("Password is too long")
