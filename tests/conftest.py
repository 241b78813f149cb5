"""
Shared fixtures.
"""

from typing import List, Tuple

import pendulum
import pytest

from meetpoll.adapters.credentials import BcryptCredentialService
from meetpoll.domain.models import Form, Interval
from meetpoll.services.room_service import RoomService
from meetpoll.services.sessions import SessionManager
from meetpoll.store.room_store import RoomStore

TZ = "Europe/Berlin"


def at(value: str):
    """Parse a local test timestamp."""
    return pendulum.parse(value, tz=TZ)


def interval(start: str, end: str) -> Interval:
    return Interval(start=at(start), end=at(end))


def form(*ranges: Tuple[str, str], name: str = None, note: str = None) -> Form:
    return Form(
        participant_name=name,
        note=note,
        availability=tuple(interval(s, e) for s, e in ranges),
    )


class FakeClock:
    """Manually advanced replacement for ``pendulum.now``."""

    def __init__(self, start: str = "2024-11-25 08:00"):
        self.current = at(start)

    def __call__(self):
        return self.current

    def advance(self, **kwargs) -> None:
        self.current = self.current.add(**kwargs)


@pytest.fixture(autouse=True)
def _no_admin_password_from_env(monkeypatch):
    monkeypatch.delenv("MEETPOLL_ADMIN_PASSWORD", raising=False)


@pytest.fixture
def credentials() -> BcryptCredentialService:
    # Lowest cost bcrypt accepts, to keep the suite fast
    return BcryptCredentialService(rounds=4)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sessions(clock) -> SessionManager:
    return SessionManager(ttl=pendulum.duration(minutes=30), clock=clock)


@pytest.fixture
def data_file(tmp_path):
    return tmp_path / "data.json"


@pytest.fixture
def store(data_file) -> RoomStore:
    return RoomStore(data_file)


@pytest.fixture
def service(store, credentials, sessions) -> RoomService:
    return RoomService(
        store=store,
        credentials=credentials,
        sessions=sessions,
        admin_password="admin-secret",
        timezone=TZ,
    )
