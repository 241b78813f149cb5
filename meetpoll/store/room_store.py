"""
In-memory room/form store with whole-snapshot persistence.
"""

from __future__ import annotations

import logging
import os
import tempfile
import threading
from dataclasses import replace
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import ValidationError as SnapshotValidationError

from ..domain.exceptions import (
    AlreadyExistsError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from ..domain.models import Form, Room
from .snapshot import RoomRecord, StoreSnapshot

logger = logging.getLogger(__name__)


class RoomStore:
    """
    Holds every room in memory, keyed by code.

    Mutations only touch memory. ``persist()`` writes the whole store to
    ``data_file`` and ``load()`` replaces the whole store from it; anything
    changed after the last successful persist is lost on a crash.
    All operations are serialized by one lock.
    """

    def __init__(self, data_file: Path):
        self.data_file = Path(data_file)
        self._rooms: Dict[str, Room] = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._rooms)

    def __contains__(self, code: object) -> bool:
        with self._lock:
            return code in self._rooms

    def create_room(self, code: str, credential: str) -> Room:
        """
        Insert a new room with no forms.

        Raises:
            AlreadyExistsError: If the code is taken (the store is unchanged)
        """
        with self._lock:
            if code in self._rooms:
                raise AlreadyExistsError(f"Room '{code}' already exists")
            room = Room(code=code, credential=credential)
            self._rooms[code] = room
            logger.info("Created room %s", code)
            return room

    def lookup_room(self, code: str) -> Optional[Room]:
        """Return the room for ``code``, or None."""
        with self._lock:
            return self._rooms.get(code)

    def append_form(self, code: str, form: Form) -> None:
        """
        Append a form to the end of the room's form list.

        Raises:
            NotFoundError: If no room has this code
        """
        with self._lock:
            current = self._get(code)
            room = replace(current, forms=current.forms + (form,))
            self._rooms[code] = room
            logger.info("Appended form %d to room %s", len(room.forms), code)

    def list_forms(self, code: str) -> List[Form]:
        """
        Return a copy of the room's forms in submission order.

        Raises:
            NotFoundError: If no room has this code
        """
        with self._lock:
            return list(self._get(code).forms)

    def room_codes(self) -> List[str]:
        """Return every room code in creation order."""
        with self._lock:
            return list(self._rooms)

    def persist(self) -> None:
        """
        Write the whole store to ``data_file``.

        The snapshot goes to a temporary file in the same directory and is
        then renamed over the old one, so readers see either the previous
        or the new snapshot.

        Raises:
            PersistenceError: If the file cannot be written
        """
        with self._lock:
            snapshot = StoreSnapshot(
                rooms=[RoomRecord.from_domain(room) for room in self._rooms.values()]
            )
            payload = snapshot.model_dump_json(indent=2)
            room_count = len(self._rooms)

            tmp_name = None
            try:
                self.data_file.parent.mkdir(parents=True, exist_ok=True)
                with tempfile.NamedTemporaryFile(
                    "w",
                    encoding="utf-8",
                    dir=self.data_file.parent,
                    prefix=f".{self.data_file.name}.",
                    suffix=".tmp",
                    delete=False,
                ) as tmp:
                    tmp_name = tmp.name
                    tmp.write(payload)
                    tmp.flush()
                    os.fsync(tmp.fileno())
                os.replace(tmp_name, self.data_file)
            except OSError as exc:
                if tmp_name is not None and os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                logger.error("Could not persist store to %s: %s", self.data_file, exc)
                raise PersistenceError(f"Could not write {self.data_file}: {exc}") from exc

        logger.info("Persisted %d rooms to %s", room_count, self.data_file)

    def load(self) -> None:
        """
        Replace the in-memory store with the contents of ``data_file``.

        A missing or empty file gives an empty store.

        Raises:
            PersistenceError: If the file cannot be read or parsed; the
                in-memory store is left as it was
        """
        rooms = self._read_snapshot()

        with self._lock:
            self._rooms = rooms

        logger.info("Loaded %d rooms from %s", len(rooms), self.data_file)

    def _read_snapshot(self) -> Dict[str, Room]:
        if not self.data_file.exists():
            logger.info("No snapshot at %s, starting empty", self.data_file)
            return {}

        try:
            text = self.data_file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise PersistenceError(f"Could not read {self.data_file}: {exc}") from exc

        if not text.strip():
            return {}

        try:
            snapshot = StoreSnapshot.model_validate_json(text)
            return {record.code: record.to_domain() for record in snapshot.rooms}
        except (SnapshotValidationError, ValidationError) as exc:
            raise PersistenceError(f"Invalid snapshot in {self.data_file}: {exc}") from exc

    def _get(self, code: str) -> Room:
        room = self._rooms.get(code)
        if room is None:
            raise NotFoundError(f"Room '{code}' not found")
        return room
