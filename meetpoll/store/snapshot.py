"""
On-disk document layout for the room store.

Every collection is a JSON array, whatever its length.
"""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from ..domain.models import Form, Interval, Room, parse_timestamp

SNAPSHOT_VERSION = 1


class IntervalRecord(BaseModel):
    """A single availability interval as ISO-8601 strings."""
    start: str
    end: str

    @classmethod
    def from_domain(cls, interval: Interval) -> "IntervalRecord":
        start, end = interval.as_pair()
        return cls(start=start, end=end)

    def to_domain(self) -> Interval:
        return Interval(start=parse_timestamp(self.start), end=parse_timestamp(self.end))


class FormRecord(BaseModel):
    """A submitted form."""
    name: Optional[str] = None
    note: Optional[str] = None
    availability: List[IntervalRecord] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, form: Form) -> "FormRecord":
        return cls(
            name=form.participant_name,
            note=form.note,
            availability=[IntervalRecord.from_domain(i) for i in form.availability],
        )

    def to_domain(self) -> Form:
        return Form(
            participant_name=self.name,
            note=self.note,
            availability=tuple(record.to_domain() for record in self.availability),
        )


class RoomRecord(BaseModel):
    """A room with its credential and forms in submission order."""
    code: str
    credential: str
    forms: List[FormRecord] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, room: Room) -> "RoomRecord":
        return cls(
            code=room.code,
            credential=room.credential,
            forms=[FormRecord.from_domain(form) for form in room.forms],
        )

    def to_domain(self) -> Room:
        return Room(
            code=self.code,
            credential=self.credential,
            forms=tuple(record.to_domain() for record in self.forms),
        )


class StoreSnapshot(BaseModel):
    """The whole store."""
    version: int = SNAPSHOT_VERSION
    rooms: List[RoomRecord] = Field(default_factory=list)

    @field_validator("version")
    @classmethod
    def validate_version(cls, value: int) -> int:
        """Only the current layout is understood."""
        if value != SNAPSHOT_VERSION:
            raise ValueError(f"Unsupported snapshot version {value}")
        return value

    @field_validator("rooms")
    @classmethod
    def validate_unique_codes(cls, value: List[RoomRecord]) -> List[RoomRecord]:
        """Ensure room codes are unique."""
        seen: set[str] = set()
        for room in value:
            if room.code in seen:
                raise ValueError(f"Duplicate room code in snapshot: {room.code}")
            seen.add(room.code)
        return value
