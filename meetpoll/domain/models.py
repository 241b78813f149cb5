"""
Domain models for rooms, submitted forms and availability intervals.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple, Union

import pendulum
from pendulum import DateTime

from .exceptions import ValidationError

TimestampLike = Union[str, datetime]


def parse_timestamp(value: TimestampLike, tz: str = "UTC") -> DateTime:
    """
    Convert an ISO-8601 string or a datetime into a pendulum DateTime.

    Naive values are interpreted in ``tz``.

    Raises:
        ValidationError: If the value is not a point in time
    """
    if isinstance(value, DateTime):
        return value

    if isinstance(value, datetime):
        if value.tzinfo is None:
            return pendulum.instance(value, tz=tz)
        return pendulum.instance(value)

    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"Invalid timestamp: {value!r}")

    try:
        parsed = pendulum.parse(value.strip(), tz=tz)
    except (ValueError, TypeError) as exc:
        raise ValidationError(f"Invalid timestamp: {value!r}") from exc

    if not isinstance(parsed, DateTime):
        raise ValidationError(f"Timestamp must include a date and time: {value!r}")

    return parsed


@dataclass(frozen=True)
class Interval:
    """
    Represents an immutable availability range with start and end datetime.

    Invariant: start must not be after end. Zero-length intervals are
    allowed but never count towards an overlap.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start > self.end:
            raise ValidationError(
                f"Start time {self.start} must not be after end time {self.end}"
            )

    @classmethod
    def from_pair(
        cls,
        start: TimestampLike,
        end: TimestampLike,
        tz: str = "UTC"
    ) -> "Interval":
        """Build an interval from a raw ``(start, end)`` pair."""
        return cls(start=parse_timestamp(start, tz), end=parse_timestamp(end, tz))

    def is_zero_length(self) -> bool:
        """Return True if start and end are the same instant."""
        return self.start == self.end

    def as_pair(self) -> Tuple[str, str]:
        """Return the interval as a pair of ISO-8601 strings."""
        return self.start.isoformat(), self.end.isoformat()

    def __str__(self) -> str:
        return f"{self.start.format('DD.MM.YYYY HH:mm')} - {self.end.format('HH:mm')}"


@dataclass(frozen=True)
class Form:
    """
    One participant's submission. Never changed after it is appended.
    """
    participant_name: Optional[str] = None
    note: Optional[str] = None
    availability: Tuple[Interval, ...] = ()


@dataclass(frozen=True)
class Room:
    """
    A password-protected collection of forms, keyed by its code.

    ``forms`` only ever grows; the store replaces the room with one more
    form appended, in arrival order.
    """
    code: str
    credential: str
    forms: Tuple[Form, ...] = ()


@dataclass(frozen=True)
class AggregatedRange:
    """
    A sub-range between two adjacent distinct breakpoints and the number of
    submitted intervals that fully contain it.
    """
    start: DateTime
    end: DateTime
    count: int
