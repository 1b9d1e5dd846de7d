"""
Domain models for reservations, time ranges and calendar slots.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Hashable, List, Optional

from pendulum import Date, DateTime

from .exceptions import InvalidInputError
from .overlap import overlaps

Clock = Callable[[], DateTime]


@dataclass(frozen=True)
class TimeRange:
    """
    Represents an immutable time range with start and end datetime.

    Invariant: start must be before end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start >= self.end:
            raise InvalidInputError(f"Start time {self.start} must be before end time {self.end}")

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() / 60)

    def overlaps(self, other: "TimeRange") -> bool:
        """Check if this range overlaps with another."""
        return overlaps(self, other)

    def __str__(self) -> str:
        return f"{self.start.format('DD.MM.YYYY HH:mm')} - {self.end.format('HH:mm')}"


@dataclass(frozen=True)
class ReservationRecord:
    """
    An existing reservation as supplied by the reservation store.

    The scheduling core only reads these.
    """
    identity: Hashable
    service_id: str
    time_range: TimeRange
    owner: Optional[str] = None

    @property
    def start(self) -> DateTime:
        return self.time_range.start

    @property
    def end(self) -> DateTime:
        return self.time_range.end


@dataclass(frozen=True)
class ReservationRequest:
    """
    A proposed reservation awaiting validation.

    Unlike ``TimeRange`` the bounds are not required to be ordered: an
    inverted request is a rule violation reported by the validator, not a
    programming error. Missing, naive or non-datetime bounds are.
    """
    service_id: str
    start: DateTime
    end: DateTime

    def __post_init__(self):
        for name in ("start", "end"):
            value = getattr(self, name)
            if not isinstance(value, datetime):
                raise InvalidInputError(f"Reservation {name} must be a datetime, got {value!r}")
            if value.tzinfo is None:
                raise InvalidInputError(f"Reservation {name} must be timezone-aware, got {value!r}")

    def duration_minutes(self) -> int:
        """Signed duration in minutes; negative when the bounds are inverted."""
        return int((self.end - self.start).total_seconds() / 60)

    def time_range(self) -> TimeRange | None:
        """Return the occupied range, or None when the request covers no time."""
        if self.end <= self.start:
            return None
        return TimeRange(start=self.start, end=self.end)


@dataclass(frozen=True)
class Slot:
    """One bookable unit of the day view."""
    start: DateTime
    available: bool
    is_past: bool

    @property
    def label(self) -> str:
        return self.start.format("HH:mm")


@dataclass(frozen=True)
class DurationOption:
    """A contiguous, conflict-free end time offered for a given start."""
    end: DateTime
    minutes: int
    label: str


@dataclass
class CalendarDay:
    """
    Everything a calendar page needs for one service and one day.
    """
    date: Date
    service_id: str
    slots: List[Slot]
    reservations: List[ReservationRecord] = field(default_factory=list)
    previous_day: Date | None = None
    next_day: Date | None = None
    is_today: bool = False
    closed_message: str | None = None

    @property
    def is_open(self) -> bool:
        return self.closed_message is None

    def available_slots(self) -> List[Slot]:
        return [slot for slot in self.slots if slot.available]
