"""
Operating calendar: opening hours, slot granularity and open days.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import FrozenSet

import pendulum
from pendulum import DateTime

from .exceptions import InvalidInputError
from .formatting import WEEKDAY_NAMES
from .overlap import Bounded


@dataclass(frozen=True)
class OperatingCalendar:
    """
    Immutable opening configuration of a bookable service.

    ``closing_hour`` is exclusive for slot starts and inclusive as an end
    boundary; 24 closes at midnight. Weekdays use ISO numbering (1=Monday,
    7=Sunday). ``slot_minutes`` divides an hour so that the minute-of-hour
    alignment check matches the generated grid.
    """
    opening_hour: int = 8
    closing_hour: int = 19
    slot_minutes: int = 30
    open_weekdays: FrozenSet[int] = field(default_factory=lambda: frozenset(range(1, 7)))
    max_duration_minutes: int = 240
    timezone: str = "Europe/Paris"

    def __post_init__(self):
        # frozen: normalise through object.__setattr__
        object.__setattr__(self, "open_weekdays", frozenset(self.open_weekdays))

        if not 0 <= self.opening_hour < self.closing_hour <= 24:
            raise InvalidInputError(
                f"Opening hour {self.opening_hour} must be before closing hour {self.closing_hour} (0-24)"
            )
        if self.slot_minutes <= 0:
            raise InvalidInputError(f"slot_minutes must be positive, got {self.slot_minutes}")
        if 60 % self.slot_minutes:
            raise InvalidInputError(f"slot_minutes must divide 60, got {self.slot_minutes}")

        span = (self.closing_hour - self.opening_hour) * 60
        if span % self.slot_minutes:
            raise InvalidInputError(
                f"slot_minutes ({self.slot_minutes}) must divide the opening span of {span} minutes"
            )
        if self.max_duration_minutes <= 0 or self.max_duration_minutes % self.slot_minutes:
            raise InvalidInputError(
                f"max_duration_minutes ({self.max_duration_minutes}) must be a positive "
                f"multiple of slot_minutes ({self.slot_minutes})"
            )

        invalid_days = sorted(day for day in self.open_weekdays if day not in range(1, 8))
        if invalid_days:
            raise InvalidInputError(f"open_weekdays must be between 1 and 7, got {invalid_days}")

    def localize(self, moment: datetime) -> DateTime:
        """Express ``moment`` in the calendar timezone (naive values are taken as local)."""
        return pendulum.instance(moment, tz=self.timezone).in_timezone(self.timezone)

    def day_start(self, day: date) -> DateTime:
        """Midnight of ``day`` in the calendar timezone."""
        if isinstance(day, datetime):
            day = self.localize(day).date()
        return pendulum.datetime(day.year, day.month, day.day, tz=self.timezone)

    def opening_on(self, day: date) -> DateTime:
        return self.day_start(day).set(hour=self.opening_hour)

    def closing_on(self, day: date) -> DateTime:
        if self.closing_hour == 24:
            return self.day_start(day).add(days=1)
        return self.day_start(day).set(hour=self.closing_hour)

    def is_open_day(self, day: date) -> bool:
        """Check whether reservations are accepted on the weekday of ``day``."""
        return self.day_start(day).isoweekday() in self.open_weekdays

    def is_within_hours(self, interval: Bounded) -> bool:
        """
        Check that an interval fits the opening hours of its start day.

        Ending exactly at closing is allowed, starting at closing is not.
        """
        start = self.localize(interval.start)
        end = self.localize(interval.end)
        closing = self.closing_on(start)

        return self.opening_on(start) <= start < closing and end <= closing

    def is_slot_aligned(self, moment: datetime) -> bool:
        """Check that ``moment`` falls on a slot boundary (whole minute, multiple of the slot size)."""
        local = self.localize(moment)
        return local.second == 0 and local.microsecond == 0 and local.minute % self.slot_minutes == 0

    def closed_message(self, day: date) -> str | None:
        """User-facing notice for a closed day, None when the day is open."""
        if self.is_open_day(day):
            return None

        weekday = WEEKDAY_NAMES[self.day_start(day).isoweekday()]
        return f"Nos services sont fermés le {weekday}."
