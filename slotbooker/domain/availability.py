"""
Availability of a service for display: annotated day grid and bookable durations.

This is the display side; admission is ``ReservationValidator``'s job. Both
share the operating calendar and the conflict detector, hence the same
overlap and open-day semantics.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

import pendulum
from pendulum import DateTime

from .calendar import OperatingCalendar
from .conflicts import ConflictDetector
from .formatting import format_duration
from .models import CalendarDay, Clock, DurationOption, Slot, TimeRange
from .slot_generator import SlotGenerator


class AvailabilityCalculator:
    """
    Combines the slot grid with existing reservations.

    Each operation performs a single windowed lookup and then works on that
    snapshot in memory.
    """

    def __init__(
        self,
        calendar: OperatingCalendar,
        conflict_detector: ConflictDetector,
        clock: Optional[Clock] = None,
        slot_generator: Optional[SlotGenerator] = None,
    ):
        self.calendar = calendar
        self.conflict_detector = conflict_detector
        self.slot_generator = slot_generator or SlotGenerator(calendar)
        self._clock = clock or (lambda: pendulum.now(calendar.timezone))

    def day_view(self, service_id: str, day: date) -> List[Slot]:
        """Return every slot of ``day`` marked as past and/or available."""
        return self._build_slots(service_id, day, self._clock())[0]

    def calendar_day(self, service_id: str, day: date) -> CalendarDay:
        """
        Gather the day view together with navigation and closing information.
        """
        now = self._clock()
        slots, reservations = self._build_slots(service_id, day, now)
        current = self.calendar.day_start(day).date()

        return CalendarDay(
            date=current,
            service_id=service_id,
            slots=slots,
            reservations=reservations,
            previous_day=current.subtract(days=1),
            next_day=current.add(days=1),
            is_today=current == self.calendar.localize(now).date(),
            closed_message=self.calendar.closed_message(current),
        )

    def available_durations(self, service_id: str, start: datetime) -> List[DurationOption]:
        """
        Return the bookable durations starting at ``start``.

        Candidates grow one slot at a time up to ``max_duration_minutes``. The
        first candidate ending after closing or colliding with a reservation
        stops the search, so the result is always a contiguous prefix: a free
        slot after an obstruction is never offered.
        """
        calendar = self.calendar
        start = calendar.localize(start)
        closing = calendar.closing_on(start)
        max_slots = calendar.max_duration_minutes // calendar.slot_minutes

        window = TimeRange(start=start, end=start.add(minutes=calendar.max_duration_minutes))
        reservations = self.conflict_detector.reservations_in(service_id, window)

        durations: List[DurationOption] = []

        for i in range(1, max_slots + 1):
            minutes = i * calendar.slot_minutes
            end = start.add(minutes=minutes)

            if end > closing:
                break

            if self.conflict_detector.select_conflicts(reservations, TimeRange(start=start, end=end)):
                break

            durations.append(
                DurationOption(end=end, minutes=minutes, label=format_duration(minutes))
            )

        return durations

    def _build_slots(self, service_id: str, day: date, now: DateTime):
        calendar = self.calendar
        day_start = calendar.day_start(day)
        window = TimeRange(start=day_start, end=day_start.add(days=1))

        reservations = self.conflict_detector.reservations_in(service_id, window)
        open_day = calendar.is_open_day(day_start)

        slots: List[Slot] = []

        for slot_start in self.slot_generator.generate(day_start):
            is_past = slot_start < now
            slot_range = TimeRange(start=slot_start, end=slot_start.add(minutes=calendar.slot_minutes))

            available = (
                not is_past
                and open_day
                and not self.conflict_detector.select_conflicts(reservations, slot_range)
            )
            slots.append(Slot(start=slot_start, available=available, is_past=is_past))

        return slots, reservations
