"""
Enumeration of slot start times for a day.

Generation ignores bookings and the clock; availability is layered on top by
``AvailabilityCalculator``.
"""

from datetime import date
from typing import List

from pendulum import DateTime

from .calendar import OperatingCalendar


class SlotGenerator:
    """Produces the fixed grid of slot starts defined by an operating calendar."""

    def __init__(self, calendar: OperatingCalendar):
        self.calendar = calendar

    def generate(self, day: date) -> List[DateTime]:
        """
        Return every slot start of ``day``, from opening up to (excluding) closing.

        Example with 08:00-19:00 and 30 minute slots:
        [08:00, 08:30, ..., 18:30] (22 slots)
        """
        slots: List[DateTime] = []

        current = self.calendar.opening_on(day)
        end = self.calendar.closing_on(day)

        while current < end:
            slots.append(current)
            current = current.add(minutes=self.calendar.slot_minutes)

        return slots
