"""
Business-rule validation of proposed reservations.

All rules run on every call, in a fixed order, and every violation is
reported so the user sees each problem at once. Violations are returned,
never raised.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Hashable, List, Optional

import pendulum

from .calendar import OperatingCalendar
from .conflicts import ConflictDetector
from .formatting import describe_open_days, format_duration
from .models import Clock, ReservationRequest


class ValidationRule(Enum):
    """Validation rules, declared in evaluation order."""
    END_AFTER_START = "end_after_start"
    DURATION = "duration"
    IN_FUTURE = "in_future"
    OPENING_HOURS = "opening_hours"
    OPEN_DAY = "open_day"
    SLOT_ALIGNMENT = "slot_alignment"
    NO_CONFLICT = "no_conflict"


@dataclass(frozen=True)
class RuleViolation:
    """One failed rule with its user-facing message."""
    rule: ValidationRule
    message: str


CONFLICT_MESSAGE = "Ce créneau est déjà réservé. Veuillez choisir un autre horaire."


class ReservationValidator:
    """
    Runs the full rule set against a reservation request.

    Rules (in order):
    1. End strictly after start
    2. Duration positive and at most ``max_duration_minutes``
    3. Start strictly in the future
    4. Within opening hours
    5. Start on an open day
    6. Start and end slot-aligned
    7. No conflicting reservation (ignoring ``exclude_id``)
    """

    def __init__(
        self,
        calendar: OperatingCalendar,
        conflict_detector: ConflictDetector,
        clock: Optional[Clock] = None,
    ):
        self.calendar = calendar
        self.conflict_detector = conflict_detector
        self._clock = clock or (lambda: pendulum.now(calendar.timezone))

    def validate(
        self,
        request: ReservationRequest,
        exclude_id: Optional[Hashable] = None,
    ) -> List[str]:
        """Return the messages of every violated rule; empty means acceptable."""
        return [violation.message for violation in self.check(request, exclude_id)]

    def check(
        self,
        request: ReservationRequest,
        exclude_id: Optional[Hashable] = None,
    ) -> List[RuleViolation]:
        """Same as ``validate`` but keeps the rule of each violation."""
        calendar = self.calendar
        violations: List[RuleViolation] = []

        def fail(rule: ValidationRule, message: str) -> None:
            violations.append(RuleViolation(rule=rule, message=message))

        if not request.end > request.start:
            fail(ValidationRule.END_AFTER_START, "La date de fin doit être après la date de début.")

        duration = request.duration_minutes()
        if not 0 < duration <= calendar.max_duration_minutes:
            fail(
                ValidationRule.DURATION,
                f"La durée maximale est de {format_duration(calendar.max_duration_minutes)}. "
                f"Durée demandée : {duration} minutes.",
            )

        if not request.start > self._clock():
            fail(ValidationRule.IN_FUTURE, "Vous ne pouvez pas réserver dans le passé.")

        if not calendar.is_within_hours(request):
            fail(
                ValidationRule.OPENING_HOURS,
                f"Les réservations sont possibles de {calendar.opening_hour}h "
                f"à {calendar.closing_hour}h.",
            )

        if not calendar.is_open_day(request.start):
            fail(
                ValidationRule.OPEN_DAY,
                f"Les réservations sont possibles "
                f"{describe_open_days(calendar.open_weekdays)} uniquement.",
            )

        if not (calendar.is_slot_aligned(request.start) and calendar.is_slot_aligned(request.end)):
            fail(ValidationRule.SLOT_ALIGNMENT, self._alignment_message())

        occupied = request.time_range()
        # an inverted or empty request occupies no time and cannot collide
        if occupied is not None and self.conflict_detector.find_conflicts(
            request.service_id, occupied, exclude_id
        ):
            fail(ValidationRule.NO_CONFLICT, CONFLICT_MESSAGE)

        return violations

    def _alignment_message(self) -> str:
        step = self.calendar.slot_minutes
        examples = ", ".join(
            f"{(self.calendar.opening_hour + 1 + (i * step) // 60) % 24:02d}:{(i * step) % 60:02d}"
            for i in range(3)
        )
        return (
            f"Les créneaux doivent être alignés sur des tranches de {step} minutes "
            f"(ex: {examples}...)."
        )
