"""
Domain layer - Pure scheduling logic without external dependencies.
"""

from .availability import AvailabilityCalculator
from .calendar import OperatingCalendar
from .conflicts import ConflictDetector, ReservationLookupProtocol
from .models import (
    CalendarDay,
    DurationOption,
    ReservationRecord,
    ReservationRequest,
    Slot,
    TimeRange,
)
from .overlap import overlaps
from .slot_generator import SlotGenerator
from .validator import ReservationValidator, RuleViolation, ValidationRule

__all__ = [
    "AvailabilityCalculator",
    "CalendarDay",
    "ConflictDetector",
    "DurationOption",
    "OperatingCalendar",
    "ReservationLookupProtocol",
    "ReservationRecord",
    "ReservationRequest",
    "ReservationValidator",
    "RuleViolation",
    "Slot",
    "SlotGenerator",
    "TimeRange",
    "ValidationRule",
    "overlaps",
]
