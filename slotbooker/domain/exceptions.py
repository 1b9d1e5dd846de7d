"""
Domain-specific exception hierarchy for slotbooker.

Business-rule violations are never raised: the validator reports them as a
list of messages. The exceptions below cover caller mistakes and write-time
conflicts only.
"""

from __future__ import annotations

from typing import Sequence


class SlotbookerError(Exception):
    """Base class for all application-level errors."""


class InvalidInputError(SlotbookerError, ValueError):
    """Raised when a caller violates a precondition (malformed interval, bad calendar)."""


class UnknownServiceError(SlotbookerError):
    """Raised when a service identifier cannot be resolved."""


class ReservationNotFoundError(SlotbookerError):
    """Raised when a reservation identity does not exist in the store."""


class ReservationAccessError(SlotbookerError):
    """Raised when a reservation is modified by someone other than its owner."""


class ReservationConflictError(SlotbookerError):
    """
    Raised by a store when a write collides with an existing reservation.

    This is the commit-time side of the check-then-act race: callers surface
    it exactly like a pre-commit conflict.
    """

    def __init__(self, message: str, conflicts: Sequence[object] = ()) -> None:
        super().__init__(message)
        self.conflicts = tuple(conflicts)
