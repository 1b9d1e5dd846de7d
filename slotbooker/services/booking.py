"""
Application services for browsing availability and managing reservations.

The service resolves services from configuration, wires the domain
components around a reservation store and turns commit-time conflicts into
the same user-facing outcome as a pre-commit conflict. The store dependency
is a simple protocol so the in-memory adapter or a real database can be
plugged in.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Hashable, List, Optional, Protocol

import pendulum

from ..config import AppConfig, ServiceConfig
from ..domain.availability import AvailabilityCalculator
from ..domain.conflicts import ConflictDetector, ReservationLookupProtocol
from ..domain.exceptions import (
    ReservationAccessError,
    ReservationConflictError,
    UnknownServiceError,
)
from ..domain.formatting import format_reservation
from ..domain.models import (
    CalendarDay,
    Clock,
    DurationOption,
    ReservationRecord,
    ReservationRequest,
    TimeRange,
)
from ..domain.validator import CONFLICT_MESSAGE, ReservationValidator

logger = logging.getLogger(__name__)

PAST_EDIT_MESSAGE = "Vous ne pouvez pas modifier une réservation passée."


class ReservationRepositoryProtocol(ReservationLookupProtocol, Protocol):
    """
    Store behaviour needed by the booking workflow.

    ``add`` and ``update`` must reject a write overlapping another
    reservation of the same service with ``ReservationConflictError``, checked
    atomically with the write (transaction or exclusion constraint).
    """

    def get(self, identity: Hashable) -> ReservationRecord:
        """Return a reservation or raise ``ReservationNotFoundError``."""

    def for_owner(self, owner: str) -> List[ReservationRecord]:
        """Return the reservations of ``owner``."""

    def add(self, service_id: str, time_range: TimeRange, owner: Optional[str] = None) -> ReservationRecord:
        """Persist a new reservation."""

    def update(self, identity: Hashable, time_range: TimeRange) -> ReservationRecord:
        """Move a reservation to a new interval."""

    def remove(self, identity: Hashable) -> ReservationRecord:
        """Delete a reservation and return it."""


@dataclass
class BookingResult:
    """Outcome of a booking or rescheduling attempt."""
    reservation: Optional[ReservationRecord] = None
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


@dataclass
class OwnerReservations:
    upcoming: List[ReservationRecord]
    past: List[ReservationRecord]


class BookingService:
    """
    Orchestrates availability queries and the book/reschedule/cancel workflows.
    """

    def __init__(
        self,
        config: AppConfig,
        repository: ReservationRepositoryProtocol,
        clock: Optional[Clock] = None,
    ) -> None:
        self._config = config
        self._repository = repository
        self.calendar = config.operating_calendar()
        self._clock = clock or (lambda: pendulum.now(self.calendar.timezone))

        detector = ConflictDetector(repository)
        self.validator = ReservationValidator(self.calendar, detector, clock=self._clock)
        self.availability = AvailabilityCalculator(self.calendar, detector, clock=self._clock)

    def list_services(self) -> List[ServiceConfig]:
        return list(self._config.services)

    def resolve_service(self, identifier: str) -> ServiceConfig:
        """
        Resolve a service slug or name.

        Raises:
            UnknownServiceError: If no configured service matches
        """
        service = self._config.find_service(identifier)
        if service is None:
            raise UnknownServiceError(
                f"Unknown service: '{identifier}'. "
                f"Known services: {', '.join(s.slug for s in self._config.services) or 'none'}."
            )
        return service

    def calendar_day(self, service: str, day: date) -> CalendarDay:
        return self.availability.calendar_day(self.resolve_service(service).slug, day)

    def available_durations(self, service: str, start: datetime) -> List[DurationOption]:
        return self.availability.available_durations(self.resolve_service(service).slug, start)

    def validate(
        self,
        service: str,
        start: datetime,
        end: datetime,
        exclude_id: Optional[Hashable] = None,
    ) -> List[str]:
        """Validate a proposed interval; an empty list means it may be committed."""
        request = ReservationRequest(
            service_id=self.resolve_service(service).slug,
            start=start,
            end=end,
        )
        return self.validator.validate(request, exclude_id=exclude_id)

    def book(
        self,
        service: str,
        start: datetime,
        end: datetime,
        owner: Optional[str] = None,
    ) -> BookingResult:
        """
        Validate and commit a new reservation.

        A conflict raised by the store at commit time (another request won the
        race) is reported with the regular conflict message.
        """
        slug = self.resolve_service(service).slug
        errors = self.validate(slug, start, end)
        if errors:
            return BookingResult(errors=errors)

        time_range = TimeRange(start=self.calendar.localize(start), end=self.calendar.localize(end))
        try:
            record = self._repository.add(slug, time_range, owner=owner)
        except ReservationConflictError as exc:
            logger.warning("Commit-time conflict while booking %s: %s", slug, exc)
            return BookingResult(errors=[CONFLICT_MESSAGE])

        logger.info("Booked %s #%s: %s", slug, record.identity, format_reservation(time_range))
        return BookingResult(reservation=record)

    def reschedule(
        self,
        reservation_id: Hashable,
        end: datetime,
        owner: Optional[str] = None,
        start: Optional[datetime] = None,
    ) -> BookingResult:
        """
        Move an upcoming reservation, keeping its start unless one is given.

        The reservation is excluded from its own conflict check.
        """
        current = self._load_owned(reservation_id, owner)

        if current.start < self._clock():
            return BookingResult(reservation=current, errors=[PAST_EDIT_MESSAGE])

        new_start = start or current.start
        errors = self.validate(current.service_id, new_start, end, exclude_id=current.identity)
        if errors:
            return BookingResult(reservation=current, errors=errors)

        time_range = TimeRange(start=self.calendar.localize(new_start), end=self.calendar.localize(end))
        try:
            record = self._repository.update(current.identity, time_range)
        except ReservationConflictError as exc:
            logger.warning("Commit-time conflict while rescheduling #%s: %s", current.identity, exc)
            return BookingResult(reservation=current, errors=[CONFLICT_MESSAGE])

        logger.info("Rescheduled #%s: %s", record.identity, format_reservation(time_range))
        return BookingResult(reservation=record)

    def cancel(self, reservation_id: Hashable, owner: Optional[str] = None) -> ReservationRecord:
        """Delete a reservation and return it."""
        current = self._load_owned(reservation_id, owner)
        removed = self._repository.remove(current.identity)
        logger.info("Cancelled #%s (%s)", removed.identity, removed.service_id)
        return removed

    def reservations_for(self, owner: str) -> OwnerReservations:
        """Split an owner's reservations into upcoming (soonest first) and past (latest first)."""
        now = self._clock()
        records = self._repository.for_owner(owner)

        upcoming = sorted((r for r in records if r.start > now), key=lambda r: r.start)
        past = sorted((r for r in records if r.start <= now), key=lambda r: r.start, reverse=True)

        return OwnerReservations(upcoming=upcoming, past=past)

    def _load_owned(self, reservation_id: Hashable, owner: Optional[str]) -> ReservationRecord:
        record = self._repository.get(reservation_id)
        if owner is not None and record.owner != owner:
            raise ReservationAccessError(
                f"Reservation #{reservation_id} does not belong to {owner}"
            )
        return record
