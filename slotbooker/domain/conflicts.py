"""
Conflict detection between a candidate interval and existing reservations.

The detector never trusts the store to filter exactly: whatever the lookup
returns is re-checked with the shared ``overlaps`` primitive, so over-fetching
is harmless while under-fetching is a store bug.
"""

from __future__ import annotations

from typing import Hashable, Iterable, List, Optional, Protocol, Sequence

from .models import ReservationRecord, TimeRange
from .overlap import overlaps


class ReservationLookupProtocol(Protocol):
    """Read access to existing reservations needed by the scheduling core."""

    def find_reservations(
        self,
        service_id: str,
        window: TimeRange,
    ) -> Sequence[ReservationRecord]:
        """Return every reservation of ``service_id`` that may overlap ``window``."""


class ConflictDetector:
    """
    Answers "does this candidate collide with an existing booking?".

    Both the calendar view and the validator go through this class so they
    cannot disagree on what counts as a conflict.
    """

    def __init__(self, lookup: ReservationLookupProtocol) -> None:
        self._lookup = lookup

    def find_conflicts(
        self,
        service_id: str,
        candidate: TimeRange,
        exclude_id: Optional[Hashable] = None,
    ) -> List[ReservationRecord]:
        """
        Return reservations of ``service_id`` overlapping ``candidate``.

        ``exclude_id`` drops the reservation being edited so it does not
        conflict with its own previous state. An empty list means available.
        """
        records = self.reservations_in(service_id, candidate)
        return self.select_conflicts(records, candidate, exclude_id)

    def reservations_in(
        self,
        service_id: str,
        window: TimeRange,
    ) -> List[ReservationRecord]:
        """Fetch once the reservations of a service overlapping ``window``, sorted by start."""
        fetched = self._lookup.find_reservations(service_id, window)
        records = [
            record for record in fetched
            if record.service_id == service_id and overlaps(record.time_range, window)
        ]
        return sorted(records, key=lambda r: r.start)

    @staticmethod
    def select_conflicts(
        records: Iterable[ReservationRecord],
        candidate: TimeRange,
        exclude_id: Optional[Hashable] = None,
    ) -> List[ReservationRecord]:
        """Pure in-process filter over an already fetched snapshot."""
        return [
            record for record in records
            if (exclude_id is None or record.identity != exclude_id)
            and overlaps(record.time_range, candidate)
        ]
