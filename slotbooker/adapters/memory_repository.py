"""
In-memory reservation store.

Implements the reservation lookup used by the scheduling core plus the write
operations of the booking workflow. Writes enforce an exclusion constraint on
(service, overlapping interval): the overlap re-check and the write happen
under one lock, so of two concurrent writers for the same slot exactly one
wins and the other gets ``ReservationConflictError``.
"""

from __future__ import annotations

import itertools
import json
import logging
import threading
from pathlib import Path
from typing import Dict, Hashable, List, Optional, Sequence

import pendulum

from ..domain.exceptions import (
    InvalidInputError,
    ReservationConflictError,
    ReservationNotFoundError,
)
from ..domain.models import ReservationRecord, TimeRange
from ..domain.overlap import overlaps

logger = logging.getLogger(__name__)


class InMemoryReservationRepository:
    """
    Thread-safe dictionary-backed reservation store.

    Identities are integers allocated in insertion order unless supplied.
    Seeded records must have distinct identities and must not overlap.
    """

    def __init__(self, records: Sequence[ReservationRecord] = ()):
        self._lock = threading.Lock()
        self._records: Dict[Hashable, ReservationRecord] = {}
        self._ids = itertools.count(1)

        for record in records:
            if record.identity in self._records:
                raise ValueError(f"Duplicate reservation id {record.identity!r}")
            self._ensure_free(record.service_id, record.time_range, exclude_id=None)
            self._records[record.identity] = record
        numeric_ids = [r.identity for r in records if isinstance(r.identity, int)]
        if numeric_ids:
            self._ids = itertools.count(max(numeric_ids) + 1)

    @classmethod
    def load_from_json(cls, data_file: Path, timezone: str = "Europe/Paris") -> "InMemoryReservationRepository":
        """
        Seed a store from a JSON list of reservations.

        Expected entries: {"id": 1, "service": "spa", "start": "...", "end": "...", "owner": "..."}
        ("id" and "owner" are optional). Entries without an id are numbered
        after the highest integer id of the file.

        Raises:
            FileNotFoundError: If the data file doesn't exist
            ValueError: If the file or one of its entries is invalid
        """
        if not data_file.exists():
            raise FileNotFoundError(f"Reservation data file not found: {data_file}")

        try:
            with open(data_file, "r", encoding="utf-8") as f:
                entries = json.load(f)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON in {data_file}: {exc}") from exc

        if not isinstance(entries, list):
            raise ValueError("Reservation data file must contain a list at the root level.")

        explicit_ids = [entry["id"] for entry in entries if isinstance(entry, dict) and "id" in entry]
        next_id = itertools.count(max((i for i in explicit_ids if isinstance(i, int)), default=0) + 1)

        records: List[ReservationRecord] = []
        for index, entry in enumerate(entries, 1):
            try:
                records.append(
                    ReservationRecord(
                        identity=entry["id"] if "id" in entry else next(next_id),
                        service_id=entry["service"],
                        time_range=TimeRange(
                            start=pendulum.parse(entry["start"], tz=timezone),
                            end=pendulum.parse(entry["end"], tz=timezone),
                        ),
                        owner=entry.get("owner"),
                    )
                )
            except (KeyError, TypeError, AttributeError, ValueError) as exc:
                raise ValueError(f"Invalid reservation entry #{index} in {data_file}: {exc}") from exc

        try:
            repository = cls(records)
        except ReservationConflictError as exc:
            raise ValueError(f"Overlapping reservations in {data_file}: {exc}") from exc

        logger.debug("Loaded %d reservation(s) from %s", len(records), data_file)
        return repository

    def find_reservations(self, service_id: str, window: TimeRange) -> List[ReservationRecord]:
        """Reservations of ``service_id`` overlapping ``window``, sorted by start."""
        with self._lock:
            found = [
                record for record in self._records.values()
                if record.service_id == service_id and overlaps(record.time_range, window)
            ]
        logger.debug("Lookup %s %s: %d reservation(s)", service_id, window, len(found))
        return sorted(found, key=lambda r: r.start)

    def get(self, identity: Hashable) -> ReservationRecord:
        with self._lock:
            try:
                return self._records[identity]
            except KeyError:
                raise ReservationNotFoundError(f"Reservation {identity!r} not found") from None

    def resolve_identity(self, token: str) -> Hashable:
        """
        Map a textual id (command line) onto the stored identity.

        JSON data may use integer or string ids; the stored identity whose
        string form equals ``token`` is returned, ``token`` itself otherwise.
        """
        with self._lock:
            for identity in self._records:
                if str(identity) == token:
                    return identity
        return token

    def for_owner(self, owner: str) -> List[ReservationRecord]:
        """All reservations of ``owner``, most recent start first."""
        with self._lock:
            owned = [r for r in self._records.values() if r.owner == owner]
        return sorted(owned, key=lambda r: r.start, reverse=True)

    def add(
        self,
        service_id: str,
        time_range: TimeRange,
        owner: Optional[str] = None,
    ) -> ReservationRecord:
        """
        Insert a reservation unless it collides with an existing one.

        Raises:
            ReservationConflictError: If the interval overlaps a stored reservation
        """
        with self._lock:
            self._ensure_free(service_id, time_range, exclude_id=None)
            record = ReservationRecord(
                identity=next(self._ids),
                service_id=service_id,
                time_range=time_range,
                owner=owner,
            )
            self._records[record.identity] = record
            return record

    def update(self, identity: Hashable, time_range: TimeRange) -> ReservationRecord:
        """
        Move an existing reservation to a new interval.

        Raises:
            ReservationNotFoundError: If the reservation doesn't exist
            ReservationConflictError: If the new interval overlaps another reservation
        """
        with self._lock:
            current = self._records.get(identity)
            if current is None:
                raise ReservationNotFoundError(f"Reservation {identity!r} not found")

            self._ensure_free(current.service_id, time_range, exclude_id=identity)
            record = ReservationRecord(
                identity=identity,
                service_id=current.service_id,
                time_range=time_range,
                owner=current.owner,
            )
            self._records[identity] = record
            return record

    def remove(self, identity: Hashable) -> ReservationRecord:
        with self._lock:
            try:
                return self._records.pop(identity)
            except KeyError:
                raise ReservationNotFoundError(f"Reservation {identity!r} not found") from None

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def _ensure_free(
        self,
        service_id: str,
        time_range: TimeRange,
        exclude_id: Optional[Hashable],
    ) -> None:
        # caller holds the lock
        if not isinstance(time_range, TimeRange):
            raise InvalidInputError(f"Expected a TimeRange, got {time_range!r}")

        conflicts = [
            record for record in self._records.values()
            if record.service_id == service_id
            and record.identity != exclude_id
            and overlaps(record.time_range, time_range)
        ]
        if conflicts:
            raise ReservationConflictError(
                f"{service_id}: {time_range} overlaps {len(conflicts)} existing reservation(s)",
                conflicts=conflicts,
            )
