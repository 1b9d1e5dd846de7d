"""
Tests for domain models.
"""

from datetime import datetime

import pendulum
import pytest

from slotbooker.domain.exceptions import InvalidInputError
from slotbooker.domain.models import CalendarDay, ReservationRecord, ReservationRequest, Slot, TimeRange

TZ = "Europe/Paris"


class TestTimeRange:
    """Tests for TimeRange model."""

    def test_create_valid_time_range(self):
        """Test creating a valid time range."""
        start = pendulum.parse("2024-11-25 09:00", tz=TZ)
        end = pendulum.parse("2024-11-25 17:00", tz=TZ)

        tr = TimeRange(start=start, end=end)

        assert tr.start == start
        assert tr.end == end
        assert tr.duration_minutes() == 480  # 8 hours

    def test_invalid_time_range_raises_error(self):
        """Test that creating an invalid time range raises ValueError."""
        start = pendulum.parse("2024-11-25 17:00", tz=TZ)
        end = pendulum.parse("2024-11-25 09:00", tz=TZ)

        with pytest.raises(ValueError, match="Start time .* must be before end time"):
            TimeRange(start=start, end=end)

    def test_empty_time_range_is_input_error(self):
        """A zero-length range is a precondition violation."""
        moment = pendulum.parse("2024-11-25 09:00", tz=TZ)

        with pytest.raises(InvalidInputError):
            TimeRange(start=moment, end=moment)

    def test_overlaps(self):
        """Test overlap detection."""
        tr1 = TimeRange(
            start=pendulum.parse("2024-11-25 09:00", tz=TZ),
            end=pendulum.parse("2024-11-25 12:00", tz=TZ)
        )
        tr2 = TimeRange(
            start=pendulum.parse("2024-11-25 11:00", tz=TZ),
            end=pendulum.parse("2024-11-25 14:00", tz=TZ)
        )
        tr3 = TimeRange(
            start=pendulum.parse("2024-11-25 14:00", tz=TZ),
            end=pendulum.parse("2024-11-25 17:00", tz=TZ)
        )

        assert tr1.overlaps(tr2)
        assert tr2.overlaps(tr1)
        assert not tr1.overlaps(tr3)
        assert not tr2.overlaps(tr3)  # touching at 14:00


class TestReservationRequest:
    """Tests for ReservationRequest preconditions."""

    def test_inverted_request_is_allowed(self):
        """Inverted bounds are reported by the validator, not rejected here."""
        request = ReservationRequest(
            service_id="spa",
            start=pendulum.parse("2024-11-25 10:00", tz=TZ),
            end=pendulum.parse("2024-11-25 09:00", tz=TZ),
        )

        assert request.duration_minutes() == -60
        assert request.time_range() is None

    def test_time_range_of_valid_request(self):
        request = ReservationRequest(
            service_id="spa",
            start=pendulum.parse("2024-11-25 09:00", tz=TZ),
            end=pendulum.parse("2024-11-25 10:30", tz=TZ),
        )

        assert request.time_range() == TimeRange(start=request.start, end=request.end)
        assert request.duration_minutes() == 90

    def test_missing_bound_raises_input_error(self):
        """None timestamps are a caller mistake."""
        with pytest.raises(InvalidInputError, match="end must be a datetime"):
            ReservationRequest(
                service_id="spa",
                start=pendulum.parse("2024-11-25 09:00", tz=TZ),
                end=None,
            )

    def test_naive_bound_raises_input_error(self):
        with pytest.raises(InvalidInputError, match="timezone-aware"):
            ReservationRequest(
                service_id="spa",
                start=datetime(2024, 11, 25, 9, 0),
                end=pendulum.parse("2024-11-25 10:00", tz=TZ),
            )


class TestReservationRecord:
    """Tests for ReservationRecord."""

    def test_bounds_come_from_time_range(self):
        tr = TimeRange(
            start=pendulum.parse("2024-11-25 10:00", tz=TZ),
            end=pendulum.parse("2024-11-25 11:00", tz=TZ),
        )
        record = ReservationRecord(identity=7, service_id="spa", time_range=tr, owner="user@example.com")

        assert record.start == tr.start
        assert record.end == tr.end


class TestCalendarDay:
    """Tests for CalendarDay helpers."""

    def test_available_slots_and_open_flag(self):
        start = pendulum.parse("2024-11-25 08:00", tz=TZ)
        slots = [
            Slot(start=start, available=False, is_past=True),
            Slot(start=start.add(minutes=30), available=True, is_past=False),
        ]
        day = CalendarDay(date=start.date(), service_id="spa", slots=slots)

        assert day.is_open
        assert day.available_slots() == [slots[1]]
        assert slots[1].label == "08:30"
