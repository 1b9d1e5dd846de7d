"""
Tests for French display helpers.
"""

import pendulum
import pytest

from slotbooker.domain.formatting import describe_open_days, format_duration, format_reservation
from slotbooker.domain.models import TimeRange


class TestFormatDuration:
    @pytest.mark.parametrize(
        "minutes, label",
        [
            (30, "30 minutes"),
            (45, "45 minutes"),
            (60, "1 heure"),
            (90, "1h30"),
            (120, "2 heures"),
            (135, "2h15"),
            (240, "4 heures"),
        ],
    )
    def test_labels(self, minutes, label):
        assert format_duration(minutes) == label


class TestDescribeOpenDays:
    @pytest.mark.parametrize(
        "weekdays, text",
        [
            ({1, 2, 3, 4, 5, 6}, "du lundi au samedi"),
            ({1, 2, 3, 4, 5}, "du lundi au vendredi"),
            ({6, 7}, "les samedi et dimanche"),
            ({1, 3, 5}, "les lundi, mercredi et vendredi"),
            ({2}, "le mardi"),
        ],
    )
    def test_descriptions(self, weekdays, text):
        assert describe_open_days(weekdays) == text


def test_format_reservation():
    time_range = TimeRange(
        start=pendulum.datetime(2024, 11, 25, 9, 0, tz="Europe/Paris"),
        end=pendulum.datetime(2024, 11, 25, 10, 30, tz="Europe/Paris"),
    )

    assert format_reservation(time_range) == "lundi 25/11/2024 de 09:00 à 10:30"
