"""
Tests for YAML configuration loading.
"""

import pytest
from pydantic import ValidationError

from slotbooker.config import AppConfig, CalendarConfig, ServiceConfig, slugify


class TestCalendarConfig:
    """Tests for CalendarConfig validation."""

    def test_defaults_match_operating_calendar_defaults(self):
        calendar = CalendarConfig().to_operating_calendar("Europe/Paris")

        assert calendar.opening_hour == 8
        assert calendar.closing_hour == 19
        assert calendar.open_weekdays == frozenset(range(1, 7))
        assert calendar.max_duration_minutes == 240

    def test_midnight_closing_accepted(self):
        calendar = CalendarConfig(opening_hour=18, closing_hour=24).to_operating_calendar("Europe/Paris")

        assert calendar.closing_hour == 24

    def test_open_weekdays_deduplicated(self):
        assert CalendarConfig(open_weekdays=[3, 1, 3]).open_weekdays == [1, 3]

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"opening_hour": 25},
            {"opening_hour": 19, "closing_hour": 8},
            {"slot_minutes": 45},
            {"opening_hour": 8, "closing_hour": 20, "slot_minutes": 90, "max_duration_minutes": 180},
            {"closing_hour": 25},
            {"max_duration_minutes": 100},
            {"open_weekdays": [0]},
            {"slot_minutes": -30},
        ],
    )
    def test_invalid_calendar(self, kwargs):
        with pytest.raises(ValidationError):
            CalendarConfig(**kwargs)


class TestServices:
    """Tests for service definitions."""

    @pytest.mark.parametrize(
        "name, slug",
        [
            ("Spa", "spa"),
            ("Salle de sport", "salle-de-sport"),
            ("Espace détente privatif", "espace-detente-privatif"),
        ],
    )
    def test_slugify(self, name, slug):
        assert slugify(name) == slug
        assert ServiceConfig(name=name).slug == slug

    def test_explicit_slug_is_kept(self):
        assert ServiceConfig(name="Massage", slug="massage-duo").slug == "massage-duo"

    def test_duplicate_slug_rejected(self):
        with pytest.raises(ValidationError, match="Duplicate service slug"):
            AppConfig(services=[ServiceConfig(name="Spa"), ServiceConfig(name="Other", slug="spa")])

    def test_find_service_by_slug_or_name(self):
        config = AppConfig(services=[ServiceConfig(name="Salle de sport")])

        assert config.find_service("salle-de-sport").name == "Salle de sport"
        assert config.find_service("SALLE DE SPORT").slug == "salle-de-sport"
        assert config.find_service("piscine") is None


class TestLoadFromYaml:
    """Tests for AppConfig.load_from_yaml."""

    def test_load(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "timezone: Europe/Brussels\n"
            "calendar:\n"
            "  opening_hour: 9\n"
            "  closing_hour: 18\n"
            "  open_weekdays: [1, 2, 3, 4, 5]\n"
            "services:\n"
            "  - name: Spa\n"
            "reservations_file: data/reservations.json\n",
            encoding="utf-8",
        )

        config = AppConfig.load_from_yaml(config_file)

        assert config.timezone == "Europe/Brussels"
        assert config.operating_calendar().opening_hour == 9
        assert config.operating_calendar().timezone == "Europe/Brussels"
        assert config.services[0].slug == "spa"
        assert config.reservations_file == tmp_path / "data" / "reservations.json"

    def test_empty_file_gives_defaults(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("", encoding="utf-8")

        config = AppConfig.load_from_yaml(config_file)

        assert config.services == []
        assert config.calendar.slot_minutes == 30

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            AppConfig.load_from_yaml(tmp_path / "config.yaml")

    def test_invalid_yaml(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("services: [unclosed\n", encoding="utf-8")

        with pytest.raises(ValueError, match="Invalid YAML"):
            AppConfig.load_from_yaml(config_file)

    def test_root_must_be_mapping(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("- spa\n", encoding="utf-8")

        with pytest.raises(ValueError, match="mapping"):
            AppConfig.load_from_yaml(config_file)
