"""
Configuration management using Pydantic models loaded from YAML.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.calendar import OperatingCalendar

logger = logging.getLogger(__name__)


def slugify(value: str) -> str:
    """Turn a display name into a URL-friendly identifier ("Salle de sport" -> "salle-de-sport")."""
    ascii_value = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    return re.sub(r"[^a-z0-9]+", "-", ascii_value.lower()).strip("-")


class CalendarConfig(BaseModel):
    """Opening hours and booking granularity."""
    opening_hour: int = 8
    closing_hour: int = 19
    slot_minutes: int = 30
    open_weekdays: List[int] = Field(default_factory=lambda: [1, 2, 3, 4, 5, 6])  # Monday to Saturday
    max_duration_minutes: int = 240

    @field_validator("opening_hour")
    @classmethod
    def validate_hour(cls, v: int) -> int:
        """Validate hour is between 0 and 23."""
        if not 0 <= v <= 23:
            raise ValueError(f"Hour must be between 0 and 23, got {v}")
        return v

    @field_validator("closing_hour")
    @classmethod
    def validate_closing_hour(cls, v: int) -> int:
        """Validate closing hour is between 1 and 24 (24 closes at midnight)."""
        if not 1 <= v <= 24:
            raise ValueError(f"Closing hour must be between 1 and 24, got {v}")
        return v

    @field_validator("slot_minutes", "max_duration_minutes")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("durations must be greater than zero")
        return value

    @field_validator("slot_minutes")
    @classmethod
    def validate_slot_minutes(cls, value: int) -> int:
        """Slots must tile an hour, e.g. 15, 20, 30 or 60."""
        if value > 0 and 60 % value:
            raise ValueError(f"slot_minutes must divide 60, got {value}")
        return value

    @field_validator("open_weekdays")
    @classmethod
    def validate_open_weekdays(cls, value: List[int]) -> List[int]:
        """Ensure weekdays are ISO numbers (1=Monday, 7=Sunday), deduplicated."""
        invalid_days = [day for day in value if day not in range(1, 8)]
        if invalid_days:
            raise ValueError(f"open_weekdays must be between 1 and 7, got {invalid_days}")
        return sorted(set(value))

    @model_validator(mode="after")
    def validate_grid(self) -> "CalendarConfig":
        """Ensure the opening span and maximum duration fit the slot grid."""
        if self.closing_hour <= self.opening_hour:
            raise ValueError("closing_hour must be later than opening_hour")
        if ((self.closing_hour - self.opening_hour) * 60) % self.slot_minutes:
            raise ValueError("slot_minutes must divide the opening span evenly")
        if self.max_duration_minutes % self.slot_minutes:
            raise ValueError("max_duration_minutes must be a multiple of slot_minutes")
        return self

    def to_operating_calendar(self, timezone: str) -> OperatingCalendar:
        return OperatingCalendar(
            opening_hour=self.opening_hour,
            closing_hour=self.closing_hour,
            slot_minutes=self.slot_minutes,
            open_weekdays=frozenset(self.open_weekdays),
            max_duration_minutes=self.max_duration_minutes,
            timezone=timezone,
        )


class ServiceConfig(BaseModel):
    """A bookable service (spa, massage, ...)."""
    name: str
    slug: str = ""  # derived from the name when empty
    description: str = ""

    @model_validator(mode="after")
    def fill_slug(self) -> "ServiceConfig":
        if not self.slug:
            self.slug = slugify(self.name)
        if not self.slug:
            raise ValueError(f"Cannot derive a slug from service name {self.name!r}")
        return self


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "Europe/Paris"
    calendar: CalendarConfig = Field(default_factory=CalendarConfig)
    services: List[ServiceConfig] = Field(default_factory=list)
    reservations_file: Optional[Path] = None

    @field_validator("services")
    @classmethod
    def validate_services(cls, value: List[ServiceConfig]) -> List[ServiceConfig]:
        """Ensure service names and slugs are unique."""
        seen_names: set[str] = set()
        seen_slugs: set[str] = set()
        for service in value:
            name_key = service.name.lower()
            if name_key in seen_names:
                raise ValueError(f"Duplicate service name detected: {service.name}")
            if service.slug in seen_slugs:
                raise ValueError(f"Duplicate service slug detected: {service.slug}")
            seen_names.add(name_key)
            seen_slugs.add(service.slug)
        return value

    def operating_calendar(self) -> OperatingCalendar:
        return self.calendar.to_operating_calendar(self.timezone)

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        config = cls(**data)

        # relative data paths are resolved against the config file
        if config.reservations_file is not None and not config.reservations_file.is_absolute():
            config.reservations_file = config_path.parent / config.reservations_file

        logger.debug("Loaded configuration from %s (%d service(s))", config_path, len(config.services))
        return config

    def find_service(self, identifier: str) -> ServiceConfig | None:
        """Find a service by slug or by name (case-insensitive)."""
        key = identifier.lower()
        for service in self.services:
            if service.slug == key or service.name.lower() == key:
                return service
        return None


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
