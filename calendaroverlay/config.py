"""
Configuration management using Pydantic models loaded from YAML.
"""

from datetime import datetime
from pathlib import Path
from typing import List, Literal, Optional

import pendulum
import yaml
from pydantic import BaseModel, Field, field_validator

from .domain.models import EventConfig, EventType, TimezonePreference, resolve_timezone

MAX_TIMEZONE_OFFSET_MINUTES = 14 * 60


class DefaultsConfig(BaseModel):
    """Default settings for overlays."""
    week_offset: int = 0


class EventDefinition(BaseModel):
    """A named event whose availability grid can be overlaid."""
    name: str
    type: EventType = EventType.SPECIFIC_DATES
    dates: List[datetime]
    duration: float
    start_on_monday: bool = False
    event_id: str = ""  # Optional: fetch the calendars shared with this event

    @field_validator("dates")
    @classmethod
    def validate_dates(cls, value: List[datetime]) -> List[datetime]:
        """Ensure the event has at least one date."""
        if not value:
            raise ValueError("dates must contain at least one date")
        return value

    @field_validator("duration")
    @classmethod
    def validate_duration(cls, value: float) -> float:
        """Ensure the daily window is positive and fits in a day."""
        if not 0 < value <= 24:
            raise ValueError(f"duration must be between 0 and 24 hours, got {value}")
        return value

    def to_event_config(self, tz=None) -> EventConfig:
        """
        Build the domain event, expressing dates in ``tz``.

        Dates without an offset are read in ``tz`` (UTC if omitted).
        """
        tz = tz or "UTC"
        dates = tuple(
            pendulum.instance(date, tz=tz).in_timezone(tz) for date in self.dates
        )
        return EventConfig(
            type=self.type,
            dates=dates,
            duration=self.duration,
            start_on_monday=self.start_on_monday
        )


class AppConfig(BaseModel):
    """Application configuration."""
    api_base_url: str = "http://localhost:3002/api"
    access_token: Optional[str] = None
    timezone_offset_minutes: Optional[int] = None  # Minutes east of UTC
    time_type: Literal["12h", "24h"] = "12h"
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    events: List[EventDefinition] = Field(default_factory=list)

    @field_validator("timezone_offset_minutes")
    @classmethod
    def validate_timezone_offset(cls, value: Optional[int]) -> Optional[int]:
        """Ensure the offset is a real-world UTC offset."""
        if value is not None and abs(value) > MAX_TIMEZONE_OFFSET_MINUTES:
            raise ValueError(
                f"timezone_offset_minutes must be within +-{MAX_TIMEZONE_OFFSET_MINUTES}, got {value}"
            )
        return value

    @field_validator("events")
    @classmethod
    def validate_events(cls, value: List[EventDefinition]) -> List[EventDefinition]:
        """Ensure event names are unique."""
        seen_names: set[str] = set()
        for event in value:
            name_key = event.name.lower()
            if name_key in seen_names:
                raise ValueError(f"Duplicate event name detected: {event.name}")
            seen_names.add(name_key)
        return value

    @property
    def hour12(self) -> bool:
        return self.time_type == "12h"

    def timezone_preference(self) -> Optional[TimezonePreference]:
        """Return the stored timezone preference, None if unset."""
        if self.timezone_offset_minutes is None:
            return None
        return TimezonePreference(offset_minutes=self.timezone_offset_minutes)

    def display_timezone(self):
        """Return the timezone overlays are displayed in."""
        return resolve_timezone(self.timezone_preference())

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

        return cls(**data)

    def find_event(self, name: str) -> EventDefinition | None:
        """Find an event by its name (case-insensitive)."""
        for event in self.events:
            if event.name.lower() == name.lower():
                return event
        return None

    def resolve_event(self, name: str) -> EventDefinition:
        """
        Find an event by name.

        Raises:
            ValueError: If no event has that name
        """
        event = self.find_event(name)
        if event is None:
            known = ", ".join(event.name for event in self.events) or "none"
            raise ValueError(f"Unknown event: '{name}'. Configured events: {known}.")
        return event


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
