"""
Domain models for availability windows and calendar overlays.
"""

from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import pendulum
from pendulum import DateTime


class EventType(str, Enum):
    """How the dates of an event are to be read."""
    SPECIFIC_DATES = "specific_dates"
    RECURRING_WEEKLY = "dow"
    RECURRING_GROUP = "group"

    @property
    def is_recurring(self) -> bool:
        """Recurring events reference weekdays, not concrete calendar dates."""
        return self is not EventType.SPECIFIC_DATES


@dataclass(frozen=True)
class AvailabilityWindow:
    """
    One day-slot of an event: a concrete start and a duration in hours.
    """
    day_index: int
    start: DateTime
    duration_hours: float

    def __post_init__(self):
        if self.duration_hours < 0:
            raise ValueError(f"Window duration must not be negative, got {self.duration_hours}")

    @property
    def end(self) -> DateTime:
        return self.start + timedelta(hours=self.duration_hours)


@dataclass(frozen=True)
class EventConfig:
    """
    The scheduling-relevant part of an event.

    For recurring events ``dates`` are reference date-times whose weekday and
    time of day matter, not their calendar date.
    """
    type: EventType
    dates: Tuple[DateTime, ...]
    duration: float
    start_on_monday: bool = False

    def __post_init__(self):
        if not self.dates:
            raise ValueError("An event needs at least one date")
        if self.duration < 0:
            raise ValueError(f"Event duration must not be negative, got {self.duration}")

    def availability_windows(self) -> List[AvailabilityWindow]:
        """Return one window per event date, indexed by position."""
        return [
            AvailabilityWindow(day_index=index, start=date, duration_hours=self.duration)
            for index, date in enumerate(self.dates)
        ]


@dataclass(frozen=True)
class BusyInterval:
    """
    A calendar occupancy record as fetched from a calendar provider.

    ``metadata`` carries every other field of the record (summary, calendar
    id, ...) untouched.
    """
    start: DateTime
    end: DateTime
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.end < self.start:
            raise ValueError(f"End time {self.end} must not be before start time {self.start}")


@dataclass(frozen=True)
class ClippedInterval:
    """
    A busy interval truncated to one availability window.

    ``hours_offset`` and ``hours_length`` are relative to the window start.
    """
    start: DateTime
    end: DateTime
    hours_offset: float
    hours_length: float
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def hours_end(self) -> float:
        return self.hours_offset + self.hours_length


@dataclass(frozen=True)
class TimezonePreference:
    """A persisted display timezone, in minutes east of UTC."""
    offset_minutes: int

    def timezone(self):
        return pendulum.fixed_timezone(self.offset_minutes * 60)


def resolve_timezone(preference: Optional[TimezonePreference]):
    """
    Return the timezone to display dates in.

    Falls back to the host clock's timezone when no preference is stored.
    """
    if preference is None:
        return pendulum.local_timezone()
    return preference.timezone()


def calendar_account_key(email: str, calendar_type: str) -> str:
    """Key identifying one connected calendar account, e.g. ``a@b.com_google``."""
    return f"{email}_{calendar_type}"
