"""
Domain layer - Pure business logic without external dependencies.
"""

from .day_alignment import ReferenceWeek, align, fetch_range
from .models import (
    AvailabilityWindow,
    BusyInterval,
    ClippedInterval,
    EventConfig,
    EventType,
    TimezonePreference,
)
from .normalizer import CalendarEventNormalizer
from .reconciler import IntervalReconciler

__all__ = [
    "AvailabilityWindow",
    "BusyInterval",
    "CalendarEventNormalizer",
    "ClippedInterval",
    "EventConfig",
    "EventType",
    "IntervalReconciler",
    "ReferenceWeek",
    "TimezonePreference",
    "align",
    "fetch_range",
]
