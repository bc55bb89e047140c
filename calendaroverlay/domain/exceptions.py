"""
Domain-specific exception hierarchy for the calendar overlay application.
"""


class OverlayError(Exception):
    """Base class for all application-level errors."""


class CalendarAPIError(OverlayError):
    """Raised when calendar data cannot be fetched or parsed."""


class EmptyReferenceWeekError(OverlayError, ValueError):
    """Raised when a recurring event has no reference dates to align against."""
