"""
Adapters layer - External integrations (scheduling backend API).
"""

from .calendar_client import CalendarClient
from .mock_calendar_client import MockCalendarClient

__all__ = ["CalendarClient", "MockCalendarClient"]
