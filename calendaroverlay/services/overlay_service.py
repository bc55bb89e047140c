"""
Application services for building calendar overlays.

The service coordinates fetching busy intervals via a calendar client
adapter and delegates alignment and clipping to the domain layer. This keeps
the CLI thin and allows the calendar dependency to be mocked via a simple
protocol.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, List, Optional, Protocol

import pendulum
from pendulum import DateTime

from ..domain.day_alignment import fetch_range
from ..domain.models import BusyInterval, ClippedInterval, EventConfig
from ..domain.normalizer import CalendarEventNormalizer
from ..domain.reconciler import IntervalReconciler

logger = logging.getLogger(__name__)

DayOverlay = Dict[int, List[ClippedInterval]]


class CalendarClientProtocol(Protocol):
    """Protocol describing the calendar client behaviour needed by the service."""

    async def get_calendar_events(
        self,
        time_min: DateTime,
        time_max: DateTime,
        event_id: str = "",
    ) -> Dict[str, List[BusyInterval]]:
        """Return busy intervals per calendar account."""


class OverlayService:
    """
    Orchestrates busy-interval retrieval and reconciliation.

    Fetch errors raised by the calendar client propagate unchanged.
    """

    def __init__(
        self,
        calendar_client: CalendarClientProtocol,
        reconciler: IntervalReconciler | None = None,
    ) -> None:
        self._calendar_client = calendar_client
        self._reconciler = reconciler or IntervalReconciler()

    async def build_overlay(
        self,
        event: EventConfig,
        *,
        week_offset: int = 0,
        event_id: str = "",
        now: Optional[datetime] = None,
        tz=None,
    ) -> Dict[str, DayOverlay]:
        """
        Fetch busy intervals for ``event`` and clip them to its windows.

        Returns:
            Dict mapping calendar account key to the per-day overlay
        """
        # The fetched week and the aligned week must come from the same instant
        if now is None:
            now = pendulum.now()

        calendar_events = await self.fetch_busy_intervals(
            event,
            week_offset=week_offset,
            event_id=event_id,
            now=now,
            tz=tz,
        )

        return self.calculate_overlay(
            event,
            calendar_events,
            week_offset=week_offset,
            now=now,
            tz=tz,
        )

    async def fetch_busy_intervals(
        self,
        event: EventConfig,
        *,
        week_offset: int = 0,
        event_id: str = "",
        now: Optional[datetime] = None,
        tz=None,
    ) -> Dict[str, List[BusyInterval]]:
        """Fetch busy intervals covering the range displayed for ``event``."""
        time_min, time_max = fetch_range(event, week_offset, now=now, tz=tz)
        logger.debug(
            "Fetching calendar events between %s and %s",
            time_min.to_iso8601_string(),
            time_max.to_iso8601_string(),
        )

        return await self._calendar_client.get_calendar_events(
            time_min=time_min,
            time_max=time_max,
            event_id=event_id,
        )

    def calculate_overlay(
        self,
        event: EventConfig,
        calendar_events: Dict[str, List[BusyInterval]],
        *,
        week_offset: int = 0,
        now: Optional[datetime] = None,
        tz=None,
    ) -> Dict[str, DayOverlay]:
        """Normalize and clip already fetched busy intervals, per account."""
        normalizer = CalendarEventNormalizer(event, week_offset, now=now, tz=tz)
        windows = event.availability_windows()

        overlays: Dict[str, DayOverlay] = {}
        for account, intervals in calendar_events.items():
            overlays[account] = self._reconciler.reconcile(
                windows,
                normalizer.normalize(intervals),
            )

        return overlays
