"""
Normalization of fetched busy intervals before reconciliation.
"""

import copy
from dataclasses import replace
from datetime import datetime
from typing import Callable, List, Optional, Sequence

import pendulum
from pendulum import DateTime

from .day_alignment import ReferenceWeek
from .models import BusyInterval, EventConfig


class CalendarEventNormalizer:
    """
    Turns raw busy intervals into a single time-ordered sequence.

    For recurring events every start and end is moved into the event's
    reference week so that it can be compared against the event's windows;
    for specific-date events the absolute timestamps are kept.
    """

    def __init__(
        self,
        event: EventConfig,
        week_offset: int = 0,
        *,
        now: Optional[datetime] = None,
        tz=None
    ):
        self.event = event
        self.week_offset = week_offset
        self._to_event_time = self._build_mapper(event, week_offset, now, tz)

    @staticmethod
    def _build_mapper(
        event: EventConfig,
        week_offset: int,
        now: Optional[datetime],
        tz
    ) -> Callable[[DateTime], DateTime]:
        if not event.type.is_recurring:
            return lambda date: date

        reference_week = ReferenceWeek.from_event(event)
        # One instant for every date, so start and end share a week
        if now is None:
            now = pendulum.now()
        return lambda date: reference_week.align(
            date,
            week_offset,
            reverse=False,
            now=now,
            tz=tz
        )

    def normalize(self, intervals: Sequence[BusyInterval]) -> List[BusyInterval]:
        """
        Return aligned copies of ``intervals`` sorted by start.

        The input sequence and its intervals are left untouched.
        """
        normalized = [
            replace(
                interval,
                start=self._to_event_time(interval.start),
                end=self._to_event_time(interval.end),
                metadata=copy.deepcopy(interval.metadata)
            )
            for interval in intervals
        ]
        normalized.sort(key=lambda interval: interval.start)
        return normalized
