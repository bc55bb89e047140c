"""
Core business logic for overlaying busy intervals onto availability windows.

Pure domain logic: no API calls, no configuration, no I/O.
"""

import copy
import logging
from typing import Dict, List, Sequence

from pendulum import DateTime

from .models import AvailabilityWindow, BusyInterval, ClippedInterval, EventConfig

logger = logging.getLogger(__name__)

SECONDS_PER_HOUR = 60 * 60


def _is_between(value: DateTime, lower: DateTime, upper: DateTime) -> bool:
    return lower <= value <= upper


class IntervalReconciler:
    """
    Clips busy intervals to the availability windows of an event.

    Algorithm:
    1. Walk the windows in chronological order
    2. For each window, consume every busy interval starting before the
       window ends, advancing a single cursor that never moves back
    3. Keep consumed intervals that overlap the window, clipped to it
    4. Express each kept interval as hours offset/length from the window start

    Preconditions: windows are chronological and disjoint, intervals are
    sorted by start. Both inputs being sorted keeps the sweep linear.

    A busy interval is consumed by the first window it reaches, so a busy
    interval spanning two windows only shows up in the first of them.
    """

    def reconcile(
        self,
        windows: Sequence[AvailabilityWindow],
        intervals: Sequence[BusyInterval]
    ) -> Dict[int, List[ClippedInterval]]:
        """
        Clip ``intervals`` to ``windows``.

        Args:
            windows: Chronological, non-overlapping availability windows
            intervals: Busy intervals sorted ascending by start

        Returns:
            Dict mapping each window's day index to its clipped intervals
        """
        by_day: Dict[int, List[ClippedInterval]] = {
            window.day_index: [] for window in windows
        }
        cursor = 0

        for window in windows:
            if cursor >= len(intervals):
                break

            window_end = window.end

            while cursor < len(intervals) and window_end > intervals[cursor].start:
                interval = intervals[cursor]
                cursor += 1

                clipped = self._clip_to_window(interval, window.start, window_end)
                if clipped is not None:
                    by_day[window.day_index].append(clipped)

        logger.debug(
            "Reconciled %d busy interval(s) against %d window(s), %d left unconsumed",
            len(intervals),
            len(windows),
            len(intervals) - cursor
        )

        return by_day

    def reconcile_event(
        self,
        event: EventConfig,
        intervals: Sequence[BusyInterval]
    ) -> Dict[int, List[ClippedInterval]]:
        """Clip ``intervals`` to the windows of ``event``."""
        return self.reconcile(event.availability_windows(), intervals)

    def _clip_to_window(
        self,
        interval: BusyInterval,
        window_start: DateTime,
        window_end: DateTime
    ) -> ClippedInterval | None:
        """
        Clip an interval to a window.

        Returns None if the interval does not overlap the window or is
        empty after clipping.
        """
        start_within_window = _is_between(interval.start, window_start, window_end)
        end_within_window = _is_between(interval.end, window_start, window_end)
        window_start_within = _is_between(window_start, interval.start, interval.end)
        window_end_within = _is_between(window_end, interval.start, interval.end)

        if not (
            start_within_window
            or end_within_window
            or (window_start_within and window_end_within)
        ):
            return None

        start = window_start if window_start_within else interval.start
        end = window_end if window_end_within else interval.end

        hours_length = (end - start).total_seconds() / SECONDS_PER_HOUR
        if hours_length == 0:
            return None

        return ClippedInterval(
            start=start,
            end=end,
            hours_offset=(start - window_start).total_seconds() / SECONDS_PER_HOUR,
            hours_length=hours_length,
            metadata=copy.deepcopy(interval.metadata)
        )
