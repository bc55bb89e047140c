"""
Alignment of recurring weekly events onto concrete calendar weeks.

Recurring events store one reference date-time per weekday ("every Tuesday
and Thursday at 9:00"). Only their weekday and time of day carry meaning;
the calendar week they happen to fall in is arbitrary. To overlay calendar
data we move dates between that *reference week* and the week the user is
looking at.
"""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence, Tuple

import pendulum
from pendulum import DateTime

from .exceptions import EmptyReferenceWeekError
from .models import EventConfig
from .timenum import as_pendulum, date_day_offset

SECONDS_PER_DAY = 24 * 60 * 60


def weekday_index(date: datetime, start_on_monday: bool = False) -> int:
    """
    Return the weekday of ``date`` with Sunday as 0.

    With ``start_on_monday`` Sunday is moved to 7 so that it orders last.
    """
    index = date.isoweekday() % 7
    if start_on_monday and index == 0:
        return 7
    return index


def _week_anchor(reference_dates: Sequence[DateTime], start_on_monday: bool) -> DateTime:
    # Sort by weekday rather than by instant: dates authored in another
    # timezone can put the chronologically first date on the last weekday.
    return sorted(
        reference_dates,
        key=lambda date: weekday_index(date, start_on_monday)
    )[0]


def align(
    reference_dates: Sequence[datetime],
    target: datetime,
    week_offset: int = 0,
    reverse: bool = False,
    start_on_monday: bool = False,
    *,
    now: Optional[datetime] = None,
    tz=None
) -> DateTime:
    """
    Move ``target`` between the reference week and a concrete week.

    The two weeks are ``day_offset`` whole days apart, where the displayed
    week is the one ``week_offset`` weeks from ``now``. Forward, ``target``
    is moved back by that distance, so a date from the displayed week lands
    on the same weekday of the reference week and can be compared against
    the event's windows. ``reverse`` moves the other way, undoing a forward
    alignment.

    The day shift is in wall-clock days. A forward result that falls into a
    DST gap is moved past the gap (02:30 becomes 03:30), so reversing it does
    not give back the original time of day.

    Args:
        reference_dates: Reference date-times of the recurring pattern
        target: Date to move
        week_offset: Weeks relative to the current week (may be negative)
        reverse: Move from reference-week space to the displayed week instead
        start_on_monday: Treat Monday as the first day of the week when
            picking the week anchor
        now: Current instant, defaults to the wall clock
        tz: Timezone in which weekdays are evaluated, defaults to the
            target's own timezone

    Returns:
        The aligned date-time, expressed in ``tz``

    Raises:
        EmptyReferenceWeekError: If ``reference_dates`` is empty
    """
    if not reference_dates:
        raise EmptyReferenceWeekError("Cannot align against an empty set of reference dates")

    target = as_pendulum(target)
    if tz is None:
        tz = target.timezone or "UTC"

    references = [as_pendulum(date).in_timezone(tz) for date in reference_dates]
    anchor = _week_anchor(references, start_on_monday)

    # Sunday of the reference week, keeping the anchor's time of day
    reference_week_start = anchor.subtract(days=weekday_index(anchor))

    current = pendulum.now(tz) if now is None else as_pendulum(now).in_timezone(tz)
    target_week_start = current.subtract(days=weekday_index(current)).add(weeks=week_offset)
    target_week_start = target_week_start.set(
        hour=reference_week_start.hour,
        minute=reference_week_start.minute,
        second=reference_week_start.second,
        microsecond=reference_week_start.microsecond
    )

    # Round half up so DST shifts of an hour do not change the day count
    elapsed = (target_week_start - reference_week_start).total_seconds()
    day_offset = math.floor(elapsed / SECONDS_PER_DAY + 0.5)

    if reverse:
        day_offset = -day_offset

    return target.in_timezone(tz).subtract(days=day_offset)


@dataclass(frozen=True)
class ReferenceWeek:
    """
    The reference dates of one recurring pattern.

    Invariant: at least one reference date.
    """
    dates: Tuple[DateTime, ...]
    start_on_monday: bool = False

    def __post_init__(self):
        if not self.dates:
            raise EmptyReferenceWeekError("A reference week needs at least one date")

    @classmethod
    def from_event(cls, event: EventConfig) -> "ReferenceWeek":
        if not event.type.is_recurring:
            raise ValueError(f"Event of type '{event.type.value}' has no reference week")
        return cls(dates=tuple(event.dates), start_on_monday=event.start_on_monday)

    def anchor(self, tz=None) -> DateTime:
        """Return the reference date that opens the week."""
        dates = self.dates if tz is None else [as_pendulum(date).in_timezone(tz) for date in self.dates]
        return _week_anchor(dates, self.start_on_monday)

    def align(
        self,
        target: datetime,
        week_offset: int = 0,
        reverse: bool = False,
        *,
        now: Optional[datetime] = None,
        tz=None
    ) -> DateTime:
        """Align ``target`` against this week, see :func:`align`."""
        return align(
            self.dates,
            target,
            week_offset,
            reverse,
            self.start_on_monday,
            now=now,
            tz=tz
        )


def fetch_range(
    event: EventConfig,
    week_offset: int = 0,
    *,
    now: Optional[datetime] = None,
    tz=None
) -> Tuple[DateTime, DateTime]:
    """
    Return the ``(time_min, time_max)`` range to fetch busy intervals for.

    Specific-date events span their first date up to two days past their
    last. Recurring events span the displayed week, starting the Saturday
    before it and running nine days, so that dates shifted across timezones
    are still covered.
    """
    if not event.type.is_recurring:
        return as_pendulum(event.dates[0]), date_day_offset(event.dates[-1], 2)

    if tz is None:
        tz = as_pendulum(event.dates[0]).timezone or "UTC"
    current = pendulum.now(tz) if now is None else as_pendulum(now).in_timezone(tz)

    current = date_day_offset(current, week_offset * 7)
    time_min = date_day_offset(current, -(weekday_index(current) + 1))
    time_max = date_day_offset(time_min, 7 + 2)

    return time_min, time_max
