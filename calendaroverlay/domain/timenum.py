"""
TimeNum arithmetic and small calendar helpers.

A *TimeNum* is an hour of the day expressed as a float in ``[0, 24)`` where
the fractional part carries the minutes (``13.5`` is 13:30). Availability
grids are laid out in TimeNums, so every conversion between datetimes and
grid rows goes through this module.
"""

import math
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

import pendulum
from pendulum import DateTime

UPPER = "upper"
LOWER = "lower"


def as_pendulum(date: datetime) -> DateTime:
    """Return ``date`` as a pendulum DateTime, converting stdlib datetimes."""
    if isinstance(date, DateTime):
        return date
    return pendulum.instance(date)


def from_hours_minutes(hours: int, minutes: int) -> float:
    """Build a TimeNum from whole hours and minutes."""
    return hours + minutes / 60


def to_hours_minutes(time_num: float) -> Tuple[int, int]:
    """
    Split a TimeNum into whole hours and whole minutes.

    Both parts are floored, so ``9.99`` becomes ``(9, 59)``.
    """
    hours = math.floor(time_num)
    minutes = math.floor((time_num - hours) * 60)
    return hours, minutes


def split_time(time_string: str) -> Tuple[int, int]:
    """
    Split a ``"HH:MM"`` string into hours and minutes.

    Raises:
        ValueError: If the string is not of the form ``H:MM``
    """
    try:
        hours, minutes = time_string.split(":")
        return int(hours), int(minutes)
    except ValueError as exc:
        raise ValueError(f"Invalid time string: '{time_string}'") from exc


def date_to_time_num(date: datetime, utc: bool = False) -> float:
    """Return the time of day of ``date`` as a TimeNum."""
    date = as_pendulum(date)
    if utc:
        date = date.in_timezone("UTC")
    return date.hour + date.minute / 60


def date_with_time_num(date: datetime, time_num: float, utc: bool = False) -> DateTime:
    """
    Return ``date``'s calendar day at the time of day given by ``time_num``.

    With ``utc`` the calendar day and the time are taken in UTC, otherwise in
    the date's own timezone.
    """
    date = as_pendulum(date)
    if utc:
        date = date.in_timezone("UTC")
    hours, minutes = to_hours_minutes(time_num)
    return date.set(hour=hours, minute=minutes, second=0, microsecond=0)


def date_day_offset(date: datetime, days: int) -> DateTime:
    """Shift ``date`` by a number of 24-hour days (may be negative)."""
    return as_pendulum(date).add(hours=24 * days)


def date_hours_offset(date: datetime, hours_offset: float) -> DateTime:
    """Shift ``date`` by a TimeNum-like amount of hours."""
    hours, minutes = to_hours_minutes(hours_offset)
    return as_pendulum(date).add(hours=hours, minutes=minutes)


def time_num_to_display_text(time_num: float, hour12: bool = True) -> str:
    """
    Convert a TimeNum to display text.

    Examples: ``0 -> "12 am"``, ``13.5 -> "1:30 pm"``; in 24-hour mode
    ``13.5 -> "13:30"`` and ``9 -> "9:00"``.
    """
    hours = math.floor(time_num)
    minutes_decimal = time_num - hours
    minutes_string = (
        f":{math.floor(minutes_decimal * 60):02d}" if minutes_decimal > 0 else ""
    )

    if hour12:
        if 0 <= time_num < 1:
            return f"12{minutes_string} am"
        if time_num < 12:
            return f"{hours}{minutes_string} am"
        if time_num < 13:
            return f"12{minutes_string} pm"
        return f"{hours - 12}{minutes_string} pm"

    return f"{hours}{minutes_string or ':00'}"


def time_num_to_iso_time_string(time_num: float) -> str:
    """Convert a TimeNum to a zero-padded ``HH:MM:00`` string."""
    hours, minutes = to_hours_minutes(time_num)
    return f"{hours:02d}:{minutes:02d}:00"


def clamp_date_to_time_num(date: datetime, time_num: float, bound: str) -> DateTime:
    """
    Clamp the time of day of ``date`` against ``time_num``.

    With ``bound="upper"`` a date later in the day than ``time_num`` is pulled
    back to ``time_num``; with ``bound="lower"`` an earlier date is pushed
    forward to it. Dates already within the bound are returned unchanged.
    """
    if bound not in (UPPER, LOWER):
        raise ValueError(f"bound must be '{UPPER}' or '{LOWER}', got '{bound}'")

    date = as_pendulum(date)
    diff = date_to_time_num(date) - time_num

    if (bound == UPPER and diff > 0) or (bound == LOWER and diff < 0):
        return date_with_time_num(date, time_num)

    return date


def is_time_num_between_wrapping(time_num: float, lower: float, upper: float) -> bool:
    """
    Check whether ``time_num`` lies in ``[lower, upper]``.

    When ``lower > upper`` the range wraps past midnight, e.g. 22 to 2.
    """
    if lower <= upper:
        return lower <= time_num <= upper
    return time_num >= lower or time_num <= upper


def is_time_num_between_dates(time_num: float, date1: datetime, date2: datetime) -> bool:
    """Hour-granular variant of :func:`is_time_num_between_wrapping` for two dates."""
    return is_time_num_between_wrapping(time_num, date1.hour, date2.hour)


def is_date_between(date: datetime, start: datetime, end: datetime) -> bool:
    """Inclusive check that ``start <= date <= end``."""
    return start <= date <= end


def is_date_in_range(date: datetime, start: datetime, duration_hours: float) -> bool:
    """Inclusive check that ``date`` falls within ``duration_hours`` after ``start``."""
    end = as_pendulum(start) + timedelta(hours=duration_hours)
    return start <= date <= end


def compare_date_day(a: datetime, b: datetime) -> int:
    """Compare two dates by calendar day only (negative, zero or positive)."""
    if a.year != b.year:
        return a.year - b.year
    if a.month != b.month:
        return a.month - b.month
    return a.day - b.day


def get_days_in_month(month: int, year: int) -> int:
    """Return the number of days in ``month`` (1-12) of ``year``."""
    return pendulum.date(year, month, 1).days_in_month


def host_timezone_offset() -> int:
    """
    Return the host clock's offset in minutes UTC is ahead of local time.

    Positive west of Greenwich, i.e. 300 for UTC-5.
    """
    return -pendulum.now().offset // 60


def utc_time_to_local_time(time_num: float, timezone_offset: Optional[int] = None) -> float:
    """
    Convert a UTC TimeNum to local time, wrapped into ``[0, 24)``.

    ``timezone_offset`` is in minutes UTC is ahead of local time (positive
    west of Greenwich). Without it the host clock's offset is used.
    """
    if timezone_offset is None:
        timezone_offset = host_timezone_offset()
    return (time_num - timezone_offset / 60) % 24


def time_options(hour12: bool = True) -> List[Tuple[str, int]]:
    """
    Return the whole-hour options offered when picking a time of day.

    The 12-hour list starts at 1 am and ends with 12 am (midnight); the
    24-hour list runs 0:00 to 23:00.
    """
    if hour12:
        values = list(range(1, 24)) + [0]
    else:
        values = list(range(24))
    return [(time_num_to_display_text(value, hour12), value) for value in values]
