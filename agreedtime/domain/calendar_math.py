"""
Timezone-safe calendar arithmetic.

All grid dates are local calendar dates ("YYYY-MM-DD") without a time
component. Arithmetic runs on calendar fields rather than on epoch offsets so
daylight-saving transitions never shift a date by one.
"""

from __future__ import annotations

from datetime import date, tzinfo
from typing import Union

import pendulum
from pendulum import Date, DateTime

TimezoneLike = Union[str, tzinfo, None]

WEEKDAY_ABBREVIATIONS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
MINUTES_PER_DAY = 24 * 60


def resolve_timezone(tz: TimezoneLike = None) -> tzinfo:
    """
    Resolve a timezone name into a tzinfo.

    ``None`` and ``"local"`` resolve to the machine's local zone, strings are
    looked up as IANA names, tzinfo objects pass through unchanged.
    """
    if tz is None or (isinstance(tz, str) and tz.lower() == "local"):
        return pendulum.local_timezone()
    if isinstance(tz, str):
        return pendulum.timezone(tz)
    return tz


def to_date(date_str: str) -> Date:
    """Parse "YYYY-MM-DD" into a calendar date."""
    year, month, day = (int(part) for part in date_str.split("-"))
    return pendulum.date(year, month, day)


def parse_local_date(date_str: str, tz: TimezoneLike = None) -> DateTime:
    """
    Parse a date string (YYYY-MM-DD) as a local date at midnight.

    Args:
        date_str: Date string in YYYY-MM-DD format
        tz: Zone the midnight belongs to (defaults to the local zone)

    Returns:
        DateTime at midnight in ``tz``
    """
    day = to_date(date_str)
    return pendulum.datetime(day.year, day.month, day.day, tz=resolve_timezone(tz))


def format_local_date(value: date) -> str:
    """Format a date or datetime as YYYY-MM-DD using its own calendar fields."""
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def get_today_local(tz: TimezoneLike = None) -> str:
    """Get today's date as YYYY-MM-DD in the given zone."""
    return format_local_date(pendulum.now(resolve_timezone(tz)))


def add_days(date_str: str, days: int) -> str:
    """
    Add days to a date string.

    Args:
        date_str: Date string in YYYY-MM-DD format
        days: Number of days to add (can be negative)

    Returns:
        New date string in YYYY-MM-DD format
    """
    return format_local_date(to_date(date_str).add(days=days))


def get_day_of_week(date_str: str) -> int:
    """Day of week for a date string, 0 = Sunday through 6 = Saturday."""
    return to_date(date_str).isoweekday() % 7


def get_first_sunday(date_str: str) -> str:
    """The Sunday on or before ``date_str``."""
    return add_days(date_str, -get_day_of_week(date_str))


def get_last_saturday(date_str: str) -> str:
    """The Saturday on or after ``date_str``."""
    return add_days(date_str, 6 - get_day_of_week(date_str))


def diff_in_days(start: str, end: str) -> int:
    """Number of days from ``start`` to ``end`` (negative if end is earlier)."""
    return to_date(end).toordinal() - to_date(start).toordinal()


def format_date_display(date_str: str) -> str:
    """Format a date for a column header, e.g. "Mon\\n12/10"."""
    day = to_date(date_str)
    weekday = WEEKDAY_ABBREVIATIONS[get_day_of_week(date_str)]
    return f"{weekday}\n{day.month}/{day.day}"


def format_hour(hour: int) -> str:
    """
    Format an hour as a 12-hour label ("9 AM", "2 PM").

    ``24`` is the end of the day and renders as "12 AM".
    """
    if hour == 24 or hour == 0:
        return "12 AM"
    if hour < 12:
        return f"{hour} AM"
    if hour == 12:
        return "12 PM"
    return f"{hour - 12} PM"


def format_hour_time(hour: int) -> str:
    """Format an hour as "HH:00"."""
    return f"{hour:02d}:00"


def format_minimal_time_label(hour: float) -> str:
    """
    Format a possibly fractional hour as a 12-hour label.

    Minutes are shown only when non-zero ("9 AM", "9:30 AM"). The input is
    rounded to the nearest minute and wrapped into a single day.
    """
    total_minutes = round(hour * 60)
    normalized = total_minutes % MINUTES_PER_DAY

    h, m = divmod(normalized, 60)
    ampm = "PM" if h >= 12 else "AM"
    display_hour = 12 if h % 12 == 0 else h % 12

    if m == 0:
        return f"{display_hour} {ampm}"
    return f"{display_hour}:{m:02d} {ampm}"


def format_slot_label(start_minute: int, end_minute: int) -> str:
    """Format a slot row label such as "09:00-09:30"."""
    start_h, start_m = divmod(start_minute, 60)
    end_h, end_m = divmod(end_minute, 60)
    return f"{start_h:02d}:{start_m:02d}-{end_h:02d}:{end_m:02d}"


def get_timezone_offset_string(tz: TimezoneLike = None, at: DateTime | None = None) -> str:
    """
    Current UTC offset of a zone as "GMT+08:00".

    The offset is measured as minutes local time is behind UTC, so a positive
    value renders with a minus sign (New York in winter is "GMT-05:00").
    """
    moment = at if at is not None else pendulum.now("UTC")
    local = moment.in_timezone(resolve_timezone(tz))
    offset = local.utcoffset()
    offset_minutes = -int(offset.total_seconds() // 60) if offset is not None else 0

    sign = "-" if offset_minutes > 0 else "+"
    hours, minutes = divmod(abs(offset_minutes), 60)
    return f"GMT{sign}{hours:02d}:{minutes:02d}"
