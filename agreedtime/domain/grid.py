"""
Grid layout: whole-week rows, slot rows and date range validation.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional

from .calendar_math import (
    add_days,
    diff_in_days,
    format_slot_label,
    get_first_sunday,
    get_last_saturday,
)

MAX_WEEKS_DEFAULT = 8


@dataclass(frozen=True)
class Week:
    week_number: int
    start_date: str
    dates: List[str]


@dataclass(frozen=True)
class SlotRow:
    """One row of the grid: [start_minute, end_minute) of every day."""
    start_minute: int
    end_minute: int
    label: str

    @property
    def start_hour(self) -> float:
        return self.start_minute / 60


def build_weeks(start_date: str, end_date: str, max_weeks: int = MAX_WEEKS_DEFAULT) -> List[Week]:
    """
    Generate Sunday-to-Saturday weeks covering the date range.

    The range is rounded outward to whole weeks so the grid always renders
    complete rows; at most ``max_weeks`` are produced.
    """
    if not start_date or not end_date:
        return []

    last_saturday = get_last_saturday(end_date)
    current = get_first_sunday(start_date)

    weeks: List[Week] = []
    while current <= last_saturday and len(weeks) < max_weeks:
        weeks.append(
            Week(
                week_number=len(weeks),
                start_date=current,
                dates=[add_days(current, offset) for offset in range(7)],
            )
        )
        current = add_days(current, 7)
    return weeks


def build_time_slots(start_hour: float, end_hour: float, slot_duration: int) -> List[SlotRow]:
    """
    Generate the slot rows between ``start_hour`` and ``end_hour``.

    The last row is clipped to ``end_hour`` when the window is not a whole
    number of slots.
    """
    first_minute = round(start_hour * 60)
    last_minute = round(end_hour * 60)

    rows: List[SlotRow] = []
    current = first_minute
    while current < last_minute:
        following = min(current + slot_duration, last_minute)
        rows.append(SlotRow(current, following, format_slot_label(current, following)))
        current = following
    return rows


def validate_date_range(
    start_date: str, end_date: str, max_weeks: int = MAX_WEEKS_DEFAULT
) -> Optional[str]:
    """
    Check a date range, returning an error message or None when valid.
    """
    if not start_date or not end_date:
        return None

    if end_date < start_date:
        return "End date cannot be before start date"

    weeks = math.ceil(diff_in_days(start_date, end_date) / 7)
    if weeks > max_weeks:
        return f"Date range cannot exceed {max_weeks} weeks"
    return None


def is_date_in_range(date: str, start_date: str, end_date: str) -> bool:
    # ISO dates order lexically.
    return start_date <= date <= end_date
