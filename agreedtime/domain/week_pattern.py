"""
Copy the first week's selection pattern into the following weeks.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import AbstractSet, Dict, FrozenSet, Set

from .calendar_math import add_days, diff_in_days
from .models import CellKey

logger = logging.getLogger(__name__)

DAYS_PER_WEEK = 7


@dataclass(frozen=True)
class WeekPatternMergeResult:
    merged_selected_cells: FrozenSet[CellKey]
    has_week1_pattern: bool
    added_count: int


def extract_week1_pattern(
    selected_cells: AbstractSet[CellKey],
    start_date: str,
    end_date: str,
    start_hour: float,
    end_hour: float,
    slot_duration: int,
) -> Dict[int, Set[int]]:
    """
    Map each day offset of week 1 (0..6) to the selected minutes on that day.

    Week 1 is the seven days starting at ``start_date``, whatever weekday
    that is. Days past ``end_date`` are not part of it.
    """
    pattern: Dict[int, Set[int]] = {}
    first_minute = round(start_hour * 60)
    last_minute = round(end_hour * 60)

    for day_offset in range(DAYS_PER_WEEK):
        date = add_days(start_date, day_offset)
        if date > end_date:
            break

        day_pattern = {
            minute
            for minute in range(first_minute, last_minute, slot_duration)
            if CellKey(date=date, minute=minute) in selected_cells
        }
        if day_pattern:
            pattern[day_offset] = day_pattern

    return pattern


def merge_week1_pattern(
    selected_cells: AbstractSet[CellKey],
    start_date: str,
    end_date: str,
    start_hour: float,
    end_hour: float,
    slot_duration: int,
) -> WeekPatternMergeResult:
    """
    Stamp the week 1 pattern onto every later week of the range.

    The merge only ever adds cells: selections on days without a week 1
    pattern, or on hours outside it, are kept as they are.
    """
    pattern = extract_week1_pattern(
        selected_cells, start_date, end_date, start_hour, end_hour, slot_duration
    )
    merged: Set[CellKey] = set(selected_cells)
    has_week1_pattern = bool(pattern)

    if not has_week1_pattern:
        return WeekPatternMergeResult(frozenset(merged), False, 0)

    total_days = diff_in_days(start_date, end_date) + 1
    if total_days <= DAYS_PER_WEEK:
        return WeekPatternMergeResult(frozenset(merged), True, 0)

    added_count = 0
    for day_offset in range(DAYS_PER_WEEK, total_days):
        minutes = pattern.get(day_offset % DAYS_PER_WEEK)
        if not minutes:
            continue

        date = add_days(start_date, day_offset)
        for minute in minutes:
            key = CellKey(date=date, minute=minute)
            if key not in merged:
                merged.add(key)
                added_count += 1

    logger.debug(
        "Merged week 1 pattern over %d days: %d cells added", total_days, added_count
    )
    return WeekPatternMergeResult(frozenset(merged), True, added_count)
