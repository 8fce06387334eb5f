"""
Conversion between grid cells and the canonical wire representation.

A participant edits a set of local calendar cells; the API stores merged UTC
time ranges. This module converts in both directions for a given slot
duration.
"""

from __future__ import annotations

from typing import Any, Dict, FrozenSet, Iterable, List, Mapping

import pendulum
from pendulum import DateTime

from .calendar_math import TimezoneLike, resolve_timezone, to_date
from .models import CellKey, TimeRange

# Instants closer than this are treated as contiguous when coalescing.
CONTIGUITY_TOLERANCE_SECONDS = 1.0


class CellRangeCodec:
    """
    Encodes cell selections into minimal UTC ranges and decodes them back.

    Both directions assume the same ``slot_duration`` (minutes) and the same
    local timezone; a cell key means nothing without them.
    """

    def __init__(self, slot_duration: int, tz: TimezoneLike = None):
        if slot_duration <= 0:
            raise ValueError(f"slot_duration must be greater than zero, got {slot_duration}")
        self.slot_duration = slot_duration
        self.tz = resolve_timezone(tz)

    def cell_start(self, cell: CellKey) -> DateTime:
        """UTC instant at which a cell starts (its local wall-clock time)."""
        day = to_date(cell.date)
        hour, minute = divmod(cell.minute, 60)
        local = pendulum.datetime(day.year, day.month, day.day, hour, minute, tz=self.tz)
        return local.in_timezone("UTC")

    def cell_for_instant(self, instant: DateTime) -> CellKey:
        """Local cell key containing the start of ``instant``."""
        local = instant.in_timezone(self.tz)
        return CellKey(date=local.to_date_string(), minute=local.hour * 60 + local.minute)

    def cells_to_ranges(self, cells: Iterable[CellKey]) -> List[TimeRange]:
        """
        Merge selected cells into the fewest disjoint, sorted UTC ranges.

        Example (60 minute slots):
        Cells: [Mon@9, Mon@10, Mon@14]
        Result: [Mon 09:00-11:00, Mon 14:00-15:00]
        """
        instants = sorted({self.cell_start(cell) for cell in cells})
        if not instants:
            return []

        ranges: List[TimeRange] = []
        current_start = instants[0]
        current_end = current_start.add(minutes=self.slot_duration)

        for instant in instants[1:]:
            gap = abs((instant - current_end).total_seconds())
            if gap < CONTIGUITY_TOLERANCE_SECONDS:
                current_end = current_end.add(minutes=self.slot_duration)
            else:
                ranges.append(TimeRange(start=current_start, end=current_end))
                current_start = instant
                current_end = instant.add(minutes=self.slot_duration)

        ranges.append(TimeRange(start=current_start, end=current_end))
        return ranges

    def ranges_to_cells(self, ranges: Iterable[TimeRange]) -> FrozenSet[CellKey]:
        """
        Expand UTC ranges into the local cells they cover.

        Each range is walked from start to end in slot-duration steps; the
        range is half-open, so the step landing on ``end`` is not emitted.
        """
        cells = set()
        for time_range in ranges:
            current = time_range.start.in_timezone("UTC")
            end = time_range.end
            while current < end:
                cells.add(self.cell_for_instant(current))
                current = current.add(minutes=self.slot_duration)
        return frozenset(cells)

    def ranges_to_api(self, ranges: Iterable[TimeRange]) -> List[Dict[str, str]]:
        return [time_range.to_api() for time_range in ranges]

    def ranges_from_api(self, payload: Iterable[Mapping[str, Any]]) -> List[TimeRange]:
        return [TimeRange.from_api(item) for item in payload]

    def cells_to_api(self, cells: Iterable[CellKey]) -> List[Dict[str, str]]:
        """Encode cells straight into the API payload shape."""
        return self.ranges_to_api(self.cells_to_ranges(cells))
