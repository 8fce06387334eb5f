"""
Domain layer - Pure grid logic, no I/O.
"""

from .aggregator import AggregationResult, AvailabilityAggregator, opacity_for
from .cell_range_codec import CellRangeCodec
from .history import HistoryStack
from .models import AggregatedSlot, CellKey, GridState, ParticipantAvailability, TimeRange
from .selection import DragMode, SelectionController
from .week_pattern import WeekPatternMergeResult, merge_week1_pattern

__all__ = [
    "AggregatedSlot",
    "AggregationResult",
    "AvailabilityAggregator",
    "CellKey",
    "CellRangeCodec",
    "DragMode",
    "GridState",
    "HistoryStack",
    "ParticipantAvailability",
    "SelectionController",
    "TimeRange",
    "WeekPatternMergeResult",
    "merge_week1_pattern",
    "opacity_for",
]
