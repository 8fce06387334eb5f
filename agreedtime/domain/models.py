"""
Domain models for grid cells, time ranges and aggregated slots.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Mapping, Optional

import pendulum
from pendulum import DateTime

from .calendar_math import MINUTES_PER_DAY, TimezoneLike, resolve_timezone

API_DATETIME_FORMAT = "YYYY-MM-DD[T]HH:mm:ss[Z]"


@dataclass(frozen=True, order=True)
class CellKey:
    """
    Identifies one grid cell: a local calendar date and a local minute-of-day.

    The cell width is defined by the slot duration that both the encoder and
    decoder agree on; the key itself only marks where the cell starts.
    """
    date: str
    minute: int

    def __post_init__(self):
        if not 0 <= self.minute < MINUTES_PER_DAY:
            raise ValueError(f"Minute of day must be in [0, {MINUTES_PER_DAY}), got {self.minute}")

    @classmethod
    def from_hour(cls, date: str, hour: float) -> "CellKey":
        """Build a key from a (possibly fractional) hour, rounded to the minute."""
        return cls(date=date, minute=round(hour * 60))

    @classmethod
    def parse(cls, value: str) -> "CellKey":
        """Parse the "YYYY-MM-DD_<hour>" string form."""
        date_part, _, hour_part = value.partition("_")
        if not hour_part:
            raise ValueError(f"Invalid cell key: '{value}'")
        return cls.from_hour(date_part, float(hour_part))

    @property
    def hour(self) -> float:
        """Start of the cell in fractional hours (9.5 = 09:30)."""
        return self.minute / 60

    def __str__(self) -> str:
        if self.minute % 60 == 0:
            return f"{self.date}_{self.minute // 60}"
        return f"{self.date}_{self.hour:g}"


SelectionSet = FrozenSet[CellKey]


@dataclass(frozen=True)
class TimeRange:
    """
    Represents an immutable half-open time range [start, end).

    Invariant: start must be before end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start time {self.start} must be before end time {self.end}")

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() / 60)

    def to_api(self) -> Dict[str, str]:
        """Wire form: {"start_at": ..., "end_at": ...} in UTC ISO-8601."""
        return {
            "start_at": self.start.in_timezone("UTC").format(API_DATETIME_FORMAT),
            "end_at": self.end.in_timezone("UTC").format(API_DATETIME_FORMAT),
        }

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "TimeRange":
        """Parse the wire form, normalising both instants to UTC."""
        start = pendulum.parse(str(payload["start_at"])).in_timezone("UTC")
        end = pendulum.parse(str(payload["end_at"])).in_timezone("UTC")
        return cls(start=start, end=end)

    def __str__(self) -> str:
        return f"{self.start.format('YYYY-MM-DD HH:mm')} - {self.end.format('HH:mm')}"


@dataclass
class ParticipantAvailability:
    """One participant's submitted availability."""
    name: str
    is_organizer: bool = False
    availabilities: List[TimeRange] = field(default_factory=list)
    comment: Optional[str] = None
    participant_id: Optional[str] = None

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "ParticipantAvailability":
        participant_id = payload.get("id") or payload.get("participant_id")
        return cls(
            name=str(payload["name"]),
            is_organizer=bool(payload.get("is_organizer", False)),
            availabilities=[TimeRange.from_api(item) for item in payload.get("availabilities") or []],
            comment=payload.get("comment"),
            participant_id=str(participant_id) if participant_id is not None else None,
        )


@dataclass
class AggregatedSlot:
    """
    Vote tally for one cell across all participants.
    """
    start: DateTime
    cell: CellKey
    count: int = 0
    attendees: List[str] = field(default_factory=list)
    attendee_ids: List[Optional[str]] = field(default_factory=list)

    def format_display(self, slot_duration: int, tz: TimezoneLike = "UTC") -> str:
        """
        Format the slot for display.
        Format: Weekday, Mon D, YYYY | HH:MM - HH:MM
        """
        local_start = self.start.in_timezone(resolve_timezone(tz))
        local_end = local_start.add(minutes=slot_duration)
        return (
            f"{local_start.format('dddd, MMM D, YYYY')} | "
            f"{local_start.format('HH:mm')} - {local_end.format('HH:mm')}"
        )


@dataclass(frozen=True)
class HeatmapCell:
    """Render data for one heatmap cell."""
    count: int
    attendees: List[str]
    opacity: float


@dataclass(frozen=True)
class GridState:
    """
    Everything one undo step restores in the time-slot editor.
    """
    selected_cells: FrozenSet[CellKey]
    start_date: str
    end_date: str
    start_hour: int
    end_hour: int
