"""
Aggregate participants' availability into per-slot vote counts.

This is pure domain logic: it consumes ranges that were already fetched from
the API and produces the data the results page and heatmap render.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from pendulum import DateTime

from .calendar_math import TimezoneLike
from .cell_range_codec import CellRangeCodec
from .models import AggregatedSlot, CellKey, HeatmapCell, ParticipantAvailability

OPACITY_EXPONENT = 0.6
MIN_OPACITY = 0.15
MAX_OPACITY = 1.0


def opacity_for(count: int, total_participants: int) -> float:
    """
    Visual intensity of a heatmap cell.

    The sub-linear curve lifts low counts above a plain ratio, and any
    non-zero count is at least ``MIN_OPACITY`` so a single vote stays visible.
    """
    if count <= 0 or total_participants <= 0:
        return 0.0
    ratio = count / total_participants
    return min(max(ratio ** OPACITY_EXPONENT, MIN_OPACITY), MAX_OPACITY)


def find_organizer(
    participants: Sequence[ParticipantAvailability],
) -> Optional[ParticipantAvailability]:
    """Find the organizer in the participants list."""
    for participant in participants:
        if participant.is_organizer:
            return participant
    return None


def is_organizer_only_slot(
    slot: AggregatedSlot, organizer: Optional[ParticipantAvailability]
) -> bool:
    """
    Check whether the organizer is the only attendee of a slot.

    A stable participant id is compared when the API supplied one; otherwise
    the display name has to do, which mistakes two people sharing a name.
    """
    if organizer is None:
        return False
    if slot.count != 1 or len(slot.attendees) != 1:
        return False

    attendee_id = slot.attendee_ids[0] if slot.attendee_ids else None
    if organizer.participant_id is not None and attendee_id is not None:
        return attendee_id == organizer.participant_id
    return slot.attendees[0] == organizer.name


def is_organizer_only(
    total_participants: int, participants: Sequence[ParticipantAvailability]
) -> bool:
    """Check whether only the organizer has responded."""
    return total_participants == 1 and bool(participants) and participants[0].is_organizer


def filter_organizer_only_slots(
    slots: List[AggregatedSlot],
    total_participants: int,
    organizer: Optional[ParticipantAvailability],
) -> List[AggregatedSlot]:
    """Drop organizer-only slots, unless the organizer is the only respondent."""
    if total_participants <= 1:
        return slots
    return [slot for slot in slots if not is_organizer_only_slot(slot, organizer)]


@dataclass
class AggregationResult:
    slots: List[AggregatedSlot]
    total_participants: int
    max_count: int
    top_picks: List[AggregatedSlot]
    other_options: List[AggregatedSlot]
    is_organizer_only: bool
    organizer: Optional[ParticipantAvailability] = None
    by_cell: Dict[CellKey, AggregatedSlot] = field(default_factory=dict)

    def opacity(self, slot: AggregatedSlot) -> float:
        return opacity_for(slot.count, self.total_participants)

    def heatmap(self) -> Dict[CellKey, HeatmapCell]:
        """Render data keyed by local cell."""
        return {
            cell: HeatmapCell(
                count=slot.count,
                attendees=list(slot.attendees),
                opacity=self.opacity(slot),
            )
            for cell, slot in self.by_cell.items()
        }


class AvailabilityAggregator:
    """
    Tallies participants' availability per slot.

    Algorithm:
    1. Decode each participant's ranges into local cells
    2. Count votes and collect attendees per slot instant
    3. Rank by count (descending), then by time (earliest first)
    4. Split into top picks (count == max) and other options
    """

    def __init__(self, slot_duration: int, tz: TimezoneLike = None):
        self.codec = CellRangeCodec(slot_duration=slot_duration, tz=tz)

    @property
    def slot_duration(self) -> int:
        return self.codec.slot_duration

    def aggregate(
        self,
        participants: Sequence[ParticipantAvailability],
        total_participants: Optional[int] = None,
    ) -> AggregationResult:
        """
        Build a fresh tally from the full participant list.

        Args:
            participants: Every participant who responded
            total_participants: Count reported by the API (defaults to the
                number of participants given)

        Returns:
            AggregationResult with ranked slots and the organizer flags
        """
        total = len(participants) if total_participants is None else total_participants
        tally: Dict[DateTime, AggregatedSlot] = {}

        for participant in participants:
            cells = self.codec.ranges_to_cells(participant.availabilities)
            for cell in sorted(cells):
                start = self.codec.cell_start(cell)
                slot = tally.get(start)
                if slot is None:
                    slot = AggregatedSlot(start=start, cell=cell)
                    tally[start] = slot
                slot.count += 1
                slot.attendees.append(participant.name)
                slot.attendee_ids.append(participant.participant_id)

        slots = sorted(tally.values(), key=lambda s: (-s.count, s.start))
        max_count = slots[0].count if slots else 0

        organizer = find_organizer(participants)
        top_picks = [slot for slot in slots if max_count > 0 and slot.count == max_count]
        other_options = filter_organizer_only_slots(
            [slot for slot in slots if slot.count < max_count],
            total,
            organizer,
        )

        return AggregationResult(
            slots=slots,
            total_participants=total,
            max_count=max_count,
            top_picks=top_picks,
            other_options=other_options,
            is_organizer_only=is_organizer_only(total, participants),
            organizer=organizer,
            by_cell={slot.cell: slot for slot in slots},
        )
