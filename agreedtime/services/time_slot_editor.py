"""
Editing session for the time-slot grid.

The editor wires the selection state machine to the undo history and the
wire codec. A whole drag gesture is one undo step: the pre-drag state is
committed when the drag starts and every cell touched afterwards updates the
present value in place.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import AbstractSet, Callable, Dict, FrozenSet, Iterable, List, Optional

from ..config import AppConfig
from ..domain.calendar_math import TimezoneLike, add_days
from ..domain.cell_range_codec import CellRangeCodec
from ..domain.grid import (
    MAX_WEEKS_DEFAULT,
    SlotRow,
    Week,
    build_time_slots,
    build_weeks,
    is_date_in_range,
    validate_date_range,
)
from ..domain.history import HistoryStack
from ..domain.models import CellKey, GridState, TimeRange
from ..domain.selection import (
    LONG_PRESS_MS,
    MOVE_THRESHOLD_PX,
    CellResolver,
    Scheduler,
    SelectionController,
)
from ..domain.week_pattern import WeekPatternMergeResult, merge_week1_pattern

logger = logging.getLogger(__name__)


class TimeSlotEditor:
    """
    One participant's (or the organizer's) grid editing session.

    ``allowed_cells`` restricts selection to a fixed set, as when a guest
    picks from the slots the organizer offered. Without it, every cell inside
    the date and hour range is selectable.
    """

    def __init__(
        self,
        *,
        start_date: str,
        end_date: str,
        start_hour: int = 9,
        end_hour: int = 18,
        slot_duration: int = 60,
        max_weeks: int = MAX_WEEKS_DEFAULT,
        tz: TimezoneLike = None,
        initial_cells: Iterable[CellKey] = (),
        allowed_cells: Optional[AbstractSet[CellKey]] = None,
        resolve_cell: Optional[CellResolver] = None,
        scheduler: Optional[Scheduler] = None,
        haptic: Optional[Callable[[], None]] = None,
        long_press_ms: int = LONG_PRESS_MS,
        move_threshold_px: float = MOVE_THRESHOLD_PX,
    ):
        self.codec = CellRangeCodec(slot_duration=slot_duration, tz=tz)
        self.max_weeks = max_weeks
        self.allowed_cells = frozenset(allowed_cells) if allowed_cells is not None else None

        self.history: HistoryStack[GridState] = HistoryStack(
            GridState(
                selected_cells=frozenset(initial_cells),
                start_date=start_date,
                end_date=end_date,
                start_hour=start_hour,
                end_hour=end_hour,
            )
        )
        self.controller = SelectionController(
            self.history.state.selected_cells,
            is_selectable=self.is_cell_selectable,
            resolve_cell=resolve_cell,
            scheduler=scheduler,
            haptic=haptic,
            on_drag_start=self._on_drag_start,
            on_change=self._on_selection_change,
            long_press_ms=long_press_ms,
            move_threshold_px=move_threshold_px,
        )

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        *,
        start_date: str,
        end_date: Optional[str] = None,
        initial_cells: Iterable[CellKey] = (),
        allowed_cells: Optional[AbstractSet[CellKey]] = None,
        resolve_cell: Optional[CellResolver] = None,
        scheduler: Optional[Scheduler] = None,
        vibrate: Optional[Callable[[int], None]] = None,
    ) -> "TimeSlotEditor":
        """
        Build an editor from the grid and gesture settings.

        Args:
            config: Loaded application config
            start_date: First date of the grid
            end_date: Last date (defaults to ``grid.default_weeks`` weeks on)
            vibrate: Device hook taking a duration in milliseconds; it is
                called with ``gesture.haptic_ms`` when a touch drag starts
        """
        grid = config.grid
        gesture = config.gesture
        if end_date is None:
            end_date = add_days(start_date, grid.default_weeks * 7 - 1)

        haptic = None
        if vibrate is not None:
            def haptic() -> None:
                vibrate(gesture.haptic_ms)

        return cls(
            start_date=start_date,
            end_date=end_date,
            start_hour=grid.start_hour,
            end_hour=grid.end_hour,
            slot_duration=grid.slot_duration,
            max_weeks=grid.max_weeks,
            tz=config.timezone,
            initial_cells=initial_cells,
            allowed_cells=allowed_cells,
            resolve_cell=resolve_cell,
            scheduler=scheduler,
            haptic=haptic,
            long_press_ms=gesture.long_press_ms,
            move_threshold_px=gesture.move_threshold_px,
        )

    # -- read side ---------------------------------------------------------

    @property
    def state(self) -> GridState:
        return self.history.state

    @property
    def slot_duration(self) -> int:
        return self.codec.slot_duration

    @property
    def selected_cells(self) -> FrozenSet[CellKey]:
        return self.history.state.selected_cells

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    @property
    def date_range_error(self) -> Optional[str]:
        return validate_date_range(self.state.start_date, self.state.end_date, self.max_weeks)

    @property
    def weeks(self) -> List[Week]:
        if self.date_range_error:
            return []
        return build_weeks(self.state.start_date, self.state.end_date, self.max_weeks)

    @property
    def time_slots(self) -> List[SlotRow]:
        return build_time_slots(self.state.start_hour, self.state.end_hour, self.slot_duration)

    def is_cell_selectable(self, cell: CellKey) -> bool:
        state = self.history.state
        if self.date_range_error:
            return False
        if not is_date_in_range(cell.date, state.start_date, state.end_date):
            return False
        if not state.start_hour * 60 <= cell.minute < state.end_hour * 60:
            return False
        if self.allowed_cells is not None and cell not in self.allowed_cells:
            return False
        return True

    # -- gesture hooks -----------------------------------------------------

    def _on_drag_start(self, cells: FrozenSet[CellKey]) -> None:
        # Commit the pre-drag state; the drag itself then edits in place.
        self.history.push_state(lambda state: state)

    def _on_selection_change(self, cells: FrozenSet[CellKey]) -> None:
        self.history.set_state(lambda state: replace(state, selected_cells=cells))

    def _sync_controller(self) -> None:
        self.controller.replace(self.history.state.selected_cells)

    # -- discrete actions --------------------------------------------------

    def set_date_range(self, start_date: str, end_date: str) -> None:
        """
        Change the date range as one undoable step.

        Selected cells that fall outside the new range are dropped. An invalid
        range (inverted or too long) or a missing bound only disables the grid,
        so the selection is kept until the range is corrected.
        """
        def update(state: GridState) -> GridState:
            if not (start_date and end_date) or validate_date_range(start_date, end_date, self.max_weeks):
                return replace(state, start_date=start_date, end_date=end_date)
            kept = frozenset(
                cell
                for cell in state.selected_cells
                if is_date_in_range(cell.date, start_date, end_date)
            )
            return replace(state, start_date=start_date, end_date=end_date, selected_cells=kept)

        self.history.push_state(update)
        self._sync_controller()

    def set_hour_range(self, start_hour: int, end_hour: int) -> None:
        """Change the hour window as one undoable step, dropping cells outside it."""
        def update(state: GridState) -> GridState:
            kept = frozenset(
                cell
                for cell in state.selected_cells
                if start_hour * 60 <= cell.minute < end_hour * 60
            )
            return replace(state, start_hour=start_hour, end_hour=end_hour, selected_cells=kept)

        self.history.push_state(update)
        self._sync_controller()

    def remove_cell(self, cell: CellKey) -> None:
        if cell not in self.selected_cells:
            return
        self.history.push_state(
            lambda state: replace(state, selected_cells=state.selected_cells - {cell})
        )
        self._sync_controller()

    def clear(self) -> None:
        if not self.selected_cells:
            return
        self.history.push_state(lambda state: replace(state, selected_cells=frozenset()))
        self._sync_controller()

    def copy_week1_pattern(self) -> WeekPatternMergeResult:
        """
        Stamp the first week's selection onto the following weeks.

        History is only touched when at least one cell was added.
        """
        state = self.history.state
        result = merge_week1_pattern(
            state.selected_cells,
            state.start_date,
            state.end_date,
            state.start_hour,
            state.end_hour,
            self.slot_duration,
        )
        if result.added_count > 0:
            self.history.push_state(
                lambda current: replace(current, selected_cells=result.merged_selected_cells)
            )
            self._sync_controller()
        return result

    def undo(self) -> None:
        self.history.undo()
        self._sync_controller()

    def redo(self) -> None:
        self.history.redo()
        self._sync_controller()

    # -- wire boundary -----------------------------------------------------

    def load_ranges(self, ranges: Iterable[TimeRange]) -> None:
        """
        Seed the selection from previously submitted ranges (draft restore).

        Loading is not an edit, so history is reset.
        """
        ranges = list(ranges)
        cells = self.codec.ranges_to_cells(ranges)
        self.history.set_state(lambda state: replace(state, selected_cells=cells))
        self.history.clear_history()
        self._sync_controller()
        logger.debug("Loaded %d cells from %d ranges", len(cells), len(ranges))

    def to_ranges(self) -> List[TimeRange]:
        return self.codec.cells_to_ranges(self.selected_cells)

    def to_api(self) -> List[Dict[str, str]]:
        return self.codec.ranges_to_api(self.to_ranges())
