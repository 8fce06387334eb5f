"""
Drag-selection state machine for the time-slot grid.

Mouse input starts a drag immediately on press. Touch input waits for a long
press first, so that a finger sliding across the grid scrolls it instead of
painting cells. Both share one toggle core: the drag mode is fixed when the
gesture starts (the inverse of the pressed cell's state) and every cell the
pointer passes is forced to that state.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Callable, FrozenSet, Iterable, Optional, Protocol, Tuple

from .models import CellKey

logger = logging.getLogger(__name__)

LONG_PRESS_MS = 500
MOVE_THRESHOLD_PX = 10
PRIMARY_BUTTON = 0


class DragMode(str, Enum):
    SELECT = "select"
    DESELECT = "deselect"


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    """Anything with the ``call_later`` shape of an asyncio event loop."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        ...


CellResolver = Callable[[float, float], Optional[CellKey]]
SelectablePredicate = Callable[[CellKey], bool]
SelectionCallback = Callable[[FrozenSet[CellKey]], None]


def _always_selectable(cell: CellKey) -> bool:
    return True


class SelectionController:
    """
    Owns the selected cell set and mutates it in response to pointer events.

    States are ``Idle`` (``drag_mode is None``) and ``Dragging(mode)``.

    Collaborators are injected:
    - ``is_selectable``: guard for out-of-range or disabled cells
    - ``resolve_cell``: hit-testing from touch coordinates to a cell
    - ``scheduler``: long-press timer (defaults to the running asyncio loop)
    - ``haptic``: best-effort feedback when a touch drag starts
    - ``on_drag_start``: receives the pre-drag selection, once per gesture
    - ``on_change``: receives the selection after every effective change
    """

    def __init__(
        self,
        initial_cells: Iterable[CellKey] = (),
        *,
        is_selectable: SelectablePredicate = _always_selectable,
        resolve_cell: Optional[CellResolver] = None,
        scheduler: Optional[Scheduler] = None,
        haptic: Optional[Callable[[], None]] = None,
        on_drag_start: Optional[SelectionCallback] = None,
        on_change: Optional[SelectionCallback] = None,
        long_press_ms: int = LONG_PRESS_MS,
        move_threshold_px: float = MOVE_THRESHOLD_PX,
    ):
        self._cells: FrozenSet[CellKey] = frozenset(initial_cells)
        self._is_selectable = is_selectable
        self._resolve_cell = resolve_cell
        self._scheduler = scheduler
        self._haptic = haptic
        self._on_drag_start = on_drag_start
        self._on_change = on_change
        self.long_press_ms = long_press_ms
        self.move_threshold_px = move_threshold_px

        self._drag_mode: Optional[DragMode] = None
        self._long_press_timer: Optional[TimerHandle] = None
        self._touch_origin: Optional[Tuple[float, float]] = None

    # -- state -----------------------------------------------------------

    @property
    def selected_cells(self) -> FrozenSet[CellKey]:
        return self._cells

    @property
    def is_dragging(self) -> bool:
        return self._drag_mode is not None

    @property
    def drag_mode(self) -> Optional[DragMode]:
        return self._drag_mode

    @property
    def long_press_pending(self) -> bool:
        return self._long_press_timer is not None

    def is_selected(self, cell: CellKey) -> bool:
        return cell in self._cells

    def replace(self, cells: Iterable[CellKey]) -> None:
        """
        Overwrite the selection from outside a gesture (undo, redo, pattern
        copy, range pruning). ``on_change`` is not fired.
        """
        self._cells = frozenset(cells)

    # -- direct edits ------------------------------------------------------

    def set_cell(self, cell: CellKey, selected: bool) -> bool:
        """
        Force a cell into the given state.

        Returns True when the selection actually changed.
        """
        if not self._is_selectable(cell):
            return False
        if (cell in self._cells) == selected:
            return False

        if selected:
            self._cells = self._cells | {cell}
        else:
            self._cells = self._cells - {cell}

        if self._on_change:
            self._on_change(self._cells)
        return True

    def toggle_cell(self, cell: CellKey) -> bool:
        return self.set_cell(cell, cell not in self._cells)

    def remove_cell(self, cell: CellKey) -> bool:
        """Deselect a cell regardless of whether it is still selectable."""
        if cell not in self._cells:
            return False
        self._cells = self._cells - {cell}
        if self._on_change:
            self._on_change(self._cells)
        return True

    def clear(self) -> None:
        if not self._cells:
            return
        self._cells = frozenset()
        if self._on_change:
            self._on_change(self._cells)

    # -- shared drag core --------------------------------------------------

    def _begin_drag(self, cell: CellKey) -> None:
        if self._on_drag_start:
            self._on_drag_start(self._cells)

        self._drag_mode = DragMode.DESELECT if cell in self._cells else DragMode.SELECT
        logger.debug("Drag started on %s in %s mode", cell, self._drag_mode.value)
        self.set_cell(cell, self._drag_mode is DragMode.SELECT)

    def _apply_drag_mode(self, cell: CellKey) -> bool:
        if self._drag_mode is None:
            return False
        return self.set_cell(cell, self._drag_mode is DragMode.SELECT)

    def _end_drag(self) -> None:
        if self._drag_mode is not None:
            logger.debug("Drag ended with %d cells selected", len(self._cells))
        self._drag_mode = None

    # -- mouse -------------------------------------------------------------

    def pointer_down(self, cell: CellKey, button: int = PRIMARY_BUTTON) -> bool:
        """
        Start a drag on ``cell``. Returns True when a drag started.

        Non-primary buttons and non-selectable cells are ignored.
        """
        if button != PRIMARY_BUTTON:
            return False
        if not self._is_selectable(cell):
            return False

        self._begin_drag(cell)
        return True

    def pointer_enter(self, cell: CellKey) -> bool:
        return self._apply_drag_mode(cell)

    def pointer_up(self) -> None:
        self._end_drag()

    def pointer_leave(self) -> None:
        self._end_drag()

    def window_pointer_up(self) -> None:
        self._end_drag()

    # -- touch -------------------------------------------------------------

    def _get_scheduler(self) -> Scheduler:
        if self._scheduler is None:
            return asyncio.get_running_loop()
        return self._scheduler

    def _cancel_long_press(self) -> None:
        if self._long_press_timer is not None:
            self._long_press_timer.cancel()
            self._long_press_timer = None

    def _resolve(self, x: float, y: float) -> Optional[CellKey]:
        if self._resolve_cell is None:
            return None
        return self._resolve_cell(x, y)

    def touch_start(self, x: float, y: float) -> bool:
        """
        Arm the long-press timer for the cell under the finger.

        Returns True when a timer was armed.
        """
        cell = self._resolve(x, y)
        if cell is None or not self._is_selectable(cell):
            return False

        self._touch_origin = (x, y)
        self._cancel_long_press()
        self._long_press_timer = self._get_scheduler().call_later(
            self.long_press_ms / 1000, lambda: self._on_long_press(cell)
        )
        return True

    def _on_long_press(self, cell: CellKey) -> None:
        self._long_press_timer = None
        # The range may have changed while the finger was held down.
        if not self._is_selectable(cell):
            return

        if self._haptic:
            try:
                self._haptic()
            except Exception as exc:
                logger.debug("Haptic feedback failed: %s", exc)

        self._begin_drag(cell)

    def touch_move(self, x: float, y: float) -> bool:
        """
        Track a moving finger.

        Before the long press fires, moving past the threshold cancels it
        (the gesture is a scroll). During a drag, the cell under the finger
        is forced to the drag mode. Returns True when the selection changed.
        """
        if self._touch_origin is not None and not self.is_dragging:
            origin_x, origin_y = self._touch_origin
            if (
                abs(x - origin_x) > self.move_threshold_px
                or abs(y - origin_y) > self.move_threshold_px
            ):
                self._cancel_long_press()
            return False

        if not self.is_dragging:
            return False

        cell = self._resolve(x, y)
        if cell is None:
            return False
        return self._apply_drag_mode(cell)

    def touch_end(self) -> None:
        self._cancel_long_press()
        self._touch_origin = None
        self._end_drag()
