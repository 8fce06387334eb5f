"""
Linear undo/redo history around a single value.
"""

from __future__ import annotations

from typing import Callable, Generic, List, TypeVar, Union

T = TypeVar("T")

StateOrUpdater = Union[T, Callable[[T], T]]


class HistoryStack(Generic[T]):
    """
    Undo/redo container with two kinds of updates.

    ``set_state`` replaces the present value in place and leaves history
    alone, for high-frequency intermediate updates such as every cell touched
    mid-drag. ``push_state`` commits the present value to the past before
    replacing it, for discrete user actions. Pushing clears the redo stack.
    """

    def __init__(self, initial_state: T):
        self._past: List[T] = []
        self._present: T = initial_state
        self._future: List[T] = []

    @property
    def state(self) -> T:
        return self._present

    @property
    def past(self) -> List[T]:
        return list(self._past)

    @property
    def future(self) -> List[T]:
        return list(self._future)

    @property
    def can_undo(self) -> bool:
        return len(self._past) > 0

    @property
    def can_redo(self) -> bool:
        return len(self._future) > 0

    def _resolve(self, new_state: StateOrUpdater) -> T:
        # Updaters always see the freshest present, including values written by
        # set_state earlier in the same batch.
        if callable(new_state):
            return new_state(self._present)
        return new_state

    def set_state(self, new_state: StateOrUpdater) -> None:
        """Update the present value without touching history."""
        self._present = self._resolve(new_state)

    def push_state(self, new_state: StateOrUpdater) -> None:
        """Commit the present value to history, then replace it."""
        resolved = self._resolve(new_state)
        self._past.append(self._present)
        self._present = resolved
        self._future = []

    def undo(self) -> None:
        if not self._past:
            return
        previous = self._past.pop()
        self._future.insert(0, self._present)
        self._present = previous

    def redo(self) -> None:
        if not self._future:
            return
        following = self._future.pop(0)
        self._past.append(self._present)
        self._present = following

    def clear_history(self) -> None:
        """Forget past and future, keeping the present value."""
        self._past = []
        self._future = []
