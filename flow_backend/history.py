"""
Snapshot-based undo/redo history.

The store keeps three things:
- past: snapshots to undo into (bounded, oldest evicted first)
- future: snapshots to redo into (cleared by every new record)
- current: the snapshot matching the live state

Every snapshot going in or out is cloned, so nothing held here is ever
shared with the caller or with another entry. Underflow is not an error:
undo/redo on an empty stack return None.
"""

import copy
import logging
from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar


logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_HISTORY = 50


@dataclass(frozen=True)
class HistoryInfo:
    """Stack sizes for undo/redo affordances."""
    undo_count: int
    redo_count: int

    @property
    def can_undo(self) -> bool:
        return self.undo_count > 0

    @property
    def can_redo(self) -> bool:
        return self.redo_count > 0

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "undoCount": self.undo_count,
            "redoCount": self.redo_count,
            "canUndo": self.can_undo,
            "canRedo": self.can_redo,
        }


class HistoryStore(Generic[T]):
    """
    Bounded linear undo/redo over opaque snapshots.

    Callers record the state *before* they mutate it, so the entry pushed
    onto `past` is always the pre-mutation state. Once the mutation is
    applied, replace_current() keeps `current` in step with the live state.
    """

    def __init__(
        self,
        max_history: int = DEFAULT_MAX_HISTORY,
        clone: Callable[[T], T] = copy.deepcopy
    ):
        if max_history < 1:
            raise ValueError("max_history must be at least 1")
        self._max_history = max_history
        self._clone = clone
        self._past: list[T] = []
        self._future: list[T] = []
        self._current: Optional[T] = None

    # --- Properties ---

    @property
    def max_history(self) -> int:
        return self._max_history

    @property
    def current(self) -> Optional[T]:
        """A copy of the current snapshot, or None before init/record."""
        if self._current is None:
            return None
        return self._clone(self._current)

    @property
    def can_undo(self) -> bool:
        return len(self._past) > 0

    @property
    def can_redo(self) -> bool:
        return len(self._future) > 0

    def info(self) -> HistoryInfo:
        return HistoryInfo(undo_count=len(self._past), redo_count=len(self._future))

    # --- Operations ---

    def init(self, state: T) -> None:
        """Start over from `state` with empty stacks."""
        self._current = self._clone(state)
        self._past.clear()
        self._future.clear()

    def record(self, state: T) -> None:
        """Push the current snapshot onto past and make `state` current."""
        if self._current is not None:
            self._past.append(self._current)
            # Trim history if too long
            if len(self._past) > self._max_history:
                self._past.pop(0)

        self._current = self._clone(state)
        # New action invalidates redo stack
        self._future.clear()
        logger.debug("Recorded history entry (%d undo, 0 redo)", len(self._past))

    def replace_current(self, state: T) -> None:
        """Make `state` current without touching either stack (commit an applied change)."""
        self._current = self._clone(state)

    def undo(self) -> Optional[T]:
        """Step back one snapshot; returns a copy of it, or None if nothing to undo."""
        if not self.can_undo:
            return None

        self._future.append(self._current)
        self._current = self._past.pop()
        return self._clone(self._current)

    def redo(self) -> Optional[T]:
        """Step forward one snapshot; returns a copy of it, or None if nothing to redo."""
        if not self.can_redo:
            return None

        self._past.append(self._current)
        self._current = self._future.pop()
        return self._clone(self._current)

    def discard_last(self) -> None:
        """Cancel the latest record(): past's top becomes current again, future untouched."""
        if self._past:
            self._current = self._past.pop()

    def clear(self) -> None:
        """Drop both stacks; current is kept."""
        self._past.clear()
        self._future.clear()
