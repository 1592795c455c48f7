"""
Drag threshold guard.

A drag gesture records history when it starts, before any position
changes. When it stops, the recorded entry is kept only if some dragged
node actually moved more than the threshold; a click or a jitter is
discarded so it never shows up as an undo step.
"""

import logging
from typing import Iterable, Optional

from flow_core.models import DraggedNode, Position

from .flow_manager import FlowManager


logger = logging.getLogger(__name__)

MOVEMENT_THRESHOLD = 1.0  # Pixels, per axis


class DragThresholdGuard:
    """Keeps no-op drags out of the undo history."""

    def __init__(self, manager: FlowManager, threshold: float = MOVEMENT_THRESHOLD):
        self._manager = manager
        self._threshold = threshold
        self._start_positions: Optional[dict[str, Position]] = None

    @property
    def is_dragging(self) -> bool:
        return self._start_positions is not None

    def on_drag_start(self, dragged_nodes: Iterable[DraggedNode]):
        """Record current state first, then remember where each dragged node started."""
        self._manager.record_state()
        self._start_positions = {
            node.id: Position(x=node.position.x, y=node.position.y)
            for node in dragged_nodes
        }

    def on_drag_stop(self, dragged_nodes: Iterable[DraggedNode]) -> bool:
        """
        Apply final positions and decide whether the drag earned its history entry.

        Returns:
            True if the entry was kept, False if it was discarded (or no drag was active)
        """
        if self._start_positions is None:
            return False

        dragged_nodes = list(dragged_nodes)
        try:
            moved = any(self._moved(node) for node in dragged_nodes)
            if not moved:
                self._manager.discard_last_record()
                logger.debug("Drag of %d nodes stayed within threshold, history entry discarded",
                             len(dragged_nodes))

            self._manager.set_node_positions((node.id, node.position) for node in dragged_nodes)
            return moved
        finally:
            self._start_positions = None

    def _moved(self, node: DraggedNode) -> bool:
        start = self._start_positions.get(node.id)
        if start is None:
            return False
        dx = abs(start.x - node.position.x)
        dy = abs(start.y - node.position.y)
        return dx > self._threshold or dy > self._threshold
