"""Tests for keeping no-op drags out of history."""

from flow_backend.drag_guard import DragThresholdGuard
from flow_core.models import DraggedNode, Position


def dragged(node_id, x, y):
    return DraggedNode(id=node_id, position=Position(x=x, y=y))


def test_drag_within_threshold_leaves_history_unchanged(loaded_manager):
    guard = DragThresholdGuard(loaded_manager)
    before = loaded_manager.history.info()

    guard.on_drag_start([dragged("1", 0, 0), dragged("2", 1000, 0)])
    recorded = guard.on_drag_stop([dragged("1", 1, -1), dragged("2", 1000.5, 0)])

    assert recorded is False
    assert loaded_manager.history.info() == before
    assert not guard.is_dragging


def test_drag_beyond_threshold_adds_one_entry(loaded_manager):
    guard = DragThresholdGuard(loaded_manager)

    guard.on_drag_start([dragged("1", 0, 0), dragged("2", 1000, 0)])
    recorded = guard.on_drag_stop([dragged("1", 0, 0), dragged("2", 1000, 1.5)])

    assert recorded is True
    assert loaded_manager.history.info().undo_count == 1
    assert loaded_manager.get_node("2").position == Position(x=1000, y=1.5)


def test_undo_after_drag_returns_to_start(loaded_manager):
    guard = DragThresholdGuard(loaded_manager)

    guard.on_drag_start([dragged("1", 0, 0)])
    guard.on_drag_stop([dragged("1", 50, 60)])
    loaded_manager.undo()

    assert loaded_manager.get_node("1").position == Position(x=0, y=0)


def test_stop_without_start_is_a_no_op(loaded_manager):
    guard = DragThresholdGuard(loaded_manager)

    assert guard.on_drag_stop([dragged("1", 500, 500)]) is False
    assert loaded_manager.get_node("1").position == Position(x=0, y=0)
    assert not loaded_manager.can_undo


def test_start_positions_cleared_after_stop(loaded_manager):
    guard = DragThresholdGuard(loaded_manager)

    guard.on_drag_start([dragged("1", 0, 0)])
    assert guard.is_dragging
    guard.on_drag_stop([dragged("1", 10, 0)])

    assert not guard.is_dragging
    assert guard.on_drag_stop([dragged("1", 20, 0)]) is False


def test_custom_threshold(loaded_manager):
    guard = DragThresholdGuard(loaded_manager, threshold=10)

    guard.on_drag_start([dragged("1", 0, 0)])

    assert guard.on_drag_stop([dragged("1", 9, 9)]) is False
