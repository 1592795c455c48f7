"""Tests for the bounded undo/redo store."""

import pytest

from flow_backend.history import HistoryInfo, HistoryStore


def test_new_store_is_empty():
    store = HistoryStore()

    assert store.current is None
    assert store.undo() is None
    assert store.redo() is None
    assert store.info() == HistoryInfo(undo_count=0, redo_count=0)


def test_max_history_must_be_positive():
    with pytest.raises(ValueError):
        HistoryStore(max_history=0)


def test_record_then_undo_then_redo():
    store = HistoryStore()
    store.init({"n": 0})
    store.record({"n": 1})

    assert store.undo() == {"n": 0}
    assert store.redo() == {"n": 1}
    assert store.redo() is None


def test_record_clears_future():
    store = HistoryStore()
    store.init({"n": 0})
    store.record({"n": 1})
    store.undo()
    assert store.can_redo

    store.record({"n": 2})

    assert not store.can_redo
    assert store.info().redo_count == 0


def test_first_record_without_init_pushes_nothing():
    store = HistoryStore()
    store.record({"n": 1})

    assert not store.can_undo
    assert store.current == {"n": 1}


def test_past_is_bounded_and_evicts_oldest_first():
    store = HistoryStore(max_history=3)
    store.init(0)
    for n in range(1, 6):
        store.record(n)

    assert store.info().undo_count == 3
    assert [store.undo() for _ in range(4)] == [4, 3, 2, None]


def test_snapshots_are_not_aliased():
    store = HistoryStore()
    state = {"nodes": [1]}
    store.init(state)
    state["nodes"].append(2)

    assert store.current == {"nodes": [1]}

    store.record({"nodes": [1, 2]})
    undone = store.undo()
    undone["nodes"].append(99)

    assert store.current == {"nodes": [1]}


def test_discard_last_restores_pre_record_value():
    store = HistoryStore()
    store.init("a")
    store.record("x")
    store.discard_last()

    assert store.current == "a"
    assert store.info() == HistoryInfo(undo_count=0, redo_count=0)


def test_discard_last_leaves_future_untouched():
    store = HistoryStore()
    store.init("a")
    store.record("b")
    store.record("c")
    store.undo()  # current "b", past ["a"], future ["c"]

    store.discard_last()

    assert store.current == "a"
    assert store.info() == HistoryInfo(undo_count=0, redo_count=1)


def test_discard_last_on_empty_past_is_a_no_op():
    store = HistoryStore()
    store.init("a")
    store.discard_last()

    assert store.current == "a"


def test_replace_current_touches_no_stack():
    store = HistoryStore()
    store.init("a")
    store.record("b")
    store.replace_current("b2")

    assert store.info().undo_count == 1
    assert store.undo() == "a"
    assert store.redo() == "b2"


def test_clear_keeps_current():
    store = HistoryStore()
    store.init("a")
    store.record("b")
    store.undo()
    store.clear()

    assert store.current == "a"
    assert store.info() == HistoryInfo(undo_count=0, redo_count=0)


def test_init_resets_stacks():
    store = HistoryStore()
    store.init("a")
    store.record("b")
    store.init("z")

    assert store.current == "z"
    assert not store.can_undo and not store.can_redo


def test_info_to_dict():
    info = HistoryInfo(undo_count=2, redo_count=0)

    assert info.to_dict() == {"undoCount": 2, "redoCount": 0, "canUndo": True, "canRedo": False}
