"""Shared fixtures for the flowtree test suite."""

import pytest

from flow_backend.config import Settings
from flow_backend.flow_manager import FlowManager
from flow_backend.history import HistoryStore
from flow_core.layout import LayoutRequest
from flow_core.models import FlowSnapshot, Position, parse_records


class FakeSolver:
    """
    Deterministic stand-in for the layout solver.

    Node i (in request order) gets its top-left corner at (i * 1000, 0);
    every request is kept for inspection.
    """

    def __init__(self):
        self.requests: list[LayoutRequest] = []

    def solve(self, request: LayoutRequest) -> dict[str, Position]:
        self.requests.append(request)
        return {
            spec.id: Position(x=i * 1000 + spec.width / 2, y=spec.height / 2)
            for i, spec in enumerate(request.nodes)
        }


def trigger(id, parent_id=-1, name=""):
    return {"id": id, "parentId": parent_id, "type": "trigger", "name": name, "data": {"type": "conversationOpened"}}


def message(id, parent_id, text="Hello", name=""):
    return {
        "id": id,
        "parentId": parent_id,
        "type": "sendMessage",
        "name": name,
        "data": {"payload": [{"type": "text", "text": text}]},
    }


def comment(id, parent_id, text="note", name=""):
    return {"id": id, "parentId": parent_id, "type": "addComment", "name": name, "data": {"comment": text}}


@pytest.fixture
def solver():
    return FakeSolver()


@pytest.fixture
def sibling_records():
    """Root 1 with children 2 and 3."""
    return parse_records([trigger("1"), message("2", "1"), comment("3", "1")])


@pytest.fixture
def chain_records():
    """1 -> 2 -> 3."""
    return parse_records([trigger("1"), message("2", "1"), comment("3", "2")])


@pytest.fixture
def manager(solver):
    return FlowManager(history=HistoryStore(clone=FlowSnapshot.clone), solver=solver)


@pytest.fixture
def loaded_manager(manager, chain_records):
    manager.load(chain_records)
    return manager


@pytest.fixture
def settings():
    return Settings(data_url="http://feed.test/flow.json", load_on_startup=False)
