"""
Composition root - one explicit context object per running app.

The context owns the flow manager, its history, the drag guard and the
feed, and is passed by reference to whoever needs them. Nothing here is
module-level state.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from flow_core.layout import LayoutSolver
from flow_core.models import FlowSnapshot

from .config import Settings
from .drag_guard import DragThresholdGuard
from .feed import FetchResult, FlowFeed
from .flow_manager import FlowManager
from .history import HistoryStore


logger = logging.getLogger(__name__)


@dataclass
class FlowContext:
    """Everything one editing session needs."""
    settings: Settings
    manager: FlowManager
    drag_guard: DragThresholdGuard
    feed: FlowFeed
    last_error: Optional[str] = None

    async def load(self) -> FetchResult:
        """
        Fetch records and replace the flow with them.

        On success nodes, edges and history are fully replaced. On failure
        the current flow is kept and the error is remembered.
        """
        result = await self.feed.fetch()
        if result.is_error:
            self.last_error = result.error
            return result

        self.last_error = None
        self.manager.load(result.records)
        return result


def create_context(
    settings: Settings,
    solver: Optional[LayoutSolver] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> FlowContext:
    """Wire a FlowContext from settings; `solver` and `transport` are for embedding and tests."""
    history: HistoryStore[FlowSnapshot] = HistoryStore(
        max_history=settings.max_history,
        clone=FlowSnapshot.clone,
    )
    manager = FlowManager(history=history, solver=solver, layout_config=settings.layout)
    feed = FlowFeed(settings.data_url, timeout=settings.fetch_timeout_s, transport=transport)
    return FlowContext(
        settings=settings,
        manager=manager,
        drag_guard=DragThresholdGuard(manager),
        feed=feed,
    )
