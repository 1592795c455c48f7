"""
Flowtree Backend - Live flow state, history and the HTTP API.
"""

from .history import HistoryStore, HistoryInfo
from .flow_manager import FlowManager
from .drag_guard import DragThresholdGuard, MOVEMENT_THRESHOLD
from .feed import FlowFeed, FetchResult
from .context import FlowContext, create_context

__all__ = [
    "HistoryStore",
    "HistoryInfo",
    "FlowManager",
    "DragThresholdGuard",
    "MOVEMENT_THRESHOLD",
    "FlowFeed",
    "FetchResult",
    "FlowContext",
    "create_context",
]
