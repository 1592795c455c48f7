"""
Flowtree Core - Shared models, tree indexing, projection and layout.

This package provides the functionality used by both the flow manager
and the HTTP API, ensuring a single source of truth for all flow logic.
"""

from .models import (
    # Enums
    NodeType,
    Side,
    ConnectorType,
    Weekday,
    # Records
    Record,
    TriggerRecord,
    SendMessageRecord,
    AddCommentRecord,
    DateTimeRecord,
    DateTimeConnectorRecord,
    parse_record,
    parse_records,
    # View models
    Size,
    Position,
    ViewNode,
    ViewEdge,
    FlowSnapshot,
    # Request models (for API)
    CreateNodeRequest,
    UpdateNodeRequest,
    EditNodeRequest,
    MoveNodeRequest,
    DraggedNode,
    DragRequest,
)

from .config import LayoutConfig
from .tree_index import build_index, resolve_parent, compute_depth, compute_depths, compute_leaf_set
from .layout import LayoutRequest, LayoutSolver, LayeredLayoutSolver
from .projection import LAYER_COLORS, layer_color, node_dimensions, get_layout_elements
from .creation import build_records, generate_id
from .editing import build_node_updates
from .validation import validate_records, validation_summary, ValidationIssue, IssueSeverity

__all__ = [
    # Enums
    "NodeType",
    "Side",
    "ConnectorType",
    "Weekday",
    # Records
    "Record",
    "TriggerRecord",
    "SendMessageRecord",
    "AddCommentRecord",
    "DateTimeRecord",
    "DateTimeConnectorRecord",
    "parse_record",
    "parse_records",
    # View models
    "Size",
    "Position",
    "ViewNode",
    "ViewEdge",
    "FlowSnapshot",
    # Request models
    "CreateNodeRequest",
    "UpdateNodeRequest",
    "EditNodeRequest",
    "MoveNodeRequest",
    "DraggedNode",
    "DragRequest",
    # Config
    "LayoutConfig",
    # Tree index
    "build_index",
    "resolve_parent",
    "compute_depth",
    "compute_depths",
    "compute_leaf_set",
    # Layout
    "LayoutRequest",
    "LayoutSolver",
    "LayeredLayoutSolver",
    # Projection
    "LAYER_COLORS",
    "layer_color",
    "node_dimensions",
    "get_layout_elements",
    # Creation / editing
    "build_records",
    "generate_id",
    "build_node_updates",
    # Validation
    "validate_records",
    "validation_summary",
    "ValidationIssue",
    "IssueSeverity",
]
