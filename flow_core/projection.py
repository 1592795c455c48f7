"""
Flow projection - turn flat records into a laid-out {nodes, edges} view.

Every call is a full recomputation: depth, leaf flags, colors, edges and
positions are derived from scratch from the record list. Inputs are never
modified; each view node carries its own copy of the record as payload.
"""

import logging
from typing import Optional, Sequence

from .config import LayoutConfig
from .layout import LayeredLayoutSolver, LayoutEdgeSpec, LayoutNodeSpec, LayoutRequest, LayoutSolver
from .models import FlowSnapshot, NodeType, Position, Record, Size, ViewEdge, ViewNode, edge_id
from .tree_index import build_index, compute_depths, compute_leaf_set, resolve_parent


logger = logging.getLogger(__name__)

# Layer colors: deep pink -> deep orange -> green (cycling)
LAYER_COLORS = ("#e91e63", "#ff5722", "#4caf50")


def layer_color(depth: int, palette: Sequence[str] = LAYER_COLORS) -> str:
    """Color for a depth, cycling through the palette."""
    return palette[depth % len(palette)]


def node_dimensions(node_type: str, config: Optional[LayoutConfig] = None) -> Size:
    """Branch connectors are drawn as small pills, every other step as a full card."""
    config = config or LayoutConfig()
    if node_type == NodeType.DATE_TIME_CONNECTOR:
        return Size(width=config.connector_width, height=config.connector_height)
    return Size(width=config.node_width, height=config.node_height)


def get_layout_elements(
    records: Sequence[Record],
    solver: Optional[LayoutSolver] = None,
    config: Optional[LayoutConfig] = None
) -> FlowSnapshot:
    """
    Project records into positioned view nodes and parent -> child edges.

    Node order mirrors record order. An edge is emitted for each record whose
    parent resolves, colored with the parent's layer color.

    Args:
        records: Flat record list (any order)
        solver: Layout solver (LayeredLayoutSolver if None)
        config: Palette, sizes and separations (defaults if None)

    Returns:
        A fresh FlowSnapshot
    """
    config = config or LayoutConfig()
    solver = solver or LayeredLayoutSolver()

    if not records:
        return FlowSnapshot()

    index = build_index(records)
    depths = compute_depths(records, index)
    leaves = compute_leaf_set(records, index)

    request = LayoutRequest(rank_dir=config.rank_dir, rank_sep=config.rank_sep, node_sep=config.node_sep)
    nodes: list[ViewNode] = []
    edges: list[ViewEdge] = []

    for record in records:
        depth = depths[record.id]
        size = node_dimensions(record.type, config)

        nodes.append(ViewNode(
            id=record.id,
            depth=depth,
            is_leaf=record.id in leaves,
            layer_color=layer_color(depth, config.palette),
            size=size,
            payload=record.model_copy(deep=True),
        ))
        request.nodes.append(LayoutNodeSpec(id=record.id, width=size.width, height=size.height))

        parent_id = resolve_parent(record, index)
        if parent_id is None:
            if record.parent_id is not None:
                logger.debug("Unresolved parent %s on record %s, placing as root", record.parent_id, record.id)
            continue

        parent_depth = depths[parent_id]
        edges.append(ViewEdge(
            id=edge_id(parent_id, record.id),
            source=parent_id,
            target=record.id,
            color=layer_color(parent_depth, config.palette),
            source_depth=parent_depth,
            target_depth=depth,
        ))
        request.edges.append(LayoutEdgeSpec(source=parent_id, target=record.id))

    centers = solver.solve(request)

    # Solver returns centers; the canvas wants top-left corners
    for node in nodes:
        center = centers.get(node.id)
        if center is None:
            logger.debug("Solver returned no position for %s", node.id)
            continue
        node.position = Position(
            x=center.x - node.size.width / 2,
            y=center.y - node.size.height / 2,
        )

    return FlowSnapshot(nodes=nodes, edges=edges)
