"""
Layout solver contract and the default layered solver.

The projector never computes coordinates itself. It hands a solver:
- one {id, width, height} entry per node
- one {source, target} entry per edge
- a rank direction plus fixed rank/node separation

and receives a center coordinate per node id. Any object with a matching
`solve` method can be plugged in; LayeredLayoutSolver is the default.
"""

import logging
from collections import defaultdict, deque
from typing import Protocol

import networkx as nx
from pydantic import BaseModel, Field

from .models import Position


logger = logging.getLogger(__name__)


# Default solver parameters
DEFAULT_RANK_DIR = "TB"
DEFAULT_RANK_SEP = 80
DEFAULT_NODE_SEP = 60


class LayoutNodeSpec(BaseModel):
    id: str
    width: float
    height: float


class LayoutEdgeSpec(BaseModel):
    source: str
    target: str


class LayoutRequest(BaseModel):
    """Everything a solver needs to place one graph."""
    nodes: list[LayoutNodeSpec] = Field(default_factory=list)
    edges: list[LayoutEdgeSpec] = Field(default_factory=list)
    rank_dir: str = DEFAULT_RANK_DIR  # "TB" (top-to-bottom) or "LR" (left-to-right)
    rank_sep: float = DEFAULT_RANK_SEP
    node_sep: float = DEFAULT_NODE_SEP


class LayoutSolver(Protocol):
    """Turns node sizes and connectivity into center coordinates."""

    def solve(self, request: LayoutRequest) -> dict[str, Position]:
        ...


class LayeredLayoutSolver:
    """
    Hierarchical layout in ranks.

    Nodes with no incoming edges start rank 0 and children go one rank
    below the parent that reaches them first. Within a rank, siblings are
    grouped under their parent, ordered by the parent's slot, and centered
    on it as far as the nodes to their left allow.
    """

    def solve(self, request: LayoutRequest) -> dict[str, Position]:
        if not request.nodes:
            return {}

        graph = self._build_graph(request)
        ranks = self._assign_ranks(graph)
        layers = self._order_layers(graph, ranks)
        centers = self._assign_coordinates(graph, layers, request)

        logger.debug(
            "Laid out %d nodes in %d ranks (%s)",
            graph.number_of_nodes(), len(layers), request.rank_dir
        )
        return centers

    def _build_graph(self, request: LayoutRequest) -> nx.DiGraph:
        horizontal = request.rank_dir == "LR"
        graph = nx.DiGraph()
        for spec in request.nodes:
            # "breadth" runs along a rank, "extent" across it
            breadth, extent = (spec.height, spec.width) if horizontal else (spec.width, spec.height)
            graph.add_node(spec.id, breadth=breadth, extent=extent)
        for edge in request.edges:
            if edge.source == edge.target:
                continue
            if edge.source in graph and edge.target in graph:
                graph.add_edge(edge.source, edge.target)
        return graph

    def _assign_ranks(self, graph: nx.DiGraph) -> dict[str, int]:
        """BFS levels from roots; a leftover cycle starts a new walk at its first node."""
        ranks: dict[str, int] = {}
        roots = [n for n in graph.nodes if graph.in_degree(n) == 0]

        while True:
            queue = deque((root, 0) for root in roots)
            while queue:
                node_id, rank = queue.popleft()
                if node_id in ranks:
                    continue
                ranks[node_id] = rank
                for child in graph.successors(node_id):
                    queue.append((child, rank + 1))

            remaining = [n for n in graph.nodes if n not in ranks]
            if not remaining:
                return ranks
            roots = remaining[:1]

    def _order_layers(self, graph: nx.DiGraph, ranks: dict[str, int]) -> list[list[str]]:
        """Order each rank by the mean slot of its parents in the rank above."""
        by_rank: dict[int, list[str]] = defaultdict(list)
        for node_id in graph.nodes:
            by_rank[ranks[node_id]].append(node_id)

        slots: dict[str, int] = {}
        layers: list[list[str]] = []
        for rank in sorted(by_rank):
            layer = by_rank[rank]

            def barycenter(node_id: str) -> float:
                parent_slots = [
                    slots[p] for p in graph.predecessors(node_id)
                    if p in slots and ranks[p] < rank
                ]
                if not parent_slots:
                    return float("inf")
                return sum(parent_slots) / len(parent_slots)

            layer = sorted(layer, key=barycenter)
            for slot, node_id in enumerate(layer):
                slots[node_id] = slot
            layers.append(layer)
        return layers

    def _assign_coordinates(
        self,
        graph: nx.DiGraph,
        layers: list[list[str]],
        request: LayoutRequest
    ) -> dict[str, Position]:
        along: dict[str, float] = {}   # Center along the rank
        across: dict[str, float] = {}  # Center across ranks
        offset = 0.0

        for layer in layers:
            rank_extent = max(graph.nodes[n]["extent"] for n in layer)
            cursor = None  # Right edge of the last placed node

            for group in self._sibling_groups(graph, layer, along):
                widths = [graph.nodes[n]["breadth"] for n in group]
                total = sum(widths) + request.node_sep * (len(group) - 1)
                parents = [along[p] for p in graph.predecessors(group[0]) if p in along]

                if parents:
                    left = sum(parents) / len(parents) - total / 2
                else:
                    left = 0.0 if cursor is None else cursor + request.node_sep
                if cursor is not None:
                    left = max(left, cursor + request.node_sep)

                for node_id, width in zip(group, widths):
                    along[node_id] = left + width / 2
                    across[node_id] = offset + rank_extent / 2
                    left += width + request.node_sep
                cursor = left - request.node_sep

            offset += rank_extent + request.rank_sep

        # Shift so the left-most node edge sits at 0
        shift = min(along[n] - graph.nodes[n]["breadth"] / 2 for n in along)
        centers: dict[str, Position] = {}
        for node_id in along:
            a = along[node_id] - shift
            c = across[node_id]
            if request.rank_dir == "LR":
                centers[node_id] = Position(x=c, y=a)
            else:
                centers[node_id] = Position(x=a, y=c)
        return centers

    @staticmethod
    def _sibling_groups(
        graph: nx.DiGraph,
        layer: list[str],
        placed: dict[str, float]
    ) -> list[list[str]]:
        """Split an ordered rank into runs of nodes sharing the same placed parents."""
        groups: list[list[str]] = []
        last_key = None
        for node_id in layer:
            key = tuple(sorted(p for p in graph.predecessors(node_id) if p in placed))
            if groups and key and key == last_key:
                groups[-1].append(node_id)
            else:
                groups.append([node_id])
            last_key = key
        return groups
