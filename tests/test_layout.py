"""Tests for the default layered layout solver."""

from flow_core.layout import LayeredLayoutSolver, LayoutEdgeSpec, LayoutNodeSpec, LayoutRequest
from flow_core.models import parse_records
from flow_core.projection import get_layout_elements
from tests.conftest import comment, message, trigger


def make_request(nodes, edges, **kwargs):
    return LayoutRequest(
        nodes=[LayoutNodeSpec(id=n, width=100, height=40) for n in nodes],
        edges=[LayoutEdgeSpec(source=s, target=t) for s, t in edges],
        **kwargs
    )


def test_empty_request():
    assert LayeredLayoutSolver().solve(LayoutRequest()) == {}


def test_every_node_gets_a_center():
    request = make_request(["a", "b", "c", "d"], [("a", "b"), ("a", "c")])
    centers = LayeredLayoutSolver().solve(request)

    assert set(centers) == {"a", "b", "c", "d"}


def test_children_sit_one_rank_below_parent():
    request = make_request(["a", "b", "c"], [("a", "b"), ("b", "c")])
    centers = LayeredLayoutSolver().solve(request)

    # extent 40 + rank_sep 80
    assert centers["b"].y - centers["a"].y == 120
    assert centers["c"].y - centers["b"].y == 120


def test_siblings_do_not_overlap_and_keep_node_sep():
    request = make_request(["a", "b", "c", "d"], [("a", "b"), ("a", "c"), ("a", "d")])
    centers = LayeredLayoutSolver().solve(request)
    xs = sorted(centers[n].x for n in ("b", "c", "d"))

    assert xs[1] - xs[0] == 160
    assert xs[2] - xs[1] == 160


def test_parent_is_centered_over_its_children():
    request = make_request(["a", "b", "c"], [("a", "b"), ("a", "c")])
    centers = LayeredLayoutSolver().solve(request)

    assert centers["a"].x == (centers["b"].x + centers["c"].x) / 2


def test_left_most_edge_is_at_zero():
    request = make_request(["a", "b", "c"], [("a", "b"), ("a", "c")])
    centers = LayeredLayoutSolver().solve(request)

    assert min(c.x - 50 for c in centers.values()) == 0


def test_left_to_right_transposes_axes():
    request = make_request(["a", "b"], [("a", "b")], rank_dir="LR")
    centers = LayeredLayoutSolver().solve(request)

    assert centers["a"].y == centers["b"].y
    assert centers["b"].x > centers["a"].x


def test_cycle_and_self_loop_still_laid_out():
    request = make_request(["a", "b", "c"], [("a", "b"), ("b", "a"), ("c", "c")])
    centers = LayeredLayoutSolver().solve(request)

    assert set(centers) == {"a", "b", "c"}


def test_projection_with_real_solver_has_no_overlaps_within_a_rank():
    records = parse_records([
        trigger("1"),
        message("2", "1"),
        comment("3", "1"),
        message("4", "2"),
        comment("5", "2"),
        message("6", "3"),
        trigger("7"),
    ])
    snapshot = get_layout_elements(records)

    by_row = {}
    for node in snapshot.nodes:
        by_row.setdefault(node.position.y, []).append(node)
    for row in by_row.values():
        row.sort(key=lambda n: n.position.x)
        for left, right in zip(row, row[1:]):
            assert left.position.x + left.size.width <= right.position.x

    nodes = {n.id: n for n in snapshot.nodes}
    for edge in snapshot.edges:
        assert nodes[edge.target].position.y > nodes[edge.source].position.y
