"""Tests for flat tree indexing: id normalization, depth and leaf sets."""

import itertools

from flow_core.models import parse_records
from flow_core.tree_index import build_index, compute_depth, compute_depths, compute_leaf_set, resolve_parent
from tests.conftest import comment, message, trigger


def test_build_index_normalizes_numeric_ids():
    records = parse_records([trigger(1), message(2, 1)])
    index = build_index(records)

    assert set(index) == {"1", "2"}
    assert index["2"].parent_id == "1"


def test_none_sentinel_variants_all_mean_no_parent():
    raw = [trigger("a", parent_id=-1), trigger("b", parent_id=None), {"id": "c", "type": "trigger"}]
    records = parse_records(raw)
    index = build_index(records)

    assert [r.parent_id for r in records] == [None, None, None]
    assert all(compute_depth(r.id, index) == 0 for r in records)


def test_sibling_scenario_depths_and_leaves(sibling_records):
    index = build_index(sibling_records)

    assert compute_depths(sibling_records, index) == {"1": 0, "2": 1, "3": 1}
    assert compute_leaf_set(sibling_records, index) == {"2", "3"}


def test_child_before_parent_resolves(chain_records):
    reordered = list(reversed(chain_records))
    index = build_index(reordered)

    assert compute_depths(reordered, index) == {"1": 0, "2": 1, "3": 2}
    assert compute_leaf_set(reordered) == {"3"}


def test_depth_and_leaves_invariant_under_permutation():
    records = parse_records([
        trigger("1"),
        message("2", "1"),
        comment("3", "1"),
        message("4", "2"),
        comment("5", "4"),
        trigger("6"),
    ])
    expected_depths = compute_depths(records, build_index(records))
    expected_leaves = compute_leaf_set(records)

    for permutation in itertools.permutations(records):
        permutation = list(permutation)
        assert compute_depths(permutation, build_index(permutation)) == expected_depths
        assert compute_leaf_set(permutation) == expected_leaves


def test_dangling_parent_is_a_root():
    records = parse_records([trigger("1"), message("2", "missing")])
    index = build_index(records)

    assert resolve_parent(records[1], index) is None
    assert compute_depth("2", index) == 0
    assert compute_leaf_set(records, index) == {"1", "2"}


def test_self_parent_is_a_root_and_stays_a_leaf():
    records = parse_records([message("1", "1")])
    index = build_index(records)

    assert compute_depth("1", index) == 0
    assert compute_leaf_set(records, index) == {"1"}


def test_cycle_terminates():
    records = parse_records([message("a", "b"), message("b", "a")])
    index = build_index(records)

    # a -> b -> a: the revisited id counts as 0
    assert compute_depth("a", index) == 2
    assert compute_depth("b", index) == 2


def test_visited_ids_count_as_zero(chain_records):
    index = build_index(chain_records)

    assert compute_depth("3", index, visited={"1"}) == 2
    assert compute_depth("3", index, visited={"2"}) == 1
    assert compute_depth("3", index, visited={"3"}) == 0


def test_unknown_id_has_depth_zero(chain_records):
    assert compute_depth("nope", build_index(chain_records)) == 0


def test_deep_chain_does_not_hit_recursion_limit():
    raw = [trigger("0")] + [comment(str(i), str(i - 1)) for i in range(1, 5000)]
    records = parse_records(raw)

    assert compute_depth("4999", build_index(records)) == 4999


def test_leaf_iff_never_a_resolved_parent(chain_records):
    index = build_index(chain_records)
    parents = {resolve_parent(r, index) for r in chain_records} - {None}
    leaves = compute_leaf_set(chain_records, index)

    for record in chain_records:
        assert (record.id in leaves) == (record.id not in parents)
