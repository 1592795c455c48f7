"""
Flat tree indexing - depth and leaf analysis over parent-referencing records.

Records arrive as a flat list in arbitrary order, each naming its parent by id.
All lookups go through one global id index, so a child listed before its
parent resolves exactly like one listed after it.

Malformed input never raises:
- A parent id that matches no record (or the record itself) is unresolved and
  the record is treated as a root (depth 0, no edge).
- A cyclic parent chain stops at the first revisited id, which counts as 0.
"""

import logging
from typing import Iterable, Optional

from .models import Record


logger = logging.getLogger(__name__)


def build_index(records: Iterable[Record]) -> dict[str, Record]:
    """Map normalized id -> record. A later duplicate id replaces an earlier one."""
    return {str(record.id): record for record in records}


def resolve_parent(record: Record, index: dict[str, Record]) -> Optional[str]:
    """Return the record's parent id if it names another indexed record, else None."""
    parent_id = record.parent_id
    if parent_id is None or parent_id == record.id or parent_id not in index:
        return None
    return parent_id


def compute_depth(
    node_id: str,
    index: dict[str, Record],
    visited: Optional[set[str]] = None
) -> int:
    """
    Count the edges between a record and its topmost resolvable ancestor.

    Walks the parent chain through the index. Reaching a missing record, a
    record without a resolvable parent, or an id already in `visited`
    (a cycle) ends the walk.

    Args:
        node_id: Id of the record to measure
        index: Id lookup built by build_index
        visited: Ids to treat as already seen (not modified)

    Returns:
        Depth, 0 for roots
    """
    seen = set(visited) if visited else set()
    current = str(node_id)
    depth = 0

    while current not in seen:
        record = index.get(current)
        if record is None:
            break
        parent_id = resolve_parent(record, index)
        if parent_id is None:
            break
        seen.add(current)
        depth += 1
        current = parent_id
    else:
        logger.debug("Cyclic parent chain at %s while measuring %s", current, node_id)

    return depth


def compute_depths(records: Iterable[Record], index: dict[str, Record]) -> dict[str, int]:
    """Depth for every record id."""
    return {record.id: compute_depth(record.id, index) for record in records}


def compute_leaf_set(
    records: Iterable[Record],
    index: Optional[dict[str, Record]] = None
) -> set[str]:
    """
    Ids of records that are nobody's parent.

    Starts from every id and removes each one that some other record names
    as its resolved parent.
    """
    records = list(records)
    if index is None:
        index = build_index(records)

    leaves = set(index)
    for record in records:
        parent_id = resolve_parent(record, index)
        if parent_id is not None:
            leaves.discard(parent_id)
    return leaves
