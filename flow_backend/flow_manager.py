"""
Flow Manager - Live flow state, mutations and undo/redo.

This module implements:
- Ownership of the live {nodes, edges} view state
- O(1) node lookups via an index dictionary
- Pre-image history recording around every mutation
- Cascading deletion of a node's whole descendant subtree
- Full re-projection after structural changes
"""

import logging
from typing import Any, Callable, Iterable, Optional

from pydantic import BaseModel

from flow_core.config import LayoutConfig
from flow_core.creation import build_records
from flow_core.layout import LayeredLayoutSolver, LayoutSolver
from flow_core.models import (
    CreateNodeRequest,
    FlowSnapshot,
    Position,
    Record,
    ViewEdge,
    ViewNode,
)
from flow_core.projection import get_layout_elements

from .history import HistoryStore


logger = logging.getLogger(__name__)


def _wire_keys(model: type[BaseModel], data: dict[str, Any]) -> dict[str, Any]:
    """Rename field-name keys to their aliases so they override the dumped (aliased) values."""
    renamed: dict[str, Any] = {}
    for key, value in data.items():
        field = model.model_fields.get(key)
        renamed[field.alias or key if field else key] = value
    return renamed


class FlowManager:
    """
    Manages the live flow view and its history.

    Every structural entry point records the current state *before*
    changing anything, so undo always returns to the pre-mutation view.
    Undo/redo restore stored snapshots verbatim, without re-layout.
    """

    def __init__(
        self,
        history: Optional[HistoryStore[FlowSnapshot]] = None,
        solver: Optional[LayoutSolver] = None,
        layout_config: Optional[LayoutConfig] = None
    ):
        self._nodes: list[ViewNode] = []
        self._edges: list[ViewEdge] = []
        self._history = history if history is not None else HistoryStore(clone=FlowSnapshot.clone)
        self._solver = solver or LayeredLayoutSolver()
        self._layout_config = layout_config or LayoutConfig()
        self._on_change_callbacks: list[Callable] = []

        # O(1) lookup index
        self._node_index: dict[str, ViewNode] = {}  # node_id -> ViewNode

    # --- Index Management ---

    def _rebuild_indexes(self):
        """Rebuild the node index from the current nodes."""
        self._node_index = {node.id: node for node in self._nodes}

    def _apply(self, snapshot: FlowSnapshot):
        """Replace the live state wholesale."""
        self._nodes = list(snapshot.nodes)
        self._edges = list(snapshot.edges)
        self._rebuild_indexes()

    def _replace_node(self, node: ViewNode):
        self._nodes = [node if n.id == node.id else n for n in self._nodes]
        self._node_index[node.id] = node

    # --- Properties ---

    @property
    def nodes(self) -> list[ViewNode]:
        return list(self._nodes)

    @property
    def edges(self) -> list[ViewEdge]:
        return list(self._edges)

    @property
    def history(self) -> HistoryStore[FlowSnapshot]:
        return self._history

    @property
    def can_undo(self) -> bool:
        return self._history.can_undo

    @property
    def can_redo(self) -> bool:
        return self._history.can_redo

    def get_node(self, node_id: str) -> Optional[ViewNode]:
        """Get a node by ID (O(1) lookup)."""
        return self._node_index.get(str(node_id))

    def snapshot(self) -> FlowSnapshot:
        """The live state as a snapshot (shares node objects; history clones on record)."""
        return FlowSnapshot(nodes=list(self._nodes), edges=list(self._edges))

    def raw_records(self) -> list[Record]:
        """Re-derive the flat records from the nodes' payloads, in node order."""
        return [node.payload for node in self._nodes]

    def get_state(self) -> dict:
        """Get the full current state for API responses."""
        return {
            **self.snapshot().to_json_dict(),
            "history": self._history.info().to_dict(),
        }

    # --- Change Callbacks ---

    def on_change(self, callback: Callable):
        """Register a callback for flow changes."""
        self._on_change_callbacks.append(callback)

    def _notify_change(self):
        """Notify all registered callbacks of a change."""
        for callback in self._on_change_callbacks:
            callback()

    # --- Projection ---

    def project(self, records: list[Record]) -> FlowSnapshot:
        """Run a full projection with this manager's solver and layout config."""
        return get_layout_elements(records, solver=self._solver, config=self._layout_config)

    def load(self, records: list[Record]) -> FlowSnapshot:
        """Replace the whole flow with freshly fetched records and restart history."""
        snapshot = self.project(records)
        self._apply(snapshot)
        self._history.init(snapshot)
        logger.info("Loaded flow: %d nodes, %d edges", len(self._nodes), len(self._edges))
        self._notify_change()
        return self.snapshot()

    # --- History ---

    def record_state(self):
        """Save the current state to history before a mutation."""
        self._history.record(self.snapshot())

    def _commit(self):
        """Keep history's current entry in step with the state just applied."""
        self._history.replace_current(self.snapshot())

    def discard_last_record(self):
        """Drop the latest recorded state (the action turned out to be a no-op)."""
        self._history.discard_last()

    def undo(self) -> Optional[FlowSnapshot]:
        """Undo the last action."""
        snapshot = self._history.undo()
        if snapshot is None:
            return None

        self._apply(snapshot)
        self._notify_change()
        return self.snapshot()

    def redo(self) -> Optional[FlowSnapshot]:
        """Redo the last undone action."""
        snapshot = self._history.redo()
        if snapshot is None:
            return None

        self._apply(snapshot)
        self._notify_change()
        return self.snapshot()

    # --- Bulk setters ---

    def set_nodes(self, nodes: list[ViewNode], with_history: bool = True):
        if with_history:
            self.record_state()
        self._nodes = list(nodes)
        self._rebuild_indexes()
        self._commit()
        self._notify_change()

    def set_edges(self, edges: list[ViewEdge], with_history: bool = True):
        if with_history:
            self.record_state()
        self._edges = list(edges)
        self._commit()
        self._notify_change()

    # --- Node Operations ---

    def create_node(self, form: CreateNodeRequest, parent_id: Optional[str] = None) -> list[Record]:
        """
        Add the records for a creation form submission and re-layout.

        Args:
            form: Submitted creation form
            parent_id: Parent preset by the "add" affordance (wins over form.parent_id)

        Returns:
            The new records (a business-hours gate brings its two branches)
        """
        new_records = build_records(form, parent_id=parent_id, existing_ids=set(self._node_index))

        self.record_state()

        snapshot = self.project(self.raw_records() + new_records)
        self._apply(snapshot)
        logger.debug("Created %s: %s", form.type.value, [r.id for r in new_records])
        self._commit()
        self._notify_change()
        return new_records

    def update_node(self, node_id: str, updates: dict[str, Any]) -> Optional[ViewNode]:
        """
        Rename a node and/or merge top-level keys into its record data.

        `updates` may carry "name" and "data". Data keys are merged shallowly
        and re-validated against the record's type; id, parent and type
        cannot be changed here. An unknown id still records history.

        Returns:
            The updated node, or None if the id is unknown
        """
        node = self._node_index.get(str(node_id))
        if node is None:
            self.record_state()
            logger.debug("update_node: unknown node %s", node_id)
            return None

        record = node.payload
        changes: dict[str, Any] = {}
        if updates.get("name") is not None:
            changes["name"] = str(updates["name"])
        data_updates = updates.get("data")
        if data_updates:
            merged = {**record.data.to_json_dict(), **_wire_keys(type(record.data), data_updates)}
            # Raises pydantic.ValidationError (a ValueError) before anything is recorded
            changes["data"] = type(record.data).model_validate(merged)

        self.record_state()

        updated = node.model_copy(update={"payload": record.model_copy(update=changes)})
        self._replace_node(updated)
        self._commit()
        self._notify_change()
        return updated

    def update_node_position(self, node_id: str, position: Position) -> Optional[ViewNode]:
        """Move one node to a new top-left position."""
        self.record_state()

        node = self._node_index.get(str(node_id))
        if node is None:
            logger.debug("update_node_position: unknown node %s", node_id)
            return None

        updated = node.model_copy(update={"position": position.model_copy()})
        self._replace_node(updated)
        self._commit()
        self._notify_change()
        return updated

    def set_node_positions(self, positions: Iterable[tuple[str, Position]]):
        """
        Overwrite positions without recording history.

        Only for gestures whose history entry was recorded when they began
        (see DragThresholdGuard). Unknown ids are skipped.
        """
        changed = False
        for node_id, position in positions:
            node = self._node_index.get(str(node_id))
            if node is None:
                continue
            self._replace_node(node.model_copy(update={"position": position.model_copy()}))
            changed = True
        if changed:
            self._commit()
            self._notify_change()

    def descendant_closure(self, node_id: str) -> set[str]:
        """
        A node id together with the ids of all its transitive descendants.

        Scans every node repeatedly, adding those whose parent is already
        in the set, until a full pass adds nothing.
        """
        closure = {str(node_id)}
        changed = True
        while changed:
            changed = False
            for node in self._nodes:
                parent_id = node.payload.parent_id
                if node.id not in closure and parent_id is not None and parent_id in closure:
                    closure.add(node.id)
                    changed = True
        return closure

    def remove_node(self, node_id: str) -> list[str]:
        """
        Delete a node, its whole subtree and every incident edge.

        Surviving records are re-projected from scratch so depth, leaf
        flags, colors and positions stay consistent. An unknown id is a
        no-op (history is still recorded).

        Returns:
            Ids of the removed nodes, in node order
        """
        node_id = str(node_id)
        self.record_state()

        if node_id not in self._node_index:
            logger.debug("remove_node: unknown node %s", node_id)
            return []

        closure = self.descendant_closure(node_id)
        removed = [n.id for n in self._nodes if n.id in closure]
        survivors = [n for n in self._nodes if n.id not in closure]

        if survivors:
            self._apply(self.project([n.payload for n in survivors]))
        else:
            self._apply(FlowSnapshot())

        logger.debug("Removed %d nodes under %s", len(removed), node_id)
        self._commit()
        self._notify_change()
        return removed
