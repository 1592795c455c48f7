"""
Translate editor form state into a record update.

Each record variant exposes different editable fields, so the update is
built per tag. The result is the `updates` mapping FlowManager.update_node
accepts: an optional new `name` and top-level `data` keys to merge.
"""

from typing import Any

from .models import (
    AddCommentRecord,
    DateTimeConnectorRecord,
    DateTimeRecord,
    EditNodeRequest,
    Record,
    SendMessageRecord,
    TextPart,
    TriggerRecord,
)


def build_node_updates(record: Record, edit: EditNodeRequest) -> dict[str, Any]:
    """Build the update for `record` from editor state, ignoring fields its type lacks."""
    updates: dict[str, Any] = {}
    if edit.name is not None:
        updates["name"] = edit.name

    data: dict[str, Any] = {}

    if isinstance(record, SendMessageRecord):
        # Only text parts are editable; attachments are kept as they are
        if edit.message is not None:
            data["payload"] = [
                part.model_copy(update={"text": edit.message}).to_json_dict()
                if isinstance(part, TextPart) else part.to_json_dict()
                for part in record.data.payload
            ]
    elif isinstance(record, AddCommentRecord):
        if edit.comment is not None:
            data["comment"] = edit.comment
    elif isinstance(record, DateTimeRecord):
        if edit.times is not None:
            data["times"] = [window.to_json_dict() for window in edit.times]
        if edit.timezone is not None:
            data["timezone"] = edit.timezone
    elif isinstance(record, (TriggerRecord, DateTimeConnectorRecord)):
        pass  # Name only
    else:
        raise TypeError(f"Unsupported record type: {type(record).__name__}")

    if data:
        updates["data"] = data
    return updates
