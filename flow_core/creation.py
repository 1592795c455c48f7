"""
Record synthesis for the node-creation form.

A business-hours gate is never created alone: it comes with a "Success"
and a "Failure" branch record, a Monday-Friday 09:00-17:00 schedule and
the UTC timezone. Every other step type yields a single record.
"""

import uuid
from typing import Container, Optional

from .models import (
    AddCommentData,
    AddCommentRecord,
    ConnectorType,
    CreateNodeRequest,
    DateTimeConnectorData,
    DateTimeConnectorRecord,
    DateTimeData,
    DateTimeRecord,
    NodeType,
    Record,
    SendMessageData,
    SendMessageRecord,
    TextPart,
    TimeWindow,
    TriggerRecord,
    Weekday,
)


# Business-hours defaults
DEFAULT_BUSINESS_DAYS = (Weekday.MON, Weekday.TUE, Weekday.WED, Weekday.THU, Weekday.FRI)
DEFAULT_OPEN_TIME = "09:00"
DEFAULT_CLOSE_TIME = "17:00"
DEFAULT_TIMEZONE = "UTC"
DEFAULT_GATE_NAME = "Business Hours"

# Id lengths
STEP_ID_LENGTH = 4
CONNECTOR_ID_LENGTH = 6


def generate_id(length: int = CONNECTOR_ID_LENGTH, existing: Optional[Container[str]] = None) -> str:
    """Generate a short random id, regenerating on collision with `existing`."""
    while True:
        candidate = uuid.uuid4().hex[:length]
        if existing is None or candidate not in existing:
            return candidate


def default_schedule() -> list[TimeWindow]:
    return [
        TimeWindow(start_time=DEFAULT_OPEN_TIME, end_time=DEFAULT_CLOSE_TIME, day=day)
        for day in DEFAULT_BUSINESS_DAYS
    ]


def build_business_hours_records(
    gate_id: str,
    parent_id: Optional[str],
    form: CreateNodeRequest,
    existing: Optional[set[str]] = None
) -> list[Record]:
    """Gate record followed by its success and failure branches."""
    taken = set(existing or ()) | {gate_id}
    success_id = generate_id(CONNECTOR_ID_LENGTH, taken)
    taken.add(success_id)
    failure_id = generate_id(CONNECTOR_ID_LENGTH, taken)

    gate = DateTimeRecord(
        id=gate_id,
        parent_id=parent_id,
        name=form.title or DEFAULT_GATE_NAME,
        data=DateTimeData(
            times=default_schedule(),
            connectors=[success_id, failure_id],
            timezone=DEFAULT_TIMEZONE,
        ),
    )
    success = DateTimeConnectorRecord(
        id=success_id,
        parent_id=gate_id,
        name="Success",
        data=DateTimeConnectorData(connector_type=ConnectorType.SUCCESS),
    )
    failure = DateTimeConnectorRecord(
        id=failure_id,
        parent_id=gate_id,
        name="Failure",
        data=DateTimeConnectorData(connector_type=ConnectorType.FAILURE),
    )
    return [gate, success, failure]


def build_regular_record(new_id: str, parent_id: Optional[str], form: CreateNodeRequest) -> Record:
    """Single record for a message, comment or trigger step."""
    if form.type == NodeType.SEND_MESSAGE:
        return SendMessageRecord(
            id=new_id,
            parent_id=parent_id,
            name=form.title,
            data=SendMessageData(payload=[TextPart(text=form.description)]),
        )
    if form.type == NodeType.ADD_COMMENT:
        return AddCommentRecord(
            id=new_id,
            parent_id=parent_id,
            name=form.title,
            data=AddCommentData(comment=form.description),
        )
    if form.type == NodeType.TRIGGER:
        return TriggerRecord(id=new_id, parent_id=parent_id, name=form.title)
    raise ValueError(f"Cannot create a standalone {form.type.value} step")


def build_records(
    form: CreateNodeRequest,
    parent_id: Optional[str] = None,
    existing_ids: Optional[set[str]] = None
) -> list[Record]:
    """
    Build the records a creation form submission adds to the flow.

    Args:
        form: Submitted form
        parent_id: Parent preset by the "add" affordance; wins over form.parent_id
        existing_ids: Ids already in the flow (new ids avoid them)

    Returns:
        New records, parent-first
    """
    existing = set(existing_ids or ())
    parent = parent_id if parent_id is not None else form.parent_id
    new_id = generate_id(STEP_ID_LENGTH, existing)

    if form.type == NodeType.DATE_TIME:
        return build_business_hours_records(new_id, parent, form, existing)
    return [build_regular_record(new_id, parent, form)]
