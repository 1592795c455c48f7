"""
Core data models for automation flows.

These models define the canonical schema shared by the projector, the
mutation manager and the HTTP layer:
- Records: flat, parent-referencing flow steps as delivered by the feed
- View nodes/edges: depth-annotated, colored, positioned render entities
- Snapshots: the full {nodes, edges} pair stored in undo/redo history

Field Naming Convention:
- Python attributes are snake_case (`parent_id`, `layer_color`)
- JSON serialization outputs camelCase (`parentId`, `layerColor`)
- Either spelling is accepted on input
"""

from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic.alias_generators import to_camel


# Literal parent value meaning "no parent" in feed payloads
NONE_SENTINEL = -1

# 24-hour "HH:MM"
TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class NodeType(str, Enum):
    """Record tags (one data shape per tag)."""
    TRIGGER = "trigger"
    SEND_MESSAGE = "sendMessage"
    ADD_COMMENT = "addComment"
    DATE_TIME = "dateTime"
    DATE_TIME_CONNECTOR = "dateTimeConnector"


class Side(str, Enum):
    """Node sides an edge can attach to."""
    TOP = "top"
    RIGHT = "right"
    BOTTOM = "bottom"
    LEFT = "left"


class ConnectorType(str, Enum):
    """Business-hours branch outcomes."""
    SUCCESS = "success"
    FAILURE = "failure"


class Weekday(str, Enum):
    MON = "mon"
    TUE = "tue"
    WED = "wed"
    THU = "thu"
    FRI = "fri"
    SAT = "sat"
    SUN = "sun"


def normalize_id(value: Any) -> str:
    """Identifiers may arrive as numbers; identity is always compared as strings."""
    return str(value)


def normalize_parent_id(value: Any) -> Optional[str]:
    """Map the none-sentinel (missing, null or -1) to None, anything else to a string id."""
    if value is None or isinstance(value, bool):
        return None
    if value == NONE_SENTINEL:
        return None
    return str(value)


class FlowModel(BaseModel):
    """Base for wire models: camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        """Convert to JSON-serializable dict with wire field names."""
        return self.model_dump(mode="json", by_alias=True)


# --- Type-specific record payloads ---

class TriggerData(FlowModel):
    """Payload of a trigger step. Trigger options beyond the event name pass through."""
    model_config = ConfigDict(extra="allow")

    type: str = ""  # Event name, e.g. "conversationOpened"


class TextPart(FlowModel):
    type: Literal["text"] = "text"
    text: str = ""


class AttachmentPart(FlowModel):
    type: Literal["attachment"] = "attachment"
    attachment: list[str] = Field(default_factory=list)  # Attachment URLs


MessagePart = Annotated[Union[TextPart, AttachmentPart], Field(discriminator="type")]


class SendMessageData(FlowModel):
    """Payload of a send-message step."""
    payload: list[MessagePart] = Field(default_factory=list)


class AddCommentData(FlowModel):
    """Payload of an add-comment step."""
    comment: str = ""


class TimeWindow(FlowModel):
    """One opening window of a business-hours schedule."""
    start_time: str = Field(default="09:00", pattern=TIME_PATTERN)
    end_time: str = Field(default="17:00", pattern=TIME_PATTERN)
    day: Weekday


class DateTimeData(FlowModel):
    """Payload of a business-hours gate."""
    times: list[TimeWindow] = Field(default_factory=list)
    connectors: list[str] = Field(default_factory=list)  # [success_id, failure_id]
    timezone: str = "UTC"
    action: str = "businessHours"

    @field_validator("connectors", mode="before")
    @classmethod
    def normalize_connectors(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [normalize_id(item) for item in value]
        return value


class DateTimeConnectorData(FlowModel):
    """Payload of a business-hours branch (success or failure)."""
    connector_type: ConnectorType


# --- Records ---

class RecordBase(FlowModel):
    """Fields shared by every record variant."""
    id: str
    parent_id: Optional[str] = None
    name: str = ""

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value: Any) -> Any:
        if isinstance(value, (str, int)) and not isinstance(value, bool):
            return normalize_id(value)
        return value

    @field_validator("parent_id", mode="before")
    @classmethod
    def coerce_parent_id(cls, value: Any) -> Optional[str]:
        return normalize_parent_id(value)


class TriggerRecord(RecordBase):
    type: Literal["trigger"] = "trigger"
    data: TriggerData = Field(default_factory=TriggerData)


class SendMessageRecord(RecordBase):
    type: Literal["sendMessage"] = "sendMessage"
    data: SendMessageData = Field(default_factory=SendMessageData)


class AddCommentRecord(RecordBase):
    type: Literal["addComment"] = "addComment"
    data: AddCommentData = Field(default_factory=AddCommentData)


class DateTimeRecord(RecordBase):
    type: Literal["dateTime"] = "dateTime"
    data: DateTimeData = Field(default_factory=DateTimeData)


class DateTimeConnectorRecord(RecordBase):
    type: Literal["dateTimeConnector"] = "dateTimeConnector"
    data: DateTimeConnectorData


Record = Annotated[
    Union[TriggerRecord, SendMessageRecord, AddCommentRecord, DateTimeRecord, DateTimeConnectorRecord],
    Field(discriminator="type"),
]

_record_adapter = TypeAdapter(Record)
_record_list_adapter = TypeAdapter(list[Record])


def parse_record(raw: Any) -> Record:
    """Validate one raw record (raises pydantic.ValidationError)."""
    return _record_adapter.validate_python(raw)


def parse_records(raw: Any) -> list[Record]:
    """Validate a raw record list, preserving order (raises pydantic.ValidationError)."""
    return _record_list_adapter.validate_python(raw)


# --- View model ---

class Size(FlowModel):
    width: float
    height: float


class Position(FlowModel):
    x: float = 0
    y: float = 0


class ViewNode(FlowModel):
    """A positioned, depth-colored node handed to the rendering layer."""
    id: str
    depth: int = Field(default=0, ge=0)
    is_leaf: bool = True
    layer_color: str
    size: Size
    position: Position = Field(default_factory=Position)
    anchor_in: Side = Side.TOP      # Incoming edges attach here
    anchor_out: Side = Side.BOTTOM  # Outgoing edges leave from here
    payload: Record


class ViewEdge(FlowModel):
    """A parent -> child connection, colored by the parent's depth."""
    id: str
    source: str
    target: str
    color: str
    source_depth: int = 0
    target_depth: int = 0


def edge_id(parent_id: str, child_id: str) -> str:
    return f"e{parent_id}-{child_id}"


class FlowSnapshot(FlowModel):
    """
    The complete {nodes, edges} view state.
    This is what gets stored in undo/redo history.
    """
    nodes: list[ViewNode] = Field(default_factory=list)
    edges: list[ViewEdge] = Field(default_factory=list)

    def clone(self) -> "FlowSnapshot":
        """Structural deep copy sharing nothing with this snapshot."""
        return self.model_copy(deep=True)


# --- API Request/Response Models ---

class CreateNodeRequest(FlowModel):
    """Creation form submission."""
    type: NodeType
    title: str = ""
    description: str = ""
    parent_id: Optional[str] = None

    @field_validator("parent_id", mode="before")
    @classmethod
    def coerce_parent_id(cls, value: Any) -> Optional[str]:
        return normalize_parent_id(value)


class UpdateNodeRequest(FlowModel):
    """Partial update: new name and/or top-level keys merged into the record data."""
    name: Optional[str] = None
    data: Optional[dict[str, Any]] = None


class EditNodeRequest(FlowModel):
    """Editor form state; only the fields relevant to the record's type are used."""
    name: Optional[str] = None
    message: Optional[str] = None
    comment: Optional[str] = None
    times: Optional[list[TimeWindow]] = None
    timezone: Optional[str] = None


class MoveNodeRequest(FlowModel):
    """New top-left position for one node; both coordinates are required."""
    x: float
    y: float

    def to_position(self) -> Position:
        return Position(x=self.x, y=self.y)


class DraggedNode(FlowModel):
    id: str
    position: Position

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return normalize_id(value)
        return value


class DragRequest(FlowModel):
    """Nodes involved in a drag gesture, with their current positions."""
    nodes: list[DraggedNode] = Field(default_factory=list)
