"""
Flow validation - Report structural problems in a record list.

Projection silently defuses dangling and cyclic parent references (they
degrade to depth 0). Validation is where those conditions are surfaced,
so callers can warn about them without changing how the flow renders.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from .models import ConnectorType, DateTimeConnectorRecord, DateTimeRecord, Record
from .tree_index import build_index, resolve_parent


class IssueSeverity(str, Enum):
    """Severity levels for validation issues."""
    ERROR = "error"      # Invalid state, must be fixed
    WARNING = "warning"  # Rendered, but probably not what was meant
    INFO = "info"        # Informational, may be intentional


@dataclass
class ValidationIssue:
    """A single validation issue found in a flow."""
    severity: IssueSeverity
    message: str
    node_id: str | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        result = {
            "type": self.severity.value,
            "message": self.message
        }
        if self.node_id:
            result["node_id"] = self.node_id
        return result


def find_cyclic_ids(records: Sequence[Record]) -> set[str]:
    """Ids that sit on a cycle of resolved parent references."""
    index = build_index(records)
    cyclic: set[str] = set()
    cleared: set[str] = set()

    for record in records:
        path: list[str] = []
        on_path: set[str] = set()
        current = record.id
        while current is not None and current not in cleared and current not in cyclic:
            if current in on_path:
                cyclic.update(path[path.index(current):])
                break
            path.append(current)
            on_path.add(current)
            current = resolve_parent(index[current], index)
        cleared.update(i for i in path if i not in cyclic)

    return cyclic


def validate_records(records: Sequence[Record]) -> list[ValidationIssue]:
    """
    Validate a record list and return a list of issues.

    Checks for:
    - Duplicate record ids - ERROR
    - Dangling parent references (unknown or self) - WARNING
    - Cyclic parent chains - WARNING
    - Business-hours gates without one success and one failure branch - WARNING
    - Empty flow - INFO

    Args:
        records: The records to validate

    Returns:
        List of ValidationIssue objects
    """
    issues: list[ValidationIssue] = []

    if not records:
        issues.append(ValidationIssue(
            severity=IssueSeverity.INFO,
            message="Flow has no steps"
        ))
        return issues

    # Duplicate ids
    seen: set[str] = set()
    for record in records:
        if record.id in seen:
            issues.append(ValidationIssue(
                severity=IssueSeverity.ERROR,
                message=f"Duplicate step id: {record.id}",
                node_id=record.id
            ))
        seen.add(record.id)

    index = build_index(records)

    # Dangling parents
    for record in records:
        if record.parent_id is not None and resolve_parent(record, index) is None:
            issues.append(ValidationIssue(
                severity=IssueSeverity.WARNING,
                message=f"Parent {record.parent_id} does not resolve, step is placed as a root",
                node_id=record.id
            ))

    # Cycles
    for node_id in sorted(find_cyclic_ids(records)):
        issues.append(ValidationIssue(
            severity=IssueSeverity.WARNING,
            message="Step is part of a parent cycle",
            node_id=node_id
        ))

    # Business-hours branches
    for record in records:
        if not isinstance(record, DateTimeRecord):
            continue
        outcomes = []
        for connector_id in record.data.connectors:
            branch = index.get(connector_id)
            if isinstance(branch, DateTimeConnectorRecord) and branch.parent_id == record.id:
                outcomes.append(branch.data.connector_type)
        if sorted(outcomes) != sorted([ConnectorType.SUCCESS, ConnectorType.FAILURE]):
            issues.append(ValidationIssue(
                severity=IssueSeverity.WARNING,
                message="Business hours step needs exactly one Success and one Failure branch",
                node_id=record.id
            ))

    return issues


def validation_summary(issues: list[ValidationIssue]) -> dict:
    """
    Create a summary of validation issues.

    Args:
        issues: List of validation issues

    Returns:
        Dictionary with counts by severity
    """
    return {
        "total": len(issues),
        "errors": len([i for i in issues if i.severity == IssueSeverity.ERROR]),
        "warnings": len([i for i in issues if i.severity == IssueSeverity.WARNING]),
        "info": len([i for i in issues if i.severity == IssueSeverity.INFO]),
        "valid": len([i for i in issues if i.severity == IssueSeverity.ERROR]) == 0
    }
