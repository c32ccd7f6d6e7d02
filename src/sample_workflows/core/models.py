"""Concrete data models for sample-workflows.

This module provides the plain dataclasses the engine reasons about. They are
decoupled from the SQLAlchemy models in :mod:`sample_workflows.db.models`,
which convert into them through ``to_domain()``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any
from uuid import UUID

from sample_workflows.core.types import (
    ConditionOperator,
    ConditionType,
    InputFieldType,
    NodeData,
    NodeType,
    RecordStatus,
    StateStatus,
)

__all__ = [
    "DEFAULT_NODE_EDIT_HOURS",
    "BranchResolution",
    "BranchTarget",
    "Editability",
    "InputField",
    "SampleRecord",
    "SampleWorkflowState",
    "WorkflowNode",
    "WorkflowPosition",
    "WorkflowSettings",
    "WorkflowTransition",
]

DEFAULT_NODE_EDIT_HOURS = 48
"""Freeze window applied when neither the node nor the settings define one."""


@dataclass
class InputField:
    """Definition of one input a node asks the officer for.

    Attributes:
        name: Key under which the value is stored in node_data.
        type: Widget type.
        label: Human-readable label.
        required: Whether the UI should require a value. Not enforced server-side.
        options: Choices for ``select`` fields.
    """

    name: str
    type: InputFieldType
    label: str
    required: bool = False
    options: list[str] | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> InputField:
        """Build an input field from its stored JSON form."""
        return cls(
            name=data["name"],
            type=InputFieldType(data.get("type", InputFieldType.TEXT)),
            label=data.get("label") or data["name"],
            required=bool(data.get("required", False)),
            options=list(data["options"]) if data.get("options") else None,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the stored JSON form."""
        data: dict[str, Any] = {
            "name": self.name,
            "type": self.type.value,
            "label": self.label,
            "required": self.required,
        }
        if self.options is not None:
            data["options"] = list(self.options)
        return data


@dataclass
class WorkflowNode:
    """One configurable step in a sample's lifecycle graph.

    Attributes:
        id: Unique identifier.
        name: Display name. Also consulted by the legacy name heuristic.
        position: Main-path ordering key.
        node_type: Action, decision or end.
        description: Free text description.
        icon: Icon name used by clients.
        color: Hex color used by clients.
        input_fields: Ordered input definitions.
        template_ids: Associated document templates, opaque to the engine.
        is_start_node: Marks the first node of the graph.
        is_end_node: Marks a terminal node.
        edit_freeze_hours: Per-node freeze window override. ``None`` defers to
            the global setting, ``0`` never freezes, ``-1`` freezes at once.
        auto_advance_condition: Stored but not interpreted.
        status: Active or inactive.
    """

    id: UUID
    name: str
    position: int = 0
    node_type: NodeType = NodeType.ACTION
    description: str | None = None
    icon: str = "circle"
    color: str = "#1E40AF"
    input_fields: list[InputField] = field(default_factory=list)
    template_ids: list[str] = field(default_factory=list)
    is_start_node: bool = False
    is_end_node: bool = False
    edit_freeze_hours: int | None = None
    auto_advance_condition: str | None = None
    status: RecordStatus = RecordStatus.ACTIVE

    @property
    def is_decision(self) -> bool:
        return self.node_type == NodeType.DECISION

    @property
    def is_terminal(self) -> bool:
        """True for nodes that can never be part of the main path."""
        return self.is_end_node or self.node_type == NodeType.END

    @property
    def is_active(self) -> bool:
        return self.status == RecordStatus.ACTIVE


@dataclass
class WorkflowTransition:
    """A directed, optionally conditioned edge between two nodes.

    Attributes:
        id: Unique identifier.
        from_node_id: Source node.
        to_node_id: Target node.
        condition_type: Kind of guard.
        condition_field: node_data key inspected by ``field_value`` guards.
        condition_operator: Comparison applied by ``field_value`` guards.
        condition_value: Expected value.
        label: Label shown to officers for the branch.
        display_order: Ordering key, also the branch tie-breaker.
        status: Active or inactive.
    """

    id: UUID
    from_node_id: UUID
    to_node_id: UUID
    condition_type: ConditionType = ConditionType.ALWAYS
    condition_field: str | None = None
    condition_operator: ConditionOperator | None = None
    condition_value: str | None = None
    label: str | None = None
    display_order: int = 0
    status: RecordStatus = RecordStatus.ACTIVE

    @property
    def is_active(self) -> bool:
        return self.status == RecordStatus.ACTIVE

    def matches_lab_result(self, lab_result: str | None) -> bool:
        """Check whether this is a lab result transition for ``lab_result``.

        The comparison is case-insensitive and ignores ``condition_operator``.

        Args:
            lab_result: The resolved lab result, if any.

        Returns:
            True if the transition is a lab result guard matching the value.
        """
        if self.condition_type != ConditionType.LAB_RESULT:
            return False
        if not lab_result or self.condition_value is None:
            return False
        return self.condition_value.lower() == lab_result.lower()

    def evaluate(self, values: Mapping[str, Any]) -> bool:
        """Evaluate the transition guard against recorded values.

        Args:
            values: Recorded node data, optionally merged with sample fields.
                ``labResult`` is consulted by lab result guards.

        Returns:
            True if the transition may be followed.

        Raises:
            ValueError: If the condition type is not a known variant.
        """
        if self.condition_type == ConditionType.ALWAYS:
            return True
        if self.condition_type == ConditionType.LAB_RESULT:
            return self.matches_lab_result(values.get("labResult"))
        if self.condition_type == ConditionType.FIELD_VALUE:
            if not self.condition_field:
                return False
            return self._compare(values.get(self.condition_field))

        msg = f"Unsupported condition type: {self.condition_type!r}"
        raise ValueError(msg)

    def _compare(self, actual: Any) -> bool:
        operator = self.condition_operator or ConditionOperator.EQUALS
        expected = (self.condition_value or "").lower()
        present = actual is not None and actual != ""
        text = str(actual).lower() if present else ""

        if operator == ConditionOperator.EQUALS:
            return present and text == expected
        if operator == ConditionOperator.NOT_EQUALS:
            return not present or text != expected
        if operator == ConditionOperator.CONTAINS:
            return present and expected in text

        msg = f"Unsupported condition operator: {operator!r}"
        raise ValueError(msg)


@dataclass
class SampleWorkflowState:
    """The authoritative recorded state of one sample at one node.

    Attributes:
        id: Unique identifier.
        sample_id: The sample this state belongs to.
        current_node_id: The node this state records.
        node_data: Values submitted for the node.
        entered_at: When the row was first created.
        completed_at: When data was last submitted.
        status: Active, completed or skipped.
    """

    id: UUID
    sample_id: UUID
    current_node_id: UUID
    node_data: NodeData = field(default_factory=dict)
    entered_at: datetime | None = None
    completed_at: datetime | None = None
    status: StateStatus = StateStatus.ACTIVE

    @property
    def is_completed(self) -> bool:
        return self.status == StateStatus.COMPLETED


@dataclass
class SampleRecord:
    """Legacy progress fields carried on the sample record.

    These predate the node model and are still consulted to interpret samples
    recorded before per-node states existed.
    """

    sample_id: UUID | None = None
    lifted_date: date | None = None
    dispatch_date: date | None = None
    lab_report_date: date | None = None
    lab_result: str | None = None


@dataclass
class WorkflowSettings:
    """Global editing settings.

    Attributes:
        node_edit_hours: Default freeze window in hours.
        allow_node_edit: Global kill switch for editing completed nodes.
    """

    node_edit_hours: int = DEFAULT_NODE_EDIT_HOURS
    allow_node_edit: bool = True


@dataclass(frozen=True)
class WorkflowPosition:
    """Inferred progress of a sample along the main path.

    Attributes:
        current_node_index: Index just past the leading run of completed
            nodes, clamped to the last index. ``-1`` for an empty main path.
        completed_nodes: Indices of every completed node, in or out of order.
    """

    current_node_index: int
    completed_nodes: frozenset[int]

    def is_completed(self, index: int) -> bool:
        return index in self.completed_nodes


@dataclass(frozen=True)
class BranchTarget:
    """A downstream node selected by the decision node's outcome."""

    node: WorkflowNode
    transition: WorkflowTransition


@dataclass(frozen=True)
class BranchResolution:
    """Full result of branch selection for one sample.

    Attributes:
        decision_node: The decision node, or None if the graph has none.
        lab_result: The resolved lab result, if any.
        targets: Matching branch targets ordered by display_order.
        awaiting_branch: True when a lab report exists and the decision node
            has outgoing transitions, but none applies to the sample yet.
        configuration_gap: True when the lab result is known but no outgoing
            transition of the decision node leads anywhere for it.
    """

    decision_node: WorkflowNode | None
    lab_result: str | None
    targets: tuple[BranchTarget, ...] = ()
    awaiting_branch: bool = False
    configuration_gap: bool = False


@dataclass(frozen=True)
class Editability:
    """Whether a node's recorded data may still be edited."""

    editable: bool
    reason: str | None = None
