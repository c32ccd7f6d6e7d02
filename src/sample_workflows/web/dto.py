"""Data Transfer Objects for the workflow web API.

This module defines DTOs for serializing and deserializing workflow data
in REST API requests and responses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any
from uuid import UUID

from sample_workflows.core.types import ConditionOperator, ConditionType, NodeType, RecordStatus, StateStatus
from sample_workflows.core.values import format_display_date, image_fields

if TYPE_CHECKING:
    from sample_workflows.core.models import (
        BranchTarget,
        SampleWorkflowState,
        WorkflowNode,
        WorkflowSettings,
        WorkflowTransition,
    )
    from sample_workflows.engine.service import NodeProgress, SampleProgress

__all__ = [
    "BranchTargetDTO",
    "CreateNodeDTO",
    "CreateTransitionDTO",
    "NodeProgressDTO",
    "SampleProgressDTO",
    "SampleWorkflowStateDTO",
    "SubmitNodeDataDTO",
    "UpdateNodeDTO",
    "UpdateTransitionDTO",
    "ValidationReportDTO",
    "WorkflowConfigDTO",
    "WorkflowNodeDTO",
    "WorkflowSettingsDTO",
    "WorkflowTransitionDTO",
]


@dataclass
class WorkflowNodeDTO:
    """DTO for a workflow node.

    Attributes:
        id: Node ID.
        name: Display name.
        position: Main-path ordering key.
        node_type: Action, decision or end.
        description: Free text description.
        icon: Icon name.
        color: Hex color.
        input_fields: Ordered input definitions.
        template_ids: Associated document templates.
        is_start_node: Marks the first node.
        is_end_node: Marks a terminal node.
        edit_freeze_hours: Per-node freeze window override.
        auto_advance_condition: Opaque condition string.
        status: Active or inactive.
    """

    id: UUID
    name: str
    position: int
    node_type: NodeType
    description: str | None
    icon: str
    color: str
    input_fields: list[dict[str, Any]]
    template_ids: list[str]
    is_start_node: bool
    is_end_node: bool
    edit_freeze_hours: int | None
    auto_advance_condition: str | None
    status: RecordStatus

    @classmethod
    def from_node(cls, node: WorkflowNode) -> WorkflowNodeDTO:
        return cls(
            id=node.id,
            name=node.name,
            position=node.position,
            node_type=node.node_type,
            description=node.description,
            icon=node.icon,
            color=node.color,
            input_fields=[item.to_dict() for item in node.input_fields],
            template_ids=list(node.template_ids),
            is_start_node=node.is_start_node,
            is_end_node=node.is_end_node,
            edit_freeze_hours=node.edit_freeze_hours,
            auto_advance_condition=node.auto_advance_condition,
            status=node.status,
        )


@dataclass
class WorkflowTransitionDTO:
    """DTO for a workflow transition."""

    id: UUID
    from_node_id: UUID
    to_node_id: UUID
    condition_type: ConditionType
    condition_field: str | None
    condition_operator: ConditionOperator | None
    condition_value: str | None
    label: str | None
    display_order: int
    status: RecordStatus

    @classmethod
    def from_transition(cls, transition: WorkflowTransition) -> WorkflowTransitionDTO:
        return cls(
            id=transition.id,
            from_node_id=transition.from_node_id,
            to_node_id=transition.to_node_id,
            condition_type=transition.condition_type,
            condition_field=transition.condition_field,
            condition_operator=transition.condition_operator,
            condition_value=transition.condition_value,
            label=transition.label,
            display_order=transition.display_order,
            status=transition.status,
        )


@dataclass
class WorkflowConfigDTO:
    """DTO for the active workflow configuration."""

    nodes: list[WorkflowNodeDTO]
    transitions: list[WorkflowTransitionDTO]


@dataclass
class WorkflowSettingsDTO:
    """DTO for the global editing settings.

    Attributes:
        node_edit_hours: Default freeze window in hours.
        allow_node_edit: Whether completed nodes may be edited at all.
    """

    node_edit_hours: int = 48
    allow_node_edit: bool = True

    @classmethod
    def from_settings(cls, settings: WorkflowSettings) -> WorkflowSettingsDTO:
        return cls(node_edit_hours=settings.node_edit_hours, allow_node_edit=settings.allow_node_edit)


@dataclass
class SampleWorkflowStateDTO:
    """DTO for a recorded sample state.

    Attributes:
        id: State ID.
        sample_id: The sample.
        current_node_id: The node the state records.
        node_data: Submitted values.
        entered_at: When the state was first created.
        completed_at: When data was last submitted.
        status: Active, completed or skipped.
        image_fields: Keys of node_data whose values are image references.
    """

    id: UUID
    sample_id: UUID
    current_node_id: UUID
    node_data: dict[str, Any]
    entered_at: datetime | None
    completed_at: datetime | None
    status: StateStatus
    image_fields: list[str] = field(default_factory=list)

    @classmethod
    def from_state(cls, state: SampleWorkflowState) -> SampleWorkflowStateDTO:
        return cls(
            id=state.id,
            sample_id=state.sample_id,
            current_node_id=state.current_node_id,
            node_data=dict(state.node_data),
            entered_at=state.entered_at,
            completed_at=state.completed_at,
            status=state.status,
            image_fields=image_fields(state.node_data),
        )


@dataclass
class SubmitNodeDataDTO:
    """DTO for submitting data recorded at a node.

    Attributes:
        node_id: The node the data belongs to.
        node_data: Submitted values. Dates use ``DD-MM-YYYY``.
    """

    node_id: UUID
    node_data: dict[str, Any] | None = None


@dataclass
class BranchTargetDTO:
    """DTO for a branch selected by the lab result.

    Officers record data on branch nodes too, so each target carries the
    sample's state there and whether that data may still be edited.

    Attributes:
        node_id: The branch node.
        name: Node name.
        transition_id: The transition leading to the node.
        label: Transition label shown to officers.
        display_order: Ordering key of the transition.
        completed: Whether data has been submitted for the node.
        editable: Whether recorded data may still be edited.
        lock_reason: Why editing is refused, when it is.
        display_date: Completion date as ``DD-MM-YYYY``.
        state: The recorded state, if any.
    """

    node_id: UUID
    name: str
    transition_id: UUID
    label: str | None
    display_order: int
    completed: bool = False
    editable: bool = True
    lock_reason: str | None = None
    display_date: str | None = None
    state: SampleWorkflowStateDTO | None = None

    @classmethod
    def from_target(cls, target: BranchTarget, progress: NodeProgress | None = None) -> BranchTargetDTO:
        dto = cls(
            node_id=target.node.id,
            name=target.node.name,
            transition_id=target.transition.id,
            label=target.transition.label,
            display_order=target.transition.display_order,
        )
        if progress is not None:
            dto.completed = progress.completed
            dto.editable = progress.editability.editable
            dto.lock_reason = progress.editability.reason
            dto.display_date = format_display_date(progress.display_date)
            if progress.state is not None:
                dto.state = SampleWorkflowStateDTO.from_state(progress.state)
        return dto


@dataclass
class NodeProgressDTO:
    """DTO for a sample's progress at one main-path node.

    Attributes:
        index: Position in the main path.
        node_id: The node.
        name: Node name.
        node_type: Node type.
        completed: Whether the node is completed.
        is_current: Whether the position pointer rests here.
        editable: Whether recorded data may still be edited.
        lock_reason: Why editing is refused, when it is.
        display_date: Completion date as ``DD-MM-YYYY``.
        state: The recorded state, if any.
    """

    index: int
    node_id: UUID
    name: str
    node_type: NodeType
    completed: bool
    is_current: bool
    editable: bool
    lock_reason: str | None = None
    display_date: str | None = None
    state: SampleWorkflowStateDTO | None = None

    @classmethod
    def from_progress(cls, progress: NodeProgress) -> NodeProgressDTO:
        return cls(
            index=progress.index,
            node_id=progress.node.id,
            name=progress.node.name,
            node_type=progress.node.node_type,
            completed=progress.completed,
            is_current=progress.is_current,
            editable=progress.editability.editable,
            lock_reason=progress.editability.reason,
            display_date=format_display_date(progress.display_date),
            state=SampleWorkflowStateDTO.from_state(progress.state) if progress.state is not None else None,
        )


@dataclass
class SampleProgressDTO:
    """DTO for the full workflow progress of a sample.

    Attributes:
        sample_id: The sample.
        current_node_index: Main-path index of the current node, -1 if none.
        current_node_id: The current node, if any.
        completed_nodes: Sorted main-path indices of completed nodes.
        lab_result: The resolved lab result.
        awaiting_branch: Lab report present but no branch applies yet.
        configuration_gap: The lab result matches no configured transition.
        branches: Nodes selected by the lab result.
        nodes: Per-node progress along the main path.
        settings: Editing settings in effect.
    """

    sample_id: UUID
    current_node_index: int
    current_node_id: UUID | None
    completed_nodes: list[int]
    lab_result: str | None
    awaiting_branch: bool
    configuration_gap: bool
    branches: list[BranchTargetDTO]
    nodes: list[NodeProgressDTO]
    settings: WorkflowSettingsDTO

    @classmethod
    def from_progress(cls, progress: SampleProgress) -> SampleProgressDTO:
        current = progress.current_node
        return cls(
            sample_id=progress.sample_id,
            current_node_index=progress.position.current_node_index,
            current_node_id=current.id if current is not None else None,
            completed_nodes=sorted(progress.position.completed_nodes),
            lab_result=progress.branches.lab_result,
            awaiting_branch=progress.branches.awaiting_branch,
            configuration_gap=progress.branches.configuration_gap,
            branches=[
                BranchTargetDTO.from_target(target, branch)
                for target, branch in zip(progress.branches.targets, progress.branch_nodes)
            ],
            nodes=[NodeProgressDTO.from_progress(item) for item in progress.nodes],
            settings=WorkflowSettingsDTO.from_settings(progress.settings),
        )


@dataclass
class CreateNodeDTO:
    """DTO for creating a workflow node."""

    name: str
    position: int = 0
    node_type: NodeType = NodeType.ACTION
    description: str | None = None
    icon: str = "circle"
    color: str = "#1E40AF"
    input_fields: list[dict[str, Any]] = field(default_factory=list)
    template_ids: list[str] = field(default_factory=list)
    is_start_node: bool = False
    is_end_node: bool = False
    edit_freeze_hours: int | None = None
    auto_advance_condition: str | None = None
    status: RecordStatus = RecordStatus.ACTIVE


@dataclass
class UpdateNodeDTO:
    """DTO for updating a workflow node.

    Fields left as None are not changed. Set ``clear_edit_freeze_hours`` to
    drop a node's freeze override and fall back to the global setting.
    """

    name: str | None = None
    position: int | None = None
    node_type: NodeType | None = None
    description: str | None = None
    icon: str | None = None
    color: str | None = None
    input_fields: list[dict[str, Any]] | None = None
    template_ids: list[str] | None = None
    is_start_node: bool | None = None
    is_end_node: bool | None = None
    edit_freeze_hours: int | None = None
    clear_edit_freeze_hours: bool = False
    auto_advance_condition: str | None = None
    status: RecordStatus | None = None

    def changes(self) -> dict[str, Any]:
        """Return the fields to overwrite."""
        values = {
            name: value
            for name, value in vars(self).items()
            if name != "clear_edit_freeze_hours" and value is not None
        }
        if self.clear_edit_freeze_hours:
            values["edit_freeze_hours"] = None
        return values


@dataclass
class CreateTransitionDTO:
    """DTO for creating a workflow transition."""

    from_node_id: UUID
    to_node_id: UUID
    condition_type: ConditionType = ConditionType.ALWAYS
    condition_field: str | None = None
    condition_operator: ConditionOperator | None = None
    condition_value: str | None = None
    label: str | None = None
    display_order: int = 0
    status: RecordStatus = RecordStatus.ACTIVE


@dataclass
class UpdateTransitionDTO:
    """DTO for updating a workflow transition. Fields left as None are not changed."""

    from_node_id: UUID | None = None
    to_node_id: UUID | None = None
    condition_type: ConditionType | None = None
    condition_field: str | None = None
    condition_operator: ConditionOperator | None = None
    condition_value: str | None = None
    label: str | None = None
    display_order: int | None = None
    status: RecordStatus | None = None

    def changes(self) -> dict[str, Any]:
        """Return the fields to overwrite."""
        return {name: value for name, value in vars(self).items() if value is not None}


@dataclass
class ValidationReportDTO:
    """DTO for configuration validation results."""

    valid: bool
    errors: list[str] = field(default_factory=list)
