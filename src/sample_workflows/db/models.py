"""SQLAlchemy models for workflow persistence.

This module defines the database models:
- WorkflowNodeModel: Administrator-defined workflow steps
- WorkflowTransitionModel: Guarded edges between steps
- SampleWorkflowStateModel: One recorded state per (sample, node)
- SystemSettingModel: Key/value runtime settings
- SampleModel: Legacy progress fields of the externally owned sample record
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any
from uuid import UUID

from advanced_alchemy.base import UUIDAuditBase
from advanced_alchemy.types import GUID, DateTimeUTC
from sqlalchemy import JSON, Boolean, Date, Enum, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from sample_workflows.core.models import (
    InputField,
    SampleRecord,
    SampleWorkflowState,
    WorkflowNode,
    WorkflowTransition,
)
from sample_workflows.core.types import (
    ConditionOperator,
    ConditionType,
    NodeType,
    RecordStatus,
    StateStatus,
)

__all__ = [
    "JSONType",
    "SampleModel",
    "SampleWorkflowStateModel",
    "SystemSettingModel",
    "WorkflowNodeModel",
    "WorkflowTransitionModel",
]


# Cross-database JSON type: uses JSONB for PostgreSQL, JSON for others (SQLite, MySQL, etc.)
JSONType = JSON().with_variant(JSONB, "postgresql")


def _enum_column(enum_cls: type) -> Enum:
    # Persist the lowercase values rather than member names
    return Enum(
        enum_cls,
        native_enum=False,
        length=50,
        values_callable=lambda members: [member.value for member in members],
    )


class WorkflowNodeModel(UUIDAuditBase):
    """Persisted workflow node.

    Attributes:
        name: Display name.
        description: Free text description.
        position: Main-path ordering key.
        node_type: Action, decision or end.
        icon: Icon name used by clients.
        color: Hex color used by clients.
        input_fields: Ordered input definitions as JSON.
        template_ids: Associated document template ids.
        is_start_node: Marks the first node.
        is_end_node: Marks a terminal node.
        edit_freeze_hours: Per-node freeze window override.
        auto_advance_condition: Opaque, stored only.
        status: Active or inactive.
    """

    __tablename__ = "workflow_nodes"
    __table_args__ = (Index("ix_workflow_nodes_status_position", "status", "position"),)

    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    position: Mapped[int] = mapped_column(Integer, default=0)
    node_type: Mapped[NodeType] = mapped_column(_enum_column(NodeType), default=NodeType.ACTION)
    icon: Mapped[str] = mapped_column(String(100), default="circle")
    color: Mapped[str] = mapped_column(String(20), default="#1E40AF")
    input_fields: Mapped[list[dict[str, Any]]] = mapped_column(JSONType, default=list)
    template_ids: Mapped[list[str]] = mapped_column(JSONType, default=list)
    is_start_node: Mapped[bool] = mapped_column(Boolean, default=False)
    is_end_node: Mapped[bool] = mapped_column(Boolean, default=False)
    edit_freeze_hours: Mapped[int | None] = mapped_column(Integer, nullable=True)
    auto_advance_condition: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[RecordStatus] = mapped_column(_enum_column(RecordStatus), default=RecordStatus.ACTIVE)

    def to_domain(self) -> WorkflowNode:
        """Convert to the engine's :class:`WorkflowNode`."""
        return WorkflowNode(
            id=self.id,
            name=self.name,
            position=self.position,
            node_type=self.node_type,
            description=self.description,
            icon=self.icon,
            color=self.color,
            input_fields=[InputField.from_dict(item) for item in self.input_fields or []],
            template_ids=list(self.template_ids or []),
            is_start_node=self.is_start_node,
            is_end_node=self.is_end_node,
            edit_freeze_hours=self.edit_freeze_hours,
            auto_advance_condition=self.auto_advance_condition,
            status=self.status,
        )


class WorkflowTransitionModel(UUIDAuditBase):
    """Persisted transition between two workflow nodes.

    Node ids are not foreign keys; deleting a node removes its transitions
    through :meth:`GraphStore.delete_node`.
    """

    __tablename__ = "workflow_transitions"
    __table_args__ = (
        Index("ix_workflow_transitions_from_node_id", "from_node_id"),
        Index("ix_workflow_transitions_to_node_id", "to_node_id"),
    )

    from_node_id: Mapped[UUID] = mapped_column(GUID)
    to_node_id: Mapped[UUID] = mapped_column(GUID)
    condition_type: Mapped[ConditionType] = mapped_column(
        _enum_column(ConditionType),
        default=ConditionType.ALWAYS,
    )
    condition_field: Mapped[str | None] = mapped_column(String(255), nullable=True)
    condition_operator: Mapped[ConditionOperator | None] = mapped_column(
        _enum_column(ConditionOperator),
        nullable=True,
    )
    condition_value: Mapped[str | None] = mapped_column(String(255), nullable=True)
    label: Mapped[str | None] = mapped_column(String(255), nullable=True)
    display_order: Mapped[int] = mapped_column(Integer, default=0)
    status: Mapped[RecordStatus] = mapped_column(_enum_column(RecordStatus), default=RecordStatus.ACTIVE)

    def to_domain(self) -> WorkflowTransition:
        """Convert to the engine's :class:`WorkflowTransition`."""
        return WorkflowTransition(
            id=self.id,
            from_node_id=self.from_node_id,
            to_node_id=self.to_node_id,
            condition_type=self.condition_type,
            condition_field=self.condition_field,
            condition_operator=self.condition_operator,
            condition_value=self.condition_value,
            label=self.label,
            display_order=self.display_order,
            status=self.status,
        )


class SampleWorkflowStateModel(UUIDAuditBase):
    """Recorded state of one sample at one node.

    At most one row exists per (sample_id, current_node_id). The repository's
    upsert maintains this; the index below is not unique.

    Attributes:
        sample_id: The sample, owned by another system.
        current_node_id: The node this row records.
        node_data: Submitted values.
        entered_at: When the row was first created.
        completed_at: When data was last submitted.
        status: Active, completed or skipped.
    """

    __tablename__ = "sample_workflow_states"
    __table_args__ = (Index("ix_sample_workflow_states_sample_node", "sample_id", "current_node_id"),)

    sample_id: Mapped[UUID] = mapped_column(GUID, index=True)
    current_node_id: Mapped[UUID] = mapped_column(GUID)
    node_data: Mapped[dict[str, Any]] = mapped_column(JSONType, default=dict)
    entered_at: Mapped[datetime] = mapped_column(DateTimeUTC(timezone=True))
    completed_at: Mapped[datetime | None] = mapped_column(DateTimeUTC(timezone=True), nullable=True)
    status: Mapped[StateStatus] = mapped_column(_enum_column(StateStatus), default=StateStatus.ACTIVE)

    def to_domain(self) -> SampleWorkflowState:
        """Convert to the engine's :class:`SampleWorkflowState`."""
        return SampleWorkflowState(
            id=self.id,
            sample_id=self.sample_id,
            current_node_id=self.current_node_id,
            node_data=dict(self.node_data or {}),
            entered_at=self.entered_at,
            completed_at=self.completed_at,
            status=self.status,
        )


class SystemSettingModel(UUIDAuditBase):
    """Key/value runtime setting grouped by category."""

    __tablename__ = "system_settings"
    __table_args__ = (Index("ix_system_settings_category_key", "category", "key", unique=True),)

    category: Mapped[str] = mapped_column(String(100))
    key: Mapped[str] = mapped_column(String(255))
    value: Mapped[str] = mapped_column(Text)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)


class SampleModel(UUIDAuditBase):
    """The durable sample record, reduced to the fields workflows touch.

    Satisfies the :class:`~sample_workflows.core.protocols.LegacySample`
    protocol directly.
    """

    __tablename__ = "samples"

    code: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    lifted_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    dispatch_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    lab_report_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    lab_result: Mapped[str | None] = mapped_column(String(50), nullable=True)

    def to_domain(self) -> SampleRecord:
        """Convert to a detached :class:`SampleRecord`."""
        return SampleRecord(
            sample_id=self.id,
            lifted_date=self.lifted_date,
            dispatch_date=self.dispatch_date,
            lab_report_date=self.lab_report_date,
            lab_result=self.lab_result,
        )
