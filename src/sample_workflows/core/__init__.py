"""Core domain module for sample-workflows.

This module exports the enumerations, dataclasses, protocols and value
conventions the engine is built on.
"""

from __future__ import annotations

from sample_workflows.core.models import (
    DEFAULT_NODE_EDIT_HOURS,
    BranchResolution,
    BranchTarget,
    Editability,
    InputField,
    SampleRecord,
    SampleWorkflowState,
    WorkflowNode,
    WorkflowPosition,
    WorkflowSettings,
    WorkflowTransition,
)
from sample_workflows.core.protocols import LegacySample, SampleGateway
from sample_workflows.core.types import (
    ConditionOperator,
    ConditionType,
    InputFieldType,
    NodeData,
    NodeType,
    RecordStatus,
    StateStatus,
)
from sample_workflows.core.values import format_display_date, image_fields, is_image_like, parse_display_date

__all__ = [
    "DEFAULT_NODE_EDIT_HOURS",
    "BranchResolution",
    "BranchTarget",
    "ConditionOperator",
    "ConditionType",
    "Editability",
    "InputField",
    "InputFieldType",
    "LegacySample",
    "NodeData",
    "NodeType",
    "RecordStatus",
    "SampleGateway",
    "SampleRecord",
    "SampleWorkflowState",
    "StateStatus",
    "WorkflowNode",
    "WorkflowPosition",
    "WorkflowSettings",
    "WorkflowTransition",
    "format_display_date",
    "image_fields",
    "is_image_like",
    "parse_display_date",
]
