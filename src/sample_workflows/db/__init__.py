"""Database persistence layer for sample-workflows.

This module provides SQLAlchemy models, repositories and the configuration
store backing the workflow engine.
"""

from __future__ import annotations

from sample_workflows.db.models import (
    SampleModel,
    SampleWorkflowStateModel,
    SystemSettingModel,
    WorkflowNodeModel,
    WorkflowTransitionModel,
)
from sample_workflows.db.repositories import (
    SampleRepository,
    SampleWorkflowStateRepository,
    WorkflowNodeRepository,
    WorkflowSettingsRepository,
    WorkflowTransitionRepository,
)
from sample_workflows.db.store import GraphStore

__all__ = [
    "GraphStore",
    "SampleModel",
    "SampleRepository",
    "SampleWorkflowStateModel",
    "SampleWorkflowStateRepository",
    "SystemSettingModel",
    "WorkflowNodeModel",
    "WorkflowNodeRepository",
    "WorkflowSettingsRepository",
    "WorkflowTransitionModel",
    "WorkflowTransitionRepository",
]
