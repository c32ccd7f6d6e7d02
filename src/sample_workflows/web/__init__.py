"""Web layer for sample-workflows.

This module provides the REST API controllers, DTOs and exception handlers.
The API is mounted automatically by
:class:`~sample_workflows.plugin.SampleWorkflowPlugin`.

Example:
    Guard the admin API while leaving the officer API open::

        from litestar import Litestar
        from sample_workflows import SampleWorkflowPlugin, SampleWorkflowPluginConfig

        config = SampleWorkflowPluginConfig(
            api_path_prefix="/api",
            admin_guards=[require_admin_guard],
        )

        app = Litestar(plugins=[alchemy_plugin, SampleWorkflowPlugin(config=config)])

    Disable the admin API::

        SampleWorkflowPlugin(config=SampleWorkflowPluginConfig(enable_admin_api=False))
"""

from __future__ import annotations

from sample_workflows.web.controllers import (
    SampleWorkflowController,
    WorkflowAdminController,
    WorkflowConfigController,
)
from sample_workflows.web.dto import (
    BranchTargetDTO,
    CreateNodeDTO,
    CreateTransitionDTO,
    NodeProgressDTO,
    SampleProgressDTO,
    SampleWorkflowStateDTO,
    SubmitNodeDataDTO,
    UpdateNodeDTO,
    UpdateTransitionDTO,
    ValidationReportDTO,
    WorkflowConfigDTO,
    WorkflowNodeDTO,
    WorkflowSettingsDTO,
    WorkflowTransitionDTO,
)
from sample_workflows.web.exceptions import exception_handlers

__all__ = [
    "BranchTargetDTO",
    "CreateNodeDTO",
    "CreateTransitionDTO",
    "NodeProgressDTO",
    "SampleProgressDTO",
    "SampleWorkflowController",
    "SampleWorkflowStateDTO",
    "SubmitNodeDataDTO",
    "UpdateNodeDTO",
    "UpdateTransitionDTO",
    "ValidationReportDTO",
    "WorkflowAdminController",
    "WorkflowConfigController",
    "WorkflowConfigDTO",
    "WorkflowNodeDTO",
    "WorkflowSettingsDTO",
    "WorkflowTransitionDTO",
    "exception_handlers",
]
