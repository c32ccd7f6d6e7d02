"""Sample Workflows - configurable lifecycle tracking for regulatory samples.

This package tracks a regulatory sample (for example a food sample) through an
administrator-defined graph of steps instead of a hard-coded sequence.

Key Features:
    - Nodes and guarded transitions edited at runtime
    - Progress inference from recorded states and legacy sample fields
    - Branch selection from the lab result
    - Freeze windows that make submitted data read-only
    - Litestar plugin exposing officer and admin APIs

Example:
    >>> from litestar import Litestar
    >>> from sample_workflows import SampleWorkflowPlugin, SampleWorkflowPluginConfig
    >>>
    >>> app = Litestar(plugins=[SampleWorkflowPlugin(SampleWorkflowPluginConfig())])
"""

from __future__ import annotations

from sample_workflows.__metadata__ import __project__, __version__
from sample_workflows.exceptions import (
    NodeInUseError,
    NodeLockedError,
    NodeNotFoundError,
    SampleNotFoundError,
    TransitionNotFoundError,
    WorkflowsError,
    WorkflowValidationError,
)
from sample_workflows.plugin import SampleWorkflowPlugin, SampleWorkflowPluginConfig

__all__ = (
    "NodeInUseError",
    "NodeLockedError",
    "NodeNotFoundError",
    "SampleNotFoundError",
    "SampleWorkflowPlugin",
    "SampleWorkflowPluginConfig",
    "TransitionNotFoundError",
    "WorkflowValidationError",
    "WorkflowsError",
    "__project__",
    "__version__",
)
