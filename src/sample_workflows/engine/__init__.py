"""Workflow engine components.

The resolvers and the editability guard are pure functions of their inputs.
The database-bound :class:`~sample_workflows.engine.service.SampleWorkflowService`
lives in :mod:`sample_workflows.engine.service`.
"""

from __future__ import annotations

from sample_workflows.engine.branching import BranchResolver
from sample_workflows.engine.editability import EditabilityGuard
from sample_workflows.engine.graph import WorkflowGraph
from sample_workflows.engine.position import (
    LegacyInferenceStrategy,
    NameHeuristicInference,
    NoLegacyInference,
    PositionResolver,
)
from sample_workflows.engine.sync import Synchronizer

__all__ = [
    "BranchResolver",
    "EditabilityGuard",
    "LegacyInferenceStrategy",
    "NameHeuristicInference",
    "NoLegacyInference",
    "PositionResolver",
    "Synchronizer",
    "WorkflowGraph",
]
