"""REST API controllers for sample workflows.

This module provides three controller classes:
- WorkflowConfigController: Read the active node graph and settings
- SampleWorkflowController: Record and inspect a sample's progress
- WorkflowAdminController: Administer nodes, transitions and settings
"""

from __future__ import annotations

from typing import ClassVar
from uuid import UUID

from litestar import Controller, delete, get, post, put
from litestar.params import Parameter
from litestar.status_codes import HTTP_200_OK

from sample_workflows.core.models import WorkflowSettings
from sample_workflows.db.store import GraphStore  # noqa: TC001 - needed for DI
from sample_workflows.engine.service import SampleWorkflowService  # noqa: TC001 - needed for DI
from sample_workflows.web.dto import (
    CreateNodeDTO,
    CreateTransitionDTO,
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

__all__ = [
    "SampleWorkflowController",
    "WorkflowAdminController",
    "WorkflowConfigController",
]


class WorkflowConfigController(Controller):
    """API controller for the active workflow configuration.

    Tags: Workflow Configuration
    """

    path = "/workflow"
    tags: ClassVar[list[str]] = ["Workflow Configuration"]

    @get("/nodes")
    async def list_nodes(self, graph_store: GraphStore) -> list[WorkflowNodeDTO]:
        """List active nodes ordered by position."""
        return [WorkflowNodeDTO.from_node(node) for node in await graph_store.list_active_nodes()]

    @get("/transitions")
    async def list_transitions(self, graph_store: GraphStore) -> list[WorkflowTransitionDTO]:
        """List active transitions ordered by display_order."""
        return [
            WorkflowTransitionDTO.from_transition(transition)
            for transition in await graph_store.list_active_transitions()
        ]

    @get("/config")
    async def get_config(self, graph_store: GraphStore) -> WorkflowConfigDTO:
        """Get active nodes and transitions in one response.

        Args:
            graph_store: Injected configuration store.

        Returns:
            The active configuration.
        """
        graph = await graph_store.load_graph()
        return WorkflowConfigDTO(
            nodes=[WorkflowNodeDTO.from_node(node) for node in graph.nodes],
            transitions=[WorkflowTransitionDTO.from_transition(transition) for transition in graph.transitions],
        )

    @get("/settings")
    async def get_settings(self, workflow_service: SampleWorkflowService) -> WorkflowSettingsDTO:
        """Get the editing settings, defaulting to 48 hours with editing allowed."""
        return WorkflowSettingsDTO.from_settings(await workflow_service.get_settings())


class SampleWorkflowController(Controller):
    """API controller for a sample's workflow.

    Tags: Sample Workflow
    """

    path = "/samples"
    tags: ClassVar[list[str]] = ["Sample Workflow"]

    @get("/{sample_id:uuid}/workflow-state")
    async def list_states(
        self,
        sample_id: UUID,
        workflow_service: SampleWorkflowService,
    ) -> list[SampleWorkflowStateDTO]:
        """List every recorded state of a sample ordered by entered_at.

        Args:
            sample_id: The sample ID.
            workflow_service: Injected workflow service.

        Returns:
            Recorded states.
        """
        return [SampleWorkflowStateDTO.from_state(state) for state in await workflow_service.list_states(sample_id)]

    @post("/{sample_id:uuid}/workflow-state", status_code=HTTP_200_OK, dto=None, return_dto=None)
    async def submit_state(
        self,
        sample_id: UUID,
        data: SubmitNodeDataDTO,
        workflow_service: SampleWorkflowService,
    ) -> SampleWorkflowStateDTO:
        """Record data submitted for a node.

        Creates the sample's state for the node on first submission and
        overwrites it afterwards.

        Args:
            sample_id: The sample ID.
            data: The node and its submitted values.
            workflow_service: Injected workflow service.

        Returns:
            The upserted state.

        Raises:
            NodeNotFoundError: If the node does not exist (404).
            NodeLockedError: If the node's data is frozen (423).
        """
        state = await workflow_service.submit(sample_id, data.node_id, data.node_data)
        return SampleWorkflowStateDTO.from_state(state)

    @get("/{sample_id:uuid}/workflow-progress")
    async def get_progress(
        self,
        sample_id: UUID,
        workflow_service: SampleWorkflowService,
    ) -> SampleProgressDTO:
        """Get the sample's position, per-node progress and applicable branches."""
        return SampleProgressDTO.from_progress(await workflow_service.get_progress(sample_id))


class WorkflowAdminController(Controller):
    """API controller for administering the workflow configuration.

    Tags: Workflow Administration
    """

    path = "/admin/workflow"
    tags: ClassVar[list[str]] = ["Workflow Administration"]

    @get("/nodes")
    async def list_nodes(
        self,
        graph_store: GraphStore,
        include_inactive: bool = Parameter(
            default=True,
            description="Include deactivated nodes",
        ),
    ) -> list[WorkflowNodeDTO]:
        """List nodes ordered by position."""
        nodes = await (graph_store.list_nodes() if include_inactive else graph_store.list_active_nodes())
        return [WorkflowNodeDTO.from_node(node) for node in nodes]

    @post("/nodes", dto=None, return_dto=None)
    async def create_node(self, data: CreateNodeDTO, graph_store: GraphStore) -> WorkflowNodeDTO:
        """Create a node.

        Args:
            data: Node definition.
            graph_store: Injected configuration store.

        Returns:
            The created node.
        """
        values = dict(vars(data))
        name = values.pop("name")
        return WorkflowNodeDTO.from_node(await graph_store.create_node(name, **values))

    @put("/nodes/{node_id:uuid}", dto=None, return_dto=None)
    async def update_node(self, node_id: UUID, data: UpdateNodeDTO, graph_store: GraphStore) -> WorkflowNodeDTO:
        """Update a node. Omitted fields keep their values."""
        return WorkflowNodeDTO.from_node(await graph_store.update_node(node_id, **data.changes()))

    @post("/nodes/{node_id:uuid}/deactivate", status_code=HTTP_200_OK)
    async def deactivate_node(self, node_id: UUID, graph_store: GraphStore) -> WorkflowNodeDTO:
        """Deactivate a node, keeping it for recorded history."""
        return WorkflowNodeDTO.from_node(await graph_store.deactivate_node(node_id))

    @delete("/nodes/{node_id:uuid}")
    async def delete_node(self, node_id: UUID, graph_store: GraphStore) -> None:
        """Delete a node and every transition referencing it.

        Raises:
            NodeNotFoundError: If the node does not exist (404).
            NodeInUseError: If sample states reference the node (409).
        """
        await graph_store.delete_node(node_id)

    @get("/transitions")
    async def list_transitions(self, graph_store: GraphStore) -> list[WorkflowTransitionDTO]:
        """List all transitions ordered by display_order."""
        transitions = await graph_store.list_transitions()
        return [WorkflowTransitionDTO.from_transition(transition) for transition in transitions]

    @post("/transitions", dto=None, return_dto=None)
    async def create_transition(self, data: CreateTransitionDTO, graph_store: GraphStore) -> WorkflowTransitionDTO:
        """Create a transition between two existing nodes."""
        values = dict(vars(data))
        transition = await graph_store.create_transition(values.pop("from_node_id"), values.pop("to_node_id"), **values)
        return WorkflowTransitionDTO.from_transition(transition)

    @put("/transitions/{transition_id:uuid}", dto=None, return_dto=None)
    async def update_transition(
        self,
        transition_id: UUID,
        data: UpdateTransitionDTO,
        graph_store: GraphStore,
    ) -> WorkflowTransitionDTO:
        """Update a transition. Omitted fields keep their values."""
        transition = await graph_store.update_transition(transition_id, **data.changes())
        return WorkflowTransitionDTO.from_transition(transition)

    @delete("/transitions/{transition_id:uuid}")
    async def delete_transition(self, transition_id: UUID, graph_store: GraphStore) -> None:
        """Delete a transition."""
        await graph_store.delete_transition(transition_id)

    @put("/settings", dto=None, return_dto=None)
    async def update_settings(
        self,
        data: WorkflowSettingsDTO,
        workflow_service: SampleWorkflowService,
    ) -> WorkflowSettingsDTO:
        """Replace the editing settings."""
        settings = await workflow_service.update_settings(
            WorkflowSettings(node_edit_hours=data.node_edit_hours, allow_node_edit=data.allow_node_edit)
        )
        return WorkflowSettingsDTO.from_settings(settings)

    @get("/validate")
    async def validate(self, workflow_service: SampleWorkflowService) -> ValidationReportDTO:
        """Check the active configuration for dangling or incomplete definitions."""
        errors = await workflow_service.validate()
        return ValidationReportDTO(valid=not errors, errors=errors)
