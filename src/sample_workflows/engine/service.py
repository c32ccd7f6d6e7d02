"""Workflow service wiring the engine components to a database session.

:class:`SampleWorkflowService` is the entry point used by the web layer. It
builds the read-side progress view of a sample and handles node submissions:
guard, upsert, commit, then a best-effort mirror onto the sample record.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import TYPE_CHECKING

import structlog
from sqlalchemy.exc import SQLAlchemyError

from sample_workflows.core.models import (
    BranchResolution,
    Editability,
    SampleWorkflowState,
    WorkflowNode,
    WorkflowPosition,
    WorkflowSettings,
)
from sample_workflows.db.repositories import (
    SampleRepository,
    SampleWorkflowStateRepository,
    WorkflowSettingsRepository,
)
from sample_workflows.db.store import GraphStore
from sample_workflows.engine.branching import BranchResolver
from sample_workflows.engine.editability import EditabilityGuard
from sample_workflows.engine.graph import DEFAULT_MAIN_PATH_MAX_POSITION
from sample_workflows.engine.position import PositionResolver
from sample_workflows.engine.sync import Synchronizer

if TYPE_CHECKING:
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession

    from sample_workflows.core.protocols import LegacySample, SampleGateway
    from sample_workflows.core.types import NodeData
    from sample_workflows.engine.graph import WorkflowGraph
    from sample_workflows.engine.position import LegacyInferenceStrategy

__all__ = ["NodeProgress", "SampleProgress", "SampleWorkflowService"]

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class NodeProgress:
    """Progress of one sample at one main-path node.

    Attributes:
        index: Position of the node in the main path, or in the branch
            target list for branch nodes.
        node: The node.
        completed: Completed explicitly or by legacy inference.
        is_current: The node the position pointer rests on.
        state: The recorded state, if any.
        editability: Whether the recorded data may still be edited.
        display_date: completed_at of the state, or the matching legacy date.
    """

    index: int
    node: WorkflowNode
    completed: bool
    is_current: bool
    state: SampleWorkflowState | None
    editability: Editability
    display_date: date | datetime | None = None


@dataclass(frozen=True)
class SampleProgress:
    """Everything a client needs to render a sample's workflow.

    ``nodes`` follows the main path. ``branch_nodes`` holds one entry per
    branch target, in the same order as ``branches.targets``, indexed by
    that order.
    """

    sample_id: UUID
    position: WorkflowPosition
    branches: BranchResolution
    settings: WorkflowSettings
    nodes: tuple[NodeProgress, ...] = field(default_factory=tuple)
    branch_nodes: tuple[NodeProgress, ...] = field(default_factory=tuple)

    @property
    def current_node(self) -> WorkflowNode | None:
        """The node the pointer rests on, or None for an empty main path."""
        if self.position.current_node_index < 0:
            return None
        return self.nodes[self.position.current_node_index].node


class SampleWorkflowService:
    """Engine operations over one database session.

    Attributes:
        session: SQLAlchemy async session.
        graph_store: Configuration store.
        state_repository: Per-sample state repository.
        settings_repository: Editing settings repository.
        sample_gateway: Access to the sample record.
    """

    def __init__(
        self,
        session: AsyncSession,
        *,
        sample_gateway: SampleGateway | None = None,
        legacy_inference: LegacyInferenceStrategy | None = None,
        main_path_max_position: int | None = DEFAULT_MAIN_PATH_MAX_POSITION,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            session: SQLAlchemy async session.
            sample_gateway: Sample record access. Defaults to the ``samples`` table.
            legacy_inference: Legacy inference strategy for position resolution.
            main_path_max_position: Highest position on the main path.
            clock: Returns the current time. Defaults to UTC wall-clock time.
        """
        self.session = session
        self.main_path_max_position = main_path_max_position
        self.clock = clock or (lambda: datetime.now(timezone.utc))

        self.graph_store = GraphStore(session, auto_commit=False)
        self.state_repository = SampleWorkflowStateRepository(session=session)
        self.settings_repository = WorkflowSettingsRepository(session=session)
        self.sample_gateway = sample_gateway or SampleRepository(session=session)

        self.position_resolver = PositionResolver(legacy_inference)
        self.branch_resolver = BranchResolver()
        self.editability_guard = EditabilityGuard(clock=self.clock)
        self.synchronizer = Synchronizer(self.sample_gateway)

    async def load_graph(self) -> WorkflowGraph:
        """Load the active configuration."""
        return await self.graph_store.load_graph()

    async def list_states(self, sample_id: UUID) -> list[SampleWorkflowState]:
        """Get every state of a sample ordered by entered_at."""
        return [model.to_domain() for model in await self.state_repository.list_for_sample(sample_id)]

    async def get_settings(self) -> WorkflowSettings:
        """Get the editing settings, defaulting when unset."""
        return await self.settings_repository.get_workflow_settings()

    async def get_progress(self, sample_id: UUID) -> SampleProgress:
        """Build the progress view of a sample.

        Args:
            sample_id: The sample ID.

        Returns:
            Position, per-node progress and branch resolution.
        """
        graph = await self.load_graph()
        states = await self.list_states(sample_id)
        sample = await self.sample_gateway.get_legacy_fields(sample_id)
        settings = await self.get_settings()

        main_path = graph.main_path(self.main_path_max_position)
        position = self.position_resolver.resolve(main_path, sample, states)
        branches = self.branch_resolver.resolve(graph, sample, states)

        states_by_node: dict[UUID, SampleWorkflowState] = {}
        for state in states:
            states_by_node.setdefault(state.current_node_id, state)

        now = self.clock()
        nodes = tuple(
            NodeProgress(
                index=index,
                node=node,
                completed=position.is_completed(index),
                is_current=index == position.current_node_index,
                state=states_by_node.get(node.id),
                editability=self.editability_guard.check(node, states_by_node.get(node.id), settings, now),
                display_date=self._display_date(node, sample, states_by_node.get(node.id)),
            )
            for index, node in enumerate(main_path)
        )
        branch_nodes: list[NodeProgress] = []
        for index, target in enumerate(branches.targets):
            branch_state = states_by_node.get(target.node.id)
            branch_nodes.append(
                NodeProgress(
                    index=index,
                    node=target.node,
                    completed=branch_state is not None and branch_state.is_completed,
                    is_current=False,
                    state=branch_state,
                    editability=self.editability_guard.check(target.node, branch_state, settings, now),
                    display_date=self._display_date(target.node, sample, branch_state),
                )
            )

        if branches.configuration_gap:
            logger.warning(
                "workflow_branch_unconfigured",
                sample_id=str(sample_id),
                lab_result=branches.lab_result,
            )
        elif branches.awaiting_branch:
            logger.debug("workflow_branch_awaiting", sample_id=str(sample_id))

        return SampleProgress(
            sample_id=sample_id,
            position=position,
            branches=branches,
            settings=settings,
            nodes=nodes,
            branch_nodes=tuple(branch_nodes),
        )

    def _display_date(
        self,
        node: WorkflowNode,
        sample: LegacySample | None,
        state: SampleWorkflowState | None,
    ) -> date | datetime | None:
        if state is not None and state.completed_at is not None:
            return state.completed_at
        if sample is None:
            return None
        return self.position_resolver.legacy_inference.legacy_date(node, sample)

    async def submit(self, sample_id: UUID, node_id: UUID, node_data: NodeData | None) -> SampleWorkflowState:
        """Record data submitted for a node.

        The editability guard runs before anything is written. The state write
        is committed before the sample mirror runs, and a failing mirror never
        reverts it.

        Args:
            sample_id: The sample ID.
            node_id: The node ID.
            node_data: Submitted values. Not validated against input_fields.

        Returns:
            The upserted state.

        Raises:
            NodeNotFoundError: If the node does not exist.
            NodeLockedError: If the node's data is frozen.
        """
        node = await self.graph_store.get_node(node_id)
        settings = await self.get_settings()
        existing = await self.state_repository.get_for_node(sample_id, node_id)

        now = self.clock()
        self.editability_guard.ensure_editable(
            node,
            existing.to_domain() if existing is not None else None,
            settings,
            now,
        )

        model = await self.state_repository.upsert(sample_id, node_id, node_data, now=now)
        await self.session.commit()
        state = model.to_domain()

        updates = await self.synchronizer.sync(node, sample_id, node_data)
        if not self.session.is_active:
            # A mirror that failed mid-flush leaves the transaction needing a rollback
            await self.session.rollback()
        elif updates:
            try:
                await self.session.commit()
            except SQLAlchemyError:
                await self.session.rollback()
                logger.warning("sample_sync_failed", sample_id=str(sample_id), node_id=str(node_id), exc_info=True)
        return state

    async def update_settings(self, settings: WorkflowSettings) -> WorkflowSettings:
        """Store new editing settings and commit."""
        stored = await self.settings_repository.save_workflow_settings(settings)
        await self.session.commit()
        return stored

    async def validate(self) -> list[str]:
        """Report issues in the active configuration."""
        return (await self.load_graph()).validate()
