"""Repository implementations for workflow persistence.

This module provides async repositories for the workflow models using
advanced-alchemy's repository pattern.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any
from uuid import UUID

import structlog
from advanced_alchemy.repository import SQLAlchemyAsyncRepository
from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError

from sample_workflows.core.models import DEFAULT_NODE_EDIT_HOURS, WorkflowSettings
from sample_workflows.core.types import RecordStatus, StateStatus
from sample_workflows.db.models import (
    SampleModel,
    SampleWorkflowStateModel,
    SystemSettingModel,
    WorkflowNodeModel,
    WorkflowTransitionModel,
)
from sample_workflows.exceptions import SampleNotFoundError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sample_workflows.core.types import NodeData

__all__ = [
    "SETTINGS_CATEGORY",
    "SampleRepository",
    "SampleWorkflowStateRepository",
    "WorkflowNodeRepository",
    "WorkflowSettingsRepository",
    "WorkflowTransitionRepository",
]

logger = structlog.get_logger(__name__)

SETTINGS_CATEGORY = "workflow"
NODE_EDIT_HOURS_KEY = "workflow_node_edit_hours"
ALLOW_NODE_EDIT_KEY = "workflow_allow_node_edit"


class WorkflowNodeRepository(SQLAlchemyAsyncRepository[WorkflowNodeModel]):
    """Repository for workflow node CRUD operations."""

    model_type = WorkflowNodeModel

    async def list_ordered(self, *, active_only: bool = True) -> Sequence[WorkflowNodeModel]:
        """List nodes ascending by position.

        Args:
            active_only: If True, only return active nodes.

        Returns:
            Nodes ordered by position, then creation time.
        """
        stmt = select(WorkflowNodeModel).order_by(WorkflowNodeModel.position, WorkflowNodeModel.created_at)
        if active_only:
            stmt = stmt.where(WorkflowNodeModel.status == RecordStatus.ACTIVE)
        result = await self.session.execute(stmt)
        return result.scalars().all()


class WorkflowTransitionRepository(SQLAlchemyAsyncRepository[WorkflowTransitionModel]):
    """Repository for workflow transition CRUD operations."""

    model_type = WorkflowTransitionModel

    async def list_ordered(self, *, active_only: bool = True) -> Sequence[WorkflowTransitionModel]:
        """List transitions ascending by display_order.

        Args:
            active_only: If True, only return active transitions.

        Returns:
            Transitions ordered by display_order, then creation time.
        """
        stmt = select(WorkflowTransitionModel).order_by(
            WorkflowTransitionModel.display_order,
            WorkflowTransitionModel.created_at,
        )
        if active_only:
            stmt = stmt.where(WorkflowTransitionModel.status == RecordStatus.ACTIVE)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def list_for_node(self, node_id: UUID) -> Sequence[WorkflowTransitionModel]:
        """List every transition leaving or entering a node.

        Args:
            node_id: The node ID.

        Returns:
            Transitions referencing the node on either end.
        """
        stmt = select(WorkflowTransitionModel).where(
            or_(
                WorkflowTransitionModel.from_node_id == node_id,
                WorkflowTransitionModel.to_node_id == node_id,
            )
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()


class SampleWorkflowStateRepository(SQLAlchemyAsyncRepository[SampleWorkflowStateModel]):
    """Repository for per-sample workflow states.

    The one-row-per-(sample, node) invariant rests entirely on :meth:`upsert`.
    Its read-then-write is not atomic, so two concurrent submissions for the
    same pair can race.
    """

    model_type = SampleWorkflowStateModel

    async def list_for_sample(self, sample_id: UUID) -> Sequence[SampleWorkflowStateModel]:
        """Get all states of a sample.

        Args:
            sample_id: The sample ID.

        Returns:
            States ordered by entered_at ascending.
        """
        stmt = (
            select(SampleWorkflowStateModel)
            .where(SampleWorkflowStateModel.sample_id == sample_id)
            .order_by(SampleWorkflowStateModel.entered_at, SampleWorkflowStateModel.created_at)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def get_for_node(self, sample_id: UUID, node_id: UUID) -> SampleWorkflowStateModel | None:
        """Get the state of a sample at one node.

        Args:
            sample_id: The sample ID.
            node_id: The node ID.

        Returns:
            The earliest matching state, or None.
        """
        stmt = (
            select(SampleWorkflowStateModel)
            .where(
                SampleWorkflowStateModel.sample_id == sample_id,
                SampleWorkflowStateModel.current_node_id == node_id,
            )
            .order_by(SampleWorkflowStateModel.entered_at)
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def count_for_node(self, node_id: UUID) -> int:
        """Count states recorded at a node across all samples."""
        stmt = (
            select(func.count())
            .select_from(SampleWorkflowStateModel)
            .where(SampleWorkflowStateModel.current_node_id == node_id)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def upsert(
        self,
        sample_id: UUID,
        node_id: UUID,
        node_data: NodeData | None,
        *,
        now: datetime | None = None,
    ) -> SampleWorkflowStateModel:
        """Record submitted data for a (sample, node) pair.

        An existing row is updated in place: node_data is overwritten,
        completed_at set to ``now`` and the status set to completed. Otherwise
        a new completed row is inserted with entered_at equal to completed_at.

        Args:
            sample_id: The sample ID.
            node_id: The node ID.
            node_data: The submitted values.
            now: Submission time. Defaults to the current UTC time.

        Returns:
            The inserted or updated state.
        """
        now = now or datetime.now(timezone.utc)
        state = await self.get_for_node(sample_id, node_id)

        if state is None:
            state = await self.add(
                SampleWorkflowStateModel(
                    sample_id=sample_id,
                    current_node_id=node_id,
                    node_data=dict(node_data or {}),
                    entered_at=now,
                    completed_at=now,
                    status=StateStatus.COMPLETED,
                )
            )
            logger.info("workflow_state_created", sample_id=str(sample_id), node_id=str(node_id))
            return state

        state.node_data = dict(node_data or {})
        state.completed_at = now
        state.status = StateStatus.COMPLETED
        await self.session.flush()
        logger.info("workflow_state_updated", sample_id=str(sample_id), node_id=str(node_id))
        return state


class WorkflowSettingsRepository(SQLAlchemyAsyncRepository[SystemSettingModel]):
    """Workflow editing settings stored as system settings.

    Values live under the ``workflow`` category as text and fall back to the
    defaults when unset or unparseable. A stored edit switch other than
    ``true`` disables editing.
    """

    model_type = SystemSettingModel

    async def _get_values(self) -> dict[str, str]:
        stmt = select(SystemSettingModel).where(SystemSettingModel.category == SETTINGS_CATEGORY)
        result = await self.session.execute(stmt)
        return {setting.key: setting.value for setting in result.scalars().all()}

    async def get_workflow_settings(self) -> WorkflowSettings:
        """Read the workflow settings.

        Returns:
            The settings, defaulting to 48 hours and editing allowed.
        """
        try:
            values = await self._get_values()
        except SQLAlchemyError:
            logger.warning("workflow_settings_unreadable", exc_info=True)
            return WorkflowSettings()

        settings = WorkflowSettings()
        raw_hours = values.get(NODE_EDIT_HOURS_KEY)
        if raw_hours is not None:
            try:
                settings.node_edit_hours = int(raw_hours)
            except ValueError:
                logger.warning("workflow_setting_invalid", key=NODE_EDIT_HOURS_KEY, value=raw_hours)
                settings.node_edit_hours = DEFAULT_NODE_EDIT_HOURS

        raw_allow = values.get(ALLOW_NODE_EDIT_KEY)
        if raw_allow is not None:
            settings.allow_node_edit = raw_allow.strip().lower() == "true"
        return settings

    async def save_workflow_settings(self, settings: WorkflowSettings) -> WorkflowSettings:
        """Persist the workflow settings.

        Args:
            settings: The settings to store.

        Returns:
            The stored settings.
        """
        values = {
            NODE_EDIT_HOURS_KEY: (str(settings.node_edit_hours), "Default freeze window in hours"),
            ALLOW_NODE_EDIT_KEY: ("true" if settings.allow_node_edit else "false", "Allow editing completed nodes"),
        }
        for key, (value, description) in values.items():
            existing = await self.get_one_or_none(category=SETTINGS_CATEGORY, key=key)
            if existing is None:
                await self.add(
                    SystemSettingModel(category=SETTINGS_CATEGORY, key=key, value=value, description=description)
                )
            else:
                existing.value = value
        await self.session.flush()
        logger.info(
            "workflow_settings_saved",
            node_edit_hours=settings.node_edit_hours,
            allow_node_edit=settings.allow_node_edit,
        )
        return settings


class SampleRepository(SQLAlchemyAsyncRepository[SampleModel]):
    """Access to the durable sample record.

    Implements :class:`~sample_workflows.core.protocols.SampleGateway`.
    """

    model_type = SampleModel

    async def get_legacy_fields(self, sample_id: UUID) -> SampleModel | None:
        """Get the sample if it is stored."""
        return await self.get_one_or_none(id=sample_id)

    async def apply_legacy_updates(self, sample_id: UUID, updates: dict[str, Any]) -> None:
        """Write mirrored values onto the sample.

        Args:
            sample_id: The sample ID.
            updates: Attribute names and values to set.

        Raises:
            SampleNotFoundError: If the sample is not stored.
        """
        sample = await self.get_one_or_none(id=sample_id)
        if sample is None:
            raise SampleNotFoundError(sample_id)
        for name, value in updates.items():
            setattr(sample, name, value)
        await self.session.flush()
