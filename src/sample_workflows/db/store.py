"""Database-backed store for the workflow configuration.

:class:`GraphStore` owns node and transition definitions. Reads return the
engine's dataclasses in their load-bearing order (nodes by position,
transitions by display_order); writes validate references and keep the graph
free of dangling edges.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import structlog

from sample_workflows.core.models import InputField
from sample_workflows.core.types import ConditionOperator, ConditionType, NodeType, RecordStatus
from sample_workflows.db.models import WorkflowNodeModel, WorkflowTransitionModel
from sample_workflows.db.repositories import (
    SampleWorkflowStateRepository,
    WorkflowNodeRepository,
    WorkflowTransitionRepository,
)
from sample_workflows.engine.graph import WorkflowGraph
from sample_workflows.exceptions import (
    NodeInUseError,
    NodeNotFoundError,
    TransitionNotFoundError,
    WorkflowValidationError,
)

if TYPE_CHECKING:
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession

    from sample_workflows.core.models import WorkflowNode, WorkflowTransition

__all__ = ["GraphStore"]

logger = structlog.get_logger(__name__)

_NODE_FIELDS = frozenset(
    {
        "name",
        "description",
        "position",
        "node_type",
        "icon",
        "color",
        "input_fields",
        "template_ids",
        "is_start_node",
        "is_end_node",
        "edit_freeze_hours",
        "auto_advance_condition",
        "status",
    }
)
_TRANSITION_FIELDS = frozenset(
    {
        "from_node_id",
        "to_node_id",
        "condition_type",
        "condition_field",
        "condition_operator",
        "condition_value",
        "label",
        "display_order",
        "status",
    }
)


def _coerce(enum_cls: type[Any], value: Any, field_name: str) -> Any:
    try:
        return enum_cls(value)
    except ValueError as e:
        raise WorkflowValidationError([f"Invalid {field_name} '{value}'"]) from e


def _normalize_node_values(values: Mapping[str, Any]) -> dict[str, Any]:
    unknown = set(values) - _NODE_FIELDS
    if unknown:
        raise WorkflowValidationError([f"Unknown node field '{name}'" for name in sorted(unknown)])

    normalized = dict(values)
    if "node_type" in normalized:
        normalized["node_type"] = _coerce(NodeType, normalized["node_type"], "node_type")
    if "status" in normalized:
        normalized["status"] = _coerce(RecordStatus, normalized["status"], "status")
    if "input_fields" in normalized:
        try:
            normalized["input_fields"] = [
                item.to_dict() if isinstance(item, InputField) else InputField.from_dict(item).to_dict()
                for item in normalized["input_fields"] or []
            ]
        except (KeyError, ValueError) as e:
            raise WorkflowValidationError([f"Invalid input field definition: {e}"]) from e
    if "template_ids" in normalized:
        normalized["template_ids"] = [str(item) for item in normalized["template_ids"] or []]
    if "name" in normalized and not normalized["name"]:
        raise WorkflowValidationError(["Node name is required"])
    return normalized


def _normalize_transition_values(values: Mapping[str, Any]) -> dict[str, Any]:
    unknown = set(values) - _TRANSITION_FIELDS
    if unknown:
        raise WorkflowValidationError([f"Unknown transition field '{name}'" for name in sorted(unknown)])

    normalized = dict(values)
    if "condition_type" in normalized:
        normalized["condition_type"] = _coerce(
            ConditionType, normalized["condition_type"] or ConditionType.ALWAYS, "condition_type"
        )
    if normalized.get("condition_operator") is not None:
        normalized["condition_operator"] = _coerce(
            ConditionOperator, normalized["condition_operator"], "condition_operator"
        )
    if "status" in normalized:
        normalized["status"] = _coerce(RecordStatus, normalized["status"], "status")
    return normalized


def _check_transition(fields: Mapping[str, Any]) -> None:
    errors = []
    condition_type = fields.get("condition_type") or ConditionType.ALWAYS
    if fields["from_node_id"] == fields["to_node_id"]:
        errors.append("A transition cannot lead from a node to itself")
    if condition_type != ConditionType.ALWAYS and not fields.get("condition_value"):
        errors.append(f"A {condition_type} transition requires a condition value")
    if condition_type == ConditionType.FIELD_VALUE and not fields.get("condition_field"):
        errors.append("A field_value transition requires a condition field")
    if errors:
        raise WorkflowValidationError(errors)


class GraphStore:
    """Read/write access to workflow nodes and transitions.

    Attributes:
        session: SQLAlchemy async session.
        auto_commit: Commit after every write. Disable to batch writes in the
            caller's transaction.
    """

    def __init__(self, session: AsyncSession, *, auto_commit: bool = True) -> None:
        """Initialize the store.

        Args:
            session: SQLAlchemy async session.
            auto_commit: Commit after every write.
        """
        self.session = session
        self.auto_commit = auto_commit

        self._node_repo = WorkflowNodeRepository(session=session)
        self._transition_repo = WorkflowTransitionRepository(session=session)
        self._state_repo = SampleWorkflowStateRepository(session=session)

    async def _finish(self) -> None:
        if self.auto_commit:
            await self.session.commit()
        else:
            await self.session.flush()

    async def _get_node_model(self, node_id: UUID) -> WorkflowNodeModel:
        node = await self._node_repo.get_one_or_none(id=node_id)
        if node is None:
            raise NodeNotFoundError(node_id)
        return node

    async def _get_transition_model(self, transition_id: UUID) -> WorkflowTransitionModel:
        transition = await self._transition_repo.get_one_or_none(id=transition_id)
        if transition is None:
            raise TransitionNotFoundError(transition_id)
        return transition

    # Reads

    async def list_active_nodes(self) -> list[WorkflowNode]:
        """Get active nodes ascending by position."""
        return [model.to_domain() for model in await self._node_repo.list_ordered(active_only=True)]

    async def list_active_transitions(self) -> list[WorkflowTransition]:
        """Get active transitions ascending by display_order."""
        return [model.to_domain() for model in await self._transition_repo.list_ordered(active_only=True)]

    async def list_nodes(self) -> list[WorkflowNode]:
        """Get all nodes, active or not, ascending by position."""
        return [model.to_domain() for model in await self._node_repo.list_ordered(active_only=False)]

    async def list_transitions(self) -> list[WorkflowTransition]:
        """Get all transitions, active or not, ascending by display_order."""
        return [model.to_domain() for model in await self._transition_repo.list_ordered(active_only=False)]

    async def load_graph(self) -> WorkflowGraph:
        """Load a snapshot of the active configuration.

        Returns:
            Graph of active nodes and active transitions.
        """
        return WorkflowGraph(await self.list_active_nodes(), await self.list_active_transitions())

    async def get_node(self, node_id: UUID) -> WorkflowNode:
        """Get a node regardless of status.

        Args:
            node_id: The node ID.

        Returns:
            The node.

        Raises:
            NodeNotFoundError: If no node has this ID.
        """
        return (await self._get_node_model(node_id)).to_domain()

    async def get_transition(self, transition_id: UUID) -> WorkflowTransition:
        """Get a transition regardless of status.

        Raises:
            TransitionNotFoundError: If no transition has this ID.
        """
        return (await self._get_transition_model(transition_id)).to_domain()

    # Node writes

    async def create_node(self, name: str, **values: Any) -> WorkflowNode:
        """Create a node.

        Omitted fields take their defaults: position 0, an action node with
        the ``circle`` icon, color ``#1E40AF``, no inputs or templates, active.

        Args:
            name: Display name.
            **values: Any other node field.

        Returns:
            The created node.

        Raises:
            WorkflowValidationError: If a field is unknown or invalid.
        """
        fields = _normalize_node_values({"name": name, **values})
        model = await self._node_repo.add(WorkflowNodeModel(**fields))
        await self._finish()
        logger.info("workflow_node_created", node_id=str(model.id), name=model.name)
        return model.to_domain()

    async def update_node(self, node_id: UUID, **changes: Any) -> WorkflowNode:
        """Update fields of a node.

        Args:
            node_id: The node ID.
            **changes: Fields to overwrite.

        Returns:
            The updated node.

        Raises:
            NodeNotFoundError: If no node has this ID.
            WorkflowValidationError: If a field is unknown or invalid.
        """
        model = await self._get_node_model(node_id)
        for name, value in _normalize_node_values(changes).items():
            setattr(model, name, value)
        await self._finish()
        logger.info("workflow_node_updated", node_id=str(node_id), fields=sorted(changes))
        return model.to_domain()

    async def deactivate_node(self, node_id: UUID) -> WorkflowNode:
        """Retire a node while keeping it for recorded history."""
        return await self.update_node(node_id, status=RecordStatus.INACTIVE)

    async def delete_node(self, node_id: UUID) -> int:
        """Delete a node together with every transition referencing it.

        Nodes with recorded sample states are kept; deactivate them instead.

        Args:
            node_id: The node ID.

        Returns:
            Number of transitions deleted alongside the node.

        Raises:
            NodeNotFoundError: If no node has this ID.
            NodeInUseError: If sample states reference the node.
        """
        model = await self._get_node_model(node_id)

        state_count = await self._state_repo.count_for_node(node_id)
        if state_count:
            raise NodeInUseError(node_id, state_count)

        transitions = await self._transition_repo.list_for_node(node_id)
        for transition in transitions:
            await self.session.delete(transition)
        await self.session.delete(model)
        await self._finish()

        logger.info("workflow_node_deleted", node_id=str(node_id), transitions_deleted=len(transitions))
        return len(transitions)

    # Transition writes

    async def create_transition(self, from_node_id: UUID, to_node_id: UUID, **values: Any) -> WorkflowTransition:
        """Create a transition between two existing nodes.

        Omitted fields take their defaults: an ``always`` condition,
        display_order 0, active.

        Args:
            from_node_id: Source node.
            to_node_id: Target node.
            **values: Any other transition field.

        Returns:
            The created transition.

        Raises:
            NodeNotFoundError: If either node does not exist.
            WorkflowValidationError: If the transition is invalid.
        """
        await self._get_node_model(from_node_id)
        await self._get_node_model(to_node_id)

        fields = _normalize_transition_values({"from_node_id": from_node_id, "to_node_id": to_node_id, **values})
        fields.setdefault("condition_type", ConditionType.ALWAYS)
        _check_transition(fields)

        model = await self._transition_repo.add(WorkflowTransitionModel(**fields))
        await self._finish()
        logger.info(
            "workflow_transition_created",
            transition_id=str(model.id),
            from_node_id=str(from_node_id),
            to_node_id=str(to_node_id),
        )
        return model.to_domain()

    async def update_transition(self, transition_id: UUID, **changes: Any) -> WorkflowTransition:
        """Update fields of a transition.

        Raises:
            TransitionNotFoundError: If no transition has this ID.
            NodeNotFoundError: If a changed endpoint does not exist.
            WorkflowValidationError: If the result is invalid.
        """
        model = await self._get_transition_model(transition_id)
        normalized = _normalize_transition_values(changes)
        for key in ("from_node_id", "to_node_id"):
            if key in normalized:
                await self._get_node_model(normalized[key])

        current = {name: getattr(model, name) for name in _TRANSITION_FIELDS}
        _check_transition({**current, **normalized})

        for name, value in normalized.items():
            setattr(model, name, value)

        await self._finish()
        logger.info("workflow_transition_updated", transition_id=str(transition_id), fields=sorted(changes))
        return model.to_domain()

    async def delete_transition(self, transition_id: UUID) -> None:
        """Delete a transition.

        Raises:
            TransitionNotFoundError: If no transition has this ID.
        """
        model = await self._get_transition_model(transition_id)
        await self.session.delete(model)
        await self._finish()
        logger.info("workflow_transition_deleted", transition_id=str(transition_id))
