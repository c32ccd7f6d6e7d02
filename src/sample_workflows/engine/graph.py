"""Workflow graph operations and navigation.

This module provides an immutable snapshot of the administrator-defined node
and transition configuration, with the orderings the rest of the engine
relies on: nodes by ``position``, transitions by ``display_order``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from sample_workflows.core.types import ConditionType

if TYPE_CHECKING:
    from uuid import UUID

    from sample_workflows.core.models import WorkflowNode, WorkflowTransition

__all__ = ["DEFAULT_MAIN_PATH_MAX_POSITION", "WorkflowGraph"]

DEFAULT_MAIN_PATH_MAX_POSITION = 2
"""Nodes positioned past this value are not part of the primary timeline."""


class WorkflowGraph:
    """Graph representation of the workflow configuration.

    Nodes are kept sorted ascending by position and transitions ascending by
    display_order. Both sorts are stable, so ties keep the order the store
    returned them in.

    Attributes:
        nodes: Nodes sorted by position.
        transitions: Transitions sorted by display_order.
        _nodes_by_id: Node lookup table.
        _adjacency: Outgoing transitions per node id.
        _reverse_adjacency: Incoming transitions per node id.
    """

    def __init__(
        self,
        nodes: Iterable[WorkflowNode],
        transitions: Iterable[WorkflowTransition],
    ) -> None:
        """Initialize a workflow graph.

        Args:
            nodes: Workflow nodes in any order.
            transitions: Workflow transitions in any order.
        """
        self.nodes: list[WorkflowNode] = sorted(nodes, key=lambda node: node.position)
        self.transitions: list[WorkflowTransition] = sorted(transitions, key=lambda t: t.display_order)
        self._nodes_by_id: dict[UUID, WorkflowNode] = {node.id: node for node in self.nodes}
        self._adjacency: dict[UUID, list[WorkflowTransition]] = {}
        self._reverse_adjacency: dict[UUID, list[WorkflowTransition]] = {}
        self._build_adjacency()

    def _build_adjacency(self) -> None:
        """Build adjacency lists from transitions."""
        for node in self.nodes:
            self._adjacency[node.id] = []
            self._reverse_adjacency[node.id] = []

        # Transitions may reference nodes outside the snapshot (e.g. inactive ones)
        for transition in self.transitions:
            self._adjacency.setdefault(transition.from_node_id, []).append(transition)
            self._reverse_adjacency.setdefault(transition.to_node_id, []).append(transition)

    def get_node(self, node_id: UUID) -> WorkflowNode | None:
        """Look up a node by id.

        Args:
            node_id: The node id.

        Returns:
            The node, or None if it is not part of this snapshot.
        """
        return self._nodes_by_id.get(node_id)

    def main_path(self, max_position: int | None = DEFAULT_MAIN_PATH_MAX_POSITION) -> list[WorkflowNode]:
        """Return the primary timeline of the graph.

        The main path is the position-ordered subsequence of non-terminal
        nodes, bounded to positions at or below ``max_position``.

        Args:
            max_position: Highest position included. ``None`` disables the bound.

        Returns:
            Main path nodes in order.

        Example:
            >>> graph.main_path()
            [WorkflowNode(name='Sample Lifted', ...), WorkflowNode(name='Dispatched', ...)]
        """
        return [
            node
            for node in self.nodes
            if not node.is_terminal and (max_position is None or node.position <= max_position)
        ]

    @property
    def decision_node(self) -> WorkflowNode | None:
        """The first decision node in position order, if any."""
        return next((node for node in self.nodes if node.is_decision), None)

    def outgoing(self, node_id: UUID) -> list[WorkflowTransition]:
        """Return the transitions leaving a node, ordered by display_order."""
        return list(self._adjacency.get(node_id, []))

    def incoming(self, node_id: UUID) -> list[WorkflowTransition]:
        """Return the transitions entering a node, ordered by display_order."""
        return list(self._reverse_adjacency.get(node_id, []))

    def get_next_nodes(self, current: UUID, values: Mapping[str, Any]) -> list[WorkflowNode]:
        """Get the nodes reachable from ``current`` given recorded values.

        Each outgoing transition's guard is evaluated against ``values``.
        Transitions whose target is not in the snapshot are skipped.

        Args:
            current: The node to leave.
            values: Recorded values consulted by transition guards.

        Returns:
            Target nodes ordered by transition display_order.
        """
        next_nodes = []
        for transition in self._adjacency.get(current, []):
            if not transition.evaluate(values):
                continue
            target = self._nodes_by_id.get(transition.to_node_id)
            if target is not None:
                next_nodes.append(target)
        return next_nodes

    def get_previous_nodes(self, current: UUID) -> list[WorkflowNode]:
        """Get the nodes with a transition into ``current``."""
        return [
            self._nodes_by_id[transition.from_node_id]
            for transition in self._reverse_adjacency.get(current, [])
            if transition.from_node_id in self._nodes_by_id
        ]

    def validate(self) -> list[str]:
        """Validate the graph configuration.

        Checks for:
        - Transitions referencing nodes outside the snapshot
        - More than one decision node
        - Decision nodes without any lab result transition
        - Guarded transitions without a condition value

        Returns:
            List of validation error messages. Empty list if valid.
        """
        errors: list[str] = []

        for transition in self.transitions:
            label = transition.label or str(transition.id)
            if transition.from_node_id not in self._nodes_by_id:
                errors.append(f"Transition '{label}': source node '{transition.from_node_id}' not found")
            if transition.to_node_id not in self._nodes_by_id:
                errors.append(f"Transition '{label}': target node '{transition.to_node_id}' not found")
            if transition.condition_type != ConditionType.ALWAYS and not transition.condition_value:
                errors.append(f"Transition '{label}': {transition.condition_type} condition has no value")

        decision_nodes = [node for node in self.nodes if node.is_decision]
        if len(decision_nodes) > 1:
            names = ", ".join(node.name for node in decision_nodes)
            errors.append(f"Multiple decision nodes found ({names}); only '{decision_nodes[0].name}' is used")

        for node in decision_nodes:
            if not any(t.condition_type == ConditionType.LAB_RESULT for t in self._adjacency.get(node.id, [])):
                errors.append(f"Decision node '{node.name}' has no lab result transitions")

        return errors
