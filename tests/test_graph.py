"""Tests for WorkflowGraph navigation and validation."""

from __future__ import annotations

from uuid import uuid4

import pytest

from sample_workflows.core.models import WorkflowNode, WorkflowTransition
from sample_workflows.core.types import ConditionType, NodeType
from sample_workflows.engine.graph import WorkflowGraph


@pytest.mark.unit
class TestGraphOrdering:
    """Tests for node and transition ordering."""

    def test_nodes_sorted_by_position(self, workflow_nodes, workflow_transitions) -> None:
        """Test nodes are sorted by position regardless of input order."""
        graph = WorkflowGraph(list(reversed(workflow_nodes)), workflow_transitions)

        assert [node.position for node in graph.nodes] == [0, 1, 2, 3, 4]

    def test_position_ties_keep_input_order(self) -> None:
        """Test nodes sharing a position keep their given order."""
        first = WorkflowNode(id=uuid4(), name="First", position=1)
        second = WorkflowNode(id=uuid4(), name="Second", position=1)
        start = WorkflowNode(id=uuid4(), name="Start", position=0)

        graph = WorkflowGraph([first, second, start], [])

        assert [node.name for node in graph.nodes] == ["Start", "First", "Second"]

    def test_transitions_sorted_by_display_order(self, workflow_graph, lab_result_node) -> None:
        """Test outgoing transitions follow display_order."""
        outgoing = workflow_graph.outgoing(lab_result_node.id)

        assert [t.display_order for t in outgoing] == [1, 2]
        assert [t.label for t in outgoing] == ["Unsafe", "Safe"]


@pytest.mark.unit
class TestMainPath:
    """Tests for main path selection."""

    def test_main_path_stops_at_position_two(self, workflow_graph) -> None:
        """Test the main path covers positions 0 through 2."""
        assert [node.name for node in workflow_graph.main_path()] == ["Sample Lifted", "Dispatched", "Lab Result"]

    def test_main_path_unbounded_skips_terminal_nodes(self, workflow_graph) -> None:
        """Test an unbounded main path still leaves out end nodes."""
        names = [node.name for node in workflow_graph.main_path(None)]

        assert names == ["Sample Lifted", "Dispatched", "Lab Result", "Unsafe"]

    def test_main_path_empty_graph(self) -> None:
        """Test an empty graph has an empty main path."""
        assert WorkflowGraph([], []).main_path() == []

    def test_decision_node(self, workflow_graph, lab_result_node) -> None:
        """Test the decision node is found."""
        assert workflow_graph.decision_node == lab_result_node

    def test_first_decision_node_wins(self) -> None:
        """Test the lowest-positioned decision node is used."""
        late = WorkflowNode(id=uuid4(), name="Late", position=5, node_type=NodeType.DECISION)
        early = WorkflowNode(id=uuid4(), name="Early", position=2, node_type=NodeType.DECISION)

        assert WorkflowGraph([late, early], []).decision_node is early

    def test_no_decision_node(self, lifted_node) -> None:
        """Test graphs without a decision node report None."""
        assert WorkflowGraph([lifted_node], []).decision_node is None


@pytest.mark.unit
class TestNavigation:
    """Tests for next/previous node lookup."""

    def test_get_next_nodes_unconditional(self, workflow_graph, lifted_node, dispatched_node) -> None:
        """Test unconditional transitions are followed."""
        assert workflow_graph.get_next_nodes(lifted_node.id, {}) == [dispatched_node]

    def test_get_next_nodes_by_lab_result(self, workflow_graph, lab_result_node, safe_node) -> None:
        """Test lab result guards select the matching branch."""
        assert workflow_graph.get_next_nodes(lab_result_node.id, {"labResult": "Safe"}) == [safe_node]
        assert workflow_graph.get_next_nodes(lab_result_node.id, {}) == []

    def test_get_next_nodes_skips_unknown_targets(self, lifted_node) -> None:
        """Test transitions to nodes outside the snapshot are skipped."""
        dangling = WorkflowTransition(id=uuid4(), from_node_id=lifted_node.id, to_node_id=uuid4())

        assert WorkflowGraph([lifted_node], [dangling]).get_next_nodes(lifted_node.id, {}) == []

    def test_get_previous_nodes(self, workflow_graph, lab_result_node, unsafe_node) -> None:
        """Test incoming transitions resolve to their sources."""
        assert workflow_graph.get_previous_nodes(unsafe_node.id) == [lab_result_node]
        assert len(workflow_graph.incoming(unsafe_node.id)) == 1

    def test_get_node(self, workflow_graph, dispatched_node) -> None:
        """Test looking up nodes by id."""
        assert workflow_graph.get_node(dispatched_node.id) is dispatched_node
        assert workflow_graph.get_node(uuid4()) is None


@pytest.mark.unit
class TestGraphValidation:
    """Tests for configuration validation."""

    def test_valid_graph(self, workflow_graph) -> None:
        """Test the standard graph validates cleanly."""
        assert workflow_graph.validate() == []

    def test_dangling_transition(self, lifted_node) -> None:
        """Test transitions to missing nodes are reported."""
        dangling = WorkflowTransition(id=uuid4(), from_node_id=lifted_node.id, to_node_id=uuid4(), label="Broken")

        errors = WorkflowGraph([lifted_node], [dangling]).validate()

        assert len(errors) == 1
        assert "Broken" in errors[0]
        assert "target node" in errors[0]

    def test_guard_without_value(self, lifted_node, dispatched_node) -> None:
        """Test guarded transitions need a value."""
        transition = WorkflowTransition(
            id=uuid4(),
            from_node_id=lifted_node.id,
            to_node_id=dispatched_node.id,
            condition_type=ConditionType.FIELD_VALUE,
            condition_field="seized",
        )

        errors = WorkflowGraph([lifted_node, dispatched_node], [transition]).validate()

        assert any("has no value" in error for error in errors)

    def test_multiple_decision_nodes(self) -> None:
        """Test more than one decision node is reported."""
        first = WorkflowNode(id=uuid4(), name="Result", position=2, node_type=NodeType.DECISION)
        second = WorkflowNode(id=uuid4(), name="Appeal", position=5, node_type=NodeType.DECISION)

        errors = WorkflowGraph([first, second], []).validate()

        assert any("Multiple decision nodes" in error for error in errors)
        assert sum("has no lab result transitions" in error for error in errors) == 2
