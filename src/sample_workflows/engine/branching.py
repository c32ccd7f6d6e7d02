"""Branch selection after the decision node."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from sample_workflows.core.models import BranchResolution, BranchTarget

if TYPE_CHECKING:
    from sample_workflows.core.models import SampleWorkflowState, WorkflowNode
    from sample_workflows.core.protocols import LegacySample
    from sample_workflows.engine.graph import WorkflowGraph

__all__ = ["LAB_RESULT_KEY", "BranchResolver"]

LAB_RESULT_KEY = "labResult"
"""node_data key under which the decision node records the lab result."""


class BranchResolver:
    """Select the downstream nodes that apply for a sample's lab result.

    The decision node is the first decision-type node in position order. Its
    lab result comes from the sample record, falling back to the decision
    node's own recorded data.
    """

    def resolve_lab_result(
        self,
        decision_node: WorkflowNode,
        sample: LegacySample | None,
        states: Iterable[SampleWorkflowState],
    ) -> str | None:
        """Resolve the lab result for a sample.

        Args:
            decision_node: The graph's decision node.
            sample: Legacy fields of the sample, if known.
            states: The sample's persisted states.

        Returns:
            The lab result, or None if neither source has one.
        """
        if sample is not None and sample.lab_result:
            return sample.lab_result

        state = next((s for s in states if s.current_node_id == decision_node.id), None)
        if state is None or not state.node_data:
            return None
        value = state.node_data.get(LAB_RESULT_KEY)
        return str(value) if value else None

    def resolve_branches(
        self,
        graph: WorkflowGraph,
        sample: LegacySample | None,
        states: Iterable[SampleWorkflowState],
    ) -> list[BranchTarget]:
        """Return the branch targets for the sample's lab result.

        Returns an empty list when the graph has no decision node or when no
        lab result can be resolved.
        """
        return list(self.resolve(graph, sample, states).targets)

    def resolve(
        self,
        graph: WorkflowGraph,
        sample: LegacySample | None,
        states: Iterable[SampleWorkflowState],
    ) -> BranchResolution:
        """Resolve branch targets along with the awaiting-determination flag.

        Args:
            graph: The active workflow graph.
            sample: Legacy fields of the sample, if known.
            states: The sample's persisted states.

        Returns:
            The branch resolution. ``awaiting_branch`` is set when a lab report
            exists but no branch applies yet. ``configuration_gap`` is set when
            a known lab result matches none of the decision node's transitions.
        """
        decision_node = graph.decision_node
        if decision_node is None:
            return BranchResolution(decision_node=None, lab_result=None)

        states = list(states)
        lab_result = self.resolve_lab_result(decision_node, sample, states)
        outgoing = graph.outgoing(decision_node.id)

        targets = []
        for transition in sorted(outgoing, key=lambda t: t.display_order):
            if not transition.matches_lab_result(lab_result):
                continue
            node = graph.get_node(transition.to_node_id)
            if node is None:
                continue
            targets.append(BranchTarget(node=node, transition=transition))

        # A lab report with nothing to branch on is shown as awaiting, whether the
        # outcome is unknown or matches no configured transition
        reported = sample is not None and sample.lab_report_date is not None
        unbranched = not targets and bool(outgoing)
        return BranchResolution(
            decision_node=decision_node,
            lab_result=lab_result,
            targets=tuple(targets),
            awaiting_branch=unbranched and reported,
            configuration_gap=unbranched and lab_result is not None,
        )
