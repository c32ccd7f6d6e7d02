"""Progress inference for a sample along the main path.

A node counts as completed when the sample has an explicit completed state
for it. Failing that, a :class:`LegacyInferenceStrategy` may infer completion
from the sample's legacy fields, which keeps records captured before per-node
states existed interpretable without a data migration.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from sample_workflows.core.models import WorkflowPosition

if TYPE_CHECKING:
    from datetime import date
    from uuid import UUID

    from sample_workflows.core.models import SampleWorkflowState, WorkflowNode
    from sample_workflows.core.protocols import LegacySample

__all__ = [
    "LegacyInferenceStrategy",
    "NameHeuristicInference",
    "NoLegacyInference",
    "PositionResolver",
]


@runtime_checkable
class LegacyInferenceStrategy(Protocol):
    """Infers node completion from legacy sample fields."""

    def legacy_date(self, node: WorkflowNode, sample: LegacySample) -> date | None:
        """Return the legacy date recording ``node``'s completion, if any."""
        ...

    def infer_completed(self, node: WorkflowNode, sample: LegacySample) -> bool:
        """Return True if the legacy fields show ``node`` as done."""
        ...


class NameHeuristicInference:
    """Match nodes to legacy fields by words in the node name.

    The first matching rule decides:

    ========================== ============================
    node name contains         completed iff
    ========================== ============================
    ``lifted``                 ``lifted_date`` is set
    ``dispatch``               ``dispatch_date`` is set
    ``report`` / ``received``  ``lab_report_date`` is set
    (decision node)            ``lab_report_date`` is set
    ========================== ============================
    """

    @staticmethod
    def legacy_field(node: WorkflowNode) -> str | None:
        """Name of the sample attribute that records ``node``, if any."""
        name = node.name.lower()
        if "lifted" in name:
            return "lifted_date"
        if "dispatch" in name:
            return "dispatch_date"
        if "report" in name or "received" in name:
            return "lab_report_date"
        if node.is_decision:
            return "lab_report_date"
        return None

    def legacy_date(self, node: WorkflowNode, sample: LegacySample) -> date | None:
        field_name = self.legacy_field(node)
        if field_name is None:
            return None
        return getattr(sample, field_name)

    def infer_completed(self, node: WorkflowNode, sample: LegacySample) -> bool:
        return self.legacy_date(node, sample) is not None


class NoLegacyInference:
    """Disable legacy inference once historical data has been migrated."""

    def legacy_date(self, node: WorkflowNode, sample: LegacySample) -> date | None:
        return None

    def infer_completed(self, node: WorkflowNode, sample: LegacySample) -> bool:
        return False


class PositionResolver:
    """Compute the current step and completed steps of a sample.

    Example:
        >>> resolver = PositionResolver()
        >>> position = resolver.resolve(graph.main_path(), sample, states)
        >>> position.current_node_index, sorted(position.completed_nodes)
        (1, [0])
    """

    def __init__(self, legacy_inference: LegacyInferenceStrategy | None = None) -> None:
        """Initialize the resolver.

        Args:
            legacy_inference: Strategy consulted when no explicit completed
                state exists. Defaults to :class:`NameHeuristicInference`.
        """
        self.legacy_inference = legacy_inference if legacy_inference is not None else NameHeuristicInference()

    def is_node_completed(
        self,
        node: WorkflowNode,
        sample: LegacySample | None,
        state: SampleWorkflowState | None,
    ) -> bool:
        """Decide whether a single node is completed for the sample.

        Args:
            node: The node to check.
            sample: Legacy fields of the sample, if known.
            state: The sample's recorded state for the node, if any.

        Returns:
            True if the node is completed explicitly or by legacy inference.
        """
        if state is not None and state.is_completed:
            return True
        if sample is None:
            return False
        return self.legacy_inference.infer_completed(node, sample)

    def resolve(
        self,
        main_path: Sequence[WorkflowNode],
        sample: LegacySample | None,
        states: Iterable[SampleWorkflowState],
    ) -> WorkflowPosition:
        """Resolve the sample's position along the main path.

        The pointer only advances across a contiguous run of completed nodes
        from the start of the path. A node completed out of order is still
        reported in ``completed_nodes`` but cannot pull the pointer past an
        earlier incomplete node. The pointer is clamped to the last index.

        Args:
            main_path: Ordered main path nodes.
            sample: Legacy fields of the sample, if known.
            states: The sample's persisted states.

        Returns:
            The resolved position.
        """
        states_by_node: dict[UUID, SampleWorkflowState] = {}
        for state in states:
            # The first row per node wins, matching lookup order by entered_at
            states_by_node.setdefault(state.current_node_id, state)

        completed: set[int] = set()
        current_node_index = 0

        for index, node in enumerate(main_path):
            if not self.is_node_completed(node, sample, states_by_node.get(node.id)):
                continue
            completed.add(index)
            if index == current_node_index:
                current_node_index = index + 1

        return WorkflowPosition(
            current_node_index=min(current_node_index, len(main_path) - 1),
            completed_nodes=frozenset(completed),
        )
