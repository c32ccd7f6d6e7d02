"""Freeze-window rule for recorded node data.

Once a node's data has been submitted it stays editable for a configurable
window, after which it becomes read-only evidence.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sample_workflows.core.models import DEFAULT_NODE_EDIT_HOURS, Editability
from sample_workflows.exceptions import NodeLockedError

if TYPE_CHECKING:
    from sample_workflows.core.models import SampleWorkflowState, WorkflowNode, WorkflowSettings

__all__ = [
    "DISABLED_REASON",
    "NEVER_FREEZE",
    "PERMANENT_LOCK_REASON",
    "PERMANENTLY_FROZEN",
    "EditabilityGuard",
    "format_freeze_window",
]

NEVER_FREEZE = 0
PERMANENTLY_FROZEN = -1

DISABLED_REASON = "Node editing is disabled by administrator"
PERMANENT_LOCK_REASON = "This node is locked and cannot be edited after submission."


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def format_freeze_window(hours: int) -> str:
    """Render a freeze window for a lock reason.

    Windows under a day are given in hours, longer ones in rounded days with
    the exact hours alongside.

    Example:
        >>> format_freeze_window(12)
        '12 hours'
        >>> format_freeze_window(48)
        '2 day(s) (48 hours)'
    """
    if hours < 24:
        return f"{hours} hours"
    return f"{_round_half_up(hours / 24)} day(s) ({hours} hours)"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_aware(value: datetime) -> datetime:
    # SQLite drops tzinfo; stored timestamps are always UTC
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


class EditabilityGuard:
    """Decide whether a node's recorded data may still be edited.

    Rules are evaluated in priority order:

    1. Editing disabled globally: locked.
    2. Nothing submitted yet: editable.
    3. The effective window is the node override, else the global setting.
    4. A window of ``0`` never freezes.
    5. A window of ``-1`` freezes immediately.
    6. Otherwise locked once more hours than the window have elapsed.
    """

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        """Initialize the guard.

        Args:
            clock: Returns the current time. Defaults to UTC wall-clock time.
        """
        self.clock = clock or _utcnow

    @staticmethod
    def effective_freeze_hours(node: WorkflowNode, settings: WorkflowSettings) -> int:
        """Return the freeze window that applies to ``node``."""
        if node.edit_freeze_hours is not None:
            return node.edit_freeze_hours
        if settings.node_edit_hours is not None:
            return settings.node_edit_hours
        return DEFAULT_NODE_EDIT_HOURS

    def check(
        self,
        node: WorkflowNode,
        state: SampleWorkflowState | None,
        settings: WorkflowSettings,
        now: datetime | None = None,
    ) -> Editability:
        """Evaluate the freeze rule for one node of one sample.

        Args:
            node: The node being edited.
            state: The sample's latest state for the node, if any.
            settings: Global editing settings.
            now: Evaluation time. Defaults to the guard's clock.

        Returns:
            The editability decision with a reason when locked.
        """
        if not settings.allow_node_edit:
            return Editability(editable=False, reason=DISABLED_REASON)

        if state is None or state.completed_at is None:
            return Editability(editable=True)

        freeze_hours = self.effective_freeze_hours(node, settings)
        if freeze_hours == NEVER_FREEZE:
            return Editability(editable=True)
        if freeze_hours == PERMANENTLY_FROZEN:
            return Editability(editable=False, reason=PERMANENT_LOCK_REASON)

        current = _as_aware(now or self.clock())
        elapsed_hours = (current - _as_aware(state.completed_at)).total_seconds() / 3600
        if elapsed_hours <= freeze_hours:
            return Editability(editable=True)

        return Editability(
            editable=False,
            reason=(
                f"This node was completed {_round_half_up(elapsed_hours)} hours ago. "
                f"Editing is only allowed within {format_freeze_window(freeze_hours)} of completion."
            ),
        )

    def ensure_editable(
        self,
        node: WorkflowNode,
        state: SampleWorkflowState | None,
        settings: WorkflowSettings,
        now: datetime | None = None,
    ) -> None:
        """Raise if the node's data may not be edited.

        Raises:
            NodeLockedError: If :meth:`check` reports the node as locked.
        """
        result = self.check(node, state, settings, now)
        if not result.editable:
            raise NodeLockedError(node.id, result.reason)
