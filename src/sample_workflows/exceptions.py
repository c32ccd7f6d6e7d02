"""Exception hierarchy for sample-workflows."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uuid import UUID

__all__ = (
    "NodeInUseError",
    "NodeLockedError",
    "NodeNotFoundError",
    "SampleNotFoundError",
    "TransitionNotFoundError",
    "WorkflowValidationError",
    "WorkflowsError",
)


class WorkflowsError(Exception):
    """Base exception for all sample-workflows errors.

    All exceptions raised by sample-workflows inherit from this class so
    callers can catch every workflow-related error with a single except clause.
    """


class NodeNotFoundError(WorkflowsError):
    """Raised when a referenced workflow node does not exist.

    Attributes:
        node_id: The ID of the node that was not found.
    """

    def __init__(self, node_id: str | UUID) -> None:
        """Initialize the exception with node details.

        Args:
            node_id: The ID of the node that was not found.
        """
        self.node_id = node_id
        super().__init__(f"Workflow node '{node_id}' not found")


class TransitionNotFoundError(WorkflowsError):
    """Raised when a referenced workflow transition does not exist.

    Attributes:
        transition_id: The ID of the transition that was not found.
    """

    def __init__(self, transition_id: str | UUID) -> None:
        """Initialize the exception with transition details.

        Args:
            transition_id: The ID of the transition that was not found.
        """
        self.transition_id = transition_id
        super().__init__(f"Workflow transition '{transition_id}' not found")


class SampleNotFoundError(WorkflowsError):
    """Raised when the sample record is not present in the durable store.

    Samples can exist only in a client-local cache, so this error is expected
    when mirroring decision data and is never fatal there.

    Attributes:
        sample_id: The ID of the sample that was not found.
    """

    def __init__(self, sample_id: str | UUID) -> None:
        """Initialize the exception with sample details.

        Args:
            sample_id: The ID of the sample that was not found.
        """
        self.sample_id = sample_id
        super().__init__(f"Sample '{sample_id}' not found")


class NodeLockedError(WorkflowsError):
    """Raised when a write targets a node whose data is frozen.

    The check happens before anything reaches the state repository, so a
    rejected write leaves no partial state behind.

    Attributes:
        node_id: The ID of the locked node.
        reason: Human-readable explanation of the lock.
    """

    def __init__(self, node_id: str | UUID, reason: str | None = None) -> None:
        """Initialize the exception with lock details.

        Args:
            node_id: The ID of the locked node.
            reason: Human-readable explanation of the lock.
        """
        self.node_id = node_id
        self.reason = reason or "This node cannot be edited."
        super().__init__(f"Workflow node '{node_id}' is locked: {self.reason}")


class NodeInUseError(WorkflowsError):
    """Raised when deleting a node that recorded sample history refers to.

    Such nodes must be deactivated instead.

    Attributes:
        node_id: The ID of the node.
        state_count: Number of state rows referencing the node.
    """

    def __init__(self, node_id: str | UUID, state_count: int) -> None:
        """Initialize the exception with usage details.

        Args:
            node_id: The ID of the node.
            state_count: Number of state rows referencing the node.
        """
        self.node_id = node_id
        self.state_count = state_count
        super().__init__(
            f"Workflow node '{node_id}' is referenced by {state_count} sample state(s); deactivate it instead"
        )


class WorkflowValidationError(WorkflowsError):
    """Raised when workflow configuration validation fails.

    Attributes:
        errors: List of validation error messages.
    """

    def __init__(self, errors: list[str]) -> None:
        """Initialize the exception with validation errors.

        Args:
            errors: List of validation error messages.
        """
        self.errors = errors
        super().__init__(f"Workflow validation failed: {'; '.join(errors)}")
