"""Tests for exception hierarchy and HTTP error mapping."""

from __future__ import annotations

from unittest.mock import Mock
from uuid import uuid4

import pytest
from litestar.status_codes import HTTP_400_BAD_REQUEST, HTTP_404_NOT_FOUND, HTTP_409_CONFLICT, HTTP_423_LOCKED

from sample_workflows.exceptions import (
    NodeInUseError,
    NodeLockedError,
    NodeNotFoundError,
    SampleNotFoundError,
    TransitionNotFoundError,
    WorkflowsError,
    WorkflowValidationError,
)


@pytest.mark.unit
class TestWorkflowsError:
    """Tests for base WorkflowsError exception."""

    def test_base_exception_creation(self) -> None:
        """Test creating base WorkflowsError."""
        error = WorkflowsError("Test error message")

        assert str(error) == "Test error message"
        assert isinstance(error, Exception)

    @pytest.mark.parametrize(
        "exc_type",
        [
            NodeNotFoundError,
            TransitionNotFoundError,
            SampleNotFoundError,
            NodeLockedError,
            NodeInUseError,
            WorkflowValidationError,
        ],
    )
    def test_all_errors_inherit_from_base(self, exc_type: type[Exception]) -> None:
        """Test every error can be caught as WorkflowsError."""
        assert issubclass(exc_type, WorkflowsError)


@pytest.mark.unit
class TestSpecificErrors:
    """Tests for the attributes and messages of each error."""

    def test_node_not_found(self) -> None:
        """Test NodeNotFoundError carries the node id."""
        node_id = uuid4()
        error = NodeNotFoundError(node_id)

        assert error.node_id == node_id
        assert str(error) == f"Workflow node '{node_id}' not found"

    def test_transition_not_found(self) -> None:
        """Test TransitionNotFoundError carries the transition id."""
        error = TransitionNotFoundError("t-1")

        assert error.transition_id == "t-1"
        assert "t-1" in str(error)

    def test_sample_not_found(self) -> None:
        """Test SampleNotFoundError carries the sample id."""
        assert SampleNotFoundError("s-1").sample_id == "s-1"

    def test_node_locked_default_reason(self) -> None:
        """Test NodeLockedError falls back to a generic reason."""
        error = NodeLockedError("n-1")

        assert error.reason == "This node cannot be edited."
        assert "locked" in str(error)

    def test_node_locked_reason(self) -> None:
        """Test NodeLockedError keeps the given reason."""
        assert NodeLockedError("n-1", "Too late").reason == "Too late"

    def test_node_in_use(self) -> None:
        """Test NodeInUseError reports the state count."""
        error = NodeInUseError("n-1", 3)

        assert error.state_count == 3
        assert "3 sample state(s)" in str(error)
        assert "deactivate" in str(error)

    def test_validation_error(self) -> None:
        """Test WorkflowValidationError joins its messages."""
        error = WorkflowValidationError(["first", "second"])

        assert error.errors == ["first", "second"]
        assert str(error) == "Workflow validation failed: first; second"


@pytest.mark.unit
class TestExceptionHandlers:
    """Tests for the web exception handlers."""

    def test_not_found_handler(self) -> None:
        """Test not-found errors map to 404."""
        from sample_workflows.web.exceptions import not_found_handler

        response = not_found_handler(Mock(), NodeNotFoundError("n-1"))

        assert response.status_code == HTTP_404_NOT_FOUND
        assert response.content["error"] == "not_found"

    def test_node_locked_handler(self) -> None:
        """Test locked writes map to 423 with the reason as message."""
        from sample_workflows.web.exceptions import node_locked_handler

        request = Mock()
        request.url.path = "/api/samples/x/workflow-state"
        response = node_locked_handler(request, NodeLockedError("n-1", "Too late"))

        assert response.status_code == HTTP_423_LOCKED
        assert response.content == {"error": "node_locked", "message": "Too late", "node_id": "n-1"}

    def test_node_in_use_handler(self) -> None:
        """Test deleting a node in use maps to 409."""
        from sample_workflows.web.exceptions import node_in_use_handler

        response = node_in_use_handler(Mock(), NodeInUseError("n-1", 2))

        assert response.status_code == HTTP_409_CONFLICT
        assert response.content["state_count"] == 2

    def test_validation_error_handler(self) -> None:
        """Test validation errors map to 400 with the error list."""
        from sample_workflows.web.exceptions import validation_error_handler

        response = validation_error_handler(Mock(), WorkflowValidationError(["bad"]))

        assert response.status_code == HTTP_400_BAD_REQUEST
        assert response.content["errors"] == ["bad"]
