"""Exception handling for workflow web endpoints.

Maps the engine's exception hierarchy onto HTTP responses so controllers can
let domain errors propagate.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
from litestar import Response
from litestar.status_codes import (
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
    HTTP_423_LOCKED,
)

from sample_workflows.exceptions import (
    NodeInUseError,
    NodeLockedError,
    NodeNotFoundError,
    SampleNotFoundError,
    TransitionNotFoundError,
    WorkflowValidationError,
)

if TYPE_CHECKING:  # pragma: no cover
    from litestar import Request

    from sample_workflows.exceptions import WorkflowsError

__all__ = [
    "exception_handlers",
    "node_in_use_handler",
    "node_locked_handler",
    "not_found_handler",
    "validation_error_handler",
]

logger = structlog.get_logger(__name__)


def _error_response(error: str, message: str, status_code: int, **extra: Any) -> Response:
    return Response(
        content={"error": error, "message": message, **extra},
        status_code=status_code,
        media_type="application/json",
    )


def not_found_handler(_request: Request, exc: WorkflowsError) -> Response:
    """Return a 404 response for a missing node, transition or sample."""
    return _error_response("not_found", str(exc), HTTP_404_NOT_FOUND)


def node_locked_handler(request: Request, exc: NodeLockedError) -> Response:
    """Return a 423 response for a write to a frozen node.

    Args:
        request: The Litestar request object.
        exc: The NodeLockedError exception.

    Returns:
        Response carrying the lock reason.
    """
    logger.info("workflow_write_rejected", path=request.url.path, node_id=str(exc.node_id), reason=exc.reason)
    return _error_response("node_locked", exc.reason, HTTP_423_LOCKED, node_id=str(exc.node_id))


def node_in_use_handler(_request: Request, exc: NodeInUseError) -> Response:
    """Return a 409 response when deleting a node that has recorded history."""
    return _error_response("node_in_use", str(exc), HTTP_409_CONFLICT, state_count=exc.state_count)


def validation_error_handler(_request: Request, exc: WorkflowValidationError) -> Response:
    """Return a 400 response listing configuration errors."""
    return _error_response("validation_failed", str(exc), HTTP_400_BAD_REQUEST, errors=exc.errors)


exception_handlers: dict[type[Exception], Any] = {
    NodeNotFoundError: not_found_handler,
    TransitionNotFoundError: not_found_handler,
    SampleNotFoundError: not_found_handler,
    NodeLockedError: node_locked_handler,
    NodeInUseError: node_in_use_handler,
    WorkflowValidationError: validation_error_handler,
}
"""Handlers registered on the application by the plugin."""
