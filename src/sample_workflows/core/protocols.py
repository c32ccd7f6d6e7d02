"""Protocol definitions for the engine's collaborators.

The engine never reaches for the sample table directly. The sample record is
owned by the host application and only has to satisfy the structural
protocols below, so the database-backed gateway and test doubles are
interchangeable.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from uuid import UUID

__all__ = ["LegacySample", "SampleGateway"]


@runtime_checkable
class LegacySample(Protocol):
    """Legacy progress fields of a sample record.

    Satisfied by :class:`~sample_workflows.core.models.SampleRecord` and by
    :class:`~sample_workflows.db.models.SampleModel`.
    """

    lifted_date: date | None
    dispatch_date: date | None
    lab_report_date: date | None
    lab_result: str | None


class SampleGateway(Protocol):
    """Access to the externally owned sample record."""

    async def get_legacy_fields(self, sample_id: UUID) -> LegacySample | None:
        """Return the sample's legacy fields, or None if it is not stored."""
        ...

    async def apply_legacy_updates(self, sample_id: UUID, updates: dict[str, Any]) -> None:
        """Write mirrored values onto the sample record.

        Raises:
            SampleNotFoundError: If the sample is not stored.
        """
        ...
