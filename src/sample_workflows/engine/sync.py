"""Mirror decision-node data onto the canonical sample record."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from sample_workflows.core.values import parse_display_date
from sample_workflows.engine.branching import LAB_RESULT_KEY
from sample_workflows.exceptions import SampleNotFoundError

if TYPE_CHECKING:
    from uuid import UUID

    from sample_workflows.core.models import WorkflowNode
    from sample_workflows.core.protocols import SampleGateway
    from sample_workflows.core.types import NodeData

__all__ = ["LAB_REPORT_DATE_KEY", "Synchronizer"]

logger = structlog.get_logger(__name__)

LAB_REPORT_DATE_KEY = "labReportDate"


class Synchronizer:
    """Best-effort mirror of a decision node's outcome onto the sample.

    The sample record is owned elsewhere and may not exist in the durable
    store at all, so failures here are logged and never propagated.
    """

    def __init__(self, sample_gateway: SampleGateway) -> None:
        self.sample_gateway = sample_gateway

    @staticmethod
    def collect_updates(node_data: NodeData | None) -> dict[str, Any]:
        """Extract the sample fields to mirror from submitted data.

        Args:
            node_data: The data submitted for the decision node.

        Returns:
            Mapping of sample attribute names to new values. Unparseable
            dates are left out.
        """
        if not node_data:
            return {}

        updates: dict[str, Any] = {}
        lab_result = node_data.get(LAB_RESULT_KEY)
        if lab_result:
            updates["lab_result"] = str(lab_result)

        raw_date = node_data.get(LAB_REPORT_DATE_KEY)
        if raw_date:
            parsed = parse_display_date(raw_date)
            if parsed is None:
                logger.info("sample_date_skipped", field=LAB_REPORT_DATE_KEY, value=raw_date)
            else:
                updates["lab_report_date"] = parsed
        return updates

    async def sync(self, node: WorkflowNode, sample_id: UUID, node_data: NodeData | None) -> dict[str, Any] | None:
        """Mirror the node's data onto the sample if it is a decision node.

        Args:
            node: The node the data was submitted for.
            sample_id: The sample to update.
            node_data: The submitted data.

        Returns:
            The applied updates, or None if nothing was written.
        """
        if not node.is_decision:
            return None

        updates = self.collect_updates(node_data)
        if not updates:
            return None

        try:
            await self.sample_gateway.apply_legacy_updates(sample_id, updates)
        except SampleNotFoundError:
            logger.info("sample_sync_skipped", sample_id=str(sample_id), reason="sample_not_stored")
            return None
        except Exception:  # noqa: BLE001
            logger.warning("sample_sync_failed", sample_id=str(sample_id), node_id=str(node.id), exc_info=True)
            return None

        logger.info("sample_synced", sample_id=str(sample_id), fields=sorted(updates))
        return updates
