"""Tests for the decision-node Synchronizer."""

from __future__ import annotations

from datetime import date
from typing import Any
from uuid import UUID, uuid4

import pytest
from structlog.testing import capture_logs

from sample_workflows.core.models import SampleRecord
from sample_workflows.engine.sync import Synchronizer
from sample_workflows.exceptions import SampleNotFoundError


class FakeSampleGateway:
    """In-memory sample gateway."""

    def __init__(self, samples: dict[UUID, SampleRecord] | None = None, error: Exception | None = None) -> None:
        self.samples = samples or {}
        self.error = error
        self.calls: list[tuple[UUID, dict[str, Any]]] = []

    async def get_legacy_fields(self, sample_id: UUID) -> SampleRecord | None:
        return self.samples.get(sample_id)

    async def apply_legacy_updates(self, sample_id: UUID, updates: dict[str, Any]) -> None:
        self.calls.append((sample_id, updates))
        if self.error is not None:
            raise self.error
        sample = self.samples.get(sample_id)
        if sample is None:
            raise SampleNotFoundError(sample_id)
        for name, value in updates.items():
            setattr(sample, name, value)


@pytest.mark.unit
class TestCollectUpdates:
    """Tests for extracting mirrored fields."""

    def test_lab_result_and_date(self) -> None:
        """Test both mirrored fields are extracted."""
        updates = Synchronizer.collect_updates({"labResult": "unsafe", "labReportDate": "15-03-2024", "note": "x"})

        assert updates == {"lab_result": "unsafe", "lab_report_date": date(2024, 3, 15)}

    def test_invalid_date_skipped(self) -> None:
        """Test an unparseable date is left out and logged."""
        with capture_logs() as logs:
            updates = Synchronizer.collect_updates({"labResult": "safe", "labReportDate": "2024-03-15"})

        assert updates == {"lab_result": "safe"}
        assert any(log["event"] == "sample_date_skipped" for log in logs)

    def test_empty_data(self) -> None:
        """Test empty data yields no updates."""
        assert Synchronizer.collect_updates(None) == {}
        assert Synchronizer.collect_updates({}) == {}
        assert Synchronizer.collect_updates({"labResult": ""}) == {}


@pytest.mark.unit
@pytest.mark.asyncio
class TestSynchronizer:
    """Tests for Synchronizer.sync."""

    async def test_decision_node_mirrored(self, lab_result_node, sample_id) -> None:
        """Test decision data lands on the sample record."""
        sample = SampleRecord(sample_id=sample_id)
        gateway = FakeSampleGateway({sample_id: sample})

        with capture_logs() as logs:
            updates = await Synchronizer(gateway).sync(
                lab_result_node, sample_id, {"labResult": "unsafe", "labReportDate": "15-03-2024"}
            )

        assert updates == {"lab_result": "unsafe", "lab_report_date": date(2024, 3, 15)}
        assert sample.lab_result == "unsafe"
        assert sample.lab_report_date == date(2024, 3, 15)
        assert [log["event"] for log in logs] == ["sample_synced"]

    async def test_non_decision_node_ignored(self, dispatched_node, sample_id) -> None:
        """Test data for action nodes is never mirrored."""
        gateway = FakeSampleGateway({sample_id: SampleRecord(sample_id=sample_id)})

        result = await Synchronizer(gateway).sync(dispatched_node, sample_id, {"labResult": "unsafe"})

        assert result is None
        assert gateway.calls == []

    async def test_nothing_to_mirror(self, lab_result_node, sample_id) -> None:
        """Test decision data without mirrored fields writes nothing."""
        gateway = FakeSampleGateway({sample_id: SampleRecord(sample_id=sample_id)})

        assert await Synchronizer(gateway).sync(lab_result_node, sample_id, {"remarks": "ok"}) is None
        assert gateway.calls == []

    async def test_missing_sample_swallowed(self, lab_result_node) -> None:
        """Test a sample absent from storage is skipped without raising."""
        gateway = FakeSampleGateway()

        with capture_logs() as logs:
            result = await Synchronizer(gateway).sync(lab_result_node, uuid4(), {"labResult": "safe"})

        assert result is None
        assert len(gateway.calls) == 1
        assert logs[0]["event"] == "sample_sync_skipped"

    async def test_gateway_failure_swallowed(self, lab_result_node, sample_id) -> None:
        """Test unexpected gateway errors are logged, not raised."""
        gateway = FakeSampleGateway(error=RuntimeError("connection reset"))

        with capture_logs() as logs:
            result = await Synchronizer(gateway).sync(lab_result_node, sample_id, {"labResult": "safe"})

        assert result is None
        assert logs[0]["event"] == "sample_sync_failed"
        assert logs[0]["log_level"] == "warning"
