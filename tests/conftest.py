"""Shared test fixtures for sample-workflows test suite."""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any
from uuid import UUID, uuid4

import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from sample_workflows.core.models import (
    InputField,
    SampleRecord,
    SampleWorkflowState,
    WorkflowNode,
    WorkflowSettings,
    WorkflowTransition,
)
from sample_workflows.core.types import ConditionType, InputFieldType, NodeType, StateStatus
from sample_workflows.db.models import WorkflowNodeModel

if TYPE_CHECKING:
    from sample_workflows.engine.graph import WorkflowGraph


FIXED_NOW = datetime(2024, 3, 20, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixed_now() -> datetime:
    """Fixed evaluation time for freeze-window tests."""
    return FIXED_NOW


@pytest.fixture
def sample_id() -> UUID:
    """Sample ID for testing."""
    return uuid4()


# =============================================================================
# Domain graph fixtures
# =============================================================================


@pytest.fixture
def lifted_node() -> WorkflowNode:
    """Start node recording when the sample was lifted."""
    return WorkflowNode(
        id=uuid4(),
        name="Sample Lifted",
        position=0,
        node_type=NodeType.ACTION,
        is_start_node=True,
        input_fields=[InputField(name="liftedDate", type=InputFieldType.DATE, label="Lifted on", required=True)],
    )


@pytest.fixture
def dispatched_node() -> WorkflowNode:
    """Node recording dispatch to the laboratory."""
    return WorkflowNode(id=uuid4(), name="Dispatched", position=1, node_type=NodeType.ACTION)


@pytest.fixture
def lab_result_node() -> WorkflowNode:
    """Decision node recording the lab result."""
    return WorkflowNode(
        id=uuid4(),
        name="Lab Result",
        position=2,
        node_type=NodeType.DECISION,
        input_fields=[
            InputField(name="labResult", type=InputFieldType.SELECT, label="Result", options=["safe", "unsafe"]),
            InputField(name="labReportDate", type=InputFieldType.DATE, label="Report date"),
        ],
    )


@pytest.fixture
def unsafe_node() -> WorkflowNode:
    """Branch taken for unsafe samples."""
    return WorkflowNode(id=uuid4(), name="Unsafe", position=3, node_type=NodeType.ACTION)


@pytest.fixture
def safe_node() -> WorkflowNode:
    """Terminal branch taken for safe samples."""
    return WorkflowNode(id=uuid4(), name="Safe", position=4, node_type=NodeType.END, is_end_node=True)


@pytest.fixture
def workflow_nodes(
    lifted_node: WorkflowNode,
    dispatched_node: WorkflowNode,
    lab_result_node: WorkflowNode,
    unsafe_node: WorkflowNode,
    safe_node: WorkflowNode,
) -> list[WorkflowNode]:
    """All nodes of the standard graph in position order."""
    return [lifted_node, dispatched_node, lab_result_node, unsafe_node, safe_node]


@pytest.fixture
def workflow_transitions(
    lifted_node: WorkflowNode,
    dispatched_node: WorkflowNode,
    lab_result_node: WorkflowNode,
    unsafe_node: WorkflowNode,
    safe_node: WorkflowNode,
) -> list[WorkflowTransition]:
    """Transitions of the standard graph."""
    return [
        WorkflowTransition(id=uuid4(), from_node_id=lifted_node.id, to_node_id=dispatched_node.id),
        WorkflowTransition(id=uuid4(), from_node_id=dispatched_node.id, to_node_id=lab_result_node.id),
        WorkflowTransition(
            id=uuid4(),
            from_node_id=lab_result_node.id,
            to_node_id=unsafe_node.id,
            condition_type=ConditionType.LAB_RESULT,
            condition_value="unsafe",
            label="Unsafe",
            display_order=1,
        ),
        WorkflowTransition(
            id=uuid4(),
            from_node_id=lab_result_node.id,
            to_node_id=safe_node.id,
            condition_type=ConditionType.LAB_RESULT,
            condition_value="safe",
            label="Safe",
            display_order=2,
        ),
    ]


@pytest.fixture
def workflow_graph(
    workflow_nodes: list[WorkflowNode],
    workflow_transitions: list[WorkflowTransition],
) -> WorkflowGraph:
    """The standard graph: Lifted, Dispatched, Lab Result, then Unsafe or Safe."""
    from sample_workflows.engine.graph import WorkflowGraph

    return WorkflowGraph(workflow_nodes, workflow_transitions)


@pytest.fixture
def make_state(sample_id: UUID) -> Callable[..., SampleWorkflowState]:
    """Factory for completed states of the fixture sample."""

    def _make_state(
        node: WorkflowNode,
        node_data: dict[str, Any] | None = None,
        completed_at: datetime | None = FIXED_NOW,
        status: StateStatus = StateStatus.COMPLETED,
    ) -> SampleWorkflowState:
        return SampleWorkflowState(
            id=uuid4(),
            sample_id=sample_id,
            current_node_id=node.id,
            node_data=node_data or {},
            entered_at=completed_at or FIXED_NOW - timedelta(hours=1),
            completed_at=completed_at,
            status=status,
        )

    return _make_state


@pytest.fixture
def empty_sample(sample_id: UUID) -> SampleRecord:
    """Sample with no legacy progress recorded."""
    return SampleRecord(sample_id=sample_id)


@pytest.fixture
def default_settings() -> WorkflowSettings:
    """Editing settings as shipped."""
    return WorkflowSettings()


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
async def db_engine():
    """Create async SQLite in-memory engine."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        future=True,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(WorkflowNodeModel.metadata.create_all)

    yield engine
    await engine.dispose()


@pytest.fixture
async def session_maker(db_engine):
    """Create session factory."""
    return async_sessionmaker(
        bind=db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
async def session(session_maker) -> AsyncIterator[AsyncSession]:
    """Create a database session for a test."""
    async with session_maker() as session:
        yield session


@pytest.fixture
async def seeded_graph(session_maker) -> dict[str, Any]:
    """Persist the standard graph and return the stored nodes and transitions by name."""
    from sample_workflows.db.store import GraphStore

    async with session_maker() as session:
        store = GraphStore(session)
        lifted = await store.create_node("Sample Lifted", position=0, is_start_node=True)
        dispatched = await store.create_node("Dispatched", position=1)
        lab_result = await store.create_node(
            "Lab Result",
            position=2,
            node_type=NodeType.DECISION,
            input_fields=[{"name": "labResult", "type": "select", "label": "Result", "options": ["safe", "unsafe"]}],
        )
        unsafe = await store.create_node("Unsafe", position=3)
        safe = await store.create_node("Safe", position=4, node_type=NodeType.END, is_end_node=True)

        to_dispatched = await store.create_transition(lifted.id, dispatched.id)
        to_lab = await store.create_transition(dispatched.id, lab_result.id)
        to_unsafe = await store.create_transition(
            lab_result.id,
            unsafe.id,
            condition_type=ConditionType.LAB_RESULT,
            condition_value="unsafe",
            label="Unsafe",
            display_order=1,
        )
        to_safe = await store.create_transition(
            lab_result.id,
            safe.id,
            condition_type=ConditionType.LAB_RESULT,
            condition_value="safe",
            label="Safe",
            display_order=2,
        )

    return {
        "nodes": {
            "lifted": lifted,
            "dispatched": dispatched,
            "lab_result": lab_result,
            "unsafe": unsafe,
            "safe": safe,
        },
        "transitions": {
            "to_dispatched": to_dispatched,
            "to_lab": to_lab,
            "to_unsafe": to_unsafe,
            "to_safe": to_safe,
        },
    }


def pytest_configure(config: Any) -> None:
    """Configure pytest with custom markers.

    Args:
        config: Pytest config object
    """
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests")
