"""Initial workflow tables.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-17
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

JSONType = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def _audit_columns() -> list[sa.Column]:
    return [
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("sa_orm_sentinel", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    """Create workflow tables."""
    # Create workflow_nodes table
    op.create_table(
        "workflow_nodes",
        *_audit_columns(),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("node_type", sa.String(length=50), nullable=False, server_default="action"),
        sa.Column("icon", sa.String(length=100), nullable=False, server_default="circle"),
        sa.Column("color", sa.String(length=20), nullable=False, server_default="#1E40AF"),
        sa.Column("input_fields", JSONType, nullable=False),
        sa.Column("template_ids", JSONType, nullable=False),
        sa.Column("is_start_node", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_end_node", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("edit_freeze_hours", sa.Integer(), nullable=True),
        sa.Column("auto_advance_condition", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=50), nullable=False, server_default="active"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_workflow_nodes_status_position",
        "workflow_nodes",
        ["status", "position"],
    )

    # Create workflow_transitions table
    op.create_table(
        "workflow_transitions",
        *_audit_columns(),
        sa.Column("from_node_id", sa.Uuid(), nullable=False),
        sa.Column("to_node_id", sa.Uuid(), nullable=False),
        sa.Column("condition_type", sa.String(length=50), nullable=False, server_default="always"),
        sa.Column("condition_field", sa.String(length=255), nullable=True),
        sa.Column("condition_operator", sa.String(length=50), nullable=True),
        sa.Column("condition_value", sa.String(length=255), nullable=True),
        sa.Column("label", sa.String(length=255), nullable=True),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("status", sa.String(length=50), nullable=False, server_default="active"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_workflow_transitions_from_node_id",
        "workflow_transitions",
        ["from_node_id"],
    )
    op.create_index(
        "ix_workflow_transitions_to_node_id",
        "workflow_transitions",
        ["to_node_id"],
    )

    # Create sample_workflow_states table
    # (sample_id, current_node_id) is intentionally not unique; the upsert keeps one row per pair
    op.create_table(
        "sample_workflow_states",
        *_audit_columns(),
        sa.Column("sample_id", sa.Uuid(), nullable=False),
        sa.Column("current_node_id", sa.Uuid(), nullable=False),
        sa.Column("node_data", JSONType, nullable=False),
        sa.Column("entered_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", sa.String(length=50), nullable=False, server_default="active"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_sample_workflow_states_sample_id",
        "sample_workflow_states",
        ["sample_id"],
    )
    op.create_index(
        "ix_sample_workflow_states_sample_node",
        "sample_workflow_states",
        ["sample_id", "current_node_id"],
    )

    # Create system_settings table
    op.create_table(
        "system_settings",
        *_audit_columns(),
        sa.Column("category", sa.String(length=100), nullable=False),
        sa.Column("key", sa.String(length=255), nullable=False),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_system_settings_category_key",
        "system_settings",
        ["category", "key"],
        unique=True,
    )

    # Create samples table
    op.create_table(
        "samples",
        *_audit_columns(),
        sa.Column("code", sa.String(length=100), nullable=True),
        sa.Column("lifted_date", sa.Date(), nullable=True),
        sa.Column("dispatch_date", sa.Date(), nullable=True),
        sa.Column("lab_report_date", sa.Date(), nullable=True),
        sa.Column("lab_result", sa.String(length=50), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_samples_code", "samples", ["code"])


def downgrade() -> None:
    """Drop workflow tables."""
    op.drop_table("samples")
    op.drop_table("system_settings")
    op.drop_table("sample_workflow_states")
    op.drop_table("workflow_transitions")
    op.drop_table("workflow_nodes")
