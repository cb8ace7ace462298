"""Initial schema baseline

Revision ID: 001_initial
Revises:
Create Date: 2026-10-17

Creates the assets table and the three maintenance tables. Databases that
were bootstrapped by create_all() at startup should be stamped, not upgraded:

    alembic stamp head
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- assets ---
    op.create_table(
        "assets",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("location", sa.String(200), nullable=False, server_default=""),
        sa.Column("status", sa.String(30), nullable=False, server_default="OPERATIONAL"),
        sa.Column("last_maintenance", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
    )

    # --- maintenance_schedules ---
    op.create_table(
        "maintenance_schedules",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("asset_id", sa.Integer(), sa.ForeignKey("assets.id"), nullable=False),
        sa.Column("frequency", sa.String(20), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("status", sa.String(30), nullable=False, server_default="SCHEDULED"),
        sa.Column("affects_asset_status", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_maintenance_schedules_asset_id", "maintenance_schedules", ["asset_id"])

    # --- maintenance_completions ---
    op.create_table(
        "maintenance_completions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("schedule_id", sa.Integer(), sa.ForeignKey("maintenance_schedules.id"), nullable=False),
        sa.Column("completed_date", sa.Date(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_maintenance_completions_schedule_id", "maintenance_completions", ["schedule_id"])

    # --- maintenance_change_logs ---
    op.create_table(
        "maintenance_change_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("schedule_id", sa.Integer(), sa.ForeignKey("maintenance_schedules.id"), nullable=False),
        sa.Column("changed_by", sa.String(100), nullable=True),
        sa.Column("change_type", sa.String(10), nullable=False),
        sa.Column("field_name", sa.String(50), nullable=True),
        sa.Column("old_value", sa.Text(), nullable=True),
        sa.Column("new_value", sa.Text(), nullable=True),
        sa.Column("changed_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_maintenance_change_logs_schedule_id", "maintenance_change_logs", ["schedule_id"])


def downgrade() -> None:
    op.drop_index("ix_maintenance_change_logs_schedule_id", table_name="maintenance_change_logs")
    op.drop_table("maintenance_change_logs")
    op.drop_index("ix_maintenance_completions_schedule_id", table_name="maintenance_completions")
    op.drop_table("maintenance_completions")
    op.drop_index("ix_maintenance_schedules_asset_id", table_name="maintenance_schedules")
    op.drop_table("maintenance_schedules")
    op.drop_table("assets")
