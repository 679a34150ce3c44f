"""create task templates table"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "0001_create_templates"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "task_templates",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="todo"),
        sa.Column("priority", sa.Integer(), nullable=False, server_default="5"),
        sa.Column("assignee_ids", sa.JSON(), nullable=False),
        sa.Column("project_id", sa.String(length=64), nullable=True),
        sa.Column("owner_id", sa.String(length=64), nullable=True),
        sa.Column("is_recurring", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("frequency", sa.String(length=20), nullable=True),
        sa.Column("interval", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_condition", sa.String(length=20), nullable=False, server_default="never"),
        sa.Column("end_count", sa.Integer(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_task_templates_status", "task_templates", ["status"], unique=False)
    op.create_index("ix_task_templates_project_id", "task_templates", ["project_id"], unique=False)
    op.create_index("ix_task_templates_owner_id", "task_templates", ["owner_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_task_templates_owner_id", table_name="task_templates")
    op.drop_index("ix_task_templates_project_id", table_name="task_templates")
    op.drop_index("ix_task_templates_status", table_name="task_templates")
    op.drop_table("task_templates")
