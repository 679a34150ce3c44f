"""create recurrence overrides table"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "0002_create_overrides"
down_revision = "0001_create_templates"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "recurrence_overrides",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column(
            "template_id",
            sa.String(length=36),
            sa.ForeignKey("task_templates.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("occurrence_date", sa.Date(), nullable=False),
        sa.Column("fields", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("template_id", "occurrence_date", name="uq_override_occurrence"),
    )
    op.create_index(
        "ix_recurrence_overrides_template_id", "recurrence_overrides", ["template_id"], unique=False
    )
    op.create_index(
        "ix_recurrence_overrides_occurrence_date",
        "recurrence_overrides",
        ["occurrence_date"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_recurrence_overrides_occurrence_date", table_name="recurrence_overrides")
    op.drop_index("ix_recurrence_overrides_template_id", table_name="recurrence_overrides")
    op.drop_table("recurrence_overrides")
