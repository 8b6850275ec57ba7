"""initial schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "mentees",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("avatar_url", sa.String(length=500), nullable=True),
        sa.Column("program_id", sa.String(length=50), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_mentees_created_at", "mentees", ["created_at"], unique=False)

    op.create_table(
        "pillars",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("mentee_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("score", sa.Float(), nullable=False),
        sa.Column("sprints", sa.Integer(), nullable=False),
        sa.Column("tasks_completed", sa.Integer(), nullable=False),
        sa.Column("tasks_total", sa.Integer(), nullable=False),
        sa.Column("findings", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["mentee_id"], ["mentees.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("mentee_id", "name", name="uq_pillar_mentee_name"),
        sa.CheckConstraint("score >= 0 AND score <= 5", name="ck_pillar_score_range"),
        sa.CheckConstraint(
            "tasks_completed >= 0 AND tasks_completed <= tasks_total",
            name="ck_pillar_task_counts",
        ),
    )
    op.create_index("ix_pillars_mentee_id", "pillars", ["mentee_id"], unique=False)

    op.create_table(
        "diagnosis_responses",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("mentee_id", sa.Integer(), nullable=False),
        sa.Column("axis_name", sa.String(length=100), nullable=False),
        sa.Column("question_id", sa.String(length=20), nullable=True),
        sa.Column("question_text", sa.Text(), nullable=False),
        sa.Column("response", sa.Text(), nullable=False),
        sa.Column("score", sa.Float(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["mentee_id"], ["mentees.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("score >= 0 AND score <= 5", name="ck_response_score_range"),
    )
    op.create_index(
        "ix_diagnosis_responses_mentee_id", "diagnosis_responses", ["mentee_id"], unique=False
    )

    op.create_table(
        "sprints",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("mentee_id", sa.Integer(), nullable=False),
        sa.Column("pillar_name", sa.String(length=100), nullable=False),
        sa.Column("sprint_name", sa.String(length=255), nullable=False),
        sa.Column("sprint_goal", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["mentee_id"], ["mentees.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_sprints_mentee_id", "sprints", ["mentee_id"], unique=False)

    op.create_table(
        "tasks",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("sprint_id", sa.String(length=36), nullable=False),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("is_custom", sa.Boolean(), nullable=False),
        sa.Column("priority", sa.String(length=10), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("is_completed", sa.Boolean(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["sprint_id"], ["sprints.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("priority IN ('low', 'medium', 'high')", name="ck_task_priority"),
    )
    op.create_index("ix_tasks_sprint_id", "tasks", ["sprint_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_tasks_sprint_id", table_name="tasks")
    op.drop_table("tasks")
    op.drop_index("ix_sprints_mentee_id", table_name="sprints")
    op.drop_table("sprints")
    op.drop_index("ix_diagnosis_responses_mentee_id", table_name="diagnosis_responses")
    op.drop_table("diagnosis_responses")
    op.drop_index("ix_pillars_mentee_id", table_name="pillars")
    op.drop_table("pillars")
    op.drop_index("ix_mentees_created_at", table_name="mentees")
    op.drop_table("mentees")
