"""Initial schema for grade records and their audit trail

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

"""

import typing as t

from alembic import op
from sqlalchemy import func as f
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.schema import CheckConstraint, Column, UniqueConstraint
from sqlalchemy.types import DateTime, Float, Integer, String, Text

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | t.Sequence[str] | None = None
depends_on: str | t.Sequence[str] | None = None


def upgrade() -> None:
    # Grades; student, course and teacher ids refer to records kept elsewhere
    op.create_table(
        "grades",
        Column("grade_id", String(22), primary_key=True),
        Column("student_id", String(22), nullable=False, index=True),
        Column("course_id", String(22), nullable=False, index=True),
        Column("teacher_id", String(22), nullable=False, index=True),
        Column("score", Float, nullable=False),
        Column("semester", String, nullable=False),
        Column("status", String(16), server_default="PENDING", nullable=False),
        Column("grade_metadata", JSONB, nullable=True),
        Column("create_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
        Column("update_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
        CheckConstraint("score >= 0.0 AND score <= 100.0", name="grades_score_range"),
    )

    # Audit trail; no foreign key, entries outlive their grade
    op.create_table(
        "grade_edit_history",
        Column("history_id", String(22), primary_key=True),
        Column("grade_id", String(22), nullable=False, index=True),
        Column("editor_id", String(22), nullable=False, index=True),
        Column("edit_number", Integer, nullable=False),
        Column("old_values", Text, nullable=False),
        Column("new_values", Text, nullable=False),
        Column("reason", Text, nullable=False),
        Column("create_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
        UniqueConstraint("grade_id", "edit_number", name="grade_edit_history_grade_id_edit_number_key"),
    )

    # System log
    op.create_table(
        "system_logs",
        Column("log_id", String(22), primary_key=True),
        Column("user_id", String(22), nullable=False, index=True),
        Column("action", String(64), nullable=False, index=True),
        Column("details", Text, nullable=False),
        Column("context", JSONB, nullable=True),
        Column("ip_address", String(64), nullable=True),
        Column("create_time", DateTime(timezone=True), server_default=f.now(), nullable=False, index=True),
    )


def downgrade() -> None:
    op.drop_table("system_logs")
    op.drop_table("grade_edit_history")
    op.drop_table("grades")
