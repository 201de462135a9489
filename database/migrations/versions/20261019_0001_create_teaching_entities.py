"""create teaching entities

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    lesson_status = sa.Enum("to_do", "in_progress", "to_review", "done", name="lesson_status")
    lesson_scope = sa.Enum("core", "bonus", "optional", name="lesson_scope")

    op.create_table(
        "classes",
        sa.Column("id", sa.String(length=80), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(length=120), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("level", sa.String(length=100), nullable=False),
        sa.Column("school", sa.String(length=200), nullable=False),
        sa.Column("students_count", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_classes_user_id", "classes", ["user_id"])

    op.create_table(
        "subjects",
        sa.Column("id", sa.String(length=80), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(length=120), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("type", sa.String(length=100), nullable=False),
        sa.Column("total_hours", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("hours_per_week", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_subjects_user_id", "subjects", ["user_id"])

    op.create_table(
        "lessons",
        sa.Column("id", sa.String(length=80), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(length=120), nullable=False),
        sa.Column("subject_id", sa.String(length=80), nullable=False),
        sa.Column("label", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("order", sa.Integer(), nullable=True),
        sa.Column("duration", sa.Integer(), nullable=False, server_default="60"),
        sa.Column("status", lesson_status, nullable=False, server_default="to_do"),
        sa.Column("scope", lesson_scope, nullable=False, server_default="core"),
        sa.Column("comments", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_lessons_user_id", "lessons", ["user_id"])
    op.create_index("ix_lessons_subject_id", "lessons", ["subject_id"])


def downgrade() -> None:
    op.drop_index("ix_lessons_subject_id", table_name="lessons")
    op.drop_index("ix_lessons_user_id", table_name="lessons")
    op.drop_table("lessons")
    op.drop_index("ix_subjects_user_id", table_name="subjects")
    op.drop_table("subjects")
    op.drop_index("ix_classes_user_id", table_name="classes")
    op.drop_table("classes")
    sa.Enum(name="lesson_scope").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="lesson_status").drop(op.get_bind(), checkfirst=True)
