"""create course progress and lesson progress

Revision ID: 20261019_0002
Revises: 20261019_0001
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261019_0002"
down_revision = "20261019_0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    course_progress_status = sa.Enum(
        "not_started", "in_progress", "completed", "on_hold", name="course_progress_status"
    )
    lesson_progress_status = sa.Enum(
        "not_started", "scheduled", "in_progress", "completed", "skipped", name="lesson_progress_status"
    )

    op.create_table(
        "course_progress",
        sa.Column("id", sa.String(length=80), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(length=120), nullable=False),
        sa.Column("class_id", sa.String(length=80), nullable=False),
        sa.Column("subject_id", sa.String(length=80), nullable=False),
        sa.Column("status", course_progress_status, nullable=False, server_default="not_started"),
        sa.Column("recurring_schedule", sa.JSON(), nullable=False),
        sa.Column("auto_scheduled", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("user_id", "class_id", "subject_id", name="uq_course_progress_class_subject"),
    )
    op.create_index("ix_course_progress_user_id", "course_progress", ["user_id"])
    op.create_index("ix_course_progress_class_id", "course_progress", ["class_id"])
    op.create_index("ix_course_progress_subject_id", "course_progress", ["subject_id"])

    op.create_table(
        "lesson_progress",
        sa.Column("id", sa.String(length=80), primary_key=True, nullable=False),
        sa.Column("lesson_id", sa.String(length=80), nullable=False),
        sa.Column("course_progress_id", sa.String(length=80), nullable=False),
        sa.Column("status", lesson_progress_status, nullable=False, server_default="not_started"),
        sa.Column("scheduled_date", sa.DateTime(), nullable=True),
        sa.Column("scheduled_duration", sa.Integer(), nullable=True),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.Column("comments", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_lesson_progress_lesson_id", "lesson_progress", ["lesson_id"])
    op.create_index("ix_lesson_progress_course_progress_id", "lesson_progress", ["course_progress_id"])


def downgrade() -> None:
    op.drop_index("ix_lesson_progress_course_progress_id", table_name="lesson_progress")
    op.drop_index("ix_lesson_progress_lesson_id", table_name="lesson_progress")
    op.drop_table("lesson_progress")
    op.drop_index("ix_course_progress_subject_id", table_name="course_progress")
    op.drop_index("ix_course_progress_class_id", table_name="course_progress")
    op.drop_index("ix_course_progress_user_id", table_name="course_progress")
    op.drop_table("course_progress")
    sa.Enum(name="lesson_progress_status").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="course_progress_status").drop(op.get_bind(), checkfirst=True)
