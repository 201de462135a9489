from __future__ import annotations

import logging

from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine

import app.models  # noqa: F401  registers every table on Base.metadata
from app.db.base import Base
from app.db.session import engine as default_engine

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "classes": {"id", "user_id", "name", "level", "school", "students_count"},
    "subjects": {"id", "user_id", "name", "type", "total_hours", "hours_per_week"},
    "lessons": {"id", "user_id", "subject_id", "label", "order", "duration", "status", "scope", "comments"},
    "course_progress": {"id", "user_id", "class_id", "subject_id", "status", "recurring_schedule", "auto_scheduled"},
    "lesson_progress": {
        "id",
        "lesson_id",
        "course_progress_id",
        "status",
        "scheduled_date",
        "scheduled_duration",
        "completed_at",
        "comments",
    },
}


def _ensure_course_progress_auto_scheduled_column(engine: Engine) -> None:
    with engine.begin() as connection:
        inspector = inspect(connection)
        if "course_progress" not in set(inspector.get_table_names()):
            return
        column_names = {item["name"] for item in inspector.get_columns("course_progress")}
        if "auto_scheduled" in column_names:
            return
        connection.execute(
            text("ALTER TABLE course_progress ADD COLUMN auto_scheduled BOOLEAN NOT NULL DEFAULT FALSE")
        )


def _ensure_lesson_progress_scheduled_duration_column(engine: Engine) -> None:
    with engine.begin() as connection:
        inspector = inspect(connection)
        if "lesson_progress" not in set(inspector.get_table_names()):
            return
        column_names = {item["name"] for item in inspector.get_columns("lesson_progress")}
        if "scheduled_duration" in column_names:
            return
        connection.execute(text("ALTER TABLE lesson_progress ADD COLUMN scheduled_duration INTEGER"))


def _assert_required_columns(engine: Engine) -> None:
    with engine.begin() as connection:
        inspector = inspect(connection)
        table_names = set(inspector.get_table_names())
        missing_tables = [name for name in REQUIRED_COLUMNS if name not in table_names]
        if missing_tables:
            raise RuntimeError(f"Missing required tables: {', '.join(sorted(missing_tables))}")

        missing_columns: list[str] = []
        for table_name, required in REQUIRED_COLUMNS.items():
            existing = {item["name"] for item in inspector.get_columns(table_name)}
            for column_name in sorted(required - existing):
                missing_columns.append(f"{table_name}.{column_name}")
        if missing_columns:
            raise RuntimeError(f"Missing required columns: {', '.join(missing_columns)}")


def ensure_runtime_schema_compatibility(engine: Engine | None = None) -> None:
    engine = engine or default_engine
    try:
        # Ensure missing tables are present before additive compatibility patches.
        Base.metadata.create_all(bind=engine)
        _ensure_course_progress_auto_scheduled_column(engine)
        _ensure_lesson_progress_scheduled_duration_column(engine)
        _assert_required_columns(engine)
    except Exception as exc:  # pragma: no cover - runtime environment dependent
        logger.exception("Runtime schema compatibility bootstrap failed")
        raise RuntimeError("Runtime schema compatibility bootstrap failed") from exc
