from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, DateTime, Enum as SAEnum, Integer, JSON, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.db.base import Base
from app.db.record_id import new_record_id


class CourseProgressStatus(str, Enum):
    not_started = "not_started"
    in_progress = "in_progress"
    completed = "completed"
    on_hold = "on_hold"


class LessonProgressStatus(str, Enum):
    not_started = "not_started"
    scheduled = "scheduled"
    in_progress = "in_progress"
    completed = "completed"
    skipped = "skipped"


class CourseProgress(Base):
    __tablename__ = "course_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "class_id", "subject_id", name="uq_course_progress_class_subject"),
    )

    id: Mapped[str] = mapped_column(String(80), primary_key=True, default=lambda: new_record_id("course_progress"))
    user_id: Mapped[str] = mapped_column(String(120), index=True, nullable=False)
    class_id: Mapped[str] = mapped_column(String(80), index=True, nullable=False)
    subject_id: Mapped[str] = mapped_column(String(80), index=True, nullable=False)
    status: Mapped[CourseProgressStatus] = mapped_column(
        SAEnum(CourseProgressStatus, name="course_progress_status"),
        nullable=False,
        default=CourseProgressStatus.not_started,
    )
    # List of {day_of_week, start_hour, end_hour, start_date} in insertion order.
    recurring_schedule: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    auto_scheduled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())


class LessonProgress(Base):
    __tablename__ = "lesson_progress"

    id: Mapped[str] = mapped_column(String(80), primary_key=True, default=lambda: new_record_id("lesson_progress"))
    lesson_id: Mapped[str] = mapped_column(String(80), index=True, nullable=False)
    course_progress_id: Mapped[str] = mapped_column(String(80), index=True, nullable=False)
    status: Mapped[LessonProgressStatus] = mapped_column(
        SAEnum(LessonProgressStatus, name="lesson_progress_status"),
        nullable=False,
        default=LessonProgressStatus.not_started,
    )
    scheduled_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    scheduled_duration: Mapped[int | None] = mapped_column(Integer, nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    comments: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())
