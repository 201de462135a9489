from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Enum as SAEnum, Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.db.base import Base
from app.db.record_id import new_record_id


class LessonStatus(str, Enum):
    to_do = "to_do"
    in_progress = "in_progress"
    to_review = "to_review"
    done = "done"


class LessonScope(str, Enum):
    core = "core"
    bonus = "bonus"
    optional = "optional"


class Lesson(Base):
    __tablename__ = "lessons"

    id: Mapped[str] = mapped_column(String(80), primary_key=True, default=lambda: new_record_id("lessons"))
    user_id: Mapped[str] = mapped_column(String(120), index=True, nullable=False)
    subject_id: Mapped[str] = mapped_column(String(80), index=True, nullable=False)
    label: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    order: Mapped[int | None] = mapped_column(Integer, nullable=True)
    duration: Mapped[int] = mapped_column(Integer, nullable=False, default=60)
    status: Mapped[LessonStatus] = mapped_column(
        SAEnum(LessonStatus, name="lesson_status"), nullable=False, default=LessonStatus.to_do
    )
    scope: Mapped[LessonScope] = mapped_column(
        SAEnum(LessonScope, name="lesson_scope"), nullable=False, default=LessonScope.core
    )
    comments: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())
