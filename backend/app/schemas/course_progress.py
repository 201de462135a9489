from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from app.models.course_progress import CourseProgressStatus, LessonProgressStatus
from app.schemas.schedule import RecurringScheduleSlot


class CourseProgressCreate(BaseModel):
    class_id: str = Field(min_length=1, max_length=80)
    subject_id: str = Field(min_length=1, max_length=80)
    status: CourseProgressStatus = CourseProgressStatus.not_started


class CourseProgressUpdate(BaseModel):
    status: CourseProgressStatus | None = None
    auto_scheduled: bool | None = None
    recurring_schedule: list[RecurringScheduleSlot] | None = Field(default=None, max_length=50)


class CourseProgressOut(BaseModel):
    id: str
    user_id: str
    class_id: str
    subject_id: str
    status: CourseProgressStatus
    recurring_schedule: list[RecurringScheduleSlot] = Field(default_factory=list)
    auto_scheduled: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None


class LessonProgressCommentIn(BaseModel):
    title: str | None = Field(default=None, max_length=200)
    description: str = Field(min_length=1, max_length=4000)

    @field_validator("description")
    @classmethod
    def normalize_description(cls, value: str) -> str:
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("Comment description cannot be empty")
        return trimmed


class LessonProgressComment(BaseModel):
    title: str | None = None
    description: str
    created_at: datetime
    updated_at: datetime


class LessonProgressCreate(BaseModel):
    lesson_id: str = Field(min_length=1, max_length=80)
    course_progress_id: str = Field(min_length=1, max_length=80)
    status: LessonProgressStatus = LessonProgressStatus.not_started
    scheduled_date: datetime | None = None
    scheduled_duration: int | None = Field(default=None, ge=1, le=24 * 60)
    comments: list[LessonProgressCommentIn] = Field(default_factory=list, max_length=100)


class LessonProgressUpdate(BaseModel):
    status: LessonProgressStatus | None = None
    completed_at: datetime | None = None
    scheduled_date: datetime | None = None
    scheduled_duration: int | None = Field(default=None, ge=1, le=24 * 60)
    comments: list[LessonProgressCommentIn] | None = Field(default=None, max_length=100)


class LessonProgressOut(BaseModel):
    id: str
    lesson_id: str
    course_progress_id: str
    status: LessonProgressStatus
    scheduled_date: datetime | None = None
    scheduled_duration: int | None = None
    completed_at: datetime | None = None
    comments: list[LessonProgressComment] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None


class CourseProgressWithLessons(CourseProgressOut):
    lesson_progress: list[LessonProgressOut] = Field(default_factory=list)


class CalendarEntry(LessonProgressOut):
    subject_name: str | None = None
    subject_type: str | None = None
    class_name: str | None = None
    class_level: str | None = None
    lesson_label: str | None = None
