from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from app.schemas.lesson import LessonOut


class SubjectBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=4000)
    type: str = Field(min_length=1, max_length=100)
    total_hours: int = Field(ge=0, le=2000)
    hours_per_week: int = Field(ge=0, le=60)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, value: str) -> str:
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("Name cannot be empty")
        return trimmed


class SubjectCreate(SubjectBase):
    pass


class SubjectUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=4000)
    type: str | None = Field(default=None, min_length=1, max_length=100)
    total_hours: int | None = Field(default=None, ge=0, le=2000)
    hours_per_week: int | None = Field(default=None, ge=0, le=60)


class SubjectOut(SubjectBase):
    id: str
    user_id: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class SubjectWithLessons(SubjectOut):
    lessons: list[LessonOut] = Field(default_factory=list)
