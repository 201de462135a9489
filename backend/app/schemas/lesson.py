from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from app.models.lesson import LessonScope, LessonStatus


class LessonComment(BaseModel):
    title: str | None = None
    description: str
    created_at: datetime
    updated_at: datetime


class LessonCommentIn(BaseModel):
    title: str | None = Field(default=None, max_length=200)
    description: str = Field(min_length=1, max_length=4000)


class LessonCreate(BaseModel):
    subject_id: str = Field(min_length=1, max_length=80)
    label: str = Field(min_length=1, max_length=200)
    description: str = Field(default="", max_length=4000)
    order: int | None = Field(default=None, ge=0)
    duration: int | None = Field(default=None, ge=1, le=24 * 60)
    status: LessonStatus = LessonStatus.to_do
    scope: LessonScope = LessonScope.core
    comments: list[LessonCommentIn] = Field(default_factory=list, max_length=100)

    @field_validator("label")
    @classmethod
    def normalize_label(cls, value: str) -> str:
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("Label cannot be empty")
        return trimmed


class LessonUpdate(BaseModel):
    subject_id: str | None = Field(default=None, min_length=1, max_length=80)
    label: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=4000)
    order: int | None = Field(default=None, ge=0)
    duration: int | None = Field(default=None, ge=1, le=24 * 60)
    status: LessonStatus | None = None
    scope: LessonScope | None = None
    comments: list[LessonCommentIn] | None = Field(default=None, max_length=100)


class LessonOut(BaseModel):
    id: str
    user_id: str
    subject_id: str
    label: str
    description: str = ""
    order: int | None = None
    duration: int = 60
    status: LessonStatus
    scope: LessonScope
    comments: list[LessonComment] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None
