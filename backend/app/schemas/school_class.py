from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class SchoolClassBase(BaseModel):
    name: str = Field(min_length=3, max_length=200)
    level: str = Field(min_length=1, max_length=100)
    school: str = Field(min_length=1, max_length=200)
    students_count: int = Field(ge=1, le=1000)


class SchoolClassCreate(SchoolClassBase):
    pass


class SchoolClassUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=3, max_length=200)
    level: str | None = Field(default=None, min_length=1, max_length=100)
    school: str | None = Field(default=None, min_length=1, max_length=200)
    students_count: int | None = Field(default=None, ge=1, le=1000)


class SchoolClassOut(SchoolClassBase):
    id: str
    user_id: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
