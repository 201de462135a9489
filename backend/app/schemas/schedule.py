from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field

DAY_NAMES = {
    1: "Monday",
    2: "Tuesday",
    3: "Wednesday",
    4: "Thursday",
    5: "Friday",
    6: "Saturday",
    7: "Sunday",
}


def day_name(day_of_week: int) -> str:
    return DAY_NAMES.get(day_of_week, f"day {day_of_week}")


class RecurringScheduleSlot(BaseModel):
    """One weekly teaching block; ``day_of_week`` is ISO (1 = Monday).

    ``end_hour <= start_hour`` is accepted so an in-progress edit can be
    stored; such a slot has no usable capacity.
    """

    day_of_week: int = Field(ge=1, le=7)
    start_hour: int = Field(ge=0, le=23)
    end_hour: int = Field(ge=0, le=24)
    start_date: date


class RecurringScheduleUpdate(BaseModel):
    recurring_schedule: list[RecurringScheduleSlot] = Field(default_factory=list, max_length=50)


class ScheduleConflict(BaseModel):
    conflict: bool = True
    message: str
    slot: RecurringScheduleSlot
    conflicting_course_progress_id: str | None = None


class GenerationOptions(BaseModel):
    handle_long_lessons: Literal["split", "reduce_duration"] = "split"
    regenerate_existing: bool = False


class GenerationWarning(BaseModel):
    lesson_id: str | None = None
    message: str


class GenerationResult(BaseModel):
    success: bool
    generated: int
    warnings: list[GenerationWarning] = Field(default_factory=list)


class SchedulePreviewRequest(BaseModel):
    recurring_schedule: list[RecurringScheduleSlot] | None = None


class SchedulePreviewItem(BaseModel):
    lesson_id: str
    lesson_label: str
    scheduled_date: datetime
    slot: str
    duration_hours: float


class SchedulePreviewResult(BaseModel):
    total_lessons: int
    total_hours: float
    weeks_needed: int
    schedule_preview: list[SchedulePreviewItem] = Field(default_factory=list)
    warnings: list[GenerationWarning] = Field(default_factory=list)
