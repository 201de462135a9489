from __future__ import annotations

from collections.abc import Sequence

from app.db.record_store import Record
from app.schemas.schedule import RecurringScheduleSlot, SchedulePreviewItem, SchedulePreviewResult
from app.services.lesson_scheduler import invalid_slot_warnings, plan_lesson_placements
from app.services.lessons import lesson_minutes, sort_lessons
from app.services.schedule_math import DEFAULT_HORIZON_WEEKS, generate_schedule_dates


def calculate_schedule_preview(
    lessons: Sequence[Record],
    slots: Sequence[RecurringScheduleSlot],
    *,
    horizon_weeks: int = DEFAULT_HORIZON_WEEKS,
) -> SchedulePreviewResult:
    """Dry run of generation in split mode; nothing is written."""
    ordered = sort_lessons(lessons)
    total_hours = sum(lesson_minutes(lesson) for lesson in ordered) / 60
    if not slots:
        return SchedulePreviewResult(total_lessons=len(ordered), total_hours=0, weeks_needed=0)

    occurrences = generate_schedule_dates(slots, total_hours, max_weeks=horizon_weeks)
    plan = plan_lesson_placements(ordered, occurrences)
    labels = {lesson["id"]: lesson.get("label") or "" for lesson in ordered}

    weeks_needed = 0
    if occurrences:
        weeks_needed = (occurrences[-1].date - occurrences[0].date).days // 7 + 1

    return SchedulePreviewResult(
        total_lessons=len(ordered),
        total_hours=total_hours,
        weeks_needed=weeks_needed,
        schedule_preview=[
            SchedulePreviewItem(
                lesson_id=placement.lesson_id,
                lesson_label=labels.get(placement.lesson_id, ""),
                scheduled_date=placement.scheduled_date,
                slot=placement.occurrence.label,
                duration_hours=placement.duration_minutes / 60,
            )
            for placement in plan.placements
        ],
        warnings=invalid_slot_warnings(slots) + plan.warnings,
    )
