from datetime import date, datetime

from app.schemas.schedule import RecurringScheduleSlot
from app.services.lesson_scheduler import SPLIT_WARNING
from app.services.schedule_preview import calculate_schedule_preview


def _slot(day: int, start: int, end: int) -> RecurringScheduleSlot:
    return RecurringScheduleSlot(day_of_week=day, start_hour=start, end_hour=end, start_date=date(2025, 1, 6))


def _lesson(key: str, order: int | None, duration: int) -> dict:
    return {"id": f"lessons:{key}", "label": f"Lesson {key}", "order": order, "duration": duration}


def test_preview_lists_every_fragment():
    lessons = [_lesson("b", 2, 30), _lesson("a", 1, 90)]

    preview = calculate_schedule_preview(lessons, [_slot(1, 9, 10), _slot(3, 14, 15)])

    assert preview.total_lessons == 2
    assert preview.total_hours == 2
    assert [(item.lesson_id, item.scheduled_date, item.duration_hours) for item in preview.schedule_preview] == [
        ("lessons:a", datetime(2025, 1, 6, 9, 0), 1.0),
        ("lessons:a", datetime(2025, 1, 8, 14, 0), 0.5),
        ("lessons:b", datetime(2025, 1, 8, 14, 30), 0.5),
    ]
    assert preview.schedule_preview[1].slot == "14h-15h"
    assert preview.weeks_needed == 1
    assert [warning.message for warning in preview.warnings] == [SPLIT_WARNING]


def test_preview_puts_unordered_lessons_last():
    lessons = [_lesson("z", None, 60), _lesson("y", 1, 60)]

    preview = calculate_schedule_preview(lessons, [_slot(1, 8, 10)])

    assert [item.lesson_label for item in preview.schedule_preview] == ["Lesson y", "Lesson z"]
    assert preview.weeks_needed == 1


def test_preview_without_schedule_is_empty():
    preview = calculate_schedule_preview([_lesson("a", 1, 60)], [])

    assert preview.total_lessons == 1
    assert preview.weeks_needed == 0
    assert preview.schedule_preview == []
