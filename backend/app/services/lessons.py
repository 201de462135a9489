from __future__ import annotations

from collections.abc import Iterable

from app.db.record_store import Record, RecordStore

DEFAULT_LESSON_DURATION_MINUTES = 60


def lesson_minutes(lesson: Record, default: int = DEFAULT_LESSON_DURATION_MINUTES) -> int:
    duration = lesson.get("duration")
    return int(duration) if duration else default


def sort_lessons(lessons: Iterable[Record]) -> list[Record]:
    """Order lessons by ``order``; unordered lessons go last, ties by id."""
    return sorted(
        lessons,
        key=lambda lesson: (lesson.get("order") is None, lesson.get("order") or 0, str(lesson.get("id"))),
    )


async def load_subject_lessons(store: RecordStore, teacher_id: str, subject_id: str) -> list[Record]:
    subject = await store.find_by_id("subjects", subject_id)
    if subject is None or subject.get("user_id") != teacher_id:
        return []
    lessons = await store.find_many(
        "lessons",
        {"subject_id": subject_id, "user_id": teacher_id},
        order_by=("order",),
    )
    return sort_lessons(lessons)
