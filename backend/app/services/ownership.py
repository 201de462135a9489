from __future__ import annotations

from app.core.exceptions import NotFoundError
from app.db.record_store import Record, RecordStore


async def verify_owned_record(
    store: RecordStore,
    table: str,
    record_id: str,
    teacher_id: str,
    message: str,
) -> Record:
    record = await store.find_by_id(table, record_id)
    if record is None or record.get("user_id") != teacher_id:
        raise NotFoundError(message)
    return record


async def verify_course_progress_ownership(
    store: RecordStore,
    teacher_id: str,
    course_progress_id: str,
) -> Record:
    """Load a course progress the caller owns.

    Missing and foreign records raise the same ``NotFoundError``.
    """
    return await verify_owned_record(
        store,
        "course_progress",
        course_progress_id,
        teacher_id,
        "Course progress not found or not accessible",
    )


async def verify_lesson_ownership(store: RecordStore, teacher_id: str, lesson_id: str) -> Record:
    return await verify_owned_record(store, "lessons", lesson_id, teacher_id, "Lesson not found")


async def verify_subject_ownership(store: RecordStore, teacher_id: str, subject_id: str) -> Record:
    return await verify_owned_record(store, "subjects", subject_id, teacher_id, "Subject not found")


async def verify_class_ownership(store: RecordStore, teacher_id: str, class_id: str) -> Record:
    return await verify_owned_record(store, "classes", class_id, teacher_id, "Class not found")


async def verify_lesson_progress_ownership(
    store: RecordStore,
    teacher_id: str,
    lesson_progress_id: str,
) -> Record:
    """Load a lesson progress whose parent course progress the caller owns."""
    lesson_progress = await store.find_by_id("lesson_progress", lesson_progress_id)
    if lesson_progress is None:
        raise NotFoundError("Lesson progress not found")
    await verify_course_progress_ownership(store, teacher_id, lesson_progress["course_progress_id"])
    return lesson_progress
