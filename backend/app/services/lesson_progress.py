from __future__ import annotations

from collections.abc import Sequence

from app.core.clock import Clock, system_clock
from app.core.exceptions import InvalidRequestError, NotFoundError
from app.db.record_store import Record, RecordStore
from app.models.course_progress import LessonProgressStatus
from app.schemas.course_progress import LessonProgressCommentIn, LessonProgressCreate, LessonProgressUpdate
from app.services.ownership import (
    verify_course_progress_ownership,
    verify_lesson_ownership,
    verify_lesson_progress_ownership,
)
from app.services.store_errors import store_operation


def stamp_comments(comments: Sequence[LessonProgressCommentIn], now) -> list[dict]:
    stamp = now.isoformat()
    return [
        {
            "title": comment.title,
            "description": comment.description,
            "created_at": stamp,
            "updated_at": stamp,
        }
        for comment in comments
    ]


async def get_lesson_progress(store: RecordStore, teacher_id: str, lesson_progress_id: str) -> Record:
    return await verify_lesson_progress_ownership(store, teacher_id, lesson_progress_id)


async def create_lesson_progress(
    store: RecordStore,
    teacher_id: str,
    payload: LessonProgressCreate,
    *,
    lesson_id: str,
    course_progress_id: str,
    clock: Clock = system_clock,
) -> Record:
    await verify_course_progress_ownership(store, teacher_id, course_progress_id)
    await verify_lesson_ownership(store, teacher_id, lesson_id)

    existing = await store.find_many(
        "lesson_progress",
        {"lesson_id": lesson_id, "course_progress_id": course_progress_id},
    )
    if existing:
        raise InvalidRequestError("A lesson progress already exists for this lesson and course")

    now = clock()
    with store_operation("creating lesson progress"):
        return await store.create(
            "lesson_progress",
            {
                "lesson_id": lesson_id,
                "course_progress_id": course_progress_id,
                "status": payload.status.value,
                "scheduled_date": payload.scheduled_date,
                "scheduled_duration": payload.scheduled_duration,
                "completed_at": now if payload.status == LessonProgressStatus.completed else None,
                "comments": stamp_comments(payload.comments, now),
            },
        )


async def patch_lesson_progress(
    store: RecordStore,
    teacher_id: str,
    lesson_progress_id: str,
    payload: LessonProgressUpdate,
    *,
    clock: Clock = system_clock,
) -> Record:
    current = await verify_lesson_progress_ownership(store, teacher_id, lesson_progress_id)

    now = clock()
    provided = payload.model_fields_set
    data: dict = {}
    if "status" in provided and payload.status is not None:
        data["status"] = payload.status.value
    for key in ("completed_at", "scheduled_date", "scheduled_duration"):
        if key in provided:
            data[key] = getattr(payload, key)
    if "comments" in provided and payload.comments is not None:
        data["comments"] = stamp_comments(payload.comments, now)

    if (
        payload.status == LessonProgressStatus.completed
        and not data.get("completed_at")
        and not current.get("completed_at")
    ):
        data["completed_at"] = now
    data["updated_at"] = now

    with store_operation("updating lesson progress"):
        updated = await store.update(lesson_progress_id, data)
        if updated is None:
            raise NotFoundError("Lesson progress not found")
    return updated


async def delete_lesson_progress(store: RecordStore, teacher_id: str, lesson_progress_id: str) -> None:
    await verify_lesson_progress_ownership(store, teacher_id, lesson_progress_id)
    with store_operation("deleting lesson progress"):
        await store.delete(lesson_progress_id)
