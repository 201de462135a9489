from __future__ import annotations

from collections.abc import Sequence
import logging

from app.core.clock import Clock, system_clock
from app.core.exceptions import InvalidRequestError, NotFoundError
from app.db.record_store import Record, RecordStore
from app.schemas.course_progress import CourseProgressCreate, CourseProgressUpdate
from app.schemas.schedule import RecurringScheduleSlot
from app.services.ownership import (
    verify_class_ownership,
    verify_course_progress_ownership,
    verify_subject_ownership,
)
from app.services.store_errors import store_operation

logger = logging.getLogger(__name__)


def _dump_schedule(slots: Sequence[RecurringScheduleSlot]) -> list[dict]:
    return [slot.model_dump(mode="json") for slot in slots]


async def list_course_progress(
    store: RecordStore,
    teacher_id: str,
    *,
    class_id: str | None = None,
    subject_id: str | None = None,
) -> list[Record]:
    filters = {"user_id": teacher_id}
    if class_id:
        filters["class_id"] = class_id
    if subject_id:
        filters["subject_id"] = subject_id
    with store_operation("listing course progress"):
        return await store.find_many("course_progress", filters, order_by=("created_at",))


async def get_course_progress_with_lessons(
    store: RecordStore,
    teacher_id: str,
    course_progress_id: str,
) -> tuple[Record, list[Record]]:
    course_progress = await verify_course_progress_ownership(store, teacher_id, course_progress_id)
    lesson_progress = await store.find_many(
        "lesson_progress",
        {"course_progress_id": course_progress_id},
        order_by=("created_at",),
    )
    lesson_progress.sort(key=lambda item: (item.get("scheduled_date") is None, item.get("scheduled_date") or 0))
    return course_progress, lesson_progress


async def create_course_progress(
    store: RecordStore,
    teacher_id: str,
    payload: CourseProgressCreate,
    *,
    class_id: str,
    subject_id: str,
) -> Record:
    existing = await store.find_many(
        "course_progress",
        {"user_id": teacher_id, "class_id": class_id, "subject_id": subject_id},
    )
    if existing:
        raise InvalidRequestError("A course already exists for this class and subject")

    await verify_class_ownership(store, teacher_id, class_id)
    await verify_subject_ownership(store, teacher_id, subject_id)

    with store_operation("creating course progress"):
        created = await store.create(
            "course_progress",
            {
                "user_id": teacher_id,
                "class_id": class_id,
                "subject_id": subject_id,
                "status": payload.status.value,
                "recurring_schedule": [],
                "auto_scheduled": False,
            },
        )
    logger.info("COURSE PROGRESS CREATED | teacher_id=%s | course_progress_id=%s", teacher_id, created["id"])
    return created


async def patch_course_progress(
    store: RecordStore,
    teacher_id: str,
    course_progress_id: str,
    payload: CourseProgressUpdate,
    *,
    clock: Clock = system_clock,
) -> Record:
    await verify_course_progress_ownership(store, teacher_id, course_progress_id)

    data = payload.model_dump(exclude_unset=True, exclude={"recurring_schedule"}, mode="json")
    data = {key: value for key, value in data.items() if value is not None}
    if payload.recurring_schedule is not None:
        data["recurring_schedule"] = _dump_schedule(payload.recurring_schedule)
    data["updated_at"] = clock()

    with store_operation("updating course progress"):
        updated = await store.update(course_progress_id, data)
        if updated is None:
            raise NotFoundError("Course progress not found or not accessible")
    return updated


async def update_course_progress_schedule(
    store: RecordStore,
    teacher_id: str,
    course_progress_id: str,
    recurring_schedule: Sequence[RecurringScheduleSlot],
    *,
    clock: Clock = system_clock,
) -> Record:
    """Replace the weekly schedule; no conflict check or generation is triggered."""
    return await patch_course_progress(
        store,
        teacher_id,
        course_progress_id,
        CourseProgressUpdate(recurring_schedule=list(recurring_schedule)),
        clock=clock,
    )


async def delete_course_progress(store: RecordStore, teacher_id: str, course_progress_id: str) -> None:
    await verify_course_progress_ownership(store, teacher_id, course_progress_id)
    with store_operation("deleting course progress"):
        lesson_progress = await store.find_many("lesson_progress", {"course_progress_id": course_progress_id})
        for record in lesson_progress:
            await store.delete(record["id"])
        await store.delete(course_progress_id)
    logger.info(
        "COURSE PROGRESS DELETED | teacher_id=%s | course_progress_id=%s | lesson_progress_removed=%s",
        teacher_id,
        course_progress_id,
        len(lesson_progress),
    )


async def list_calendar_entries(store: RecordStore, teacher_id: str) -> list[Record]:
    """Every lesson progress of the teacher's courses with display names attached."""
    with store_operation("loading calendar"):
        courses = await store.find_many("course_progress", {"user_id": teacher_id})
        if not courses:
            return []
        courses_by_id = {course["id"]: course for course in courses}
        entries = await store.find_many("lesson_progress", {"course_progress_id": list(courses_by_id)})

        subjects = await store.find_many("subjects", {"user_id": teacher_id})
        classes = await store.find_many("classes", {"user_id": teacher_id})
        lesson_ids = list({entry["lesson_id"] for entry in entries})
        lessons = await store.find_many("lessons", {"id": lesson_ids}) if lesson_ids else []

    subjects_by_id = {item["id"]: item for item in subjects}
    classes_by_id = {item["id"]: item for item in classes}
    labels = {item["id"]: item.get("label") for item in lessons}

    enriched: list[Record] = []
    for entry in entries:
        course = courses_by_id[entry["course_progress_id"]]
        subject = subjects_by_id.get(course["subject_id"], {})
        school_class = classes_by_id.get(course["class_id"], {})
        enriched.append(
            {
                **entry,
                "subject_name": subject.get("name"),
                "subject_type": subject.get("type"),
                "class_name": school_class.get("name"),
                "class_level": school_class.get("level"),
                "lesson_label": labels.get(entry["lesson_id"]),
            }
        )
    enriched.sort(key=lambda item: (item.get("scheduled_date") is None, item.get("scheduled_date") or 0))
    return enriched
