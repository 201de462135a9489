from fastapi import APIRouter, Depends, Query, status

from app.api.deps import get_clock, get_current_teacher_id, get_record_store
from app.core.clock import Clock
from app.core.config import get_settings
from app.core.exceptions import InvalidRequestError, NotFoundError
from app.db.record_id import parse_record_id
from app.db.record_store import RecordStore
from app.schemas.lesson import LessonCreate, LessonOut, LessonUpdate
from app.services.lesson_progress import stamp_comments
from app.services.lessons import sort_lessons
from app.services.ownership import verify_lesson_ownership, verify_subject_ownership
from app.services.store_errors import store_operation

router = APIRouter()


async def _label_taken(
    store: RecordStore,
    teacher_id: str,
    subject_id: str,
    label: str,
    *,
    exclude_id: str | None = None,
) -> bool:
    matches = await store.find_many("lessons", {"user_id": teacher_id, "subject_id": subject_id, "label": label})
    return any(item["id"] != exclude_id for item in matches)


@router.get("/", response_model=list[LessonOut])
async def list_lessons(
    subject_id: str | None = Query(default=None),
    teacher_id: str = Depends(get_current_teacher_id),
    store: RecordStore = Depends(get_record_store),
) -> list[LessonOut]:
    filters = {"user_id": teacher_id}
    if subject_id:
        filters["subject_id"] = parse_record_id(subject_id, "subjects")
    with store_operation("listing lessons"):
        lessons = await store.find_many("lessons", filters)
    return sort_lessons(lessons)


@router.get("/{lesson_id}", response_model=LessonOut)
async def get_lesson(
    lesson_id: str,
    teacher_id: str = Depends(get_current_teacher_id),
    store: RecordStore = Depends(get_record_store),
) -> LessonOut:
    return await verify_lesson_ownership(store, teacher_id, parse_record_id(lesson_id, "lessons"))


@router.post("/", response_model=LessonOut, status_code=status.HTTP_201_CREATED)
async def create_lesson(
    payload: LessonCreate,
    teacher_id: str = Depends(get_current_teacher_id),
    store: RecordStore = Depends(get_record_store),
    clock: Clock = Depends(get_clock),
) -> LessonOut:
    subject_id = parse_record_id(payload.subject_id, "subjects")
    await verify_subject_ownership(store, teacher_id, subject_id)
    if await _label_taken(store, teacher_id, subject_id, payload.label):
        raise InvalidRequestError("A lesson with this label already exists in the subject")

    order = payload.order
    if order is None:
        siblings = await store.find_many("lessons", {"user_id": teacher_id, "subject_id": subject_id})
        order = len(siblings) + 1

    data = payload.model_dump(exclude={"comments"})
    data.update(
        duration=payload.duration or get_settings().default_lesson_duration_minutes,
        subject_id=subject_id,
        order=order,
        user_id=teacher_id,
        comments=stamp_comments(payload.comments, clock()),
    )
    with store_operation("creating lesson"):
        return await store.create("lessons", data)


@router.patch("/{lesson_id}", response_model=LessonOut)
async def update_lesson(
    lesson_id: str,
    payload: LessonUpdate,
    teacher_id: str = Depends(get_current_teacher_id),
    store: RecordStore = Depends(get_record_store),
    clock: Clock = Depends(get_clock),
) -> LessonOut:
    record_id = parse_record_id(lesson_id, "lessons")
    lesson = await verify_lesson_ownership(store, teacher_id, record_id)

    now = clock()
    data = payload.model_dump(exclude_unset=True, exclude={"comments"})
    data = {key: value for key, value in data.items() if value is not None or key == "order"}
    if "subject_id" in data:
        data["subject_id"] = parse_record_id(data["subject_id"], "subjects")
        await verify_subject_ownership(store, teacher_id, data["subject_id"])
    if "label" in data or "subject_id" in data:
        label = data.get("label", lesson["label"]).strip()
        subject_id = data.get("subject_id", lesson["subject_id"])
        if await _label_taken(store, teacher_id, subject_id, label, exclude_id=record_id):
            raise InvalidRequestError("A lesson with this label already exists in the subject")
        if "label" in data:
            data["label"] = label
    if payload.comments is not None:
        data["comments"] = stamp_comments(payload.comments, now)
    data["updated_at"] = now

    with store_operation("updating lesson"):
        updated = await store.update(record_id, data)
        if updated is None:
            raise NotFoundError("Lesson not found")
    return updated


@router.delete("/{lesson_id}")
async def delete_lesson(
    lesson_id: str,
    teacher_id: str = Depends(get_current_teacher_id),
    store: RecordStore = Depends(get_record_store),
) -> dict:
    record_id = parse_record_id(lesson_id, "lessons")
    await verify_lesson_ownership(store, teacher_id, record_id)
    with store_operation("deleting lesson"):
        await store.delete(record_id)
    return {"success": True}
