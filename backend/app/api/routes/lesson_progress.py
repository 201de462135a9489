from fastapi import APIRouter, Depends, status

from app.api.deps import get_clock, get_current_teacher_id, get_record_store
from app.core.clock import Clock
from app.db.record_id import parse_record_id
from app.db.record_store import RecordStore
from app.schemas.course_progress import LessonProgressCreate, LessonProgressOut, LessonProgressUpdate
from app.services import lesson_progress as lesson_progress_service

router = APIRouter()


def _lesson_progress_id(raw: str) -> str:
    return parse_record_id(raw, "lesson_progress")


@router.get("/{lesson_progress_id}", response_model=LessonProgressOut)
async def get_lesson_progress(
    lesson_progress_id: str,
    teacher_id: str = Depends(get_current_teacher_id),
    store: RecordStore = Depends(get_record_store),
) -> LessonProgressOut:
    return await lesson_progress_service.get_lesson_progress(store, teacher_id, _lesson_progress_id(lesson_progress_id))


@router.post("/", response_model=LessonProgressOut, status_code=status.HTTP_201_CREATED)
async def create_lesson_progress(
    payload: LessonProgressCreate,
    teacher_id: str = Depends(get_current_teacher_id),
    store: RecordStore = Depends(get_record_store),
    clock: Clock = Depends(get_clock),
) -> LessonProgressOut:
    return await lesson_progress_service.create_lesson_progress(
        store,
        teacher_id,
        payload,
        lesson_id=parse_record_id(payload.lesson_id, "lessons"),
        course_progress_id=parse_record_id(payload.course_progress_id, "course_progress"),
        clock=clock,
    )


@router.patch("/{lesson_progress_id}", response_model=LessonProgressOut)
async def patch_lesson_progress(
    lesson_progress_id: str,
    payload: LessonProgressUpdate,
    teacher_id: str = Depends(get_current_teacher_id),
    store: RecordStore = Depends(get_record_store),
    clock: Clock = Depends(get_clock),
) -> LessonProgressOut:
    return await lesson_progress_service.patch_lesson_progress(
        store, teacher_id, _lesson_progress_id(lesson_progress_id), payload, clock=clock
    )


@router.delete("/{lesson_progress_id}")
async def delete_lesson_progress(
    lesson_progress_id: str,
    teacher_id: str = Depends(get_current_teacher_id),
    store: RecordStore = Depends(get_record_store),
) -> dict:
    await lesson_progress_service.delete_lesson_progress(store, teacher_id, _lesson_progress_id(lesson_progress_id))
    return {"success": True}
