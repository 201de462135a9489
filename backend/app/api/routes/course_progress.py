from fastapi import APIRouter, Body, Depends, Query, status

from app.api.deps import get_clock, get_current_teacher_id, get_record_store
from app.core.clock import Clock
from app.core.config import get_settings
from app.db.record_id import parse_record_id
from app.db.record_store import RecordStore
from app.schemas.course_progress import (
    CourseProgressCreate,
    CourseProgressOut,
    CourseProgressUpdate,
    CourseProgressWithLessons,
)
from app.schemas.schedule import (
    GenerationOptions,
    GenerationResult,
    RecurringScheduleSlot,
    RecurringScheduleUpdate,
    ScheduleConflict,
    SchedulePreviewRequest,
    SchedulePreviewResult,
)
from app.services import course_progress as course_progress_service
from app.services.conflict_service import check_schedule_conflicts
from app.services.lesson_scheduler import generate_lesson_progress_schedule
from app.services.lessons import load_subject_lessons
from app.services.ownership import verify_course_progress_ownership
from app.services.schedule_preview import calculate_schedule_preview

router = APIRouter()


def _course_progress_id(raw: str) -> str:
    return parse_record_id(raw, "course_progress")


@router.get("/", response_model=list[CourseProgressOut])
async def list_course_progress(
    class_id: str | None = Query(default=None),
    subject_id: str | None = Query(default=None),
    teacher_id: str = Depends(get_current_teacher_id),
    store: RecordStore = Depends(get_record_store),
) -> list[CourseProgressOut]:
    return await course_progress_service.list_course_progress(
        store,
        teacher_id,
        class_id=parse_record_id(class_id, "classes") if class_id else None,
        subject_id=parse_record_id(subject_id, "subjects") if subject_id else None,
    )


@router.get("/{course_progress_id}", response_model=CourseProgressOut)
async def get_course_progress(
    course_progress_id: str,
    teacher_id: str = Depends(get_current_teacher_id),
    store: RecordStore = Depends(get_record_store),
) -> CourseProgressOut:
    return await verify_course_progress_ownership(store, teacher_id, _course_progress_id(course_progress_id))


@router.get("/{course_progress_id}/lessons", response_model=CourseProgressWithLessons)
async def get_course_progress_with_lessons(
    course_progress_id: str,
    teacher_id: str = Depends(get_current_teacher_id),
    store: RecordStore = Depends(get_record_store),
) -> CourseProgressWithLessons:
    course_progress, lesson_progress = await course_progress_service.get_course_progress_with_lessons(
        store, teacher_id, _course_progress_id(course_progress_id)
    )
    return {**course_progress, "lesson_progress": lesson_progress}


@router.post("/", response_model=CourseProgressOut, status_code=status.HTTP_201_CREATED)
async def create_course_progress(
    payload: CourseProgressCreate,
    teacher_id: str = Depends(get_current_teacher_id),
    store: RecordStore = Depends(get_record_store),
) -> CourseProgressOut:
    return await course_progress_service.create_course_progress(
        store,
        teacher_id,
        payload,
        class_id=parse_record_id(payload.class_id, "classes"),
        subject_id=parse_record_id(payload.subject_id, "subjects"),
    )


@router.patch("/{course_progress_id}", response_model=CourseProgressOut)
async def patch_course_progress(
    course_progress_id: str,
    payload: CourseProgressUpdate,
    teacher_id: str = Depends(get_current_teacher_id),
    store: RecordStore = Depends(get_record_store),
    clock: Clock = Depends(get_clock),
) -> CourseProgressOut:
    return await course_progress_service.patch_course_progress(
        store, teacher_id, _course_progress_id(course_progress_id), payload, clock=clock
    )


@router.delete("/{course_progress_id}")
async def delete_course_progress(
    course_progress_id: str,
    teacher_id: str = Depends(get_current_teacher_id),
    store: RecordStore = Depends(get_record_store),
) -> dict:
    await course_progress_service.delete_course_progress(store, teacher_id, _course_progress_id(course_progress_id))
    return {"success": True}


@router.put("/{course_progress_id}/schedule", response_model=CourseProgressOut)
async def update_course_progress_schedule(
    course_progress_id: str,
    payload: RecurringScheduleUpdate,
    teacher_id: str = Depends(get_current_teacher_id),
    store: RecordStore = Depends(get_record_store),
    clock: Clock = Depends(get_clock),
) -> CourseProgressOut:
    return await course_progress_service.update_course_progress_schedule(
        store, teacher_id, _course_progress_id(course_progress_id), payload.recurring_schedule, clock=clock
    )


@router.post("/{course_progress_id}/schedule/conflicts", response_model=list[ScheduleConflict])
async def check_course_schedule_conflicts(
    course_progress_id: str,
    payload: RecurringScheduleUpdate,
    teacher_id: str = Depends(get_current_teacher_id),
    store: RecordStore = Depends(get_record_store),
) -> list[ScheduleConflict]:
    return await check_schedule_conflicts(
        store, teacher_id, _course_progress_id(course_progress_id), payload.recurring_schedule
    )


@router.post("/{course_progress_id}/schedule/generate", response_model=GenerationResult)
async def generate_course_schedule(
    course_progress_id: str,
    options: GenerationOptions | None = Body(default=None),
    teacher_id: str = Depends(get_current_teacher_id),
    store: RecordStore = Depends(get_record_store),
    clock: Clock = Depends(get_clock),
) -> GenerationResult:
    return await generate_lesson_progress_schedule(
        store,
        teacher_id,
        _course_progress_id(course_progress_id),
        options,
        clock=clock,
        horizon_weeks=get_settings().schedule_horizon_weeks,
    )


@router.post("/{course_progress_id}/schedule/preview", response_model=SchedulePreviewResult)
async def preview_course_schedule(
    course_progress_id: str,
    payload: SchedulePreviewRequest | None = Body(default=None),
    teacher_id: str = Depends(get_current_teacher_id),
    store: RecordStore = Depends(get_record_store),
) -> SchedulePreviewResult:
    course_progress = await verify_course_progress_ownership(store, teacher_id, _course_progress_id(course_progress_id))
    if payload is not None and payload.recurring_schedule is not None:
        slots = payload.recurring_schedule
    else:
        slots = [RecurringScheduleSlot.model_validate(item) for item in course_progress.get("recurring_schedule") or []]
    lessons = await load_subject_lessons(store, teacher_id, course_progress["subject_id"])
    return calculate_schedule_preview(lessons, slots, horizon_weeks=get_settings().schedule_horizon_weeks)
