from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime, time, timedelta
import logging
from time import perf_counter

from app.core.clock import Clock, system_clock
from app.core.exceptions import InvalidRequestError
from app.db.record_store import Record, RecordStore
from app.models.course_progress import LessonProgressStatus
from app.schemas.schedule import (
    GenerationOptions,
    GenerationResult,
    GenerationWarning,
    RecurringScheduleSlot,
    day_name,
)
from app.services.lessons import lesson_minutes, load_subject_lessons
from app.services.ownership import verify_course_progress_ownership
from app.services.schedule_locks import course_schedule_locks
from app.services.schedule_math import (
    DEFAULT_HORIZON_WEEKS,
    SlotOccurrence,
    generate_schedule_dates,
    is_valid_slot,
    usable_minutes,
)
from app.services.store_errors import store_operation

logger = logging.getLogger(__name__)

SPLIT_WARNING = "Lesson will be split across multiple slots"
INSUFFICIENT_SLOTS_WARNING = "Insufficient available slots for this lesson"


@dataclass(frozen=True)
class PlannedPlacement:
    lesson_id: str
    occurrence: SlotOccurrence
    scheduled_date: datetime
    duration_minutes: int
    existing_id: str | None = None


@dataclass
class SchedulePlan:
    placements: list[PlannedPlacement] = field(default_factory=list)
    warnings: list[GenerationWarning] = field(default_factory=list)


def _naive(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def _is_future_placement(record: Record | None, now: datetime) -> bool:
    if record is None:
        return False
    scheduled = record.get("scheduled_date")
    if scheduled is None:
        return False
    if isinstance(scheduled, str):
        scheduled = datetime.fromisoformat(scheduled)
    return _naive(scheduled) > now


def _placement_start(occurrence: SlotOccurrence, used_minutes: int) -> datetime:
    return datetime.combine(occurrence.date, time()) + timedelta(hours=occurrence.start_hour, minutes=used_minutes)


def _format_hours(minutes: int) -> str:
    return f"{minutes / 60:g}h"


def invalid_slot_warnings(slots: Sequence[RecurringScheduleSlot]) -> list[GenerationWarning]:
    return [
        GenerationWarning(
            message=(
                f"Slot on {day_name(slot.day_of_week)} ({slot.start_hour}h-{slot.end_hour}h) "
                "has no usable capacity and was ignored"
            )
        )
        for slot in slots
        if not is_valid_slot(slot)
    ]


def plan_lesson_placements(
    lessons: Sequence[Record],
    occurrences: Sequence[SlotOccurrence],
    *,
    handle_long_lessons: str = "split",
    existing_by_lesson: Mapping[str, Record] | None = None,
    now: datetime | None = None,
) -> SchedulePlan:
    """Greedy first-fit packing of ordered lessons into slot occurrences.

    Single forward pass, no backtracking. Capacities are tracked in whole
    minutes. A lesson whose existing placement lies after ``now`` is kept as
    is and consumes no capacity. An existing placement is reused for the
    first fragment of its lesson only; later fragments become new records.
    """
    existing = dict(existing_by_lesson or {})
    now = now or system_clock()
    plan = SchedulePlan()
    remaining = [lesson_minutes(lesson) for lesson in lessons]
    lesson_index = 0

    def place(occurrence: SlotOccurrence, lesson_id: str, used: int, minutes: int) -> None:
        reused = existing.pop(lesson_id, None)
        plan.placements.append(
            PlannedPlacement(
                lesson_id=lesson_id,
                occurrence=occurrence,
                scheduled_date=_placement_start(occurrence, used),
                duration_minutes=minutes,
                existing_id=reused["id"] if reused is not None else None,
            )
        )

    for occurrence in occurrences:
        if lesson_index >= len(lessons):
            break
        capacity = usable_minutes(occurrence.start_hour, occurrence.end_hour)
        used = 0
        while used < capacity and lesson_index < len(lessons):
            lesson_id = lessons[lesson_index]["id"]
            if _is_future_placement(existing.get(lesson_id), now):
                lesson_index += 1
                continue

            slot_left = capacity - used
            lesson_left = remaining[lesson_index]

            if lesson_left <= slot_left:
                place(occurrence, lesson_id, used, lesson_left)
                used += lesson_left
                remaining[lesson_index] = 0
                lesson_index += 1
            elif handle_long_lessons == "reduce_duration":
                plan.warnings.append(
                    GenerationWarning(
                        lesson_id=lesson_id,
                        message=(
                            f"Lesson duration ({_format_hours(lesson_left)}) exceeds the available slot "
                            f"({_format_hours(slot_left)}); the duration was reduced"
                        ),
                    )
                )
                place(occurrence, lesson_id, used, slot_left)
                used = capacity
                remaining[lesson_index] = 0
                lesson_index += 1
            else:
                place(occurrence, lesson_id, used, slot_left)
                used = capacity
                remaining[lesson_index] -= slot_left
                plan.warnings.append(GenerationWarning(lesson_id=lesson_id, message=SPLIT_WARNING))

    for lesson in lessons[lesson_index:]:
        if _is_future_placement(existing.get(lesson["id"]), now):
            continue
        plan.warnings.append(GenerationWarning(lesson_id=lesson["id"], message=INSUFFICIENT_SLOTS_WARNING))

    return plan


async def generate_lesson_progress_schedule(
    store: RecordStore,
    teacher_id: str,
    course_progress_id: str,
    options: GenerationOptions | None = None,
    *,
    clock: Clock = system_clock,
    horizon_weeks: int = DEFAULT_HORIZON_WEEKS,
) -> GenerationResult:
    """Place the subject's lessons onto the course's weekly slots.

    Writes are issued one by one in placement order. A store failure stops
    the run and surfaces as ``StoreError``; placements written before it are
    kept. Runs for the same course progress are serialised in-process.
    """
    options = options or GenerationOptions()
    started = perf_counter()
    async with course_schedule_locks.hold(course_progress_id):
        course_progress = await verify_course_progress_ownership(store, teacher_id, course_progress_id)

        slots = [RecurringScheduleSlot.model_validate(item) for item in course_progress.get("recurring_schedule") or []]
        if not slots:
            raise InvalidRequestError("No recurring schedule slot configured for this course")

        lessons = await load_subject_lessons(store, teacher_id, course_progress["subject_id"])
        if not lessons:
            raise InvalidRequestError("No lessons found for this subject")

        logger.info(
            "LESSON SCHEDULE GENERATION START | teacher_id=%s | course_progress_id=%s | lessons=%s | slots=%s | mode=%s | regenerate=%s",
            teacher_id,
            course_progress_id,
            len(lessons),
            len(slots),
            options.handle_long_lessons,
            options.regenerate_existing,
        )

        total_hours_needed = sum(lesson_minutes(lesson) for lesson in lessons) / 60
        occurrences = generate_schedule_dates(slots, total_hours_needed, max_weeks=horizon_weeks)

        existing = await store.find_many(
            "lesson_progress",
            {"course_progress_id": course_progress_id},
            order_by=("created_at",),
        )
        if options.regenerate_existing:
            with store_operation("clearing scheduled lesson progress"):
                for record in existing:
                    if record.get("status") == LessonProgressStatus.scheduled.value:
                        await store.delete(record["id"])
            existing_by_lesson: dict[str, Record] = {}
        else:
            existing_by_lesson = {record["lesson_id"]: record for record in existing}

        now = clock()
        plan = plan_lesson_placements(
            lessons,
            occurrences,
            handle_long_lessons=options.handle_long_lessons,
            existing_by_lesson=existing_by_lesson,
            now=now,
        )

        generated = 0
        try:
            with store_operation("writing generated lesson progress"):
                for placement in plan.placements:
                    fields = {
                        "status": LessonProgressStatus.scheduled.value,
                        "scheduled_date": placement.scheduled_date,
                        "scheduled_duration": placement.duration_minutes,
                    }
                    if placement.existing_id is not None:
                        await store.update(placement.existing_id, {**fields, "updated_at": now})
                    else:
                        await store.create(
                            "lesson_progress",
                            {
                                "lesson_id": placement.lesson_id,
                                "course_progress_id": course_progress_id,
                                "comments": [],
                                **fields,
                            },
                        )
                    generated += 1
                await store.update(course_progress_id, {"auto_scheduled": True, "updated_at": now})
        except Exception:
            logger.warning(
                "LESSON SCHEDULE GENERATION ABORTED | course_progress_id=%s | written=%s | planned=%s",
                course_progress_id,
                generated,
                len(plan.placements),
            )
            raise

    warnings = invalid_slot_warnings(slots) + plan.warnings
    logger.info(
        "LESSON SCHEDULE GENERATION COMPLETE | course_progress_id=%s | generated=%s | warnings=%s | wall_ms=%s",
        course_progress_id,
        generated,
        len(warnings),
        int((perf_counter() - started) * 1000),
    )
    return GenerationResult(success=True, generated=generated, warnings=warnings)
