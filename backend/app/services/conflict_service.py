from __future__ import annotations

from collections.abc import Mapping, Sequence
import logging

from pydantic import ValidationError

from app.core.exceptions import StoreError
from app.db.record_store import Record, RecordStore
from app.schemas.schedule import RecurringScheduleSlot, ScheduleConflict, day_name
from app.services.ownership import verify_course_progress_ownership
from app.services.schedule_math import is_valid_slot, times_overlap

logger = logging.getLogger(__name__)

UNKNOWN_COURSE_NAME = "unknown course"


def _overlap_window(a: RecurringScheduleSlot, b: RecurringScheduleSlot) -> tuple[int, int]:
    return max(a.start_hour, b.start_hour), min(a.end_hour, b.end_hour)


def _slots_conflict(a: RecurringScheduleSlot, b: RecurringScheduleSlot) -> bool:
    return a.day_of_week == b.day_of_week and times_overlap(a.start_hour, a.end_hour, b.start_hour, b.end_hour)


def find_invalid_slots(slots: Sequence[RecurringScheduleSlot]) -> list[ScheduleConflict]:
    return [
        ScheduleConflict(
            message=(
                f"Invalid slot on {day_name(slot.day_of_week)}: end hour ({slot.end_hour}h) "
                f"must be after start hour ({slot.start_hour}h)"
            ),
            slot=slot,
        )
        for slot in slots
        if not is_valid_slot(slot)
    ]


def find_self_conflicts(slots: Sequence[RecurringScheduleSlot]) -> list[ScheduleConflict]:
    """Pairwise overlaps inside one proposed schedule, reported on the lower-indexed slot."""
    conflicts: list[ScheduleConflict] = []
    for i in range(len(slots)):
        first = slots[i]
        if not is_valid_slot(first):
            continue
        for j in range(i + 1, len(slots)):
            second = slots[j]
            if not is_valid_slot(second) or not _slots_conflict(first, second):
                continue
            start, end = _overlap_window(first, second)
            conflicts.append(
                ScheduleConflict(
                    message=(
                        f"Internal conflict: two slots overlap on {day_name(first.day_of_week)} "
                        f"({start}h-{end}h)"
                    ),
                    slot=first,
                )
            )
    return conflicts


def _stored_slots(course: Record) -> list[RecurringScheduleSlot]:
    """Parse a course's saved schedule, skipping slots that no longer validate."""
    slots: list[RecurringScheduleSlot] = []
    for raw_slot in course.get("recurring_schedule") or []:
        try:
            slots.append(RecurringScheduleSlot.model_validate(raw_slot))
        except ValidationError:
            logger.warning(
                "STORED SLOT SKIPPED | course_progress_id=%s | slot=%s",
                course.get("id"),
                raw_slot,
            )
    return slots


def find_cross_course_conflicts(
    slots: Sequence[RecurringScheduleSlot],
    other_courses: Sequence[Record],
    subject_names: Mapping[str, str],
) -> list[ScheduleConflict]:
    conflicts: list[ScheduleConflict] = []
    stored = [(course, _stored_slots(course)) for course in other_courses]
    for candidate in slots:
        if not is_valid_slot(candidate):
            continue
        for course, course_slots in stored:
            subject_name = subject_names.get(course.get("subject_id"), UNKNOWN_COURSE_NAME)
            for existing in course_slots:
                if not is_valid_slot(existing) or not _slots_conflict(candidate, existing):
                    continue
                start, end = _overlap_window(candidate, existing)
                conflicts.append(
                    ScheduleConflict(
                        message=(
                            f'Conflict with course "{subject_name}" on {day_name(candidate.day_of_week)} '
                            f"from {start}h to {end}h"
                        ),
                        slot=candidate,
                        conflicting_course_progress_id=course["id"],
                    )
                )
    return conflicts


async def _load_subject_names(store: RecordStore, teacher_id: str, courses: Sequence[Record]) -> dict[str, str]:
    names: dict[str, str] = {}
    for subject_id in dict.fromkeys(course.get("subject_id") for course in courses if course.get("subject_id")):
        subject = await store.find_by_id("subjects", subject_id)
        if subject is not None and subject.get("user_id") == teacher_id:
            names[subject_id] = subject.get("name") or UNKNOWN_COURSE_NAME
    return names


async def check_schedule_conflicts(
    store: RecordStore,
    teacher_id: str,
    course_progress_id: str,
    candidate_slots: Sequence[RecurringScheduleSlot],
) -> list[ScheduleConflict]:
    """Report overlaps for a proposed weekly schedule.

    Covers invalid slots, overlaps inside ``candidate_slots`` and overlaps
    with every other course progress of the same teacher. Reporting never
    blocks saving the schedule. A store failure while loading the other
    courses is logged and the conflicts found so far are returned.
    """
    await verify_course_progress_ownership(store, teacher_id, course_progress_id)

    slots = list(candidate_slots)
    conflicts = find_invalid_slots(slots)
    conflicts.extend(find_self_conflicts(slots))

    try:
        courses = await store.find_many("course_progress", {"user_id": teacher_id})
        other_courses = [course for course in courses if course["id"] != course_progress_id]
        subject_names = await _load_subject_names(store, teacher_id, other_courses)
        conflicts.extend(find_cross_course_conflicts(slots, other_courses, subject_names))
    except StoreError:
        logger.exception(
            "SCHEDULE CONFLICT LOOKUP FAILED | teacher_id=%s | course_progress_id=%s | partial_conflicts=%s",
            teacher_id,
            course_progress_id,
            len(conflicts),
        )

    return conflicts
