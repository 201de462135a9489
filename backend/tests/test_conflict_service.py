from datetime import date

import pytest

from app.core.exceptions import NotFoundError, StoreError
from app.db.record_store import SqlRecordStore
from app.schemas.schedule import RecurringScheduleSlot
from app.services.conflict_service import (
    check_schedule_conflicts,
    find_cross_course_conflicts,
    find_invalid_slots,
    find_self_conflicts,
)


def _slot(day: int, start: int, end: int) -> RecurringScheduleSlot:
    return RecurringScheduleSlot(day_of_week=day, start_hour=start, end_hour=end, start_date=date(2025, 1, 6))


class CourseLookupFailingStore(SqlRecordStore):
    async def find_many(self, table, filters=None, *, order_by=()):
        if table == "course_progress":
            raise StoreError("course lookup unavailable")
        return await super().find_many(table, filters, order_by=order_by)


def test_overlapping_slots_in_one_schedule_are_reported():
    conflicts = find_self_conflicts([_slot(1, 9, 11), _slot(1, 10, 12)])

    assert len(conflicts) == 1
    assert conflicts[0].conflict is True
    assert conflicts[0].message == "Internal conflict: two slots overlap on Monday (10h-11h)"
    assert conflicts[0].slot.start_hour == 9


def test_adjacent_or_other_day_slots_do_not_conflict():
    assert find_self_conflicts([_slot(1, 9, 10), _slot(1, 10, 11)]) == []
    assert find_self_conflicts([_slot(1, 9, 10), _slot(2, 9, 10)]) == []


def test_every_overlapping_pair_is_reported():
    conflicts = find_self_conflicts([_slot(3, 8, 12), _slot(3, 9, 10), _slot(3, 11, 12)])

    assert len(conflicts) == 2
    assert all("Wednesday" in conflict.message for conflict in conflicts)


def test_invalid_slots_are_reported():
    conflicts = find_invalid_slots([_slot(5, 10, 10), _slot(5, 8, 9)])

    assert len(conflicts) == 1
    assert conflicts[0].slot.day_of_week == 5
    assert "Friday" in conflicts[0].message


def test_cross_course_conflict_names_the_other_subject():
    other = {
        "id": "course_progress:other",
        "subject_id": "subjects:physics",
        "recurring_schedule": [{"day_of_week": 1, "start_hour": 8, "end_hour": 10, "start_date": "2025-01-06"}],
    }

    conflicts = find_cross_course_conflicts([_slot(1, 9, 11)], [other], {"subjects:physics": "Physics"})

    assert len(conflicts) == 1
    assert conflicts[0].message == 'Conflict with course "Physics" on Monday from 9h to 10h'
    assert conflicts[0].conflicting_course_progress_id == "course_progress:other"


def test_cross_course_conflict_falls_back_to_unknown_course():
    other = {
        "id": "course_progress:other",
        "subject_id": "subjects:gone",
        "recurring_schedule": [{"day_of_week": 2, "start_hour": 14, "end_hour": 16, "start_date": "2025-01-06"}],
    }

    conflicts = find_cross_course_conflicts([_slot(2, 15, 17)], [other], {})

    assert 'course "unknown course"' in conflicts[0].message


@pytest.mark.anyio
async def test_check_compares_against_other_courses_of_the_teacher(store, seed_course, make_slot):
    current = await seed_course(schedule=[make_slot(1, 9, 10)])
    physics = await seed_course(subject_name="Physics", schedule=[make_slot(1, 9, 10)])
    await seed_course("teacher-2", subject_name="Chemistry", schedule=[make_slot(1, 9, 10)])

    conflicts = await check_schedule_conflicts(
        store, "teacher-1", current.course_progress["id"], [_slot(1, 9, 10)]
    )

    assert len(conflicts) == 1
    assert conflicts[0].conflicting_course_progress_id == physics.course_progress["id"]
    assert conflicts[0].message == 'Conflict with course "Physics" on Monday from 9h to 10h'


@pytest.mark.anyio
async def test_check_combines_internal_and_invalid_findings(store, seed_course):
    current = await seed_course()

    conflicts = await check_schedule_conflicts(
        store,
        "teacher-1",
        current.course_progress["id"],
        [_slot(4, 9, 11), _slot(4, 10, 12), _slot(4, 15, 14)],
    )

    messages = [conflict.message for conflict in conflicts]
    assert len(messages) == 2
    assert messages[0].startswith("Invalid slot on Thursday")
    assert messages[1] == "Internal conflict: two slots overlap on Thursday (10h-11h)"


@pytest.mark.anyio
async def test_check_rejects_foreign_course_progress(store, seed_course):
    seeded = await seed_course("teacher-2")

    with pytest.raises(NotFoundError):
        await check_schedule_conflicts(store, "teacher-1", seeded.course_progress["id"], [_slot(1, 9, 10)])


@pytest.mark.anyio
async def test_check_returns_partial_results_when_course_lookup_fails(db, store, seed_course):
    current = await seed_course()
    failing = CourseLookupFailingStore(db)

    conflicts = await check_schedule_conflicts(
        failing,
        "teacher-1",
        current.course_progress["id"],
        [_slot(1, 9, 11), _slot(1, 10, 12)],
    )

    assert [conflict.message for conflict in conflicts] == [
        "Internal conflict: two slots overlap on Monday (10h-11h)"
    ]


def test_partially_overlapping_morning_slots():
    conflicts = find_self_conflicts([_slot(1, 8, 10), _slot(1, 9, 11)])

    assert [conflict.message for conflict in conflicts] == [
        "Internal conflict: two slots overlap on Monday (9h-10h)"
    ]


@pytest.mark.anyio
async def test_unreadable_stored_slots_are_skipped(store, seed_course, make_slot):
    current = await seed_course()
    legacy = await seed_course(subject_name="Physics", schedule=[make_slot(0, 9, 10), make_slot(1, 10, 11)])

    conflicts = await check_schedule_conflicts(
        store,
        "teacher-1",
        current.course_progress["id"],
        [_slot(1, 9, 11), _slot(1, 10, 12)],
    )

    assert [conflict.message for conflict in conflicts] == [
        "Internal conflict: two slots overlap on Monday (10h-11h)",
        'Conflict with course "Physics" on Monday from 10h to 11h',
        'Conflict with course "Physics" on Monday from 10h to 11h',
    ]
    assert {conflict.conflicting_course_progress_id for conflict in conflicts[1:]} == {
        legacy.course_progress["id"]
    }
