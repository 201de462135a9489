from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, timedelta

from app.schemas.schedule import RecurringScheduleSlot

DEFAULT_HORIZON_WEEKS = 104


@dataclass(frozen=True)
class SlotOccurrence:
    date: date
    start_hour: int
    end_hour: int
    slot_index: int

    @property
    def duration_hours(self) -> int:
        return get_slot_duration(self.start_hour, self.end_hour)

    @property
    def label(self) -> str:
        return f"{self.start_hour}h-{self.end_hour}h"


def get_slot_duration(start_hour: int, end_hour: int) -> int:
    """Length of a slot in hours; non-positive for an invalid slot."""
    return end_hour - start_hour


def usable_minutes(start_hour: int, end_hour: int) -> int:
    return max(0, get_slot_duration(start_hour, end_hour)) * 60


def is_valid_slot(slot: RecurringScheduleSlot) -> bool:
    return get_slot_duration(slot.start_hour, slot.end_hour) > 0


def times_overlap(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    # Half-open ranges: back-to-back slots do not overlap.
    return start_a < end_b and start_b < end_a


def generate_schedule_dates(
    slots: Sequence[RecurringScheduleSlot],
    total_hours_needed: float,
    *,
    max_weeks: int = DEFAULT_HORIZON_WEEKS,
) -> list[SlotOccurrence]:
    """Project weekly slots onto calendar dates until the hour budget is covered.

    Walks day by day from the earliest ``start_date`` of the usable slots. A
    slot yields an occurrence on each matching ISO weekday on or after its own
    ``start_date``; same-day slots are emitted by start hour. Slots without
    capacity are never emitted. The walk stops as soon as the emitted
    capacity reaches ``total_hours_needed`` or after ``max_weeks`` weeks,
    whichever comes first.
    """
    usable = [(index, slot) for index, slot in enumerate(slots) if is_valid_slot(slot)]
    if not usable or total_hours_needed <= 0:
        return []

    by_weekday: dict[int, list[tuple[int, RecurringScheduleSlot]]] = defaultdict(list)
    for index, slot in usable:
        by_weekday[slot.day_of_week].append((index, slot))
    for day_slots in by_weekday.values():
        day_slots.sort(key=lambda item: (item[1].start_hour, item[1].end_hour, item[0]))

    first_day = min(slot.start_date for _, slot in usable)
    occurrences: list[SlotOccurrence] = []
    emitted_hours = 0
    for offset in range(max(0, max_weeks) * 7):
        current = first_day + timedelta(days=offset)
        for index, slot in by_weekday.get(current.isoweekday(), ()):
            if current < slot.start_date:
                continue
            occurrences.append(
                SlotOccurrence(
                    date=current,
                    start_hour=slot.start_hour,
                    end_hour=slot.end_hour,
                    slot_index=index,
                )
            )
            emitted_hours += get_slot_duration(slot.start_hour, slot.end_hour)
            if emitted_hours >= total_hours_needed:
                return occurrences
    return occurrences
