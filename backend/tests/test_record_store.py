import pytest

from app.core.exceptions import StoreError
from app.db.record_id import parse_record_id, record_table


def test_parse_record_id_qualifies_bare_keys():
    assert parse_record_id("abc", "subjects") == "subjects:abc"
    assert parse_record_id(" subjects:abc ", "lessons") == "subjects:abc"
    assert record_table("lessons:abc") == "lessons"
    with pytest.raises(ValueError):
        record_table("abc")


@pytest.mark.anyio
async def test_create_and_find_round_trip(store):
    created = await store.create(
        "classes",
        {"user_id": "teacher-1", "name": "5th B", "level": "5th", "school": "Victor Hugo", "students_count": 24},
    )

    assert created["id"].startswith("classes:")
    assert await store.find_by_id("classes", created["id"]) == created
    assert await store.find_by_id("subjects", created["id"]) is None
    assert await store.find_by_id("classes", ":abc") is None
    assert await store.find_by_id("classes", "classes:") is None


@pytest.mark.anyio
async def test_enums_come_back_as_plain_values(store):
    created = await store.create(
        "lessons",
        {"user_id": "teacher-1", "subject_id": "subjects:s1", "label": "Fractions", "comments": []},
    )

    assert created["status"] == "to_do"
    assert created["scope"] == "core"
    assert created["duration"] == 60


@pytest.mark.anyio
async def test_find_many_supports_in_filters_and_ordering(store):
    for order, label in ((2, "B"), (1, "A"), (3, "C")):
        await store.create(
            "lessons",
            {"user_id": "teacher-1", "subject_id": "subjects:s1", "label": label, "order": order, "comments": []},
        )

    found = await store.find_many("lessons", {"label": ["A", "C"]}, order_by=("order",))

    assert [item["label"] for item in found] == ["A", "C"]


@pytest.mark.anyio
async def test_update_and_delete(store):
    created = await store.create(
        "subjects",
        {"user_id": "teacher-1", "name": "History", "type": "humanities", "total_hours": 30, "hours_per_week": 2},
    )

    updated = await store.update(created["id"], {"hours_per_week": 3})
    assert updated["hours_per_week"] == 3

    with pytest.raises(StoreError):
        await store.update(created["id"], {"colour": "blue"})

    assert await store.update("subjects:missing", {"hours_per_week": 1}) is None
    assert await store.delete(created["id"]) is True
    assert await store.delete(created["id"]) is False


@pytest.mark.anyio
async def test_unknown_table_is_a_store_error(store):
    with pytest.raises(StoreError):
        await store.find_many("teachers")
