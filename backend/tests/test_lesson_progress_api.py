from datetime import datetime


def _setup(client, headers):
    school_class = client.post(
        "/api/classes/",
        json={"name": "5th C", "level": "5th", "school": "Pasteur", "students_count": 25},
        headers=headers,
    ).json()
    subject = client.post(
        "/api/subjects/",
        json={"name": "Geography", "type": "humanities", "total_hours": 20, "hours_per_week": 2},
        headers=headers,
    ).json()
    lesson = client.post(
        "/api/lessons/",
        json={"subject_id": subject["id"], "label": "Rivers of Europe"},
        headers=headers,
    ).json()
    course = client.post(
        "/api/course-progress/",
        json={"class_id": school_class["id"], "subject_id": subject["id"]},
        headers=headers,
    ).json()
    return course, lesson


def test_create_lesson_progress_with_comments(client, auth_headers):
    headers = auth_headers()
    course, lesson = _setup(client, headers)

    response = client.post(
        "/api/lesson-progress/",
        json={
            "lesson_id": lesson["id"],
            "course_progress_id": course["id"],
            "comments": [{"title": "Prep", "description": "  Bring the wall map  "}],
        },
        headers=headers,
    )

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "not_started"
    assert body["completed_at"] is None
    assert body["comments"] == [
        {
            "title": "Prep",
            "description": "Bring the wall map",
            "created_at": "2025-01-01T07:00:00",
            "updated_at": "2025-01-01T07:00:00",
        }
    ]

    duplicate = client.post(
        "/api/lesson-progress/",
        json={"lesson_id": lesson["id"], "course_progress_id": course["id"]},
        headers=headers,
    )
    assert duplicate.status_code == 400


def test_completing_a_lesson_stamps_completion_time(client, auth_headers, clock):
    headers = auth_headers()
    course, lesson = _setup(client, headers)
    created = client.post(
        "/api/lesson-progress/",
        json={"lesson_id": lesson["id"], "course_progress_id": course["id"]},
        headers=headers,
    ).json()

    clock.now = datetime(2025, 2, 3, 16, 30)
    patched = client.patch(f"/api/lesson-progress/{created['id']}", json={"status": "completed"}, headers=headers)

    assert patched.status_code == 200
    assert patched.json()["status"] == "completed"
    assert patched.json()["completed_at"] == "2025-02-03T16:30:00"

    clock.now = datetime(2025, 2, 10, 9, 0)
    again = client.patch(f"/api/lesson-progress/{created['id']}", json={"status": "completed"}, headers=headers)
    assert again.json()["completed_at"] == "2025-02-03T16:30:00"


def test_patch_only_touches_provided_fields(client, auth_headers):
    headers = auth_headers()
    course, lesson = _setup(client, headers)
    created = client.post(
        "/api/lesson-progress/",
        json={
            "lesson_id": lesson["id"],
            "course_progress_id": course["id"],
            "status": "scheduled",
            "scheduled_date": "2025-01-06T09:00:00",
            "scheduled_duration": 60,
        },
        headers=headers,
    ).json()

    patched = client.patch(
        f"/api/lesson-progress/{created['id']}",
        json={"scheduled_duration": 45},
        headers=headers,
    ).json()

    assert patched["status"] == "scheduled"
    assert patched["scheduled_date"] == "2025-01-06T09:00:00"
    assert patched["scheduled_duration"] == 45


def test_lesson_progress_is_scoped_to_course_owner(client, auth_headers):
    headers = auth_headers()
    course, lesson = _setup(client, headers)
    created = client.post(
        "/api/lesson-progress/",
        json={"lesson_id": lesson["id"], "course_progress_id": course["id"]},
        headers=headers,
    ).json()
    other = auth_headers("teacher-2")

    assert client.get(f"/api/lesson-progress/{created['id']}", headers=other).status_code == 404
    assert client.delete(f"/api/lesson-progress/{created['id']}", headers=other).status_code == 404
    assert client.get(f"/api/lesson-progress/{created['id']}", headers=headers).status_code == 200


def test_delete_lesson_progress(client, auth_headers):
    headers = auth_headers()
    course, lesson = _setup(client, headers)
    created = client.post(
        "/api/lesson-progress/",
        json={"lesson_id": lesson["id"], "course_progress_id": course["id"]},
        headers=headers,
    ).json()

    deleted = client.delete(f"/api/lesson-progress/{created['id']}", headers=headers)

    assert deleted.json() == {"success": True}
    missing = client.get(f"/api/lesson-progress/{created['id']}", headers=headers)
    assert missing.status_code == 404
    assert missing.json() == {"message": "Lesson progress not found", "details": {}}


def test_calendar_lists_enriched_entries(client, auth_headers, make_slot):
    headers = auth_headers()
    course, lesson = _setup(client, headers)
    client.put(
        f"/api/course-progress/{course['id']}/schedule",
        json={"recurring_schedule": [make_slot(4, 13, 14)]},
        headers=headers,
    )
    client.post(f"/api/course-progress/{course['id']}/schedule/generate", headers=headers)

    entries = client.get("/api/calendar/", headers=headers).json()

    assert len(entries) == 1
    entry = entries[0]
    assert entry["lesson_id"] == lesson["id"]
    assert entry["scheduled_date"] == "2025-01-09T13:00:00"
    assert entry["subject_name"] == "Geography"
    assert entry["subject_type"] == "humanities"
    assert entry["class_name"] == "5th C"
    assert entry["class_level"] == "5th"
    assert entry["lesson_label"] == "Rivers of Europe"
    assert client.get("/api/calendar/", headers=auth_headers("teacher-2")).json() == []
