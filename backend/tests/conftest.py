import os
from pathlib import Path
import tempfile

# The app's own engine is only touched by startup and the readiness check.
os.environ.setdefault(
    "DATABASE_URL",
    f"sqlite+pysqlite:///{Path(tempfile.gettempdir()) / 'courseplan-tests.db'}",
)

from datetime import datetime  # noqa: E402
from types import SimpleNamespace  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import app.models  # noqa: E402,F401
from app.api.deps import get_clock, get_db  # noqa: E402
from app.core.security import create_access_token  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.db.record_store import SqlRecordStore  # noqa: E402
from app.main import app  # noqa: E402

TEACHER_ID = "teacher-1"
OTHER_TEACHER_ID = "teacher-2"

# Wednesday; the first Monday after it is 2025-01-06.
DEFAULT_NOW = datetime(2025, 1, 1, 7, 0)


class FrozenClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture()
def make_slot():
    def _slot(day_of_week: int, start_hour: int, end_hour: int, start_date: str = "2025-01-06") -> dict:
        return {
            "day_of_week": day_of_week,
            "start_hour": start_hour,
            "end_hour": end_hour,
            "start_date": start_date,
        }

    return _slot


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def store(db):
    return SqlRecordStore(db)


@pytest.fixture()
def clock():
    return FrozenClock(DEFAULT_NOW)


@pytest.fixture()
def client(session_factory, clock):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture()
def auth_headers():
    def _headers(teacher_id: str = TEACHER_ID) -> dict:
        return {"Authorization": f"Bearer {create_access_token(teacher_id)}"}

    return _headers


@pytest.fixture()
def seed_course(store):
    """Create a class, a subject with ordered lessons and a course progress."""

    async def _seed(
        teacher_id: str = TEACHER_ID,
        *,
        durations=(60,),
        schedule=(),
        subject_name: str = "Mathematics",
        class_name: str = "6th A",
    ) -> SimpleNamespace:
        school_class = await store.create(
            "classes",
            {"user_id": teacher_id, "name": class_name, "level": "6th", "school": "Jean Moulin", "students_count": 28},
        )
        subject = await store.create(
            "subjects",
            {"user_id": teacher_id, "name": subject_name, "type": "science", "total_hours": 40, "hours_per_week": 4},
        )
        lessons = []
        for index, duration in enumerate(durations, start=1):
            lessons.append(
                await store.create(
                    "lessons",
                    {
                        "user_id": teacher_id,
                        "subject_id": subject["id"],
                        "label": f"Lesson {index}",
                        "order": index,
                        "duration": duration,
                        "comments": [],
                    },
                )
            )
        course_progress = await store.create(
            "course_progress",
            {
                "user_id": teacher_id,
                "class_id": school_class["id"],
                "subject_id": subject["id"],
                "recurring_schedule": list(schedule),
                "auto_scheduled": False,
            },
        )
        return SimpleNamespace(
            school_class=school_class,
            subject=subject,
            lessons=lessons,
            course_progress=course_progress,
        )

    return _seed
