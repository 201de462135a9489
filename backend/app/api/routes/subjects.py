from fastapi import APIRouter, Depends, Query, status

from app.api.deps import get_clock, get_current_teacher_id, get_record_store
from app.core.clock import Clock
from app.core.exceptions import InvalidRequestError, NotFoundError
from app.db.record_id import parse_record_id
from app.db.record_store import RecordStore
from app.schemas.subject import SubjectCreate, SubjectOut, SubjectUpdate, SubjectWithLessons
from app.services.lessons import load_subject_lessons
from app.services.ownership import verify_subject_ownership
from app.services.store_errors import store_operation

router = APIRouter()


async def _name_taken(store: RecordStore, teacher_id: str, name: str, *, exclude_id: str | None = None) -> bool:
    matches = await store.find_many("subjects", {"user_id": teacher_id, "name": name.strip()})
    return any(item["id"] != exclude_id for item in matches)


@router.get("/", response_model=list[SubjectOut])
async def list_subjects(
    teacher_id: str = Depends(get_current_teacher_id),
    store: RecordStore = Depends(get_record_store),
) -> list[SubjectOut]:
    with store_operation("listing subjects"):
        return await store.find_many("subjects", {"user_id": teacher_id}, order_by=("name",))


@router.get("/name-exists")
async def subject_name_exists(
    name: str = Query(min_length=1, max_length=200),
    teacher_id: str = Depends(get_current_teacher_id),
    store: RecordStore = Depends(get_record_store),
) -> dict:
    return {"exists": await _name_taken(store, teacher_id, name)}


@router.get("/{subject_id}", response_model=SubjectWithLessons)
async def get_subject(
    subject_id: str,
    teacher_id: str = Depends(get_current_teacher_id),
    store: RecordStore = Depends(get_record_store),
) -> SubjectWithLessons:
    record_id = parse_record_id(subject_id, "subjects")
    subject = await verify_subject_ownership(store, teacher_id, record_id)
    lessons = await load_subject_lessons(store, teacher_id, record_id)
    return {**subject, "lessons": lessons}


@router.post("/", response_model=SubjectOut, status_code=status.HTTP_201_CREATED)
async def create_subject(
    payload: SubjectCreate,
    teacher_id: str = Depends(get_current_teacher_id),
    store: RecordStore = Depends(get_record_store),
) -> SubjectOut:
    if await _name_taken(store, teacher_id, payload.name):
        raise InvalidRequestError("A subject with this name already exists")
    with store_operation("creating subject"):
        return await store.create("subjects", {**payload.model_dump(), "user_id": teacher_id})


@router.patch("/{subject_id}", response_model=SubjectOut)
async def update_subject(
    subject_id: str,
    payload: SubjectUpdate,
    teacher_id: str = Depends(get_current_teacher_id),
    store: RecordStore = Depends(get_record_store),
    clock: Clock = Depends(get_clock),
) -> SubjectOut:
    record_id = parse_record_id(subject_id, "subjects")
    await verify_subject_ownership(store, teacher_id, record_id)

    data = payload.model_dump(exclude_unset=True)
    if data.get("name") is not None:
        data["name"] = data["name"].strip()
        if await _name_taken(store, teacher_id, data["name"], exclude_id=record_id):
            raise InvalidRequestError("A subject with this name already exists")
    data = {key: value for key, value in data.items() if value is not None or key == "description"}
    data["updated_at"] = clock()

    with store_operation("updating subject"):
        updated = await store.update(record_id, data)
        if updated is None:
            raise NotFoundError("Subject not found")
    return updated
