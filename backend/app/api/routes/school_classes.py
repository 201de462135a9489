from fastapi import APIRouter, Depends, status

from app.api.deps import get_clock, get_current_teacher_id, get_record_store
from app.core.clock import Clock
from app.core.exceptions import NotFoundError
from app.db.record_id import parse_record_id
from app.db.record_store import RecordStore
from app.schemas.school_class import SchoolClassCreate, SchoolClassOut, SchoolClassUpdate
from app.services.ownership import verify_class_ownership
from app.services.store_errors import store_operation

router = APIRouter()


@router.get("/", response_model=list[SchoolClassOut])
async def list_classes(
    teacher_id: str = Depends(get_current_teacher_id),
    store: RecordStore = Depends(get_record_store),
) -> list[SchoolClassOut]:
    with store_operation("listing classes"):
        return await store.find_many("classes", {"user_id": teacher_id}, order_by=("name",))


@router.get("/{class_id}", response_model=SchoolClassOut)
async def get_class(
    class_id: str,
    teacher_id: str = Depends(get_current_teacher_id),
    store: RecordStore = Depends(get_record_store),
) -> SchoolClassOut:
    return await verify_class_ownership(store, teacher_id, parse_record_id(class_id, "classes"))


@router.post("/", response_model=SchoolClassOut, status_code=status.HTTP_201_CREATED)
async def create_class(
    payload: SchoolClassCreate,
    teacher_id: str = Depends(get_current_teacher_id),
    store: RecordStore = Depends(get_record_store),
) -> SchoolClassOut:
    with store_operation("creating class"):
        return await store.create("classes", {**payload.model_dump(), "user_id": teacher_id})


@router.patch("/{class_id}", response_model=SchoolClassOut)
async def update_class(
    class_id: str,
    payload: SchoolClassUpdate,
    teacher_id: str = Depends(get_current_teacher_id),
    store: RecordStore = Depends(get_record_store),
    clock: Clock = Depends(get_clock),
) -> SchoolClassOut:
    record_id = parse_record_id(class_id, "classes")
    await verify_class_ownership(store, teacher_id, record_id)

    data = {key: value for key, value in payload.model_dump(exclude_unset=True).items() if value is not None}
    data["updated_at"] = clock()
    with store_operation("updating class"):
        updated = await store.update(record_id, data)
        if updated is None:
            raise NotFoundError("Class not found")
    return updated
