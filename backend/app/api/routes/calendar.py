from fastapi import APIRouter, Depends

from app.api.deps import get_current_teacher_id, get_record_store
from app.db.record_store import RecordStore
from app.schemas.course_progress import CalendarEntry
from app.services.course_progress import list_calendar_entries

router = APIRouter()


@router.get("/", response_model=list[CalendarEntry])
async def list_calendar(
    teacher_id: str = Depends(get_current_teacher_id),
    store: RecordStore = Depends(get_record_store),
) -> list[CalendarEntry]:
    return await list_calendar_entries(store, teacher_id)
