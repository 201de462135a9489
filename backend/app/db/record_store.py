"""Record store used by the scheduling services.

Records are grouped into tables and addressed by ``table:key`` ids. Every
operation is awaitable and returns plain dicts, so services never hold ORM
instances across calls. The SQLAlchemy implementation below runs each blocking
session call in a worker thread and commits per operation.
"""
from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import Enum
from functools import partial
import logging
from typing import Any, Protocol

import anyio.to_thread
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import StoreError
from app.db.base import Base
from app.db.record_id import record_table
from app.models.course_progress import CourseProgress, LessonProgress
from app.models.lesson import Lesson
from app.models.school_class import SchoolClass
from app.models.subject import Subject

logger = logging.getLogger(__name__)

TABLE_MODELS: dict[str, type[Base]] = {
    "classes": SchoolClass,
    "subjects": Subject,
    "lessons": Lesson,
    "course_progress": CourseProgress,
    "lesson_progress": LessonProgress,
}

Record = dict[str, Any]


class RecordStore(Protocol):
    async def find_by_id(self, table: str, record_id: str) -> Record | None: ...

    async def find_many(
        self,
        table: str,
        filters: Mapping[str, Any] | None = None,
        *,
        order_by: Sequence[str] = (),
    ) -> list[Record]: ...

    async def create(self, table: str, content: Mapping[str, Any]) -> Record: ...

    async def update(self, record_id: str, patch: Mapping[str, Any]) -> Record | None: ...

    async def delete(self, record_id: str) -> bool: ...


def _to_record(instance: Base) -> Record:
    record: Record = {}
    for column in instance.__table__.columns:
        value = getattr(instance, column.key)
        if isinstance(value, Enum):
            value = value.value
        record[column.key] = value
    return record


class SqlRecordStore:
    def __init__(self, db: Session, models: Mapping[str, type[Base]] | None = None) -> None:
        self._db = db
        self._models = dict(models or TABLE_MODELS)

    def _model(self, table: str) -> type[Base]:
        model = self._models.get(table)
        if model is None:
            raise StoreError(f"Unknown table '{table}'")
        return model

    async def _run(self, operation: str, table: str, func, *args):
        try:
            return await anyio.to_thread.run_sync(partial(func, *args))
        except SQLAlchemyError as exc:
            self._db.rollback()
            logger.exception("STORE OPERATION FAILED | operation=%s | table=%s", operation, table)
            raise StoreError(f"Store operation '{operation}' failed on table '{table}'") from exc

    async def find_by_id(self, table: str, record_id: str) -> Record | None:
        model = self._model(table)
        # Malformed or foreign-table ids name no record of this table.
        id_table, _, key = record_id.partition(":")
        if id_table != table or not key:
            return None
        return await self._run("find_by_id", table, self._find_by_id, model, record_id)

    def _find_by_id(self, model: type[Base], record_id: str) -> Record | None:
        instance = self._db.get(model, record_id)
        return _to_record(instance) if instance is not None else None

    async def find_many(
        self,
        table: str,
        filters: Mapping[str, Any] | None = None,
        *,
        order_by: Sequence[str] = (),
    ) -> list[Record]:
        model = self._model(table)
        return await self._run("find_many", table, self._find_many, model, dict(filters or {}), tuple(order_by))

    def _find_many(self, model: type[Base], filters: dict[str, Any], order_by: tuple[str, ...]) -> list[Record]:
        statement = select(model)
        for key, value in filters.items():
            column = getattr(model, key)
            if isinstance(value, (list, tuple, set, frozenset)):
                statement = statement.where(column.in_(list(value)))
            else:
                statement = statement.where(column == value)
        for key in order_by:
            statement = statement.order_by(getattr(model, key))
        return [_to_record(item) for item in self._db.execute(statement).scalars()]

    async def create(self, table: str, content: Mapping[str, Any]) -> Record:
        model = self._model(table)
        return await self._run("create", table, self._create, model, dict(content))

    def _create(self, model: type[Base], content: dict[str, Any]) -> Record:
        instance = model(**content)
        self._db.add(instance)
        self._db.commit()
        self._db.refresh(instance)
        return _to_record(instance)

    async def update(self, record_id: str, patch: Mapping[str, Any]) -> Record | None:
        table = record_table(record_id)
        model = self._model(table)
        columns = set(model.__table__.columns.keys())
        unknown = sorted(set(patch) - columns)
        if unknown:
            raise StoreError(f"Unknown field(s) for table '{table}': {', '.join(unknown)}")
        return await self._run("update", table, self._update, model, record_id, dict(patch))

    def _update(self, model: type[Base], record_id: str, patch: dict[str, Any]) -> Record | None:
        instance = self._db.get(model, record_id)
        if instance is None:
            return None
        for key, value in patch.items():
            setattr(instance, key, value)
        self._db.commit()
        self._db.refresh(instance)
        return _to_record(instance)

    async def delete(self, record_id: str) -> bool:
        table = record_table(record_id)
        model = self._model(table)
        return await self._run("delete", table, self._delete, model, record_id)

    def _delete(self, model: type[Base], record_id: str) -> bool:
        instance = self._db.get(model, record_id)
        if instance is None:
            return False
        self._db.delete(instance)
        self._db.commit()
        return True
