from collections.abc import Generator

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from app.core.clock import Clock, system_clock
from app.core.security import decode_token
from app.db.record_store import SqlRecordStore
from app.db.session import SessionLocal

security = HTTPBearer()


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_record_store(db: Session = Depends(get_db)) -> SqlRecordStore:
    return SqlRecordStore(db)


def get_clock() -> Clock:
    return system_clock


def get_current_teacher_id(credentials: HTTPAuthorizationCredentials = Depends(security)) -> str:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_token(credentials.credentials)
    except JWTError as exc:
        raise credentials_exception from exc

    teacher_id = payload.get("sub")
    if not teacher_id:
        raise credentials_exception
    return str(teacher_id)
