from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.routes import (
    calendar,
    course_progress,
    health,
    lesson_progress,
    lessons,
    school_classes,
    subjects,
)
from app.core.config import get_settings
from app.core.exceptions import AppError
from app.core.middleware import RequestSizeLimitMiddleware, RequestTimingMiddleware
from app.db.bootstrap import ensure_runtime_schema_compatibility

settings = get_settings()

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    logging.getLogger("app").setLevel(level)


@asynccontextmanager
async def lifespan(_: FastAPI):
    configure_logging(settings.log_level)
    ensure_runtime_schema_compatibility()
    logger.info("APP STARTED | project=%s | api_prefix=%s", settings.project_name, settings.api_prefix)
    yield


async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("APP ERROR | path=%s | status=%s | message=%s", request.url.path, exc.status_code, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message, "details": exc.details},
    )


app = FastAPI(title=settings.project_name, lifespan=lifespan)
app.add_exception_handler(AppError, app_error_handler)

app.add_middleware(RequestSizeLimitMiddleware, max_bytes=settings.max_request_size_bytes)
app.add_middleware(RequestTimingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, prefix=settings.api_prefix, tags=["health"])
app.include_router(school_classes.router, prefix=f"{settings.api_prefix}/classes", tags=["classes"])
app.include_router(subjects.router, prefix=f"{settings.api_prefix}/subjects", tags=["subjects"])
app.include_router(lessons.router, prefix=f"{settings.api_prefix}/lessons", tags=["lessons"])
app.include_router(
    course_progress.router,
    prefix=f"{settings.api_prefix}/course-progress",
    tags=["course-progress"],
)
app.include_router(
    lesson_progress.router,
    prefix=f"{settings.api_prefix}/lesson-progress",
    tags=["lesson-progress"],
)
app.include_router(calendar.router, prefix=f"{settings.api_prefix}/calendar", tags=["calendar"])
