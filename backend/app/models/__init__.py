from app.models.course_progress import (  # noqa: F401
    CourseProgress,
    CourseProgressStatus,
    LessonProgress,
    LessonProgressStatus,
)
from app.models.lesson import Lesson, LessonScope, LessonStatus  # noqa: F401
from app.models.school_class import SchoolClass  # noqa: F401
from app.models.subject import Subject  # noqa: F401
