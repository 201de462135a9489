from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

# Naive local wall-clock time; schedules carry no timezone.
Clock = Callable[[], datetime]


def system_clock() -> datetime:
    return datetime.now()
