import anyio
import pytest

from app.services.schedule_locks import CourseScheduleLocks


@pytest.mark.anyio
async def test_holds_for_the_same_key_are_serialised():
    locks = CourseScheduleLocks()
    events: list[str] = []

    async def run(name: str) -> None:
        async with locks.hold("course_progress:1"):
            events.append(f"{name}-start")
            await anyio.sleep(0.01)
            events.append(f"{name}-end")

    async with anyio.create_task_group() as group:
        group.start_soon(run, "a")
        group.start_soon(run, "b")

    assert events[0].endswith("-start")
    assert events[1] == events[0].replace("start", "end")
    assert events[2].endswith("-start")
    assert events[3] == events[2].replace("start", "end")


@pytest.mark.anyio
async def test_holds_for_different_keys_do_not_block():
    locks = CourseScheduleLocks()
    entered: list[str] = []

    with anyio.fail_after(1):
        async with locks.hold("course_progress:1"):
            async with locks.hold("course_progress:2"):
                entered.append("both")

    assert entered == ["both"]


@pytest.mark.anyio
async def test_key_can_be_held_again_after_release():
    locks = CourseScheduleLocks()

    with anyio.fail_after(1):
        async with locks.hold("course_progress:1"):
            pass
        async with locks.hold("course_progress:1"):
            pass
