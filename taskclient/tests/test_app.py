"""Tests for the terminal presentation layer."""

import pytest

from taskclient.app import (
    DELETE_PROMPT,
    EMPTY_MESSAGE,
    CommandError,
    TaskApp,
    parse_fields,
    run_repl,
)
from taskclient.store import DELETE_TASK, TaskStore

pytestmark = pytest.mark.anyio


class Confirmer:
    def __init__(self, answer: bool):
        self.answer = answer
        self.prompts = []

    def __call__(self, prompt: str) -> bool:
        self.prompts.append(prompt)
        return self.answer


@pytest.fixture
def confirmer() -> Confirmer:
    return Confirmer(True)


@pytest.fixture
def app(store: TaskStore, confirmer: Confirmer) -> TaskApp:
    return TaskApp(store, confirm=confirmer)


async def test_empty_board(app: TaskApp):
    await app.load()
    screen = app.render()
    assert EMPTY_MESSAGE in screen
    assert "Total Tasks 0" in screen


async def test_create_renders_task_and_stats(app: TaskApp):
    assert await app.create({"title": "Write report", "priority": "high", "dueDate": "2026-11-02"})
    screen = app.render()
    assert "Write report" in screen
    assert "(To Do, high)" in screen
    assert "due 2026-11-02" in screen
    assert "Total Tasks 1 | To Do 1" in screen
    assert "Task created successfully!" in screen


async def test_delete_requires_confirmation(app: TaskApp, store: TaskStore, confirmer: Confirmer):
    await app.create({"title": "Precious"})
    task_id = store.snapshot()["tasks"][0].id

    confirmer.answer = False
    assert await app.delete(task_id) is False
    snap = store.snapshot()
    assert confirmer.prompts == [DELETE_PROMPT]
    assert snap["requests"][DELETE_TASK] == "idle"
    assert [t.id for t in snap["tasks"]] == [task_id]

    confirmer.answer = True
    assert await app.delete(task_id) is True
    assert store.snapshot()["tasks"] == []


@pytest.mark.parametrize("answer", [False, True])
async def test_delete_awaits_async_confirmation(store: TaskStore, answer: bool):
    prompts = []

    async def confirm(prompt: str) -> bool:
        prompts.append(prompt)
        return answer

    app = TaskApp(store, confirm=confirm)
    await app.create({"title": "Maybe"})
    task_id = store.snapshot()["tasks"][0].id

    assert await app.delete(task_id) is answer
    assert prompts == [DELETE_PROMPT]
    remaining = [t.id for t in store.snapshot()["tasks"]]
    assert remaining == ([] if answer else [task_id])


async def test_failed_edit_shows_error_and_keeps_list(app: TaskApp, store: TaskStore):
    await app.create({"title": "Stable"})
    task_id = store.snapshot()["tasks"][0].id
    assert await app.edit(task_id, {"title": ""}) is False
    screen = app.render()
    assert "Error: Task title is required" in screen
    assert "Stable" in screen

    app.dismiss()
    assert "Error:" not in app.render()


async def test_filter_gestures_refetch(app: TaskApp, store: TaskStore):
    await app.create({"title": "Open", "priority": "low"})
    await app.create({"title": "Closed", "status": "done", "priority": "high"})

    await app.filter_status("done")
    assert [t.title for t in store.snapshot()["tasks"]] == ["Closed"]

    await app.filter_priority("low")
    assert store.snapshot()["tasks"] == []
    assert "Status: Done | Priority: Low" in app.render()

    await app.clear_filters()
    assert {t.title for t in store.snapshot()["tasks"]} == {"Open", "Closed"}


async def test_sort_gestures(app: TaskApp, store: TaskStore):
    await app.create({"title": "Banana"})
    await app.create({"title": "Apple"})
    await app.sort_by("title")
    await app.sort_order("asc")
    assert [t.title for t in store.snapshot()["tasks"]] == ["Apple", "Banana"]
    assert "Sort: Title ascending" in app.render()


async def test_commands_drive_the_app(app: TaskApp, store: TaskStore):
    assert await app.handle_command('new "Write report" desc="first draft" priority=high')
    task = store.snapshot()["tasks"][0]
    assert (task.title, task.description) == ("Write report", "first draft")

    assert await app.handle_command(f"mark {task.id} in-progress")
    assert store.snapshot()["tasks"][0].status.value == "in-progress"

    assert await app.handle_command("status todo")
    assert store.snapshot()["tasks"] == []
    assert await app.handle_command("status all")
    assert len(store.snapshot()["tasks"]) == 1

    assert await app.handle_command(f"edit {task.id} title=Renamed")
    assert store.snapshot()["tasks"][0].title == "Renamed"

    assert await app.handle_command(f"rm {task.id}")
    assert store.snapshot()["tasks"] == []
    assert await app.handle_command("exit") is False


@pytest.mark.parametrize(
    "line",
    ["launch", "mark 1", "rm x", "status maybe", "sort colour", "order up", "new", 'new "open'],
)
async def test_bad_commands_raise(app: TaskApp, line: str):
    with pytest.raises(CommandError):
        await app.handle_command(line)


def test_parse_fields():
    assert parse_fields(["desc=hello world", "due="]) == {"description": "hello world", "dueDate": None}
    with pytest.raises(CommandError):
        parse_fields(["colour=red"])


async def test_run_repl_until_exit(app: TaskApp):
    lines = iter(["new Groceries", "bogus", "exit"])
    screens = []

    async def read_line(prompt: str) -> str:
        return next(lines)

    await run_repl(app, read_line, write=screens.append)
    assert len(screens) == 3
    assert "Groceries" in screens[1]
    assert "Unknown command 'bogus'" in screens[2]


async def test_run_repl_stops_at_end_of_input(app: TaskApp):
    async def read_line(prompt: str) -> str:
        raise EOFError

    screens = []
    await run_repl(app, read_line, write=screens.append)
    assert len(screens) == 1
