# taskclient/app.py
"""Terminal presentation of the task list.

:class:`TaskApp` renders a :class:`~taskclient.store.TaskStore` snapshot as
text and turns user gestures into store operations. :func:`run_repl` wraps
it in a small command loop.
"""

import inspect
import logging
import shlex
from typing import Awaitable, Callable, Optional, Union

from taskclient.models import SORT_FIELDS, SortOrder, TaskPriority, TaskStatus
from taskclient.store import TaskStore

logger = logging.getLogger(__name__)

DELETE_PROMPT = "Are you sure you want to delete this task?"
EMPTY_MESSAGE = "No tasks found. Create your first task to get started!"

STATUS_LABELS = {"todo": "To Do", "in-progress": "In Progress", "done": "Done"}
SORT_LABELS = {
    "createdAt": "Created Date",
    "dueDate": "Due Date",
    "priority": "Priority",
    "title": "Title",
}

# Command-line spellings of task fields -> wire keys.
FIELD_KEYS = {
    "title": "title",
    "desc": "description",
    "description": "description",
    "status": "status",
    "priority": "priority",
    "due": "dueDate",
    "dueDate": "dueDate",
}

HELP_TEXT = """\
Commands:
  new TITLE [desc=TEXT] [priority=low|medium|high] [status=S] [due=YYYY-MM-DD]
  edit ID field=value ...       change only the given fields (due= clears the date)
  mark ID todo|in-progress|done
  rm ID                         delete (asks for confirmation)
  status todo|in-progress|done|all
  priority low|medium|high|all
  sort createdAt|dueDate|priority|title
  order asc|desc
  clear                         reset filters and sort
  refresh                       reload tasks and statistics
  dismiss                       hide the current message
  help | exit"""


class CommandError(ValueError):
    """A command line that could not be understood."""


def parse_fields(tokens: list[str]) -> dict:
    """Parse ``key=value`` tokens into a request body with wire keys."""
    body = {}
    for token in tokens:
        key, sep, value = token.partition("=")
        if not sep or key not in FIELD_KEYS:
            raise CommandError(
                f"Expected field=value with field in {', '.join(FIELD_KEYS)}: {token!r}"
            )
        wire_key = FIELD_KEYS[key]
        body[wire_key] = None if wire_key == "dueDate" and value == "" else value
    return body


def _choice(value: str, choices) -> Optional[str]:
    """Map ``all``/empty to None; reject values outside *choices*."""
    if value in ("", "all"):
        return None
    if value not in choices:
        raise CommandError(f"Expected one of: {', '.join(choices)}, all")
    return value


class TaskApp:
    """Renders store state and dispatches user intents into it.

    *confirm* is asked before any delete and may be a plain function or a
    coroutine function; the delete is only dispatched when it answers True.
    """

    def __init__(
        self,
        store: TaskStore,
        confirm: Callable[[str], Union[bool, Awaitable[bool]]],
    ) -> None:
        self.store = store
        self.confirm = confirm
        self.notice: Optional[str] = None

    # -- gestures ------------------------------------------------------------

    async def load(self) -> None:
        await self.store.fetch_tasks()
        await self.store.fetch_stats()

    async def _after_mutation(self, result, notice: str) -> bool:
        if result is None:
            self.notice = None
            return False
        self.notice = notice
        await self.store.fetch_stats()
        return True

    async def create(self, data: dict) -> bool:
        result = await self.store.create_task(data)
        return await self._after_mutation(result, "Task created successfully!")

    async def edit(self, task_id: int, data: dict) -> bool:
        result = await self.store.update_task(task_id, data)
        return await self._after_mutation(result, "Task updated successfully!")

    async def delete(self, task_id: int) -> bool:
        answer = self.confirm(DELETE_PROMPT)
        if inspect.isawaitable(answer):
            answer = await answer
        if not answer:
            return False
        result = await self.store.delete_task(task_id)
        return await self._after_mutation(result, "Task deleted successfully!")

    async def change_status(self, task_id: int, status: str) -> bool:
        result = await self.store.update_task_status(task_id, status)
        return await self._after_mutation(result, "Task status updated!")

    async def filter_status(self, status: Optional[str]) -> None:
        current = self.store.snapshot()["filter"]
        self.store.set_filter(status=status, priority=current["priority"])
        await self.store.fetch_tasks()

    async def filter_priority(self, priority: Optional[str]) -> None:
        current = self.store.snapshot()["filter"]
        self.store.set_filter(status=current["status"], priority=priority)
        await self.store.fetch_tasks()

    async def sort_by(self, field: str) -> None:
        self.store.set_sort_by(field)
        await self.store.fetch_tasks()

    async def sort_order(self, order: str) -> None:
        self.store.set_sort_order(order)
        await self.store.fetch_tasks()

    async def clear_filters(self) -> None:
        self.store.reset_view()
        await self.store.fetch_tasks()

    def dismiss(self) -> None:
        self.notice = None
        self.store.clear_error()

    # -- rendering -----------------------------------------------------------

    def render(self) -> str:
        state = self.store.snapshot()
        lines = []

        stats = state["stats"]
        if stats is not None:
            lines.append(
                f"Total Tasks {stats.total} | To Do {stats.by_status.todo} | "
                f"In Progress {stats.by_status.in_progress} | Done {stats.by_status.done}"
            )

        filter_ = state["filter"]
        lines.append(
            "Status: {} | Priority: {} | Sort: {} {}".format(
                STATUS_LABELS.get(filter_["status"], "All"),
                (filter_["priority"] or "all").capitalize(),
                SORT_LABELS.get(state["sort_by"], state["sort_by"]),
                "ascending" if state["sort_order"] == "asc" else "descending",
            )
        )
        lines.append("")

        if state["loading"]:
            lines.append("Loading...")
        elif not state["tasks"]:
            lines.append(EMPTY_MESSAGE)
        else:
            for task in state["tasks"]:
                lines.extend(_render_task(task))

        if state["error"]:
            lines.extend(["", f"Error: {state['error']}"])
        elif self.notice:
            lines.extend(["", self.notice])
        return "\n".join(lines)

    # -- command loop ----------------------------------------------------------

    async def handle_command(self, line: str) -> bool:
        """Run one command line. Returns False when the user asked to exit."""
        try:
            tokens = shlex.split(line)
        except ValueError as exc:
            raise CommandError(str(exc)) from exc
        if not tokens:
            return True
        command, args = tokens[0].lower(), tokens[1:]

        if command in ("exit", "quit"):
            return False
        if command == "help":
            self.notice = HELP_TEXT
        elif command == "new":
            if not args:
                raise CommandError("Usage: new TITLE [field=value ...]")
            await self.create({"title": args[0], **parse_fields(args[1:])})
        elif command == "edit":
            await self.edit(_task_id(args), parse_fields(args[1:]))
        elif command == "mark":
            if len(args) != 2:
                raise CommandError("Usage: mark ID todo|in-progress|done")
            await self.change_status(_task_id(args), args[1])
        elif command == "rm":
            await self.delete(_task_id(args))
        elif command == "status":
            await self.filter_status(_choice(_single(args), [s.value for s in TaskStatus]))
        elif command == "priority":
            await self.filter_priority(_choice(_single(args), [p.value for p in TaskPriority]))
        elif command == "sort":
            field = _single(args)
            if field not in SORT_FIELDS:
                raise CommandError(f"Expected one of: {', '.join(SORT_FIELDS)}")
            await self.sort_by(field)
        elif command == "order":
            order = _single(args)
            if order not in [o.value for o in SortOrder]:
                raise CommandError("Expected asc or desc")
            await self.sort_order(order)
        elif command == "clear":
            await self.clear_filters()
        elif command == "refresh":
            await self.load()
        elif command == "dismiss":
            self.dismiss()
        else:
            raise CommandError(f"Unknown command {command!r}; type 'help'")
        return True


def _single(args: list[str]) -> str:
    if len(args) != 1:
        raise CommandError("Expected exactly one value")
    return args[0]


def _task_id(args: list[str]) -> int:
    if not args:
        raise CommandError("Missing task id")
    try:
        return int(args[0])
    except ValueError as exc:
        raise CommandError(f"Task id must be a number: {args[0]!r}") from exc


def _render_task(task) -> list[str]:
    header = f"[#{task.id}] {task.title}  ({STATUS_LABELS[task.status.value]}, {task.priority.value})"
    if task.due_date is not None:
        header += f"  due {task.due_date.date().isoformat()}"
    lines = [header]
    if task.description:
        lines.append(f"    {task.description}")
    return lines


async def run_repl(
    app: TaskApp,
    read_line: Callable[[str], Awaitable[str]],
    write: Callable[[str], None] = print,
) -> None:
    """Render, read a command, run it; until ``exit`` or end of input."""
    await app.load()
    while True:
        write(app.render())
        try:
            line = await read_line("\n> ")
        except EOFError:
            return
        try:
            if not await app.handle_command(line):
                return
        except CommandError as exc:
            logger.debug("Rejected command %r: %s", line, exc)
            app.notice = str(exc)
