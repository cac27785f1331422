# taskclient/store.py
"""Client state container for the task list.

State lives in one dict that is replaced, never mutated in place, by the
pure :func:`reduce` function. :class:`TaskStore` owns that dict, applies
actions under a lock and hands out deep copies via :meth:`TaskStore.snapshot`.

Each async operation dispatches ``<op>/pending`` and then either
``<op>/fulfilled`` or ``<op>/rejected``. Responses are applied in arrival
order, so when two fetches overlap the one answering last wins even if it
was issued first. Nothing cancels the older request.
"""

import copy
import logging
import threading
from typing import Any, Callable, Optional, Union

import httpx

from taskclient.api import TasksAPI, error_message
from taskclient.models import SortOrder, Task, TaskInput, TaskStats, TaskStatus

logger = logging.getLogger(__name__)

FETCH_TASKS = "tasks/fetchTasks"
CREATE_TASK = "tasks/createTask"
UPDATE_TASK = "tasks/updateTask"
DELETE_TASK = "tasks/deleteTask"
UPDATE_TASK_STATUS = "tasks/updateTaskStatus"
FETCH_STATS = "tasks/fetchStats"

OPERATIONS = (FETCH_TASKS, CREATE_TASK, UPDATE_TASK, DELETE_TASK, UPDATE_TASK_STATUS, FETCH_STATS)

DEFAULT_ERRORS = {
    FETCH_TASKS: "Failed to fetch tasks",
    CREATE_TASK: "Failed to create task",
    UPDATE_TASK: "Failed to update task",
    DELETE_TASK: "Failed to delete task",
    UPDATE_TASK_STATUS: "Failed to update task status",
    FETCH_STATS: "Failed to fetch statistics",
}

SET_FILTER = "tasks/setFilter"
SET_SORT_BY = "tasks/setSortBy"
SET_SORT_ORDER = "tasks/setSortOrder"
CLEAR_ERROR = "tasks/clearError"
RESET_VIEW = "tasks/resetView"

DEFAULT_SORT_BY = "createdAt"
DEFAULT_SORT_ORDER = SortOrder.desc.value


def initial_state() -> dict:
    """Return a fresh state dict with default filter and sort."""
    return {
        "tasks": [],
        "loading": False,
        "error": None,
        "filter": {"status": None, "priority": None},
        "sort_by": DEFAULT_SORT_BY,
        "sort_order": DEFAULT_SORT_ORDER,
        "stats": None,
        "requests": {op: "idle" for op in OPERATIONS},
    }


def action(type_: str, payload: Any = None, error: Optional[str] = None) -> dict:
    return {"type": type_, "payload": payload, "error": error}


def _enum_value(value: Any) -> Optional[str]:
    value = getattr(value, "value", value)
    return value or None


# -- reducer -----------------------------------------------------------------


def _replace_task(tasks: list, updated: Task) -> list:
    """Swap in *updated* where the ids match; an unknown id changes nothing."""
    return [updated if task.id == updated.id else task for task in tasks]


def _reduce_async(state: dict, op: str, phase: str, act: dict) -> dict:
    state = {**state, "requests": {**state["requests"], op: phase}}

    if phase == "pending":
        state = {**state, "error": None}
        if op == FETCH_TASKS:
            state = {**state, "loading": True}
        return state

    if phase == "rejected":
        state = {**state, "error": act["error"] or DEFAULT_ERRORS[op]}
        if op == FETCH_TASKS:
            state = {**state, "loading": False}
        return state

    payload = act["payload"]
    if op == FETCH_TASKS:
        return {**state, "loading": False, "tasks": list(payload)}
    if op == CREATE_TASK:
        return {**state, "tasks": [payload, *state["tasks"]]}
    if op in (UPDATE_TASK, UPDATE_TASK_STATUS):
        return {**state, "tasks": _replace_task(state["tasks"], payload)}
    if op == DELETE_TASK:
        return {**state, "tasks": [t for t in state["tasks"] if t.id != payload]}
    if op == FETCH_STATS:
        return {**state, "stats": payload}
    return state


def reduce(state: dict, act: dict) -> dict:
    """Return the state that results from applying *act* to *state*."""
    type_ = act["type"]
    op, _, phase = type_.rpartition("/")
    if op in OPERATIONS and phase in ("pending", "fulfilled", "rejected"):
        return _reduce_async(state, op, phase, act)

    payload = act.get("payload")
    if type_ == SET_FILTER:
        payload = payload or {}
        return {
            **state,
            "filter": {
                "status": _enum_value(payload.get("status")),
                "priority": _enum_value(payload.get("priority")),
            },
        }
    if type_ == SET_SORT_BY:
        return {**state, "sort_by": payload or DEFAULT_SORT_BY}
    if type_ == SET_SORT_ORDER:
        return {**state, "sort_order": _enum_value(payload) or DEFAULT_SORT_ORDER}
    if type_ == CLEAR_ERROR:
        return {**state, "error": None}
    if type_ == RESET_VIEW:
        return {
            **state,
            "filter": {"status": None, "priority": None},
            "sort_by": DEFAULT_SORT_BY,
            "sort_order": DEFAULT_SORT_ORDER,
        }

    logger.debug("Ignoring unknown action %s", type_)
    return state


# -- store -------------------------------------------------------------------


class TaskStore:
    """Holds the client state and runs the async task operations.

    The async methods return the operation's result, or ``None`` when it
    was rejected. With ``unwrap=True`` a rejection re-raises the original
    exception after the rejected action has been applied.
    """

    def __init__(self, api: TasksAPI, state: Optional[dict] = None) -> None:
        self._api = api
        self._state: dict = copy.deepcopy(state) if state is not None else initial_state()
        self._lock = threading.Lock()
        self._listeners: list[Callable[[], None]] = []

    # -- reads ---------------------------------------------------------------

    def snapshot(self) -> dict:
        """Return a deep copy of the current state."""
        with self._lock:
            return copy.deepcopy(self._state)

    # -- dispatch ------------------------------------------------------------

    def dispatch(self, act: dict) -> None:
        with self._lock:
            self._state = reduce(self._state, act)
        for listener in list(self._listeners):
            listener()

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Call *listener* after every dispatch. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def _run(self, op: str, call, fulfilled_payload=None, unwrap: bool = False):
        self.dispatch(action(f"{op}/pending"))
        try:
            result = await call()
        except (httpx.HTTPError, ValueError) as exc:
            message = error_message(exc)
            logger.warning("%s rejected: %s", op, message)
            self.dispatch(action(f"{op}/rejected", error=message))
            if unwrap:
                raise
            return None
        payload = result if fulfilled_payload is None else fulfilled_payload
        self.dispatch(action(f"{op}/fulfilled", payload=payload))
        return result

    # -- async operations ----------------------------------------------------

    async def fetch_tasks(self, unwrap: bool = False) -> Optional[list[Task]]:
        """Fetch the list using the filter and sort currently in state."""
        with self._lock:
            filter_ = dict(self._state["filter"])
            sort_by = self._state["sort_by"]
            sort_order = self._state["sort_order"]
        return await self._run(
            FETCH_TASKS,
            lambda: self._api.get_tasks(
                status=filter_["status"],
                priority=filter_["priority"],
                sort_by=sort_by,
                order=sort_order,
            ),
            unwrap=unwrap,
        )

    async def create_task(self, data: Union[TaskInput, dict], unwrap: bool = False) -> Optional[Task]:
        return await self._run(CREATE_TASK, lambda: self._api.create_task(data), unwrap=unwrap)

    async def update_task(
        self, task_id: int, data: Union[TaskInput, dict], unwrap: bool = False
    ) -> Optional[Task]:
        return await self._run(
            UPDATE_TASK, lambda: self._api.update_task(task_id, data), unwrap=unwrap
        )

    async def delete_task(self, task_id: int, unwrap: bool = False) -> Optional[int]:
        result = await self._run(
            DELETE_TASK,
            lambda: self._api.delete_task(task_id),
            fulfilled_payload=task_id,
            unwrap=unwrap,
        )
        return None if result is None else task_id

    async def update_task_status(
        self, task_id: int, status: Union[TaskStatus, str], unwrap: bool = False
    ) -> Optional[Task]:
        return await self._run(
            UPDATE_TASK_STATUS,
            lambda: self._api.update_task_status(task_id, status),
            unwrap=unwrap,
        )

    async def fetch_stats(self, unwrap: bool = False) -> Optional[TaskStats]:
        return await self._run(FETCH_STATS, self._api.get_stats, unwrap=unwrap)

    # -- synchronous actions -------------------------------------------------
    # None of these touch the task list; callers re-fetch afterwards.

    def set_filter(self, status: Optional[str] = None, priority: Optional[str] = None) -> None:
        self.dispatch(action(SET_FILTER, {"status": status, "priority": priority}))

    def set_sort_by(self, sort_by: str) -> None:
        self.dispatch(action(SET_SORT_BY, sort_by))

    def set_sort_order(self, order: Union[SortOrder, str]) -> None:
        self.dispatch(action(SET_SORT_ORDER, order))

    def clear_error(self) -> None:
        self.dispatch(action(CLEAR_ERROR))

    def reset_view(self) -> None:
        self.dispatch(action(RESET_VIEW))
