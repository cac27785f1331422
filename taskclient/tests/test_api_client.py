"""Tests for the httpx task API client against the in-process app."""

import httpx
import pytest

from taskclient.api import TasksAPI, error_message
from taskclient.models import Task, TaskInput, TaskPriority, TaskStatus

pytestmark = pytest.mark.anyio


async def test_create_and_get_task(api: TasksAPI):
    created = await api.create_task(TaskInput(title="Write report"))
    assert isinstance(created, Task)
    assert created.status == TaskStatus.todo
    assert created.priority == TaskPriority.medium

    fetched = await api.get_task_by_id(created.id)
    assert fetched == created


async def test_create_task_from_dict_with_wire_keys(api: TasksAPI):
    created = await api.create_task({"title": "Due soon", "dueDate": "2026-12-24T00:00:00Z"})
    assert created.due_date is not None
    assert created.due_date.year == 2026


async def test_get_tasks_passes_filter_and_sort(api: TasksAPI):
    await api.create_task({"title": "Banana", "priority": "high"})
    await api.create_task({"title": "Apple", "priority": "high"})
    await api.create_task({"title": "Cherry", "priority": "low"})

    tasks = await api.get_tasks(priority=TaskPriority.high, sort_by="title", order="asc")
    assert [t.title for t in tasks] == ["Apple", "Banana"]


async def test_update_task_sends_only_set_fields(api: TasksAPI):
    created = await api.create_task({"title": "Draft", "description": "keep"})
    updated = await api.update_task(created.id, TaskInput(priority=TaskPriority.high))
    assert updated.priority == TaskPriority.high
    assert updated.description == "keep"
    assert updated.title == "Draft"


async def test_update_task_status(api: TasksAPI):
    created = await api.create_task({"title": "Go"})
    updated = await api.update_task_status(created.id, TaskStatus.done)
    assert updated.status == TaskStatus.done
    assert updated.updated_at > created.updated_at


async def test_server_error_propagates_as_http_status_error(api: TasksAPI):
    with pytest.raises(httpx.HTTPStatusError) as exc_info:
        await api.get_task_by_id(12345)
    assert exc_info.value.response.status_code == 404
    assert error_message(exc_info.value) == "Task not found"


async def test_validation_error_message(api: TasksAPI):
    created = await api.create_task({"title": "Go"})
    with pytest.raises(httpx.HTTPStatusError) as exc_info:
        await api.update_task_status(created.id, "blocked")
    assert exc_info.value.response.status_code == 400
    assert error_message(exc_info.value).startswith("Valid status is required")


async def test_delete_task(api: TasksAPI):
    created = await api.create_task({"title": "Bye"})
    result = await api.delete_task(created.id)
    assert result.id == created.id
    with pytest.raises(httpx.HTTPStatusError):
        await api.get_task_by_id(created.id)


async def test_get_stats(api: TasksAPI):
    await api.create_task({"title": "a", "status": "in-progress"})
    await api.create_task({"title": "b", "priority": "high"})
    stats = await api.get_stats()
    assert stats.total == 2
    assert stats.by_status.in_progress == 1
    assert stats.by_status.todo == 1
    assert stats.by_priority.high == 1


async def test_health(api: TasksAPI):
    health = await api.health()
    assert health.status == "ok"


async def test_transport_error_propagates_unchanged():
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(refuse)) as http:
        api = TasksAPI("http://tasks.invalid/api", client=http)
        with pytest.raises(httpx.ConnectError):
            await api.get_tasks()


async def test_owned_client_is_closed_on_exit():
    async with TasksAPI("http://tasks.invalid/api") as api:
        client = api._client
    assert client.is_closed


async def test_shared_client_is_left_open():
    async with httpx.AsyncClient() as http:
        async with TasksAPI("http://tasks.invalid/api", client=http):
            pass
        assert not http.is_closed


def test_error_message_without_json_body():
    request = httpx.Request("GET", "http://tasks.invalid/api/tasks")
    response = httpx.Response(502, text="Bad gateway", request=request)
    exc = httpx.HTTPStatusError("Server error '502 Bad Gateway'", request=request, response=response)
    assert error_message(exc) == "Server error '502 Bad Gateway'"
