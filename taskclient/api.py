# taskclient/api.py
"""Typed async wrapper around the task HTTP API.

One request per call. Failures are not retried: transport errors and
``httpx.HTTPStatusError`` for non-2xx responses reach the caller as raised.
"""

import logging
from typing import Optional, Union

import httpx

from taskclient import config
from taskclient.models import (
    DeleteResult,
    Health,
    Task,
    TaskInput,
    TaskStats,
    TaskStatus,
)

logger = logging.getLogger(__name__)


class TasksAPI:
    """Task API client bound to one ``httpx.AsyncClient``.

    Pass *client* to share a connection pool or to route requests through
    a custom transport; otherwise one is created for *base_url* and closed
    by :meth:`aclose`.
    """

    def __init__(
        self,
        base_url: str = config.BASE_URL,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client if client is not None else httpx.AsyncClient()

    async def __aenter__(self) -> "TasksAPI":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        url = f"{self._base_url}{path}"
        logger.debug("%s %s", method, url)
        response = await self._client.request(method, url, **kwargs)
        response.raise_for_status()
        return response

    # -- tasks ---------------------------------------------------------------

    async def get_tasks(
        self,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        sort_by: Optional[str] = None,
        order: Optional[str] = None,
    ) -> list[Task]:
        params = {
            key: getattr(value, "value", value)
            for key, value in (
                ("status", status),
                ("priority", priority),
                ("sortBy", sort_by),
                ("order", order),
            )
            if value
        }
        response = await self._request("GET", "/tasks", params=params)
        return [Task.model_validate(item) for item in response.json()]

    async def get_task_by_id(self, task_id: int) -> Task:
        response = await self._request("GET", f"/tasks/{task_id}")
        return Task.model_validate(response.json())

    async def create_task(self, task: Union[TaskInput, dict]) -> Task:
        response = await self._request("POST", "/tasks", json=_body(task))
        return Task.model_validate(response.json())

    async def update_task(self, task_id: int, task: Union[TaskInput, dict]) -> Task:
        response = await self._request("PUT", f"/tasks/{task_id}", json=_body(task))
        return Task.model_validate(response.json())

    async def delete_task(self, task_id: int) -> DeleteResult:
        response = await self._request("DELETE", f"/tasks/{task_id}")
        return DeleteResult.model_validate(response.json())

    async def update_task_status(self, task_id: int, status: Union[TaskStatus, str]) -> Task:
        response = await self._request(
            "PATCH",
            f"/tasks/{task_id}/status",
            json={"status": getattr(status, "value", status)},
        )
        return Task.model_validate(response.json())

    async def get_stats(self) -> TaskStats:
        response = await self._request("GET", "/tasks/stats")
        return TaskStats.model_validate(response.json())

    async def health(self) -> Health:
        response = await self._request("GET", "/health")
        return Health.model_validate(response.json())


def _body(task: Union[TaskInput, dict]) -> dict:
    if isinstance(task, TaskInput):
        return task.to_json()
    return dict(task)


def error_message(exc: BaseException) -> Optional[str]:
    """Extract the server's ``message`` from a failed response, else the exception text."""
    if isinstance(exc, httpx.HTTPStatusError):
        try:
            body = exc.response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
    text = str(exc)
    return text or None
