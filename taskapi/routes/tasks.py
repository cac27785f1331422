# taskapi/routes/tasks.py
"""CRUD, status and statistics endpoints for tasks.

``/stats`` is declared before ``/{task_id}`` so the literal path is never
read as an id.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from taskapi.database import get_session
from taskapi.repository import DEFAULT_SORT_FIELD, DEFAULT_SORT_ORDER, TaskRepository
from taskapi.schemas import (
    DeleteResult,
    TaskCreate,
    TaskRead,
    TaskStats,
    TaskStatusUpdate,
    TaskUpdate,
)

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


def get_repository(session: Session = Depends(get_session)) -> TaskRepository:
    return TaskRepository(session)


@router.get("/stats", response_model=TaskStats)
def get_task_stats(repo: TaskRepository = Depends(get_repository)):
    """Count tasks in total, per status and per priority."""
    return repo.get_stats()


@router.get("", response_model=list[TaskRead])
def list_tasks(
    status: Optional[str] = None,
    priority: Optional[str] = None,
    sort_by: str = Query(default=DEFAULT_SORT_FIELD, alias="sortBy"),
    order: str = DEFAULT_SORT_ORDER,
    repo: TaskRepository = Depends(get_repository),
):
    """List tasks, optionally filtered by status and/or priority."""
    return repo.list_tasks(status=status, priority=priority, sort_by=sort_by, order=order)


@router.get("/{task_id}", response_model=TaskRead)
def get_task(task_id: int, repo: TaskRepository = Depends(get_repository)):
    return repo.get_task(task_id)


@router.post("", response_model=TaskRead, status_code=201)
def create_task(body: TaskCreate, repo: TaskRepository = Depends(get_repository)):
    return repo.create_task(body)


@router.put("/{task_id}", response_model=TaskRead)
def update_task(task_id: int, body: TaskUpdate, repo: TaskRepository = Depends(get_repository)):
    """Update an existing task. Only provided fields are changed."""
    return repo.update_task(task_id, body)


@router.patch("/{task_id}/status", response_model=TaskRead)
def update_task_status(
    task_id: int, body: TaskStatusUpdate, repo: TaskRepository = Depends(get_repository)
):
    return repo.update_task_status(task_id, body.status)


@router.delete("/{task_id}", response_model=DeleteResult)
def delete_task(task_id: int, repo: TaskRepository = Depends(get_repository)):
    """Delete a task permanently."""
    return repo.delete_task(task_id)
