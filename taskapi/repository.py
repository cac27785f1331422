# taskapi/repository.py
"""Task CRUD, status updates and statistics over one SQLModel session.

Every operation either returns persisted data or raises one of the
:mod:`taskapi.errors` failures; HTTP concerns stay in the routes.
"""

import functools
import logging
from collections.abc import Mapping
from datetime import timedelta
from typing import Any, Optional, Union

from pydantic import ValidationError
from sqlalchemy import case, func
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from taskapi.errors import StorageFailure, TaskNotFound, ValidationFailed
from taskapi.models import Task, TaskPriority, TaskStatus, as_utc, utcnow
from taskapi.schemas import (
    STATUS_CHOICES,
    DeleteResult,
    PriorityCounts,
    StatusCounts,
    TaskCreate,
    TaskStats,
    TaskUpdate,
)

logger = logging.getLogger(__name__)

DEFAULT_SORT_FIELD = "createdAt"
DEFAULT_SORT_ORDER = "desc"

_STATUS_RANK = {TaskStatus.todo: 0, TaskStatus.in_progress: 1, TaskStatus.done: 2}
_PRIORITY_RANK = {TaskPriority.low: 0, TaskPriority.medium: 1, TaskPriority.high: 2}

# Sort keys accepted from callers, in wire (camelCase) and attribute spelling.
SORT_COLUMNS = {
    "createdAt": Task.created_at,
    "created_at": Task.created_at,
    "updatedAt": Task.updated_at,
    "updated_at": Task.updated_at,
    "dueDate": Task.due_date,
    "due_date": Task.due_date,
    "title": Task.title,
    "status": case(*[(Task.status == member, rank) for member, rank in _STATUS_RANK.items()]),
    "priority": case(
        *[(Task.priority == member, rank) for member, rank in _PRIORITY_RANK.items()]
    ),
}


def _storage_guard(method):
    """Roll back and re-raise SQLAlchemy errors as StorageFailure."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception("Storage error in %s", method.__name__)
            raise StorageFailure(f"Storage error: {exc.__class__.__name__}") from exc

    return wrapper


def _validate(schema, data):
    if isinstance(data, schema):
        return data
    if isinstance(data, Mapping):
        try:
            return schema.model_validate(data)
        except ValidationError as exc:
            raise ValidationFailed.from_pydantic(exc) from exc
    raise ValidationFailed(f"Expected {schema.__name__} or a mapping")


def _parse_enum(enum_cls, value):
    """Return the enum member for *value*, or None when it is not a member."""
    if value is None or isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return None


class TaskRepository:
    """Stateless task operations bound to a database session."""

    def __init__(self, session: Session) -> None:
        self.session = session

    # -- reads ---------------------------------------------------------------

    @_storage_guard
    def list_tasks(
        self,
        status: Union[TaskStatus, str, None] = None,
        priority: Union[TaskPriority, str, None] = None,
        sort_by: Optional[str] = DEFAULT_SORT_FIELD,
        order: Optional[str] = DEFAULT_SORT_ORDER,
    ) -> list[Task]:
        """List tasks, filtered by status and/or priority, sorted by one field.

        An empty filter value means no filter; any other value outside its
        enumeration matches no task. ``status`` and ``priority`` sort by rank
        (todo < in-progress < done, low < medium < high), not by string
        order. An unknown sort field falls back to id order. Ties always
        break by ascending id.
        """
        statement = select(Task)
        if status:
            status_member = _parse_enum(TaskStatus, status)
            if status_member is None:
                logger.debug("Unknown status filter %r matches nothing", status)
                return []
            statement = statement.where(Task.status == status_member)
        if priority:
            priority_member = _parse_enum(TaskPriority, priority)
            if priority_member is None:
                logger.debug("Unknown priority filter %r matches nothing", priority)
                return []
            statement = statement.where(Task.priority == priority_member)

        column = SORT_COLUMNS.get(sort_by or DEFAULT_SORT_FIELD)
        if column is not None:
            statement = statement.order_by(column.asc() if order == "asc" else column.desc())
        statement = statement.order_by(Task.id.asc())
        return list(self.session.exec(statement).all())

    @_storage_guard
    def get_task(self, task_id: int) -> Task:
        task = self.session.get(Task, task_id)
        if task is None:
            raise TaskNotFound(task_id)
        return task

    @_storage_guard
    def get_stats(self) -> TaskStats:
        """Count tasks overall, per status and per priority."""
        total = self.session.exec(select(func.count(Task.id))).one()
        by_status = dict(
            self.session.exec(select(Task.status, func.count(Task.id)).group_by(Task.status)).all()
        )
        by_priority = dict(
            self.session.exec(
                select(Task.priority, func.count(Task.id)).group_by(Task.priority)
            ).all()
        )
        return TaskStats(
            total=total,
            by_status=StatusCounts(
                todo=by_status.get(TaskStatus.todo, 0),
                in_progress=by_status.get(TaskStatus.in_progress, 0),
                done=by_status.get(TaskStatus.done, 0),
            ),
            by_priority=PriorityCounts(
                high=by_priority.get(TaskPriority.high, 0),
                medium=by_priority.get(TaskPriority.medium, 0),
                low=by_priority.get(TaskPriority.low, 0),
            ),
        )

    # -- writes --------------------------------------------------------------

    @_storage_guard
    def create_task(self, data: Union[TaskCreate, Mapping[str, Any]]) -> Task:
        body = _validate(TaskCreate, data)
        task = Task.model_validate(body.model_dump())
        now = utcnow()
        task.created_at = now
        task.updated_at = now
        self.session.add(task)
        self.session.commit()
        self.session.refresh(task)
        logger.info("Created task %s", task.id)
        return task

    @_storage_guard
    def update_task(self, task_id: int, data: Union[TaskUpdate, Mapping[str, Any]]) -> Task:
        """Change only the supplied fields of a task."""
        body = _validate(TaskUpdate, data)
        task = self.get_task(task_id)
        for key, value in body.model_dump(exclude_unset=True).items():
            setattr(task, key, value)
        return self._save(task)

    @_storage_guard
    def update_task_status(self, task_id: int, status: Union[TaskStatus, str, None]) -> Task:
        member = _parse_enum(TaskStatus, status)
        if member is None:
            raise ValidationFailed(f"Valid status is required ({STATUS_CHOICES})")
        task = self.get_task(task_id)
        task.status = member
        return self._save(task)

    @_storage_guard
    def delete_task(self, task_id: int) -> DeleteResult:
        task = self.get_task(task_id)
        self.session.delete(task)
        self.session.commit()
        logger.info("Deleted task %s", task_id)
        return DeleteResult(id=task_id)

    # -- helpers -------------------------------------------------------------

    def _save(self, task: Task) -> Task:
        """Refresh ``updated_at`` and persist; the new stamp is always later."""
        previous = as_utc(task.updated_at)
        now = utcnow()
        if previous is not None and now <= previous:
            now = previous + timedelta(microseconds=1)
        task.updated_at = now
        self.session.add(task)
        self.session.commit()
        self.session.refresh(task)
        logger.info("Updated task %s", task.id)
        return task
