# taskclient/models.py
"""Client-side shapes of the task API payloads."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class TaskStatus(str, Enum):
    todo = "todo"
    in_progress = "in-progress"
    done = "done"


class TaskPriority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"


class SortOrder(str, Enum):
    asc = "asc"
    desc = "desc"


SORT_FIELDS = ("createdAt", "dueDate", "priority", "title")


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> dict:
        """Dump with wire (camelCase) keys, leaving out unset fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


class Task(ApiModel):
    id: int
    title: str
    description: Optional[str] = None
    status: TaskStatus = TaskStatus.todo
    priority: TaskPriority = TaskPriority.medium
    due_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class TaskInput(ApiModel):
    """Fields a user can supply when creating or editing a task.

    Validation is left to the server so its messages reach the user.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None


class StatusCounts(ApiModel):
    todo: int = 0
    in_progress: int = 0
    done: int = 0


class PriorityCounts(ApiModel):
    high: int = 0
    medium: int = 0
    low: int = 0


class TaskStats(ApiModel):
    total: int = 0
    by_status: StatusCounts = Field(default_factory=StatusCounts)
    by_priority: PriorityCounts = Field(default_factory=PriorityCounts)


class DeleteResult(ApiModel):
    message: str
    id: int


class Health(ApiModel):
    status: str
    timestamp: datetime
