# taskapi/schemas.py
"""Request and response bodies for the task API.

Bodies travel as camelCase JSON (``dueDate``, ``createdAt``) while the
Python side keeps snake_case attribute names. Requests may use either.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

from taskapi.models import (
    DESCRIPTION_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    TaskPriority,
    TaskStatus,
    as_utc,
    utcnow,
)

STATUS_CHOICES = ", ".join(s.value for s in TaskStatus)
PRIORITY_CHOICES = ", ".join(p.value for p in TaskPriority)

# (field, pydantic error type) -> message shown to API callers
_FRIENDLY_MESSAGES = {
    ("title", "missing"): "Task title is required",
    ("title", "string_too_short"): "Task title is required",
    ("title", "value_error"): "Task title is required",
    ("title", "string_type"): "Task title is required",
    ("title", "string_too_long"): f"Title cannot exceed {TITLE_MAX_LENGTH} characters",
    ("description", "string_too_long"): (
        f"Description cannot exceed {DESCRIPTION_MAX_LENGTH} characters"
    ),
    ("status", "missing"): f"Valid status is required ({STATUS_CHOICES})",
    ("status", "enum"): f"Valid status is required ({STATUS_CHOICES})",
    ("status", "value_error"): f"Valid status is required ({STATUS_CHOICES})",
    ("priority", "enum"): f"Valid priority is required ({PRIORITY_CHOICES})",
    ("priority", "value_error"): f"Valid priority is required ({PRIORITY_CHOICES})",
}


def describe_errors(errors: list[dict[str, Any]]) -> list[str]:
    """Turn pydantic error dicts into one readable line per problem."""
    messages = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        field = loc[-1] if loc else ""
        # Accept both the alias and the attribute name in the lookup.
        key = (_to_snake(field), error.get("type", ""))
        friendly = _FRIENDLY_MESSAGES.get(key)
        if friendly is None:
            msg = error.get("msg", "invalid value")
            friendly = f"{'.'.join(loc)}: {msg}" if loc else msg
        if friendly not in messages:
            messages.append(friendly)
    return messages


def _to_snake(name: str) -> str:
    return "".join(f"_{c.lower()}" if c.isupper() else c for c in name)


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class TaskCreate(CamelModel):
    """Body for creating a task. Title is required, the rest have defaults."""

    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)
    status: TaskStatus = TaskStatus.todo
    priority: TaskPriority = TaskPriority.medium
    due_date: Optional[datetime] = None

    @field_validator("due_date", "description", mode="before")
    @classmethod
    def blank_means_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("status", "priority", mode="before")
    @classmethod
    def blank_means_default(cls, v: Any, info: ValidationInfo) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return cls.model_fields[info.field_name].default
        return v

    @field_validator("due_date")
    @classmethod
    def due_date_in_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v)


class TaskUpdate(CamelModel):
    """Body for updating a task. Only the fields sent are changed."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None

    @field_validator("due_date", "description", mode="before")
    @classmethod
    def blank_means_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("title", "status", "priority")
    @classmethod
    def reject_explicit_null(cls, v: Any) -> Any:
        # Defaults are not validated, so this only fires on an explicit null.
        if v is None:
            raise ValueError("may not be null")
        return v

    @field_validator("due_date")
    @classmethod
    def due_date_in_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v)


class TaskStatusUpdate(CamelModel):
    status: TaskStatus


class TaskRead(CamelModel):
    """A task as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: TaskPriority
    due_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    @field_validator("due_date", "created_at", "updated_at")
    @classmethod
    def attach_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v)


class StatusCounts(CamelModel):
    todo: int = 0
    in_progress: int = 0
    done: int = 0


class PriorityCounts(CamelModel):
    high: int = 0
    medium: int = 0
    low: int = 0


class TaskStats(CamelModel):
    total: int = 0
    by_status: StatusCounts = Field(default_factory=StatusCounts)
    by_priority: PriorityCounts = Field(default_factory=PriorityCounts)


class DeleteResult(CamelModel):
    message: str = "Task deleted successfully"
    id: int


class HealthResponse(CamelModel):
    status: str = "ok"
    timestamp: datetime = Field(default_factory=utcnow)


class ErrorResponse(CamelModel):
    message: str
    errors: list[str] = Field(default_factory=list)
