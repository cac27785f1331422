# taskapi/errors.py
"""Failures raised by the task repository and mapped to HTTP responses."""

from typing import Optional

from pydantic import ValidationError

from taskapi.schemas import describe_errors


class TaskError(Exception):
    """Base class for task API failures."""

    status_code = 500

    def __init__(self, message: str, errors: Optional[list[str]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.errors = list(errors or [])


class ValidationFailed(TaskError):
    """Missing or malformed input."""

    status_code = 400

    @classmethod
    def from_pydantic(cls, exc: ValidationError) -> "ValidationFailed":
        return cls.from_error_list(exc.errors())

    @classmethod
    def from_error_list(cls, errors: list[dict]) -> "ValidationFailed":
        messages = describe_errors(errors)
        return cls(messages[0] if messages else "Invalid request", messages)


class TaskNotFound(TaskError):
    status_code = 404

    def __init__(self, task_id: object) -> None:
        super().__init__("Task not found")
        self.task_id = task_id


class StorageFailure(TaskError):
    """The database was unavailable or failed unexpectedly."""

    status_code = 500
