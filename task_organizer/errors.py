"""
Errors raised by the task store.
"""

from pathlib import Path


class TaskError(Exception):
    """Base class for rejected task operations."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(TaskError):
    """A required field is missing or a field value is not allowed."""


class NotFoundError(TaskError):
    """No task exists with the requested id."""

    def __init__(self, task_id: int):
        super().__init__("Task not found")
        self.task_id = task_id


class PersistenceError(TaskError):
    """Reading or writing the storage file failed. Never leaves the store."""

    def __init__(self, message: str, path: Path):
        super().__init__(f"{message}: {path}")
        self.path = path
