"""
Data models for the Smart Task Organizer.
"""

from enum import Enum
from typing import Any

from sqlmodel import Field, SQLModel


class Priority(str, Enum):
    """Task priority, highest first."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class Status(str, Enum):
    """Task status."""

    TODO = "ToDo"
    COMPLETED = "Completed"


class Task(SQLModel):
    """
    A task in the organizer.

    Records are replaced rather than edited: an update validates a new Task
    built from the old one's fields and swaps it into the store.

    Attributes:
        id: Unique identifier, assigned by the store and never reused.
        title: The task title.
        description: Longer free-form text.
        deadline: ISO 8601 timestamp, or None when the task has no deadline.
        priority: High, Medium or Low.
        status: ToDo or Completed.
    """

    id: int = Field(ge=1)
    title: str = Field(min_length=1)
    description: str = ""
    deadline: str | None = None
    priority: Priority = Priority.LOW
    status: Status = Status.TODO


# Fields a caller may change through an update; id is never among them.
UPDATABLE_FIELDS = ("title", "description", "deadline", "priority", "status")


class TaskCreate(SQLModel):
    """Schema for creating a new task. Title is checked by the store."""

    title: str | None = None
    description: str | None = None
    deadline: str | None = None
    priority: Any = None


class TaskUpdate(SQLModel):
    """
    Schema for updating a task.

    Only fields present in the request body are applied, so callers should
    read it with ``model_dump(exclude_unset=True)``.
    """

    title: str | None = None
    description: str | None = None
    deadline: str | None = None
    priority: str | None = None
    status: str | None = None
