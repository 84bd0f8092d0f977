"""
Task store for the Smart Task Organizer.

The store owns the in-memory task list and the id counter, applies every
mutation, and loads and saves the list as a JSON file. It expects to be
driven from a single thread; the HTTP layer runs its handlers on one event
loop, so no locking is done here.
"""

import json
import os
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import ValidationError as SchemaError

from .errors import NotFoundError, PersistenceError, ValidationError
from .models import UPDATABLE_FIELDS, Priority, Status, Task
from .query import apply_query

TASKS_FILENAME = "tasks.json"
EXPORT_FILENAME = "tasks_export.txt"

EXPORT_TEMPLATE = (
    "ID: {id}\n"
    "Title: {title}\n"
    "Description: {description}\n"
    "Deadline: {deadline}\n"
    "Priority: {priority}\n"
    "Status: {status}\n"
)


def render_export(tasks: Iterable[Task]) -> str:
    """
    Render tasks as the plain-text export format.

    Each task becomes a block of labelled lines; blocks are separated by a
    blank line. A missing deadline is written as 'null'.
    """
    blocks = [
        EXPORT_TEMPLATE.format(
            id=task.id,
            title=task.title,
            description=task.description,
            deadline="null" if task.deadline is None else task.deadline,
            priority=task.priority.value,
            status=task.status.value,
        )
        for task in tasks
    ]
    return "\n".join(blocks)


def _describe(exc: SchemaError) -> str:
    error = exc.errors()[0]
    field = ".".join(str(part) for part in error["loc"]) or "task"
    return f"Invalid value for '{field}': {error['msg']}"


class TaskStore:
    """
    Authoritative owner of the task collection.

    Call ``start()`` before use and ``stop()`` on shutdown so the collection
    is loaded from and flushed back to ``data_dir``.
    """

    def __init__(
        self,
        data_dir: str | Path,
        tasks_filename: str = TASKS_FILENAME,
        export_filename: str = EXPORT_FILENAME,
    ):
        self.data_dir = Path(data_dir)
        self.tasks_path = self.data_dir / tasks_filename
        self.export_path = self.data_dir / export_filename
        self._tasks: list[Task] = []
        self._next_id = 1

    def __len__(self) -> int:
        return len(self._tasks)

    @property
    def next_id(self) -> int:
        """The id the next created task will receive."""
        return self._next_id

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Load tasks from disk. Safe to call on a missing or corrupt file."""
        self.initialize()
        logger.info(
            "Task store ready: {} task(s) from {}, next id {}",
            len(self._tasks),
            self.tasks_path,
            self._next_id,
        )

    def stop(self) -> None:
        """Flush the collection to disk before shutdown."""
        logger.info("Saving tasks before shutdown...")
        self.persist()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def initialize(self) -> None:
        """
        Replace the in-memory collection with the contents of the tasks file.

        A missing file gives an empty collection. Unreadable or malformed
        content is logged and also gives an empty collection; it never
        raises. The id counter becomes one past the highest loaded id.
        """
        self._tasks = []
        self._next_id = 1

        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.error("Could not create data directory {}: {}", self.data_dir, exc)

        if not self.tasks_path.exists():
            logger.info("No tasks file at {}, starting empty", self.tasks_path)
            return

        try:
            tasks = self._read_tasks()
        except PersistenceError as exc:
            logger.error("Error loading tasks: {}; starting empty", exc.message)
            return

        self._tasks = tasks
        self._next_id = max((task.id for task in tasks), default=0) + 1

    def persist(self) -> bool:
        """
        Write the collection to the tasks file as an indented JSON array.

        Returns:
            True if the file was written. Failures are logged, not raised.
        """
        payload = [task.model_dump(mode="json") for task in self._tasks]
        try:
            self._write_text(self.tasks_path, json.dumps(payload, indent=2, ensure_ascii=False))
        except PersistenceError as exc:
            logger.error("Error saving tasks: {}", exc.message)
            return False

        logger.info("Saved {} task(s) to {}", len(payload), self.tasks_path)
        return True

    def _read_tasks(self) -> list[Task]:
        try:
            data = json.loads(self.tasks_path.read_text(encoding="utf-8"))
        except (OSError, ValueError, RecursionError) as exc:
            raise PersistenceError(f"Could not read tasks file ({exc})", self.tasks_path) from exc

        if not isinstance(data, list):
            raise PersistenceError("Tasks file does not hold a JSON array", self.tasks_path)
        if not all(isinstance(item, dict) for item in data):
            raise PersistenceError("Tasks file holds a non-object entry", self.tasks_path)

        try:
            tasks = [Task.model_validate(item) for item in data]
        except SchemaError as exc:
            raise PersistenceError(_describe(exc), self.tasks_path) from exc

        ids = [task.id for task in tasks]
        if len(set(ids)) != len(ids):
            raise PersistenceError("Tasks file contains duplicate ids", self.tasks_path)
        return tasks

    def _write_text(self, path: Path, text: str) -> None:
        # Write to a sibling temp file first so a failed write never truncates the old file.
        tmp_path = path.with_suffix(f"{path.suffix}.tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(text, encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError as exc:
            if tmp_path.exists():
                tmp_path.unlink()
            raise PersistenceError(f"Could not write file ({exc})", path) from exc

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_tasks(self, sort_by: str | None = None, filter_by: str | None = None) -> list[Task]:
        """
        List tasks, optionally filtered and sorted.

        Args:
            sort_by: 'deadline' or 'priority'. Anything else keeps store order.
            filter_by: 'completed', 'not-completed' or 'high-priority'.
                Anything else returns every task.

        Returns:
            A new list; the store itself is not reordered.
        """
        return apply_query(list(self._tasks), sort_by=sort_by, filter_by=filter_by)

    def get_task(self, task_id: int) -> Task:
        return self._tasks[self._index_of(task_id)]

    def _index_of(self, task_id: int) -> int:
        for index, task in enumerate(self._tasks):
            if task.id == task_id:
                return index
        raise NotFoundError(task_id)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_task(
        self,
        title: str | None,
        description: str | None = None,
        deadline: str | None = None,
        priority: Any = None,
    ) -> Task:
        """
        Create a new task and append it to the collection.

        Args:
            title: Required, non-empty.
            description: Defaults to an empty string.
            deadline: ISO 8601 timestamp; empty values mean no deadline.
            priority: High, Medium or Low. Anything else becomes Low.

        Returns:
            The created task, always with status ToDo.

        Raises:
            ValidationError: If the title is missing or empty.
        """
        if not title:
            raise ValidationError("Title is required")

        allowed = tuple(p.value for p in Priority)
        try:
            task = Task(
                id=self._next_id,
                title=title,
                description=description or "",
                deadline=deadline or None,
                priority=priority if priority in allowed else Priority.LOW,
                status=Status.TODO,
            )
        except SchemaError as exc:
            raise ValidationError(_describe(exc)) from exc

        self._next_id += 1
        self._tasks.append(task)
        logger.debug("Created task {} '{}'", task.id, task.title)
        return task

    def update_task(self, task_id: int, fields: Mapping[str, Any]) -> Task:
        """
        Replace a task with a copy carrying the given field values.

        Only keys present in ``fields`` change; a missing key leaves that
        field alone, while a key mapped to None sets it to None (which only
        ``deadline`` accepts). The id is never changed.

        Raises:
            NotFoundError: If no task has this id.
            ValidationError: If a value is not allowed, e.g. an empty title
                or a priority other than High, Medium or Low.
        """
        index = self._index_of(task_id)
        existing = self._tasks[index]
        changes = {key: value for key, value in fields.items() if key in UPDATABLE_FIELDS}

        try:
            updated = Task.model_validate({**existing.model_dump(), **changes, "id": existing.id})
        except SchemaError as exc:
            raise ValidationError(_describe(exc)) from exc

        self._tasks[index] = updated
        logger.debug("Updated task {}: {}", task_id, sorted(changes))
        return updated

    def delete_task(self, task_id: int) -> bool:
        """Remove a task. Its id is never handed out again."""
        index = self._index_of(task_id)
        del self._tasks[index]
        logger.debug("Deleted task {}", task_id)
        return True

    def complete_task(self, task_id: int) -> Task:
        """Mark a task as completed. Completing twice is harmless."""
        return self.update_task(task_id, {"status": Status.COMPLETED})

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def export_tasks(self) -> str:
        """
        Export every task, in store order, as plain text.

        Also saves the JSON collection and writes the text to the export
        file next to it. Write failures are logged; the text is returned
        regardless.
        """
        text = render_export(self._tasks)
        self.persist()
        try:
            self._write_text(self.export_path, text)
        except PersistenceError as exc:
            logger.error("Failed to write export file: {}", exc.message)
        else:
            logger.info("Exported {} task(s) to {}", len(self._tasks), self.export_path)
        return text
