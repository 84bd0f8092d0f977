"""Tests for task filtering and sorting."""

from datetime import datetime, timezone

import pytest

from task_organizer.models import Priority, Status, Task
from task_organizer.query import apply_query, filter_tasks, parse_deadline, sort_tasks


def make(task_id: int, **fields) -> Task:
    return Task(id=task_id, title=f"Task {task_id}", **fields)


@pytest.fixture
def tasks() -> list[Task]:
    return [
        make(1, priority=Priority.LOW, deadline="2024-03-01"),
        make(2, priority=Priority.HIGH, status=Status.COMPLETED),
        make(3, priority=Priority.MEDIUM, deadline="2024-01-15T08:00:00Z"),
        make(4, priority=Priority.HIGH, deadline="2024-02-01T00:00:00+02:00"),
        make(5, priority=Priority.LOW, status=Status.COMPLETED, deadline="2024-01-01"),
        make(6, priority=Priority.MEDIUM),
    ]


def ids(result: list[Task]) -> list[int]:
    return [t.id for t in result]


class TestFilter:
    def test_completed(self, tasks: list[Task]) -> None:
        assert ids(filter_tasks(tasks, "completed")) == [2, 5]

    def test_not_completed_is_complement(self, tasks: list[Task]) -> None:
        done = set(ids(filter_tasks(tasks, "completed")))
        open_ = set(ids(filter_tasks(tasks, "not-completed")))
        assert done.isdisjoint(open_)
        assert done | open_ == set(ids(tasks))

    def test_high_priority(self, tasks: list[Task]) -> None:
        assert ids(filter_tasks(tasks, "high-priority")) == [2, 4]

    @pytest.mark.parametrize("name", [None, "", "everything", "COMPLETED"])
    def test_unknown_filter_passes_through(self, tasks: list[Task], name) -> None:
        assert ids(filter_tasks(tasks, name)) == ids(tasks)


class TestSort:
    def test_deadline(self, tasks: list[Task]) -> None:
        result = sort_tasks(tasks, "deadline")
        assert ids(result) == [5, 3, 4, 1, 2, 6]

    def test_deadline_nulls_last(self, tasks: list[Task]) -> None:
        result = sort_tasks(tasks, "deadline")
        deadlines = [parse_deadline(t.deadline) for t in result]
        present = [d for d in deadlines if d is not None]
        assert deadlines[: len(present)] == present
        assert present == sorted(present)

    def test_unparseable_deadline_sorts_last(self) -> None:
        result = sort_tasks([make(1, deadline="someday"), make(2, deadline="2030-01-01")], "deadline")
        assert ids(result) == [2, 1]

    def test_priority_is_stable(self, tasks: list[Task]) -> None:
        assert ids(sort_tasks(tasks, "priority")) == [2, 4, 3, 6, 1, 5]

    @pytest.mark.parametrize("name", [None, "", "title"])
    def test_unknown_sort_keeps_order(self, tasks: list[Task], name) -> None:
        assert ids(sort_tasks(tasks, name)) == ids(tasks)


class TestApplyQuery:
    def test_filter_then_sort(self, tasks: list[Task]) -> None:
        result = apply_query(tasks, sort_by="deadline", filter_by="not-completed")
        assert ids(result) == [3, 4, 1, 6]

    def test_input_not_mutated(self, tasks: list[Task]) -> None:
        before = list(tasks)
        result = apply_query(tasks, sort_by="priority", filter_by="high-priority")
        assert tasks == before
        assert result is not tasks


class TestParseDeadline:
    def test_zulu(self) -> None:
        assert parse_deadline("2024-01-15T08:00:00Z") == datetime(2024, 1, 15, 8, tzinfo=timezone.utc)

    def test_naive_is_utc(self) -> None:
        assert parse_deadline("2024-01-15") == datetime(2024, 1, 15, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", [None, "", "tomorrow"])
    def test_missing_or_invalid(self, value) -> None:
        assert parse_deadline(value) is None
