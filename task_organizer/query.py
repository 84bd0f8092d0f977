"""
Filtering and sorting of task lists.

Every function here is pure: it returns a new list and leaves its input
untouched. Unknown filter or sort values are ignored rather than rejected.
"""

from collections.abc import Callable, Iterable
from datetime import datetime, timezone

from .models import Priority, Status, Task

FILTERS: dict[str, Callable[[Task], bool]] = {
    "completed": lambda task: task.status == Status.COMPLETED,
    "not-completed": lambda task: task.status != Status.COMPLETED,
    "high-priority": lambda task: task.priority == Priority.HIGH,
}

PRIORITY_ORDER = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}

_NO_DEADLINE = datetime.min.replace(tzinfo=timezone.utc)


def parse_deadline(value: str | None) -> datetime | None:
    """
    Parse an ISO 8601 deadline.

    Args:
        value: Timestamp text such as '2024-05-01' or '2024-05-01T09:30:00Z'.

    Returns:
        A timezone-aware datetime (naive input is taken as UTC), or None when
        the value is empty or cannot be parsed.
    """
    if not value:
        return None

    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _deadline_key(task: Task) -> tuple[bool, datetime]:
    # Missing or unparseable deadlines sort after every real one.
    parsed = parse_deadline(task.deadline)
    return (parsed is None, parsed or _NO_DEADLINE)


def _priority_key(task: Task) -> int:
    return PRIORITY_ORDER.get(task.priority, len(PRIORITY_ORDER))


SORT_KEYS: dict[str, Callable[[Task], object]] = {
    "deadline": _deadline_key,
    "priority": _priority_key,
}


def filter_tasks(tasks: Iterable[Task], filter_by: str | None = None) -> list[Task]:
    """Keep the tasks matching a named filter; unknown names keep everything."""
    predicate = FILTERS.get(filter_by) if filter_by else None
    if predicate is None:
        return list(tasks)
    return [task for task in tasks if predicate(task)]


def sort_tasks(tasks: Iterable[Task], sort_by: str | None = None) -> list[Task]:
    """Stable sort by a named key; unknown names keep the original order."""
    key = SORT_KEYS.get(sort_by) if sort_by else None
    if key is None:
        return list(tasks)
    return sorted(tasks, key=key)


def apply_query(
    tasks: Iterable[Task],
    sort_by: str | None = None,
    filter_by: str | None = None,
) -> list[Task]:
    """
    Build a filtered, sorted view of the tasks.

    Args:
        tasks: Tasks in store order.
        sort_by: 'deadline', 'priority', or anything else for store order.
        filter_by: 'completed', 'not-completed', 'high-priority', or anything
            else for no filtering.

    Returns:
        A new list. The filter is applied before the sort.
    """
    return sort_tasks(filter_tasks(tasks, filter_by), sort_by)
