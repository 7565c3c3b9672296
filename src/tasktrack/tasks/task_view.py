# src/tasktrack/tasks/task_view.py

"""
Derived task view: status filter -> priority filter -> search -> sort.

Search narrows before sorting so the sort only sees what will be shown.
All helpers return new lists and never mutate their input. Python's sort is
stable, so equal keys keep their cache order.
"""

from __future__ import annotations

from collections.abc import Sequence

from .task_models import FilterPriority, FilterStatus, Task, TaskSort, ViewPreferences


def filter_by_status(tasks: Sequence[Task], status: FilterStatus) -> list[Task]:
    if status is FilterStatus.ALL:
        return list(tasks)
    return [t for t in tasks if t.status.value == status.value]


def filter_by_priority(tasks: Sequence[Task], priority: FilterPriority) -> list[Task]:
    if priority is FilterPriority.ALL:
        return list(tasks)
    return [t for t in tasks if t.priority.value == priority.value]


def search_tasks(tasks: Sequence[Task], query: str) -> list[Task]:
    """
    Case-insensitive substring match over title or description.

    A blank query matches everything; otherwise the query is matched as
    typed, surrounding spaces included.
    """
    if not (query or "").strip():
        return list(tasks)
    q = query.casefold()
    return [
        t
        for t in tasks
        if q in t.title.casefold() or (t.description is not None and q in t.description.casefold())
    ]


def sort_tasks(tasks: Sequence[Task], sort: TaskSort) -> list[Task]:
    if sort is TaskSort.TITLE:
        return sorted(tasks, key=lambda t: (t.title.casefold(), t.title))
    if sort is TaskSort.PRIORITY:
        return sorted(tasks, key=lambda t: t.priority.rank, reverse=True)
    # created (default): newest first
    return sorted(tasks, key=lambda t: t.created_at, reverse=True)


def derive_view(tasks: Sequence[Task], prefs: ViewPreferences) -> list[Task]:
    out = filter_by_status(tasks, prefs.filter_status)
    out = filter_by_priority(out, prefs.filter_priority)
    out = search_tasks(out, prefs.search_query)
    return sort_tasks(out, prefs.sort)
