# src/tasktrack/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any


class TaskStatus(StrEnum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]


class TaskPriority(StrEnum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"

    @property
    def label(self) -> str:
        return _PRIORITY_LABELS[self]

    @property
    def rank(self) -> int:
        """Higher is more severe."""
        return _PRIORITY_RANK[self]


_STATUS_LABELS = {
    TaskStatus.PENDING: "To Do",
    TaskStatus.IN_PROGRESS: "In Progress",
    TaskStatus.COMPLETED: "Completed",
}

_PRIORITY_LABELS = {
    TaskPriority.LOW: "Low priority",
    TaskPriority.MEDIUM: "Medium priority",
    TaskPriority.HIGH: "High priority",
}

_PRIORITY_RANK = {
    TaskPriority.HIGH: 3,
    TaskPriority.MEDIUM: 2,
    TaskPriority.LOW: 1,
}


def _parse_timestamp(raw: Any) -> datetime:
    """
    Accepts "yyyy-MM-dd HH:mm:ss", ISO-8601 (with or without offset) or epoch
    seconds. Naive values are taken as UTC so all timestamps compare.
    """
    if isinstance(raw, datetime):
        dt = raw
    elif isinstance(raw, (int, float)):
        dt = datetime.fromtimestamp(float(raw), tz=timezone.utc)
    elif isinstance(raw, str) and raw.strip():
        s = raw.strip()
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        dt = datetime.fromisoformat(s)
    else:
        raise ValueError(f"invalid timestamp: {raw!r}")
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


@dataclass(frozen=True, slots=True)
class Task:
    id: str
    title: str
    status: TaskStatus
    priority: TaskPriority
    created_at: datetime
    description: str | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_api(cls, data: Any) -> Task:
        """Build a Task from the server's JSON object. Raises ValueError on malformed input."""
        if not isinstance(data, dict):
            raise ValueError("task payload is not an object")
        raw_id = data.get("id")
        if raw_id is None or str(raw_id) == "":
            raise ValueError("task payload has no id")
        title = data.get("title")
        if not isinstance(title, str) or not title.strip():
            raise ValueError(f"task {raw_id} has an empty title")
        description = data.get("description")
        updated_raw = data.get("updatedAt")
        return cls(
            id=str(raw_id),
            title=title,
            description=description if isinstance(description, str) else None,
            status=TaskStatus(str(data.get("status"))),
            priority=TaskPriority(str(data.get("priority"))),
            created_at=_parse_timestamp(data.get("createdAt")),
            updated_at=_parse_timestamp(updated_raw) if updated_raw else None,
        )


@dataclass(frozen=True, slots=True)
class TaskDraft:
    """Payload for creating a task. Validation is the caller's concern."""

    title: str
    status: TaskStatus = TaskStatus.PENDING
    priority: TaskPriority = TaskPriority.MEDIUM
    description: str | None = None

    def to_api(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "title": self.title,
            "status": str(self.status),
            "priority": str(self.priority),
        }
        if self.description is not None:
            body["description"] = self.description
        return body


@dataclass(frozen=True, slots=True)
class TaskUpdate:
    """Partial update: fields left as None are not sent."""

    title: str | None = None
    description: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None

    def to_api(self) -> dict[str, Any]:
        body: dict[str, Any] = {}
        if self.title is not None:
            body["title"] = self.title
        if self.description is not None:
            body["description"] = self.description
        if self.status is not None:
            body["status"] = str(self.status)
        if self.priority is not None:
            body["priority"] = str(self.priority)
        return body

    def is_empty(self) -> bool:
        return not self.to_api()


# ---- view preferences ----


class FilterStatus(StrEnum):
    ALL = "ALL"
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class FilterPriority(StrEnum):
    ALL = "ALL"
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class TaskSort(StrEnum):
    CREATED = "created"
    PRIORITY = "priority"
    TITLE = "title"


@dataclass(frozen=True, slots=True)
class ViewPreferences:
    filter_status: FilterStatus = FilterStatus.ALL
    filter_priority: FilterPriority = FilterPriority.ALL
    sort: TaskSort = TaskSort.CREATED
    search_query: str = ""
