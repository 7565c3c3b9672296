# src/tasktrack/tasks/task_api.py

from __future__ import annotations

import logging
from urllib.parse import quote

from ..core.errors import UnknownError
from ..core.ports import HttpGateway
from .task_models import Task, TaskDraft, TaskStatus, TaskUpdate

logger = logging.getLogger(__name__)

TASKS_PATH = "/v1/tasks"


def _task_path(task_id: str) -> str:
    return f"{TASKS_PATH}/{quote(str(task_id), safe='')}"


def _parse_task(data: object, op: str) -> Task:
    try:
        return Task.from_api(data)
    except (ValueError, TypeError) as e:
        raise UnknownError(f"Unexpected task payload from {op}: {e}") from e


class TaskApi:
    """Task endpoints on top of the gateway. Errors propagate as AppError."""

    def __init__(self, gateway: HttpGateway) -> None:
        self._gateway = gateway

    async def list_tasks(self) -> list[Task]:
        data = await self._gateway.get(TASKS_PATH)
        if data is None:
            return []
        if not isinstance(data, list):
            raise UnknownError("Unexpected task list payload")

        out: list[Task] = []
        for item in data:
            try:
                out.append(Task.from_api(item))
            except (ValueError, TypeError):
                logger.warning("Skipping malformed task in list: %r", item)
        return out

    async def create_task(self, draft: TaskDraft) -> Task:
        data = await self._gateway.post(TASKS_PATH, draft.to_api())
        return _parse_task(data, "create")

    async def update_task(self, task_id: str, update: TaskUpdate) -> Task:
        data = await self._gateway.put(_task_path(task_id), update.to_api())
        return _parse_task(data, "update")

    async def update_task_status(self, task_id: str, status: TaskStatus) -> Task:
        data = await self._gateway.patch(f"{_task_path(task_id)}/status", params={"status": str(status)})
        return _parse_task(data, "update status")

    async def delete_task(self, task_id: str) -> None:
        await self._gateway.delete(_task_path(task_id))
