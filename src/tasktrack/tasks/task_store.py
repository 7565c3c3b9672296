# src/tasktrack/tasks/task_store.py

from __future__ import annotations

import logging
from dataclasses import replace
from typing import NoReturn

from ..core.errors import AppError, log_app_error, to_app_error
from ..preferences.store import PreferenceStore
from .task_api import TaskApi
from .task_models import (
    FilterPriority,
    FilterStatus,
    Task,
    TaskDraft,
    TaskSort,
    TaskStatus,
    TaskUpdate,
    ViewPreferences,
)
from .task_view import derive_view

logger = logging.getLogger(__name__)


class TaskStore:
    """
    In-memory task cache kept in sync by write-through mutations.

    - the cache changes only after the server confirms (no optimistic writes)
    - the server's returned Task replaces the cached one by id, never merged
    - `view` is the filtered/searched/sorted projection, memoized on
      (cache revision, preferences)

    Concurrency:
    - single event loop; nothing is locked. Two in-flight mutations on the
      same id land in completion order.
    """

    def __init__(self, api: TaskApi, preferences: PreferenceStore | None = None) -> None:
        self._api = api
        self._pref_store = preferences

        self._tasks: list[Task] = []
        self._revision = 0
        self._prefs = ViewPreferences()
        self._view_key: tuple[int, ViewPreferences] | None = None
        self._view: tuple[Task, ...] = ()
        self._epoch = 0

        self.loading = False
        self.last_load_error: AppError | None = None

    # ---- read side ----

    @property
    def tasks(self) -> list[Task]:
        return list(self._tasks)

    @property
    def preferences(self) -> ViewPreferences:
        return self._prefs

    @property
    def view(self) -> list[Task]:
        key = (self._revision, self._prefs)
        if self._view_key != key:
            self._view = tuple(derive_view(self._tasks, self._prefs))
            self._view_key = key
        return list(self._view)

    def get(self, task_id: str) -> Task | None:
        for t in self._tasks:
            if t.id == task_id:
                return t
        return None

    def _replace_cache(self, tasks: list[Task]) -> None:
        self._tasks = tasks
        self._revision += 1

    def clear(self) -> None:
        """
        Forget every cached task (on sign-out). Loads and creates that were
        already in flight are discarded when they land.
        """
        self._epoch += 1
        self.last_load_error = None
        if self._tasks:
            logger.info("Cleared %d cached tasks", len(self._tasks))
        self._replace_cache([])

    # ---- startup ----

    def restore_preferences(self) -> ViewPreferences:
        if self._pref_store is not None:
            saved = self._pref_store.load()
            self._prefs = replace(saved, search_query=self._prefs.search_query)
        return self._prefs

    async def initialize(self) -> list[Task]:
        self.restore_preferences()
        return await self.list()

    # ---- remote operations ----

    async def list(self) -> list[Task]:
        """
        Reload the cache from the server.

        Failures are logged and yield [] with the cache untouched; check
        `last_load_error` to tell "no tasks" from "load failed".
        """
        epoch = self._epoch
        self.loading = True
        try:
            tasks = await self._api.list_tasks()
        except Exception as e:
            err = to_app_error(e)
            log_app_error(err, "TaskStore.list")
            self.last_load_error = err
            return []
        finally:
            self.loading = False

        if epoch != self._epoch:
            logger.info("Discarding task list loaded before the cache was cleared")
            return []

        self.last_load_error = None
        self._replace_cache(list(tasks))
        logger.info("Loaded %d tasks", len(tasks))
        return list(tasks)

    async def create(self, draft: TaskDraft) -> Task:
        epoch = self._epoch
        try:
            task = await self._api.create_task(draft)
        except Exception as e:
            self._raise_failed(e, "TaskStore.create")

        if epoch == self._epoch:
            self._replace_cache([task, *self._tasks])
        logger.info("Created task id=%s", task.id)
        return task

    async def update(self, task_id: str, update: TaskUpdate) -> Task:
        try:
            task = await self._api.update_task(task_id, update)
        except Exception as e:
            self._raise_failed(e, "TaskStore.update")

        self._swap(task_id, task)
        logger.info("Updated task id=%s", task_id)
        return task

    async def set_status(self, task_id: str, status: TaskStatus | str) -> Task:
        status = TaskStatus(status)
        try:
            task = await self._api.update_task_status(task_id, status)
        except Exception as e:
            self._raise_failed(e, "TaskStore.set_status")

        self._swap(task_id, task)
        logger.info("Task id=%s status=%s", task_id, status)
        return task

    async def delete(self, task_id: str) -> None:
        try:
            await self._api.delete_task(task_id)
        except Exception as e:
            self._raise_failed(e, "TaskStore.delete")

        self._replace_cache([t for t in self._tasks if t.id != task_id])
        logger.info("Deleted task id=%s", task_id)

    def _swap(self, task_id: str, task: Task) -> None:
        self._replace_cache([task if t.id == task_id else t for t in self._tasks])

    @staticmethod
    def _raise_failed(exc: Exception, context: str) -> NoReturn:
        err = to_app_error(exc)
        log_app_error(err, context)
        if err is exc:
            raise err
        raise err from exc

    # ---- view preferences ----

    def set_filter_status(self, value: FilterStatus | str) -> None:
        value = FilterStatus(value)
        self._prefs = replace(self._prefs, filter_status=value)
        if self._pref_store is not None:
            self._pref_store.save_filter_status(value)

    def set_filter_priority(self, value: FilterPriority | str) -> None:
        value = FilterPriority(value)
        self._prefs = replace(self._prefs, filter_priority=value)
        if self._pref_store is not None:
            self._pref_store.save_filter_priority(value)

    def set_sort(self, value: TaskSort | str) -> None:
        value = TaskSort(value)
        self._prefs = replace(self._prefs, sort=value)
        if self._pref_store is not None:
            self._pref_store.save_sort(value)

    def set_search_query(self, query: str) -> None:
        self._prefs = replace(self._prefs, search_query=query or "")
