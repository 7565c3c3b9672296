# src/tasktrack/preferences/store.py

from __future__ import annotations

import logging
from enum import StrEnum
from typing import TypeVar

from ..core.ports import KeyValueStorage
from ..tasks.task_models import FilterPriority, FilterStatus, TaskSort, ViewPreferences

logger = logging.getLogger(__name__)

FILTER_STATUS_KEY = "task_filter_status"
FILTER_PRIORITY_KEY = "task_filter_priority"
SORT_KEY = "task_sort"

E = TypeVar("E", bound=StrEnum)


class PreferenceStore:
    """
    Remembers the last filter/sort choice between runs.

    Each field has its own key, so a partial restore is normal. Anything
    unreadable counts as "no preference". The search query is session-only
    and never stored.
    """

    def __init__(self, storage: KeyValueStorage) -> None:
        self._storage = storage

    def _read(self, key: str, enum_cls: type[E]) -> E | None:
        try:
            raw = self._storage.get_item(key)
        except Exception:
            logger.warning("Failed to read preference %s", key, exc_info=True)
            return None
        if raw is None:
            return None
        try:
            return enum_cls(raw)
        except ValueError:
            logger.warning("Ignoring corrupted preference %s=%r", key, raw)
            return None

    def _write(self, key: str, value: StrEnum) -> None:
        try:
            self._storage.set_item(key, value.value)
        except Exception:
            logger.warning("Failed to save preference %s", key, exc_info=True)

    # ---- per-field ----

    def get_filter_status(self) -> FilterStatus | None:
        return self._read(FILTER_STATUS_KEY, FilterStatus)

    def get_filter_priority(self) -> FilterPriority | None:
        return self._read(FILTER_PRIORITY_KEY, FilterPriority)

    def get_sort(self) -> TaskSort | None:
        return self._read(SORT_KEY, TaskSort)

    def save_filter_status(self, value: FilterStatus) -> None:
        self._write(FILTER_STATUS_KEY, value)

    def save_filter_priority(self, value: FilterPriority) -> None:
        self._write(FILTER_PRIORITY_KEY, value)

    def save_sort(self, value: TaskSort) -> None:
        self._write(SORT_KEY, value)

    # ---- whole record ----

    def load(self) -> ViewPreferences:
        """Saved values where present, defaults elsewhere. Never raises."""
        defaults = ViewPreferences()
        return ViewPreferences(
            filter_status=self.get_filter_status() or defaults.filter_status,
            filter_priority=self.get_filter_priority() or defaults.filter_priority,
            sort=self.get_sort() or defaults.sort,
        )

    def save(self, prefs: ViewPreferences) -> None:
        self.save_filter_status(prefs.filter_status)
        self.save_filter_priority(prefs.filter_priority)
        self.save_sort(prefs.sort)
