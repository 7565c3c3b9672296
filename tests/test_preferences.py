# tests/test_preferences.py

from __future__ import annotations

from pathlib import Path

from tasktrack.preferences.store import (
    FILTER_PRIORITY_KEY,
    FILTER_STATUS_KEY,
    SORT_KEY,
    PreferenceStore,
)
from tasktrack.storage.local_store import LocalStore
from tasktrack.tasks.task_models import FilterPriority, FilterStatus, TaskSort, ViewPreferences
from tasktrack.tasks.task_store import TaskStore

from .fakes import MemoryStorage


def test_round_trip_each_field(preferences: PreferenceStore) -> None:
    prefs = ViewPreferences(
        filter_status=FilterStatus.IN_PROGRESS,
        filter_priority=FilterPriority.HIGH,
        sort=TaskSort.PRIORITY,
    )
    preferences.save(prefs)
    assert preferences.load() == prefs


def test_nothing_saved_gives_defaults() -> None:
    assert PreferenceStore(MemoryStorage()).load() == ViewPreferences()


def test_partial_restore_is_valid() -> None:
    store = PreferenceStore(MemoryStorage({SORT_KEY: "title"}))
    assert store.load() == ViewPreferences(sort=TaskSort.TITLE)


def test_corrupted_key_leaves_others_intact() -> None:
    storage = MemoryStorage()
    store = PreferenceStore(storage)
    store.save(
        ViewPreferences(
            filter_status=FilterStatus.COMPLETED,
            filter_priority=FilterPriority.LOW,
            sort=TaskSort.TITLE,
        )
    )

    storage.items[FILTER_PRIORITY_KEY] = "\x00garbage"

    loaded = store.load()
    assert loaded.filter_status is FilterStatus.COMPLETED
    assert loaded.filter_priority is FilterPriority.ALL
    assert loaded.sort is TaskSort.TITLE


def test_unreadable_key_is_no_preference() -> None:
    storage = MemoryStorage({FILTER_STATUS_KEY: "PENDING", SORT_KEY: "priority"})
    storage.broken_keys.add(FILTER_STATUS_KEY)

    loaded = PreferenceStore(storage).load()

    assert loaded.filter_status is FilterStatus.ALL
    assert loaded.sort is TaskSort.PRIORITY


def test_keys_are_written_independently() -> None:
    storage = MemoryStorage()
    store = PreferenceStore(storage)

    store.save_sort(TaskSort.PRIORITY)

    assert storage.items == {SORT_KEY: "priority"}


def test_write_failure_is_not_fatal() -> None:
    class ReadOnlyStorage(MemoryStorage):
        def set_item(self, key: str, value: str) -> None:
            raise OSError("read-only")

    PreferenceStore(ReadOnlyStorage()).save_filter_status(FilterStatus.PENDING)


def test_task_store_setters_persist_but_search_does_not() -> None:
    storage = MemoryStorage()
    tasks = TaskStore(api=None, preferences=PreferenceStore(storage))  # type: ignore[arg-type]

    tasks.set_filter_status("PENDING")
    tasks.set_filter_priority(FilterPriority.HIGH)
    tasks.set_sort(TaskSort.TITLE)
    tasks.set_search_query("milk")

    assert storage.items == {
        FILTER_STATUS_KEY: "PENDING",
        FILTER_PRIORITY_KEY: "HIGH",
        SORT_KEY: "title",
    }

    restored = TaskStore(api=None, preferences=PreferenceStore(storage))  # type: ignore[arg-type]
    prefs = restored.restore_preferences()
    assert prefs.filter_status is FilterStatus.PENDING
    assert prefs.filter_priority is FilterPriority.HIGH
    assert prefs.sort is TaskSort.TITLE
    assert prefs.search_query == ""


def test_preferences_survive_restart_on_disk(tmp_path: Path) -> None:
    db = tmp_path / "prefs.sqlite3"
    PreferenceStore(LocalStore(db)).save_filter_priority(FilterPriority.MEDIUM)

    loaded = PreferenceStore(LocalStore(db)).load()

    assert loaded.filter_priority is FilterPriority.MEDIUM
    assert loaded.filter_status is FilterStatus.ALL


def test_local_store_basic_ops(storage: LocalStore) -> None:
    assert storage.get_item("k") is None
    storage.set_item("k", "v1")
    storage.set_item("k", "v2")
    assert storage.get_item("k") == "v2"
    assert storage.keys() == ["k"]
    storage.remove_item("k")
    storage.remove_item("k")
    assert storage.get_item("k") is None
