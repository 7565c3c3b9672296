# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from tasktrack.api.gateway import ApiGateway
from tasktrack.auth.session import SessionStore
from tasktrack.cli.bootstrap import create_initial_state
from tasktrack.core.state import AppState
from tasktrack.preferences.store import PreferenceStore
from tasktrack.storage.local_store import LocalStore
from tasktrack.tasks.task_api import TaskApi
from tasktrack.tasks.task_store import TaskStore

from .fakes import BASE_URL, FakeTaskServer


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap.

    A SimpleNamespace rather than the real config keeps tests isolated
    from the developer's .env.
    """
    return SimpleNamespace(
        app_name="tasktrack-test",
        log_level="DEBUG",
        api_base_url=BASE_URL,
        request_timeout_seconds=5.0,
        data_dir=tmp_path,
        local_store_path=tmp_path / "local_storage.sqlite3",
        log_dir=tmp_path,
        console_enabled=False,
    )


@pytest.fixture()
def server() -> FakeTaskServer:
    srv = FakeTaskServer()
    srv.add_user("alice", "secret1", name="Alice")
    return srv


@pytest.fixture()
def storage(settings: SimpleNamespace) -> LocalStore:
    return LocalStore(settings.local_store_path)


@pytest.fixture()
def gateway(server: FakeTaskServer) -> ApiGateway:
    return ApiGateway(BASE_URL, transport=server.transport())


@pytest.fixture()
def session(storage: LocalStore, gateway: ApiGateway) -> SessionStore:
    return SessionStore(storage, gateway)


@pytest.fixture()
def preferences(storage: LocalStore) -> PreferenceStore:
    return PreferenceStore(storage)


@pytest.fixture()
def task_store(gateway: ApiGateway, session: SessionStore, preferences: PreferenceStore) -> TaskStore:
    # `session` is requested so the gateway has a credential source.
    return TaskStore(TaskApi(gateway), preferences)


@pytest.fixture()
def state(settings: SimpleNamespace, server: FakeTaskServer) -> AppState:
    """AppState wired through the real composition root, talking to the fake server."""
    return create_initial_state(settings=settings, transport=server.transport())
