# src/tasktrack/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires storage, gateway and stores into AppState,
- runs the startup sequence (session first, then tasks).
"""

from __future__ import annotations

import logging

import httpx

from ..api.gateway import ApiGateway
from ..auth.models import Session
from ..auth.session import SessionStore
from ..config import get_settings
from ..core.state import AppState
from ..preferences.store import PreferenceStore
from ..storage.local_store import LocalStore
from ..tasks.task_api import TaskApi
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _clear_tasks_on_sign_out(session: SessionStore, tasks: TaskStore) -> None:
    """Drop the previous account's tasks whenever the session stops being authenticated."""

    def _on_session_change(current: Session) -> None:
        if not current.authenticated:
            tasks.clear()

    session.subscribe(_on_session_change)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.local_store_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(
    *,
    settings=None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AppState:
    """
    Build AppState from the provided settings.

    Keeping settings (and the HTTP transport) injectable makes the app easy
    to test. If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    local_store = LocalStore(settings.local_store_path)
    gateway = ApiGateway(
        settings.api_base_url,
        timeout_seconds=settings.request_timeout_seconds,
        transport=transport,
    )
    session = SessionStore(local_store, gateway)
    preferences = PreferenceStore(local_store)
    tasks = TaskStore(TaskApi(gateway), preferences)
    _clear_tasks_on_sign_out(session, tasks)

    return AppState(
        settings=settings,
        local_store=local_store,
        gateway=gateway,
        session=session,
        preferences=preferences,
        tasks=tasks,
    )


async def start_state(state: AppState) -> None:
    """Resolve the session, restore preferences, then load tasks if signed in."""
    session = state.session.initialize()
    state.tasks.restore_preferences()
    if session.authenticated:
        await state.tasks.list()
    logger.info(
        "Startup done: authenticated=%s tasks=%d",
        session.authenticated,
        len(state.tasks.tasks),
    )


async def shutdown_state(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        await state.gateway.aclose()
    except Exception:
        logger.debug("Gateway close failed.", exc_info=True)

    try:
        state.local_store.close()
    except Exception:
        logger.debug("Local store close failed.", exc_info=True)
