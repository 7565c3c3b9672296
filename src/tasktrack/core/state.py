# src/tasktrack/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..api.gateway import ApiGateway
from ..auth.session import SessionStore
from ..preferences.store import PreferenceStore
from ..storage.local_store import LocalStore
from ..tasks.task_store import TaskStore


@dataclass
class AppState:
    """Everything the front end needs, wired once in cli.bootstrap."""

    settings: Any

    local_store: LocalStore
    gateway: ApiGateway
    session: SessionStore
    preferences: PreferenceStore
    tasks: TaskStore
