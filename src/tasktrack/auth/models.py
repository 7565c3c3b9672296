# src/tasktrack/auth/models.py

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class SessionStatus(StrEnum):
    """Authentication lifecycle of the local session."""

    INITIALIZING = "initializing"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


@dataclass(frozen=True, slots=True)
class User:
    username: str
    id: str | None = None
    name: str | None = None
    authorities: list[str] | None = field(default=None, compare=False)


@dataclass(frozen=True, slots=True)
class Session:
    """
    Immutable snapshot of the session.

    `authenticated` is derived, so it can never disagree with token/user.
    """

    status: SessionStatus
    token: str | None = None
    user: User | None = None

    @property
    def authenticated(self) -> bool:
        return self.token is not None and self.user is not None

    @property
    def initializing(self) -> bool:
        return self.status is SessionStatus.INITIALIZING

    @property
    def loading(self) -> bool:
        return self.status in (SessionStatus.INITIALIZING, SessionStatus.AUTHENTICATING)
