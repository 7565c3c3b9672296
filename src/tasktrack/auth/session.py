# src/tasktrack/auth/session.py

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from ..core.errors import AppError, AuthError, UnknownError
from ..core.ports import HttpGateway, KeyValueStorage
from .models import Session, SessionStatus, User
from .token import TokenDecodeError, user_from_token

logger = logging.getLogger(__name__)

TOKEN_KEY = "accessToken"

LOGIN_PATH = "/auth/login"
REGISTER_PATH = "/auth/register"

SessionListener = Callable[[Session], None]

# Allowed FSM edges. Any state may drop to UNAUTHENTICATED (logout never fails);
# the only way into AUTHENTICATED after startup is through AUTHENTICATING.
_TRANSITIONS: dict[SessionStatus, frozenset[SessionStatus]] = {
    SessionStatus.INITIALIZING: frozenset({SessionStatus.AUTHENTICATED, SessionStatus.UNAUTHENTICATED}),
    SessionStatus.UNAUTHENTICATED: frozenset({SessionStatus.AUTHENTICATING, SessionStatus.UNAUTHENTICATED}),
    SessionStatus.AUTHENTICATING: frozenset(
        {SessionStatus.AUTHENTICATING, SessionStatus.AUTHENTICATED, SessionStatus.UNAUTHENTICATED}
    ),
    SessionStatus.AUTHENTICATED: frozenset({SessionStatus.AUTHENTICATING, SessionStatus.UNAUTHENTICATED}),
}


class InvalidTransition(RuntimeError):
    pass


class SessionStore:
    """
    Owns "who is logged in".

    The token is persisted under `accessToken` in local storage. Identity is
    read from the token's subject claim without verifying its signature, so
    `session.user` is a display hint, never an authorization input.

    Constructing the store attaches it to the gateway as its credential
    source: the gateway reads `token` for every request and calls
    `force_logout()` when the server rejects the session.
    """

    def __init__(self, storage: KeyValueStorage, gateway: HttpGateway) -> None:
        self._storage = storage
        self._gateway = gateway
        self._session = Session(status=SessionStatus.INITIALIZING)
        self._listeners: list[SessionListener] = []
        self._login_attempt = 0

        attach = getattr(gateway, "attach_credentials", None)
        if callable(attach):
            attach(self)

    # ---- read side ----

    @property
    def session(self) -> Session:
        return self._session

    @property
    def token(self) -> str | None:
        return self._session.token

    @property
    def status(self) -> SessionStatus:
        return self._session.status

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a listener for session changes. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # ---- FSM ----

    def _transition(self, new: Session) -> None:
        current = self._session.status
        if new.status not in _TRANSITIONS[current]:
            raise InvalidTransition(f"session transition {current} -> {new.status} is not allowed")
        if new.status is SessionStatus.AUTHENTICATED and not new.authenticated:
            raise InvalidTransition("authenticated session requires both token and user")

        if new == self._session:
            return
        self._session = new
        logger.debug("Session %s -> %s", current, new.status)

        for listener in list(self._listeners):
            try:
                listener(new)
            except Exception:
                logger.exception("Session listener failed")

    def _owns_login(self, attempt: int) -> bool:
        return attempt == self._login_attempt and self._session.status is SessionStatus.AUTHENTICATING

    def _clear_persisted_token(self) -> None:
        try:
            self._storage.remove_item(TOKEN_KEY)
        except Exception:
            logger.exception("Failed to clear persisted token")

    # ---- lifecycle ----

    def initialize(self) -> Session:
        """
        Resolve the startup session from the persisted token, offline.

        A well-formed but expired token counts as a session until the first
        API call is rejected.
        """
        if self._session.status is not SessionStatus.INITIALIZING:
            return self._session

        try:
            token = self._storage.get_item(TOKEN_KEY)
        except Exception:
            logger.exception("Failed to read persisted token")
            token = None

        if not token:
            self._transition(Session(status=SessionStatus.UNAUTHENTICATED))
            return self._session

        try:
            user = user_from_token(token)
        except TokenDecodeError as e:
            logger.warning("Persisted token is unusable (%s); starting signed out", e)
            self._clear_persisted_token()
            self._transition(Session(status=SessionStatus.UNAUTHENTICATED))
            return self._session

        self._transition(Session(status=SessionStatus.AUTHENTICATED, token=token, user=user))
        logger.info("Session restored user=%s", user.username)
        return self._session

    async def login(self, username: str, password: str) -> Session:
        """
        Exchange credentials for a token. On failure the session ends up
        UNAUTHENTICATED and the error is re-raised for the caller to show.
        """
        if self._session.status is SessionStatus.INITIALIZING:
            self.initialize()

        self._login_attempt += 1
        attempt = self._login_attempt
        self._transition(Session(status=SessionStatus.AUTHENTICATING))
        try:
            data = await self._gateway.post(LOGIN_PATH, {"username": username, "password": password})
            token = _access_token(data)
            try:
                user = user_from_token(token)
            except TokenDecodeError:
                logger.debug("Token subject unreadable, using submitted username")
                user = User(username=username)

            # A logout, forced logout or newer login landed while the POST was
            # pending; that change owns the session now.
            if not self._owns_login(attempt):
                logger.info("Login superseded user=%s; discarding token", username)
                raise AuthError("Login superseded by a newer session change.")

            self._storage.set_item(TOKEN_KEY, token)
        except Exception as e:
            if isinstance(e, AppError):
                logger.info("Login failed user=%s: %s", username, e.message)
            else:
                logger.exception("Login failed user=%s", username)
            if self._owns_login(attempt):
                self._clear_persisted_token()
                self._transition(Session(status=SessionStatus.UNAUTHENTICATED))
            raise

        self._transition(Session(status=SessionStatus.AUTHENTICATED, token=token, user=user))
        logger.info("Logged in user=%s", user.username)
        return self._session

    async def register(self, name: str, username: str, password: str) -> str:
        """
        Create an account. Does not log in; returns the server's message.
        Errors (e.g. duplicate username) carry the server's message verbatim.
        """
        data = await self._gateway.post(
            REGISTER_PATH,
            {"name": name, "username": username, "password": password},
        )
        message = data.get("message") if isinstance(data, dict) else None
        logger.info("Registered user=%s", username)
        return str(message) if message else "Registration successful."

    def logout(self) -> None:
        self._clear_persisted_token()
        self._transition(Session(status=SessionStatus.UNAUTHENTICATED))
        logger.info("Logged out")

    def force_logout(self, reason: str) -> None:
        """Called by the gateway when the server rejects the session."""
        logger.warning("Session terminated: %s", reason)
        self._clear_persisted_token()
        self._transition(Session(status=SessionStatus.UNAUTHENTICATED))


def _access_token(data: Any) -> str:
    token = data.get("accessToken") if isinstance(data, dict) else None
    if not isinstance(token, str) or not token.strip():
        raise UnknownError("Authentication failed: no access token in response.")
    return token.strip()
