# src/tasktrack/core/errors.py

"""
Error taxonomy shared by the gateway and the stores.

Every failure that crosses the ApiGateway boundary is one of these. Callers
catch AppError to show `message`; they match on the subclass to react
(e.g. AuthError -> go back to the login screen).
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class: {message, code?, status?, timestamp}."""

    default_code: str | None = None

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        status: int | None = None,
        timestamp: datetime | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code if code is not None else self.default_code
        self.status = status
        self.timestamp = timestamp or datetime.now(timezone.utc)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(message={self.message!r}, "
            f"code={self.code!r}, status={self.status!r})"
        )


class NetworkError(AppError):
    """The request was sent but no response came back."""

    default_code = "NETWORK_ERROR"


class TransportError(AppError):
    """The request could not be constructed or sent."""

    default_code = "REQUEST_ERROR"


class AuthError(AppError):
    default_code = "UNAUTHORIZED"


class ValidationError(AppError):
    default_code = "VALIDATION_ERROR"

    def __init__(
        self,
        message: str,
        *,
        field_errors: dict[str, list[str]] | None = None,
        global_errors: list[str] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.field_errors = dict(field_errors or {})
        self.global_errors = list(global_errors or [])


class NotFoundError(AppError):
    default_code = "NOT_FOUND"


class ServerError(AppError):
    default_code = "SERVER_ERROR"


class UnknownError(AppError):
    default_code = "UNKNOWN_ERROR"


def error_for_status(status: int) -> type[AppError]:
    """Map an HTTP error status onto the taxonomy."""
    if status in (401, 403):
        return AuthError
    if status == 400:
        return ValidationError
    if status == 404:
        return NotFoundError
    if 500 <= status < 600:
        return ServerError
    return UnknownError


def to_app_error(exc: BaseException) -> AppError:
    """Wrap anything that escaped the gateway as an AppError (UnknownError)."""
    if isinstance(exc, AppError):
        return exc
    msg = str(exc).strip() or "An unexpected error occurred"
    return UnknownError(msg)


def log_app_error(err: AppError, context: str | None = None) -> None:
    logger.error(
        "[%s] Error in %s: message=%s code=%s status=%s",
        err.timestamp.isoformat(),
        context or "unknown context",
        err.message,
        err.code,
        err.status,
    )
