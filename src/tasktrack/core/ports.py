# src/tasktrack/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The stores depend on Protocols instead of concrete implementations.
This keeps storage/transport swappable and makes testing easier.
"""

from typing import Any, Mapping, Protocol

JsonBody = Any
# Decoded JSON: dict / list / scalar, or None for an empty body.


class KeyValueStorage(Protocol):
    """Client-local string storage (the browser's localStorage equivalent)."""

    def get_item(self, key: str) -> str | None: ...
    def set_item(self, key: str, value: str) -> None: ...
    def remove_item(self, key: str) -> None: ...


class CredentialSource(Protocol):
    """
    What the gateway needs from the session:
    - the bearer token to attach (None -> send unauthenticated)
    - a hook to tear the session down when the server rejects it
    """

    @property
    def token(self) -> str | None: ...

    def force_logout(self, reason: str) -> None: ...


class HttpGateway(Protocol):
    """Verb-generic JSON transport. Raises AppError subclasses on failure."""

    async def get(self, path: str, *, params: Mapping[str, Any] | None = None) -> JsonBody: ...

    async def post(
            self,
            path: str,
            json: JsonBody = None,
            *,
            params: Mapping[str, Any] | None = None,
    ) -> JsonBody: ...

    async def put(
            self,
            path: str,
            json: JsonBody = None,
            *,
            params: Mapping[str, Any] | None = None,
    ) -> JsonBody: ...

    async def patch(
            self,
            path: str,
            json: JsonBody = None,
            *,
            params: Mapping[str, Any] | None = None,
    ) -> JsonBody: ...

    async def delete(self, path: str, *, params: Mapping[str, Any] | None = None) -> JsonBody: ...
