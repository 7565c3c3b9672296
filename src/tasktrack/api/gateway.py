# src/tasktrack/api/gateway.py

from __future__ import annotations

import logging
import time
from typing import Any, Mapping

import httpx

from ..core.errors import (
    AppError,
    AuthError,
    NetworkError,
    TransportError,
    ValidationError,
    error_for_status,
)
from ..core.ports import CredentialSource, JsonBody

logger = logging.getLogger(__name__)

UNAUTHORIZED_MESSAGE = "Unauthorized. Please login again."
NO_RESPONSE_MESSAGE = "Network Error: No response received from server."

# Statuses that mean "this session is no longer valid here".
_SESSION_REJECTED = (401, 403)


def _error_payload(response: httpx.Response) -> dict[str, Any]:
    """Best-effort decode of the server's error body ({status, error, message, ...})."""
    try:
        data = response.json()
    except Exception:
        return {}
    return data if isinstance(data, dict) else {}


def _server_message(payload: Mapping[str, Any]) -> str | None:
    msg = payload.get("message")
    if isinstance(msg, str) and msg.strip():
        return msg.strip()
    return None


class ApiGateway:
    """
    The only place that talks to the network.

    - attaches `Authorization: Bearer <token>` when the session has a token
    - normalizes every failure into the AppError taxonomy
    - a rejected session (401/403) anywhere tears the local session down
      before the error reaches the caller
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout_seconds: float = 10.0,
        credentials: CredentialSource | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._credentials = credentials
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(timeout_seconds),
            headers={"Content-Type": "application/json", "Accept": "application/json"},
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    def attach_credentials(self, credentials: CredentialSource) -> None:
        self._credentials = credentials

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ApiGateway":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # ---- verbs ----

    async def get(self, path: str, *, params: Mapping[str, Any] | None = None) -> JsonBody:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: JsonBody = None, *, params: Mapping[str, Any] | None = None) -> JsonBody:
        return await self.request("POST", path, json=json, params=params)

    async def put(self, path: str, json: JsonBody = None, *, params: Mapping[str, Any] | None = None) -> JsonBody:
        return await self.request("PUT", path, json=json, params=params)

    async def patch(self, path: str, json: JsonBody = None, *, params: Mapping[str, Any] | None = None) -> JsonBody:
        return await self.request("PATCH", path, json=json, params=params)

    async def delete(self, path: str, *, params: Mapping[str, Any] | None = None) -> JsonBody:
        return await self.request("DELETE", path, params=params)

    # ---- core ----

    def _auth_headers(self) -> dict[str, str]:
        token = self._credentials.token if self._credentials is not None else None
        if token:
            return {"Authorization": f"Bearer {token}"}
        return {}

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: JsonBody = None,
        params: Mapping[str, Any] | None = None,
    ) -> JsonBody:
        try:
            request = self._client.build_request(
                method,
                path,
                json=json,
                params=dict(params) if params else None,
                headers=self._auth_headers(),
            )
        except Exception as e:
            raise TransportError(f"Request Error: {e}") from e

        t0 = time.monotonic()
        try:
            response = await self._client.send(request)
        except (httpx.TimeoutException, httpx.NetworkError, httpx.RemoteProtocolError) as e:
            logger.info("HTTP %s %s: no response (%s)", method, path, e.__class__.__name__)
            raise NetworkError(NO_RESPONSE_MESSAGE) from e
        except httpx.RequestError as e:
            logger.info("HTTP %s %s: request failed (%s)", method, path, e.__class__.__name__)
            raise TransportError(f"Request Error: {e}") from e

        logger.debug(
            "HTTP %s %s -> %s (%.0fms)",
            method,
            path,
            response.status_code,
            (time.monotonic() - t0) * 1000.0,
        )

        if response.status_code >= 400:
            raise self._error_from_response(method, path, response)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    def _error_from_response(self, method: str, path: str, response: httpx.Response) -> AppError:
        status = response.status_code
        payload = _error_payload(response)
        server_msg = _server_message(payload)

        if status in _SESSION_REJECTED:
            logger.warning("HTTP %s %s -> %s: session rejected, forcing logout", method, path, status)
            if self._credentials is not None:
                self._credentials.force_logout(f"HTTP {status} on {method} {path}")
            return AuthError(server_msg or UNAUTHORIZED_MESSAGE, status=status)

        message = server_msg or f"API error, status {status}"
        cls = error_for_status(status)
        if cls is ValidationError:
            field_errors = payload.get("fieldErrors")
            global_errors = payload.get("globalErrors")
            return ValidationError(
                message,
                status=status,
                field_errors=field_errors if isinstance(field_errors, dict) else None,
                global_errors=global_errors if isinstance(global_errors, list) else None,
            )
        return cls(message, status=status)
