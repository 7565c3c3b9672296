# src/tasktrack/auth/token.py

"""
Read identity claims out of a JWT access token.

NOTE: no signature verification happens here. The decoded subject is a
display hint only; authorization is the server's job.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from typing import Any

from .models import User

logger = logging.getLogger(__name__)


class TokenDecodeError(ValueError):
    pass


def _b64url_decode(segment: str) -> bytes:
    padded = segment + "=" * (-len(segment) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii"))


def decode_claims(token: str) -> dict[str, Any]:
    """Return the payload segment of a JWT as a dict."""
    parts = (token or "").strip().split(".")
    if len(parts) != 3 or not parts[1]:
        raise TokenDecodeError("token is not a three-part JWT")
    try:
        payload = json.loads(_b64url_decode(parts[1]).decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        raise TokenDecodeError(f"token payload is not valid base64 JSON: {e}") from e
    if not isinstance(payload, dict):
        raise TokenDecodeError("token payload is not a JSON object")
    return payload


def _authorities(claims: dict[str, Any]) -> list[str] | None:
    raw = claims.get("authorities", claims.get("roles"))
    if raw is None:
        return None
    if isinstance(raw, str):
        return [p for p in raw.replace(",", " ").split() if p]
    if isinstance(raw, list):
        out: list[str] = []
        for item in raw:
            if isinstance(item, dict):
                # Spring-style [{"authority": "ROLE_USER"}]
                item = item.get("authority")
            if item:
                out.append(str(item))
        return out
    return None


def user_from_token(token: str) -> User:
    """Build a User from the token's `sub` claim (plus optional extras)."""
    claims = decode_claims(token)
    sub = claims.get("sub")
    if not isinstance(sub, str) or not sub.strip():
        raise TokenDecodeError("token has no subject claim")

    raw_id = claims.get("userId", claims.get("id"))
    name = claims.get("name")
    return User(
        username=sub.strip(),
        id=str(raw_id) if raw_id is not None else None,
        name=name if isinstance(name, str) else None,
        authorities=_authorities(claims),
    )
