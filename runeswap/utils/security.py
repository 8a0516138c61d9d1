"""JWT helpers for the Liquidium bearer tokens.

The token is issued and verified by Liquidium, we only read its payload to
learn when it expires.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict

from jwt.utils import base64url_decode
from loguru import logger


def decode_token_payload(token: str) -> Dict[str, Any] | None:
    """Decode the payload segment of ``header.payload.signature`` without verifying it."""

    parts = token.split(".") if isinstance(token, str) else []
    if len(parts) != 3:
        logger.warning("JWT has {count} segments, expected 3", count=len(parts))
        return None
    try:
        payload = json.loads(base64url_decode(parts[1]).decode("utf-8"))
    except (ValueError, TypeError) as exc:
        logger.warning("Failed to decode JWT payload: {error}", error=exc)
        return None
    if not isinstance(payload, dict):
        logger.warning("JWT payload is not a JSON object")
        return None
    return payload


def decode_token_expiry(token: str) -> datetime | None:
    """Return the ``exp`` claim as an aware UTC datetime, None if absent or unreadable."""

    payload = decode_token_payload(token)
    if not payload or payload.get("exp") in (None, ""):
        return None
    try:
        return datetime.fromtimestamp(float(payload["exp"]), tz=timezone.utc)
    except (ValueError, TypeError, OverflowError, OSError) as exc:
        logger.warning("JWT exp claim is not a timestamp: {error}", error=exc)
        return None


__all__ = ["decode_token_expiry", "decode_token_payload"]
