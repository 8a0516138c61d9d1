"""RuneSwap error taxonomy.

Every error carries a stable user-facing ``message``, diagnostic ``details``
and the HTTP ``status`` it maps to at the route boundary.
"""

from __future__ import annotations

from typing import Any


class RuneSwapError(RuntimeError):
    """Base error rendered as an error envelope."""

    status: int = 500
    default_message: str = "Internal server error"

    def __init__(
        self,
        message: str | None = None,
        details: str | None = None,
        status: int | None = None,
    ) -> None:
        self.message = message or self.default_message
        self.details = details
        if status is not None:
            self.status = status
        super().__init__(self.message)


class ValidationError(RuneSwapError):
    status = 400
    default_message = "Invalid request parameters"


class AuthRequiredError(RuneSwapError):
    status = 401
    default_message = "Liquidium authentication required"


class UpstreamNotFoundError(RuneSwapError):
    status = 404
    default_message = "Resource not found"


class QuoteExpiredError(RuneSwapError):
    status = 410
    default_message = "Quote expired. Please fetch a new quote."


class RateLimitedError(RuneSwapError):
    status = 429
    default_message = "Rate limit exceeded"


class ServerConfigError(RuneSwapError):
    status = 500
    default_message = "Server configuration error"


class UpstreamUnavailableError(RuneSwapError):
    status = 503
    default_message = "API service unavailable"


class UpstreamError(RuneSwapError):
    """Failure reported by (or while talking to) an external API."""

    default_message = "Upstream request failed"

    def __init__(
        self,
        message: str | None = None,
        details: str | None = None,
        status: int | None = None,
        *,
        code: str | None = None,
        non_json: bool = False,
        payload: Any = None,
    ) -> None:
        super().__init__(message, details, status)
        self.code = code
        self.non_json = non_json
        self.payload = payload


__all__ = [
    "AuthRequiredError",
    "QuoteExpiredError",
    "RateLimitedError",
    "RuneSwapError",
    "ServerConfigError",
    "UpstreamError",
    "UpstreamNotFoundError",
    "UpstreamUnavailableError",
    "ValidationError",
]
