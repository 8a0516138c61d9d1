"""Uniform JSON envelopes for every route.

Success bodies are ``{"data": ...}``, errors are ``{"error": message, "details": details}``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from loguru import logger

from runeswap.errors import RuneSwapError, UpstreamError


@dataclass(slots=True, frozen=True)
class ErrorInfo:
    message: str
    details: str | None
    status: int


def success(data: Any, status: int = 200) -> JSONResponse:
    return JSONResponse(status_code=status, content={"data": jsonable_encoder(data)})


def error(message: str, details: str | None = None, status: int = 500) -> JSONResponse:
    logger.warning("[API Error] {message}: {details}", message=message, details=details)
    return JSONResponse(status_code=status, content={"error": message, "details": details})


def error_from(info: ErrorInfo) -> JSONResponse:
    return error(info.message, info.details, info.status)


def classify_error(exc: BaseException, context_message: str) -> ErrorInfo:
    """Map a caught exception to the message/details/status of its envelope."""

    if isinstance(exc, UpstreamError):
        status = exc.status or 500
        if status == 404:
            return ErrorInfo("Resource not found", exc.details or exc.message, 404)
        if status == 400:
            return ErrorInfo("Bad request", exc.details or exc.message, 400)
        return ErrorInfo(context_message, exc.details or exc.message, status)
    if isinstance(exc, RuneSwapError):
        return ErrorInfo(exc.message, exc.details, exc.status)
    return ErrorInfo(context_message, str(exc) or repr(exc), 500)


__all__ = ["ErrorInfo", "classify_error", "error", "error_from", "success"]
