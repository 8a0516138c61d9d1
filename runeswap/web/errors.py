"""Exception handlers for errors that escape a route (mostly dependency failures)."""

from __future__ import annotations

from fastapi import FastAPI, Request
from loguru import logger

from runeswap.errors import RuneSwapError
from .responses import error


async def handle_runeswap_error(request: Request, exc: RuneSwapError):
    return error(exc.message, exc.details, exc.status)


async def handle_unexpected_error(request: Request, exc: Exception):
    logger.exception(
        "Unhandled error on {method} {path}: {error}",
        method=request.method,
        path=request.url.path,
        error=exc,
    )
    return error("Internal server error", str(exc) or repr(exc), 500)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RuneSwapError, handle_runeswap_error)
    app.add_exception_handler(Exception, handle_unexpected_error)


__all__ = ["register_exception_handlers"]
