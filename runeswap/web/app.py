"""FastAPI backend for the RuneSwap swap and borrow UI."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from config.settings import get_settings
from runeswap.db import init_db
from runeswap.logging_config import setup_logging
from runeswap.services.clients import close_clients
from runeswap.web.errors import register_exception_handlers
from runeswap.web.routes import liquidium, ordiscan, popular, sats_terminal

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(json=settings.log_json, level="INFO" if settings.is_production else "DEBUG")
    if settings.database.create_tables:
        await init_db()
    logger.info("RuneSwap API started ({environment})", environment=settings.environment)
    yield
    await close_clients()
    logger.info("RuneSwap API stopped")


def create_app() -> FastAPI:
    application = FastAPI(title="RuneSwap API", lifespan=lifespan)
    register_exception_handlers(application)
    application.include_router(liquidium.router)
    application.include_router(sats_terminal.router)
    application.include_router(ordiscan.router)
    application.include_router(popular.router)
    return application


app = create_app()


__all__ = ["app", "create_app"]
