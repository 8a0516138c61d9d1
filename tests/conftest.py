from __future__ import annotations

import os

os.environ.setdefault("DATABASE__DSN", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("DATABASE__CREATE_TABLES", "false")
os.environ.setdefault("CACHE__BACKEND", "memory")

from datetime import timedelta  # noqa: E402
from typing import Any  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402
from sqlmodel.ext.asyncio.session import AsyncSession  # noqa: E402

from runeswap import models  # noqa: E402,F401
from runeswap.db import get_db_session, get_session_maker  # noqa: E402
from runeswap.models.base import utcnow  # noqa: E402
from runeswap.repositories import token_repo  # noqa: E402
from runeswap.services.clients import (  # noqa: E402
    get_liquidium_client,
    get_ordiscan_client,
    get_sats_terminal_client,
)
from runeswap.utils.cache import get_cache  # noqa: E402
from runeswap.web.app import app  # noqa: E402
from runeswap.web.routes.popular import optional_sats_terminal_client  # noqa: E402

WALLET = "bc1pxyzwalletaddressforrunesborrowing0000000000000000000000"


class FakeUpstream:
    """Stands in for an API client: canned results per method, every call recorded."""

    def __init__(self, **responses: Any) -> None:
        self.responses = dict(responses)
        self.calls: list[tuple[str, tuple, dict]] = []

    def __getattr__(self, name: str):
        if name.startswith("_"):
            raise AttributeError(name)

        async def method(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            result = self.responses.get(name)
            if isinstance(result, BaseException):
                raise result
            if callable(result):
                return result(*args, **kwargs)
            return result

        return method

    def called(self, name: str) -> list[tuple[tuple, dict]]:
        return [(args, kwargs) for method, args, kwargs in self.calls if method == name]


@pytest.fixture
async def session_maker():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
async def session(session_maker):
    async with session_maker() as db_session:
        yield db_session


@pytest.fixture
def liquidium() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def sats_terminal() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def ordiscan() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture(autouse=True)
async def clear_response_cache():
    await get_cache().clear()
    yield
    await get_cache().clear()


@pytest.fixture
async def client(session_maker, liquidium, sats_terminal, ordiscan):
    async def override_session():
        async with session_maker() as db_session:
            yield db_session

    app.dependency_overrides[get_db_session] = override_session
    app.dependency_overrides[get_session_maker] = lambda: session_maker
    app.dependency_overrides[get_liquidium_client] = lambda: liquidium
    app.dependency_overrides[get_sats_terminal_client] = lambda: sats_terminal
    app.dependency_overrides[optional_sats_terminal_client] = lambda: sats_terminal
    app.dependency_overrides[get_ordiscan_client] = lambda: ordiscan

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
        yield http
    app.dependency_overrides.clear()


@pytest.fixture
def store_token(session):
    async def _store(wallet: str = WALLET, jwt: str = "user-jwt", expires_in: timedelta | None = timedelta(hours=1)):
        expires_at = utcnow() + expires_in if expires_in is not None else None
        return await token_repo.upsert_token(
            session,
            wallet_address=wallet,
            ordinals_address=wallet,
            payment_address=None,
            jwt=jwt,
            expires_at=expires_at,
        )

    return _store
