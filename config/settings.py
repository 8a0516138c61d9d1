"""Global RuneSwap settings.

Settings are split by domain (external APIs, database, cache, borrow flow),
so a new upstream service gets its own group without touching the rest.
Everything is loaded from environment variables through Pydantic Settings,
nested groups use the ``__`` delimiter (``LIQUIDIUM__API_KEY=...``).
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import (
    AnyHttpUrl,
    BaseModel,
    Field,
    PositiveFloat,
    PositiveInt,
    SecretStr,
    field_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent
ACCESSIBLE_ENV_FILE = BASE_DIR / "config" / "runtime.env"
DEFAULT_ENV_FILE = BASE_DIR / ".env"
ENV_FILE = ACCESSIBLE_ENV_FILE if ACCESSIBLE_ENV_FILE.exists() else DEFAULT_ENV_FILE


class _ApiCredentials(BaseModel):
    api_key: SecretStr | None = Field(None, description="Server-side API key")

    @field_validator("api_key", mode="before")
    @classmethod
    def _empty_str_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class LiquidiumSettings(_ApiCredentials):
    """Lending API (Liquidium)."""

    api_url: AnyHttpUrl = Field(
        "https://alpha.liquidium.wtf", description="Base URL without the /api/v1 prefix"
    )


class OrdiscanSettings(_ApiCredentials):
    """Bitcoin indexer API (Ordiscan)."""

    api_url: AnyHttpUrl = Field("https://api.ordiscan.com")


class SatsTerminalSettings(_ApiCredentials):
    """DEX aggregator API (SatsTerminal)."""

    api_url: AnyHttpUrl = Field("https://api.sats.terminal")


class HttpSettings(BaseModel):
    """Outbound HTTP client settings."""

    request_timeout: PositiveFloat = 15.0


class CacheSettings(BaseModel):
    """Short-lived response cache (aiocache supports memory / redis)."""

    backend: Literal["memory", "redis"] = "memory"
    ttl_seconds: int = 30
    redis_dsn: str | None = None


class DatabaseSettings(BaseModel):
    """SQLModel + aiosqlite by default, any async SQLAlchemy DSN works."""

    dsn: str = Field(
        "sqlite+aiosqlite:///./database/runeswap.db",
        description="SQLAlchemy/SQLModel connection string",
    )
    echo: bool = False
    create_tables: bool = True


class BorrowSettings(BaseModel):
    """Borrow range cache and repay defaults."""

    range_cache_ttl_seconds: PositiveInt = 300
    probe_amount: str = "1"
    repay_fee_rate: PositiveInt = 5


class PopularRunesSettings(BaseModel):
    """Stale-while-revalidate windows for the popular runes cache."""

    expiry_seconds: PositiveInt = 7 * 24 * 60 * 60
    refresh_interval_seconds: PositiveInt = 6 * 60 * 60
    stale_after_seconds: PositiveInt = 30 * 24 * 60 * 60
    keep_entries: PositiveInt = 5


class AppSettings(BaseSettings):
    """Main RuneSwap settings container."""

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    environment: Literal["dev", "prod"] = "dev"
    log_json: bool = False
    liquidium: LiquidiumSettings = LiquidiumSettings()
    ordiscan: OrdiscanSettings = OrdiscanSettings()
    sats_terminal: SatsTerminalSettings = SatsTerminalSettings()
    http: HttpSettings = HttpSettings()
    cache: CacheSettings = CacheSettings()
    database: DatabaseSettings = DatabaseSettings()
    borrow: BorrowSettings = BorrowSettings()
    popular_runes: PopularRunesSettings = PopularRunesSettings()

    @property
    def is_production(self) -> bool:
        """True when running in the production environment."""

        return self.environment == "prod"


_settings: AppSettings | None = None


def get_settings() -> AppSettings:
    """Return the process-wide settings instance.

    The environment and ``.env`` are read once per process, later calls reuse
    the cached object.
    """

    global _settings
    if _settings is None:
        _settings = AppSettings()
    return _settings


__all__ = [
    "AppSettings",
    "BorrowSettings",
    "CacheSettings",
    "DatabaseSettings",
    "HttpSettings",
    "LiquidiumSettings",
    "OrdiscanSettings",
    "PopularRunesSettings",
    "SatsTerminalSettings",
    "get_settings",
]
