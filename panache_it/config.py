"""
Application configuration via pydantic-settings.

All settings are loaded from environment variables (or a .env file in dev).
This is the single source of truth for configuration - nothing is hardcoded
elsewhere.
"""

from __future__ import annotations

from enum import StrEnum
from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(StrEnum):
    DEV = "dev"
    PROD = "prod"
    TEST = "test"


class JsonProvider(StrEnum):
    """JSON serializer used when a client negotiates application/json."""

    BINDING = "binding"  # nulls omitted, lexicographic order
    DEFAULT = "default"  # nulls kept, declaration order


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ------------------------------------------------------------------ #
    # Application
    # ------------------------------------------------------------------ #
    environment: Environment = Environment.DEV
    debug: bool = False

    # ------------------------------------------------------------------ #
    # Database
    # ------------------------------------------------------------------ #
    database_url: str = Field(
        default="sqlite+aiosqlite:///:memory:",
        description="Async SQLAlchemy database URL",
    )
    db_echo_sql: bool = False  # Set True for SQL query logging in dev
    generate_schema: bool = Field(
        default=True,
        description="Create all tables on startup (drop-and-create for in-memory databases)",
    )

    # ------------------------------------------------------------------ #
    # Logging
    # ------------------------------------------------------------------ #
    json_logs: bool = Field(
        default=False,
        description="Render logs as JSON. Always on in production.",
    )
    log_level: str = Field(default="INFO", description="Minimum stdlib log level")

    # ------------------------------------------------------------------ #
    # Serialization
    # ------------------------------------------------------------------ #
    json_provider: JsonProvider = Field(
        default=JsonProvider.BINDING,
        description="Serializer answering Accept: application/json",
    )

    # ------------------------------------------------------------------ #
    # Derived / Computed
    # ------------------------------------------------------------------ #
    @model_validator(mode="after")
    def _set_debug_from_env(self) -> Settings:
        if self.environment == Environment.DEV:
            self.debug = True
        if self.environment == Environment.PROD:
            self.json_logs = True
        return self

    @model_validator(mode="after")
    def _validate_production_database(self) -> Settings:
        """Refuse to start in production against a throwaway database."""
        if self.environment != Environment.PROD:
            return self
        if self.is_in_memory_database:
            raise RuntimeError(
                "PRODUCTION STARTUP BLOCKED -- DATABASE_URL points at an in-memory "
                "database. Configure a persistent database for production."
            )
        return self

    @property
    def is_in_memory_database(self) -> bool:
        return self.database_url.startswith("sqlite") and ":memory:" in self.database_url

    @property
    def is_dev(self) -> bool:
        return self.environment in (Environment.DEV, Environment.TEST)

    @property
    def is_prod(self) -> bool:
        return self.environment == Environment.PROD


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings singleton.

    Use FastAPI dependency injection via Depends(get_settings) in endpoints,
    or call directly in non-request contexts (startup, scripts).
    """
    return Settings()
