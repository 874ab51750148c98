"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - get_settings() is cached (lru_cache), single instance per process
    - database_url always names an async driver (sqlite:// becomes sqlite+aiosqlite://)
    - CLI flags override these values; persisted app_settings override the directories
      and, unless follow_database_name is off, the database file

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults for everything: the tool works in any repository with no setup
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


def async_sqlite_url(url: str) -> str:
    if url.startswith("sqlite://"):
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return url


class Settings(BaseSettings):
    """Application settings from environment variables (prefix ADR_RADAR_)."""

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="ADR_RADAR_", case_sensitive=False,
    )

    # Database
    database_url: str = "sqlite+aiosqlite:///adrs.db"
    # False when database_url was given explicitly (--db) and must win over
    # a DATABASE_NAME saved from the Settings screen
    follow_database_name: bool = True

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_sqlite_url(cls, v: str) -> str:
        """Plain sqlite:// URLs need the aiosqlite driver for the async engine."""
        return async_sqlite_url(v) if isinstance(v, str) else v

    # Documents
    adr_dir: str = "adrs"
    blip_dir: str = "blips"
    author_name: str = ""

    # Terminal session
    tick_interval_ms: int = 100
    sweep_period_seconds: float = 4.0

    # API
    api_host: str = "127.0.0.1"
    api_port: int = 8000
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"
    log_file: str | None = None


def database_url_for(name: str) -> str:
    """Database URL for a bare file name or path (the DATABASE_NAME setting)."""
    if "://" in name:
        return async_sqlite_url(name)
    return f"sqlite+aiosqlite:///{name}"


@lru_cache
def get_settings() -> Settings:
    return Settings()
