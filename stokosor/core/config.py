from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Environment-driven application configuration."""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "Stokosor"
    DATA_DIR: Path = Field(default_factory=lambda: Path(__file__).resolve().parents[2] / "data")

    # Empty means "derive from DATA_DIR" (see ``database_url``).
    DB_URL: str = Field(default="", validation_alias=AliasChoices("DB_URL", "DATABASE_URL"))

    # X-API-Key must match this when set; an empty key leaves the API open
    # for a local single-user install.
    API_KEY: str = ""

    HOST: str = "127.0.0.1"
    PORT: int = 8089
    LOG_LEVEL: str = "INFO"

    # Upper bound for parent-link walks so a corrupted cycle cannot hang a lookup.
    MAX_CONTAINER_DEPTH: int = Field(default=64, ge=1)
    SEARCH_RESULT_LIMIT: int = Field(default=50, ge=1)
    EXPIRING_SOON_DAYS: int = Field(default=30, ge=0)

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalize_log_level(cls, value: object) -> str:
        cleaned = str(value or "INFO").strip().upper()
        return cleaned or "INFO"

    @property
    def database_url(self) -> str:
        return self.DB_URL or f"sqlite:///{self.DATA_DIR / 'stokosor.db'}"


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    settings = AppSettings()
    if not settings.DB_URL:
        settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
    return settings
