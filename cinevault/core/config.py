"""Application settings parsed from environment variables and defaults."""

import json
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CORS_ORIGINS = ["http://localhost:5173", "http://127.0.0.1:5173"]


def _split_list(value: str | list[str] | None) -> list[str]:
    """Parse a JSON list, a comma-separated string, or a list into clean strings."""
    if isinstance(value, list):
        return [item.strip() for item in value if isinstance(item, str) and item.strip()]
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return []
        try:
            parsed = json.loads(stripped)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, list):
            return [str(item).strip() for item in parsed if str(item).strip()]
        return [item.strip() for item in stripped.split(",") if item.strip()]
    return []


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    app_name: str = "CineVault Core"
    environment: str = "development"
    api_prefix: str = "/api"

    database_url: str = "sqlite+aiosqlite:///./cinevault.db"

    tmdb_api_key: Optional[str] = None
    omdb_api_key: Optional[str] = None
    rapidapi_key: Optional[str] = None
    mdl_api_host: str = "mydramalist-api.p.rapidapi.com"

    log_level: str = "INFO"
    cors_origins: list[str] | str = Field(default_factory=lambda: DEFAULT_CORS_ORIGINS.copy())

    redis_url: Optional[str] = None
    cache_namespace: str = "cinestat_cache:"
    cache_schema_version: str = "v1"
    cache_ttl_days: int = 30
    cache_max_entries: int = 500

    fetch_retries: int = 2
    fetch_timeout_seconds: float = 10.0
    source_circuit_threshold: int = 3
    source_circuit_backoff_seconds: float = 15.0

    privileged_caller_ids: list[str] | str = Field(default_factory=list)

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_cors_origins(cls, value: str | list[str] | None) -> list[str]:
        """Normalize CORS origins from JSON, CSV, or list inputs."""
        return _split_list(value) or DEFAULT_CORS_ORIGINS.copy()

    @field_validator("privileged_caller_ids", mode="before")
    @classmethod
    def _split_privileged_caller_ids(cls, value: str | list[str] | None) -> list[str]:
        """Normalize privileged caller identities from JSON, CSV, or list inputs."""
        return _split_list(value)

    def is_privileged(self, caller_id: str | None) -> bool:
        """Return True when the opaque caller identity is on the privileged list."""
        if not caller_id:
            return False
        return caller_id.strip() in self.privileged_caller_ids

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """Return cached settings to avoid re-parsing environment variables."""
    return Settings()


settings = get_settings()
