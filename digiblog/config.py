"""Application settings."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration entrypoint for the blog service and sync client."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: Literal["development", "staging", "production"] = "development"

    # Server
    allowed_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]
    rate_limit: str = "60/minute"

    # Observability
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "json"

    # Blog storage
    blog_backend: Literal["json", "database"] = "json"
    blogs_file: str = "data/blogs/blogs.json"
    database_url: str = Field(
        default="sqlite:///./data/digiblog.db",
        validation_alias=AliasChoices("DATABASE_URL", "SUPABASE_DB_URL"),
    )
    db_echo: bool = Field(
        default=False,
        validation_alias=AliasChoices("DB_ECHO", "SQL_ECHO"),
    )

    # Sync client
    api_base_url: str = "http://127.0.0.1:8000/api"
    api_timeout: float = 10.0
    cache_file: str = "data/cache/local_storage.json"
    cache_namespace: str = "digicides"

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def parse_allowed_origins(cls, value: str | list[str] | None) -> list[str]:
        """Normalize ALLOWED_ORIGINS env input into a list."""
        if isinstance(value, list):
            return value
        if isinstance(value, str):
            raw = value.strip()
            if not raw:
                return []
            if raw.startswith("["):
                try:
                    parsed = json.loads(raw)
                    if isinstance(parsed, list):
                        return parsed
                except json.JSONDecodeError:
                    pass
            return [item.strip() for item in raw.split(",") if item.strip()]
        return []

    @property
    def is_production(self) -> bool:
        """Return True when running in production."""
        return self.environment == "production"

    @property
    def blogs_path(self) -> Path:
        return Path(self.blogs_file)

    @property
    def cache_path(self) -> Path:
        return Path(self.cache_file)


settings = Settings()
