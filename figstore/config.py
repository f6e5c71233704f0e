"""
Configuration and settings for the figure service.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080)
    log_level: str = Field(default="INFO")

    # Durable tier (Postgres). No DB_NAME means no durable tier.
    db_name: Optional[str] = Field(default=None)
    db_user: Optional[str] = Field(default=None)
    db_pass: Optional[str] = Field(default=None)
    db_socket: Optional[str] = Field(default=None)
    # Full SQLAlchemy URL, takes precedence over the DB_* group.
    database_url: Optional[str] = Field(default=None)

    # Cache tier (Redis). No REDIS_HOST means no cache tier.
    redis_host: Optional[str] = Field(default=None)
    redis_port: int = Field(default=6379)
    redis_max_connections: int = Field(default=20)
    redis_socket_timeout: float = Field(default=5.0)

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)

    @property
    def durable_configured(self) -> bool:
        return bool(self.database_url or self.db_name)

    @property
    def cache_configured(self) -> bool:
        return bool(self.redis_host)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
