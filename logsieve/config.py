"""
Configuration settings for logsieve.

Uses Pydantic Settings to load environment variables for database connections,
logging, and the admission policy (size cap, duplicate windows, noise filters,
retention).
"""
from __future__ import annotations

from datetime import timedelta
from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# NOTE: keep in sync with the content-type filter used by the HTTP logging middleware
DEFAULT_IGNORED_CONTENT_TYPES = [
    "application/javascript; charset=utf-8",
    "application/manifest+json",
    "font",
    "image",
    "text/css",
]


class Settings(BaseSettings):
    # Database
    db_host: str = Field("localhost", alias="DB_HOST")
    db_port: int = Field(5432, alias="DB_PORT")
    db_user: str = Field("postgres", alias="DB_USER")
    db_password: str = Field("postgres", alias="DB_PASSWORD")
    db_name: str = Field("logsieve", alias="DB_NAME")
    db_statement_timeout_ms: int = Field(0, alias="DB_STATEMENT_TIMEOUT_MS")
    db_pool_min_size: int = Field(1, alias="DB_POOL_MIN_SIZE")
    db_pool_max_size: int = Field(10, alias="DB_POOL_MAX_SIZE")
    logs_table: str = Field("logs", alias="LOGS_TABLE")

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    # Admission policy
    log_max_bytes: int = Field(20_480, alias="LOG_MAX_BYTES")
    duplicate_window_seconds: int = Field(3_600, alias="DUPLICATE_WINDOW_SECONDS")
    severe_window_seconds: int = Field(600, alias="SEVERE_WINDOW_SECONDS")
    severe_levels: List[str] = Field(
        default_factory=lambda: ["error", "fatal"], alias="SEVERE_LEVELS"
    )
    ignored_content_types: List[str] = Field(
        default_factory=lambda: list(DEFAULT_IGNORED_CONTENT_TYPES),
        alias="IGNORED_CONTENT_TYPES",
    )
    retention_days: int = Field(30, alias="RETENTION_DAYS")

    # Batch ingest
    ingest_concurrency: int = Field(4, alias="INGEST_CONCURRENCY")
    ingest_failure_policy: str = Field("tolerant", alias="INGEST_FAILURE_POLICY")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def duplicate_window(self) -> timedelta:
        return timedelta(seconds=self.duplicate_window_seconds)

    @property
    def severe_window(self) -> timedelta:
        return timedelta(seconds=self.severe_window_seconds)

    @property
    def retention_ttl(self) -> timedelta:
        return timedelta(days=self.retention_days)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["DEFAULT_IGNORED_CONTENT_TYPES", "Settings", "get_settings"]
