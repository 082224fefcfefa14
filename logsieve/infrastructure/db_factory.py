"""
Database connection factory utilities for logsieve.

Builds DSNs for the log storage backends and opens the dedicated connections
used for one-off maintenance work (schema setup, retention purges).

Includes retry logic for transient connection failures using tenacity. Only
connection acquisition is retried; queries issued during admission are not.
"""

from __future__ import annotations

from typing import Optional

import psycopg
from psycopg import AsyncConnection, Connection, sql
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from logsieve.config import Settings, get_settings


def build_dsn(settings: Optional[Settings] = None) -> str:
    """Compose a DSN string from settings."""
    settings = settings or get_settings()
    return (
        f"postgresql://{settings.db_user}:{settings.db_password}"
        f"@{settings.db_host}:{settings.db_port}/{settings.db_name}"
    )


def _statement_timeout(timeout_ms: int) -> sql.Composed:
    return sql.SQL("SET statement_timeout = {}").format(sql.Literal(int(timeout_ms)))


def apply_statement_timeout(cursor: psycopg.Cursor, timeout_ms: int) -> None:
    """Set a per-session statement timeout; 0 leaves the server default."""
    if timeout_ms > 0:
        cursor.execute(_statement_timeout(timeout_ms))


async def apply_statement_timeout_async(cursor: psycopg.AsyncCursor, timeout_ms: int) -> None:
    if timeout_ms > 0:
        await cursor.execute(_statement_timeout(timeout_ms))


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((psycopg.OperationalError, psycopg.InterfaceError)),
    reraise=True,
)
def get_sync_connection(dsn: Optional[str] = None) -> Connection:
    """
    Acquire a dedicated synchronous connection with automatic retry.

    Retries up to 3 times with exponential backoff for transient connection errors.
    Use this for one-off operations (schema setup, purges). Prefer the pool for
    admission traffic.

    Raises
    ------
    psycopg.OperationalError
        If connection fails after all retry attempts.
    """
    return psycopg.connect(dsn or build_dsn())


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((psycopg.OperationalError, OSError)),
    reraise=True,
)
async def get_async_connection(dsn: Optional[str] = None) -> AsyncConnection:
    """Acquire an asynchronous connection with automatic retry."""
    return await AsyncConnection.connect(dsn or build_dsn())


__all__ = [
    "apply_statement_timeout",
    "apply_statement_timeout_async",
    "build_dsn",
    "get_async_connection",
    "get_sync_connection",
]
