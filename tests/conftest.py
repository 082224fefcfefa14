"""
Pytest configuration for logsieve.

Provides fixtures for:
- A controllable clock for time-window tests
- Settings isolated from any local `.env`
- In-memory storage and an admitter bound to both
- PostgreSQL connection management for integration tests
"""

from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from typing import Generator

import psycopg
import pytest
from psycopg import sql

from logsieve.admission.engine import LogAdmitter
from logsieve.config import Settings
from logsieve.storage.memory import InMemoryLogStorage

START = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Deterministic clock; call it to read, `advance` to move forward."""

    def __init__(self, now: datetime = START) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def storage() -> InMemoryLogStorage:
    return InMemoryLogStorage()


@pytest.fixture
def admitter(storage: InMemoryLogStorage, clock: FakeClock, settings: Settings) -> LogAdmitter:
    return LogAdmitter(storage, clock=clock, settings=settings)


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "logsieve"),
        logs_table="logs_test",
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    return (
        f"postgresql://{test_settings.db_user}:{test_settings.db_password}"
        f"@{test_settings.db_host}:{test_settings.db_port}/{test_settings.db_name}"
    )


@pytest.fixture(scope="session")
def db_connection_available(test_dsn: str) -> bool:
    """
    Check if database is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(test_dsn, connect_timeout=5) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True
    except psycopg.Error:
        return False


@pytest.fixture(scope="session")
def db_connection(
    test_dsn: str, db_connection_available: bool
) -> Generator[psycopg.Connection, None, None]:
    """
    Provide a session-scoped database connection for integration tests.

    Skips tests if database is not available.
    """
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")

    conn = psycopg.connect(test_dsn, autocommit=True)
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture
def clean_logs_table(db_connection: psycopg.Connection, test_settings: Settings):
    """
    Drop the test logs table before and after each test for isolation.
    """
    drop = sql.SQL("DROP TABLE IF EXISTS {}").format(
        sql.Identifier(test_settings.logs_table)
    )
    db_connection.execute(drop)
    yield
    db_connection.execute(drop)
