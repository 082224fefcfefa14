"""
PostgreSQL storage backends.

Each admission attempt costs one `count_matching` round-trip and, when the
candidate is new, one `insert`. Both run on a pooled psycopg connection. There
is no transaction spanning the two: two producers racing on the same duplicate
signature may both be admitted, which is acceptable at the window granularity.

PostgreSQL has no document TTL, so `expires_at` is stored per row and removed
by `purge_expired` (run from `logsieve purge` or a scheduler).
Schema setup and purges run on dedicated connections whose acquisition is
retried; admission traffic goes through the pool and is never retried.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from psycopg import sql
from psycopg.types.json import Jsonb
from psycopg_pool import AsyncConnectionPool, ConnectionPool

from logsieve.config import Settings, get_settings
from logsieve.domain.models import LogRecord, PersistedLog
from logsieve.domain.predicate import Predicate
from logsieve.infrastructure.db_factory import (
    apply_statement_timeout,
    apply_statement_timeout_async,
    build_dsn,
    get_async_connection,
    get_sync_connection,
)
from logsieve.storage.abstract import AbstractLogStorage
from logsieve.storage.sql_compiler import count_query, schema_statements
from logsieve.utils.logging import get_logger
from logsieve.utils.serialization import safe_dumps

log = get_logger(__name__)


def _insert_statement(table: str) -> sql.Composed:
    return sql.SQL(
        "INSERT INTO {} (id, created_at, expires_at, document) VALUES (%s, %s, %s, %s)"
    ).format(sql.Identifier(table))


def _purge_statement(table: str) -> sql.Composed:
    return sql.SQL("DELETE FROM {} WHERE expires_at <= %s").format(sql.Identifier(table))


def _to_row(record: LogRecord, expires_at: datetime) -> tuple[PersistedLog, tuple]:
    if record.created_at is None:
        raise ValueError("record.created_at must be set before insert")
    document = record.to_document()
    persisted = PersistedLog(
        id=str(uuid.uuid4()),
        created_at=record.created_at,
        expires_at=expires_at,
        document=document,
    )
    params = (
        persisted.id,
        persisted.created_at,
        persisted.expires_at,
        Jsonb(document, dumps=safe_dumps),
    )
    return persisted, params


class PostgresLogStorage(AbstractLogStorage):
    """
    Sync psycopg storage over a JSONB document table.

    Parameters
    ----------
    pool : ConnectionPool, optional
        Existing pool to use. When omitted, a private pool is opened from
        `dsn_override` or the configured DSN and closed by `close()`.
    """

    name: str = "postgres"

    def __init__(
        self,
        pool: Optional[ConnectionPool] = None,
        settings: Optional[Settings] = None,
        dsn_override: Optional[str] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.table = self.settings.logs_table
        self._dsn_override = dsn_override
        self._owns_pool = pool is None
        self._pool_instance: Optional[ConnectionPool] = pool

    def _conninfo(self) -> str:
        if self._dsn_override:
            return self._dsn_override
        if self._pool_instance is not None:
            return self._pool_instance.conninfo
        return build_dsn(self.settings)

    def _get_pool(self) -> ConnectionPool:
        if self._pool_instance is None:
            self._pool_instance = ConnectionPool(
                conninfo=self._conninfo(),
                min_size=self.settings.db_pool_min_size,
                max_size=self.settings.db_pool_max_size,
                open=True,
            )
        return self._pool_instance

    def ensure_schema(self) -> None:
        """Create the logs table and its indexes if missing."""
        with get_sync_connection(self._conninfo()) as conn:
            with conn.cursor() as cur:
                for statement in schema_statements(self.table):
                    cur.execute(statement)
        log.info("Log schema ensured", extra={"table": self.table})

    def count_matching(self, predicate: Predicate) -> int:
        query, params = count_query(self.table, predicate)
        with self._get_pool().connection() as conn:
            with conn.cursor() as cur:
                apply_statement_timeout(cur, self.settings.db_statement_timeout_ms)
                cur.execute(query, params)
                row = cur.fetchone()
        return int(row[0]) if row else 0

    def insert(self, record: LogRecord, expires_at: datetime) -> PersistedLog:
        persisted, params = _to_row(record, expires_at)
        with self._get_pool().connection() as conn:
            with conn.cursor() as cur:
                cur.execute(_insert_statement(self.table), params)
        return persisted

    def purge_expired(self, now: datetime) -> int:
        with get_sync_connection(self._conninfo()) as conn:
            with conn.cursor() as cur:
                cur.execute(_purge_statement(self.table), (now,))
                purged = cur.rowcount
        log.info("Expired logs purged", extra={"table": self.table, "purged": purged})
        return purged

    def close(self) -> None:
        if self._pool_instance is not None and self._owns_pool:
            self._pool_instance.close()
        self._pool_instance = None


class AsyncPostgresLogStorage:
    """Async psycopg storage sharing the table layout of `PostgresLogStorage`."""

    name: str = "postgres_async"

    def __init__(
        self,
        pool: Optional[AsyncConnectionPool] = None,
        settings: Optional[Settings] = None,
        dsn_override: Optional[str] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.table = self.settings.logs_table
        self._dsn_override = dsn_override
        self._owns_pool = pool is None
        self._pool_instance: Optional[AsyncConnectionPool] = pool

    def _conninfo(self) -> str:
        if self._dsn_override:
            return self._dsn_override
        if self._pool_instance is not None:
            return self._pool_instance.conninfo
        return build_dsn(self.settings)

    async def _get_pool(self) -> AsyncConnectionPool:
        if self._pool_instance is None:
            self._pool_instance = AsyncConnectionPool(
                conninfo=self._conninfo(),
                min_size=self.settings.db_pool_min_size,
                max_size=self.settings.db_pool_max_size,
                open=False,
            )
            await self._pool_instance.open()
        return self._pool_instance

    async def ensure_schema(self) -> None:
        conn = await get_async_connection(self._conninfo())
        async with conn:
            async with conn.cursor() as cur:
                for statement in schema_statements(self.table):
                    await cur.execute(statement)

    async def count_matching(self, predicate: Predicate) -> int:
        query, params = count_query(self.table, predicate)
        pool = await self._get_pool()
        async with pool.connection() as conn:
            async with conn.cursor() as cur:
                await apply_statement_timeout_async(cur, self.settings.db_statement_timeout_ms)
                await cur.execute(query, params)
                row = await cur.fetchone()
        return int(row[0]) if row else 0

    async def insert(self, record: LogRecord, expires_at: datetime) -> PersistedLog:
        persisted, params = _to_row(record, expires_at)
        pool = await self._get_pool()
        async with pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(_insert_statement(self.table), params)
        return persisted

    async def purge_expired(self, now: datetime) -> int:
        conn = await get_async_connection(self._conninfo())
        async with conn:
            async with conn.cursor() as cur:
                await cur.execute(_purge_statement(self.table), (now,))
                return cur.rowcount

    async def close(self) -> None:
        if self._pool_instance is not None and self._owns_pool:
            await self._pool_instance.close()
        self._pool_instance = None


__all__ = ["AsyncPostgresLogStorage", "PostgresLogStorage"]
