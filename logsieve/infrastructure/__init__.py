"""
Infrastructure package for logsieve.

Centralizes database connectivity concerns (DSNs, retrying connection factories).
Keep this layer focused on I/O and resource management, decoupled from
admission logic.
"""

from logsieve.infrastructure.db_factory import (
    apply_statement_timeout,
    apply_statement_timeout_async,
    build_dsn,
    get_async_connection,
    get_sync_connection,
)

__all__ = [
    "apply_statement_timeout",
    "apply_statement_timeout_async",
    "build_dsn",
    "get_async_connection",
    "get_sync_connection",
]
