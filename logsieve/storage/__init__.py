"""
Storage package for logsieve.

Re-exports the storage contracts, the retention policy and the concrete
backends so callers can import from `logsieve.storage` directly.
"""

from logsieve.storage.abstract import AbstractLogStorage, AsyncLogStorage, LogStorage
from logsieve.storage.memory import InMemoryLogStorage
from logsieve.storage.postgres import AsyncPostgresLogStorage, PostgresLogStorage
from logsieve.storage.schema import PARTIAL_INDEX_FIELDS, RetentionPolicy

__all__ = [
    # Contracts
    "AbstractLogStorage",
    "AsyncLogStorage",
    "LogStorage",
    # Backends
    "AsyncPostgresLogStorage",
    "InMemoryLogStorage",
    "PostgresLogStorage",
    # Schema / retention
    "PARTIAL_INDEX_FIELDS",
    "RetentionPolicy",
]
