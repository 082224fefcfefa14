"""
Storage interfaces for logsieve.

Backends (in-memory, PostgreSQL) implement `LogStorage` or its async mirror.
Admission only needs `count_matching` and `insert`; `purge_expired` carries the
retention contract and `close` releases pooled resources.
"""

from __future__ import annotations

import abc
from datetime import datetime
from typing import Protocol, runtime_checkable

from logsieve.domain.models import LogRecord, PersistedLog
from logsieve.domain.predicate import Predicate


@runtime_checkable
class LogStorage(Protocol):
    """
    Synchronous storage contract.

    Attributes
    ----------
    name : str
        A short machine-friendly identifier for the backend.
    """

    name: str

    def count_matching(self, predicate: Predicate) -> int:
        """
        Count stored records matching `predicate`.

        Parameters
        ----------
        predicate : Predicate
            Tree of Equals/Range/And/Or nodes over dotted document paths.

        Returns
        -------
        int
            Number of matching records (expired-but-unpurged records included).
        """
        ...

    def insert(self, record: LogRecord, expires_at: datetime) -> PersistedLog:
        """Persist an admitted record and return it with its new id."""
        ...

    def purge_expired(self, now: datetime) -> int:
        """Delete records whose `expires_at` is at or before `now`."""
        ...

    def close(self) -> None:
        ...


@runtime_checkable
class AsyncLogStorage(Protocol):
    """Asynchronous mirror of `LogStorage`."""

    name: str

    async def count_matching(self, predicate: Predicate) -> int:
        ...

    async def insert(self, record: LogRecord, expires_at: datetime) -> PersistedLog:
        ...

    async def purge_expired(self, now: datetime) -> int:
        ...

    async def close(self) -> None:
        ...


class AbstractLogStorage(abc.ABC):
    """
    Optional ABC helper for class-based backends.

    Subclasses set `name` and implement the three data operations.
    """

    name: str

    @abc.abstractmethod
    def count_matching(self, predicate: Predicate) -> int:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def insert(
        self, record: LogRecord, expires_at: datetime
    ) -> PersistedLog:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def purge_expired(self, now: datetime) -> int:  # pragma: no cover - interface only
        raise NotImplementedError

    def close(self) -> None:
        return None


__all__ = ["AbstractLogStorage", "AsyncLogStorage", "LogStorage"]
