"""
In-memory storage backend.

Evaluates predicate trees in Python over stored documents. Used by the unit
tests and by `logsieve ingest --dry-run`; it makes no attempt to serialize the
count-then-insert sequence, so concurrent duplicates can slip through exactly as
they can against the real database.
"""

from __future__ import annotations

import threading
import uuid
from datetime import datetime
from typing import List

from logsieve.domain.models import LogRecord, PersistedLog
from logsieve.domain.predicate import Predicate, evaluate
from logsieve.storage.abstract import AbstractLogStorage


class InMemoryLogStorage(AbstractLogStorage):
    name: str = "memory"

    def __init__(self) -> None:
        self._records: List[PersistedLog] = []
        self._lock = threading.Lock()
        self.count_calls = 0
        self.insert_calls = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    @property
    def records(self) -> List[PersistedLog]:
        with self._lock:
            return list(self._records)

    def count_matching(self, predicate: Predicate) -> int:
        with self._lock:
            self.count_calls += 1
            snapshot = list(self._records)
        return sum(1 for stored in snapshot if evaluate(predicate, stored.document))

    def insert(self, record: LogRecord, expires_at: datetime) -> PersistedLog:
        if record.created_at is None:
            raise ValueError("record.created_at must be set before insert")
        persisted = PersistedLog(
            id=uuid.uuid4().hex,
            created_at=record.created_at,
            expires_at=expires_at,
            document=record.to_document(),
        )
        with self._lock:
            self.insert_calls += 1
            self._records.append(persisted)
        return persisted

    def purge_expired(self, now: datetime) -> int:
        with self._lock:
            kept = [r for r in self._records if r.expires_at > now]
            purged = len(self._records) - len(kept)
            self._records = kept
        return purged

    def clear(self) -> None:
        with self._lock:
            self._records.clear()


__all__ = ["InMemoryLogStorage"]
