"""
Byte-size guard for candidate records.

Prevents producers from storing huge payloads (oversized headers, reflected
request bodies) by measuring the compact JSON form of the whole document.
"""

from __future__ import annotations

from logsieve.domain.errors import PayloadTooLarge
from logsieve.domain.models import LogRecord
from logsieve.utils.serialization import safe_dumps


def serialized_size(record: LogRecord) -> int:
    """UTF-8 byte length of the record's serialized document."""
    return len(safe_dumps(record.to_document()).encode("utf-8"))


def check_size(record: LogRecord, max_bytes: int) -> int:
    """
    Raise `PayloadTooLarge` when the record is over `max_bytes`.

    Returns the measured size so callers can log it.
    """
    size = serialized_size(record)
    if size > max_bytes:
        raise PayloadTooLarge(size=size, limit=max_bytes)
    return size


__all__ = ["check_size", "serialized_size"]
