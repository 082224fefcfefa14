"""
logsieve - deduplicating admission control for high-volume application logs.

Candidate log records (HTTP access logs, SMTP protocol logs, internal job
output) pass through a short pipeline before they are stored:

- Exceptions attached to the record are normalized into plain dicts
- Oversized payloads are rejected
- Uninteresting HTTP traffic (304s, static assets, source maps) is dropped
- A duplicate signature is derived and checked with one count query
- New records are inserted with a fixed retention expiry

Duplicates and noise surface as `DuplicateOrNoise`, which callers drop silently.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from logsieve.admission.engine import LogAdmitter, admit, admit_async, prepare
from logsieve.config import Settings, get_settings
from logsieve.domain.errors import (
    AdmissionError,
    DuplicateOrNoise,
    EmptyPredicateGuard,
    PayloadTooLarge,
)
from logsieve.domain.models import LogRecord, PersistedLog
from logsieve.ingest import IngestConfig, IngestSummary, run_ingest
from logsieve.storage.memory import InMemoryLogStorage
from logsieve.storage.postgres import AsyncPostgresLogStorage, PostgresLogStorage
from logsieve.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Admission
    "LogAdmitter",
    "admit",
    "admit_async",
    "prepare",
    # Errors
    "AdmissionError",
    "DuplicateOrNoise",
    "EmptyPredicateGuard",
    "PayloadTooLarge",
    # Models
    "LogRecord",
    "PersistedLog",
    # Ingest
    "IngestConfig",
    "IngestSummary",
    "run_ingest",
    # Storage
    "AsyncPostgresLogStorage",
    "InMemoryLogStorage",
    "PostgresLogStorage",
    # Logging
    "configure_logging",
    "get_logger",
]
