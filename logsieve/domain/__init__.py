"""
Domain package for logsieve.

Exports the log record models, the admission error taxonomy and the predicate
AST used for duplicate checks. Keep this package free of I/O.
"""

from logsieve.domain.errors import (
    AdmissionError,
    AdmissionStage,
    DuplicateOrNoise,
    EmptyPredicateGuard,
    NoiseReason,
    PayloadTooLarge,
)
from logsieve.domain.models import (
    HttpMeta,
    LogRecord,
    PersistedLog,
    PlainMeta,
)
from logsieve.domain.predicate import And, Equals, Or, Predicate, Range

__all__ = [
    "AdmissionError",
    "AdmissionStage",
    "DuplicateOrNoise",
    "EmptyPredicateGuard",
    "NoiseReason",
    "PayloadTooLarge",
    "HttpMeta",
    "LogRecord",
    "PersistedLog",
    "PlainMeta",
    "And",
    "Equals",
    "Or",
    "Predicate",
    "Range",
]
