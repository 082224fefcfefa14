"""
Duplicate-query builder.

Derives the existence predicate that, if it matches any stored record, proves
the candidate is a duplicate. HTTP entries are keyed by request identity and
endpoint; everything else by message and level inside a trailing time window.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import FrozenSet, List, Optional, Tuple

from logsieve.config import Settings
from logsieve.domain.errors import EmptyPredicateGuard
from logsieve.domain.models import HttpMeta, Identifier, LogRecord
from logsieve.domain.predicate import And, Equals, Or, Predicate, Range


@dataclass(frozen=True)
class DedupWindow:
    """Trailing window inside which a matching record counts as a duplicate."""

    default: timedelta = timedelta(hours=1)
    severe: timedelta = timedelta(minutes=10)
    severe_levels: FrozenSet[str] = field(default_factory=lambda: frozenset({"error", "fatal"}))

    @classmethod
    def from_settings(cls, settings: Settings) -> "DedupWindow":
        return cls(
            default=settings.duplicate_window,
            severe=settings.severe_window,
            severe_levels=frozenset(settings.severe_levels),
        )

    def for_level(self, level: Optional[Identifier]) -> timedelta:
        # numeric levels match their string form, so SEVERE_LEVELS may list "50"
        if level and str(level) in self.severe_levels:
            return self.severe
        return self.default


def _http_clauses(record: LogRecord, meta: HttpMeta) -> Tuple[List[Predicate], List[Predicate]]:
    """Return the conjunctive clauses and the request-identity alternatives."""
    clauses: List[Predicate] = []
    alternatives: List[Predicate] = []

    # X-Request-Id as seen by the app, or as echoed on the response
    if meta.request.id:
        alternatives.append(Equals("meta.request.id", meta.request.id))
    if meta.response.request_id:
        alternatives.append(
            Equals("meta.response.headers.x-request-id", meta.response.request_id)
        )

    if not record.user and meta.user.ip_address:
        clauses.append(Equals("meta.user.ip_address", meta.user.ip_address))

    if meta.response.status_code and meta.request.method and meta.request.url:
        clauses.append(
            And(
                (
                    Equals("meta.response.status_code", meta.response.status_code),
                    Equals("meta.request.method", meta.request.method),
                    Equals("meta.request.url", meta.request.url),
                )
            )
        )

    return clauses, alternatives


def build_duplicate_query(
    record: LogRecord,
    now: datetime,
    window: Optional[DedupWindow] = None,
) -> And:
    """
    Build the conjunctive existence predicate for `record`.

    Raises `EmptyPredicateGuard` when no signature clause can be derived; the
    time-window bound alone never counts as a signature, since it would match
    every recent record.
    """
    window = window or DedupWindow()
    meta = record.meta
    clauses: List[Predicate] = []
    alternatives: List[Predicate] = []

    if isinstance(meta, HttpMeta):
        clauses, alternatives = _http_clauses(record, meta)
    elif record.message:
        # request messages embed timings and are always unique, so only
        # non-HTTP entries are keyed on message text
        clauses.append(Equals("message", record.message))

    if meta.level:
        clauses.append(Equals("meta.level", meta.level))

    if record.user:
        clauses.append(Equals("user", record.user))

    if not clauses and not alternatives:
        raise EmptyPredicateGuard()

    # HTTP volume is bounded by the request-identity clauses instead
    if not isinstance(meta, HttpMeta):
        clauses.append(Range("created_at", now - window.for_level(meta.level)))

    if alternatives:
        clauses.append(Or(tuple(alternatives)))

    return And(tuple(clauses))


__all__ = ["DedupWindow", "build_duplicate_query"]
