"""
Admission decision engine.

Runs a candidate through normalize -> size guard -> noise classifier ->
duplicate-query builder, then issues a single existence count against storage
and inserts the record only when nothing matched. All stages before the count
are pure; the count and the insert are the only I/O, and neither is retried.

Usage:
    from logsieve.admission import admit
    from logsieve.storage import InMemoryLogStorage

    storage = InMemoryLogStorage()
    try:
        log_id = admit({"message": "queue drained", "meta": {"level": "info"}}, storage)
    except DuplicateOrNoise:
        pass  # expected; drop silently
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional, Union

from logsieve.admission.classifier import ensure_not_noise
from logsieve.admission.normalizer import normalize_record
from logsieve.admission.query_builder import DedupWindow, build_duplicate_query
from logsieve.admission.size_guard import check_size
from logsieve.config import Settings, get_settings
from logsieve.domain.errors import AdmissionStage, DuplicateOrNoise, NoiseReason
from logsieve.domain.models import LogRecord, PersistedLog
from logsieve.domain.predicate import And, render
from logsieve.storage.abstract import AsyncLogStorage, LogStorage
from logsieve.storage.schema import RetentionPolicy
from logsieve.utils.logging import get_logger

log = get_logger(__name__)

Clock = Callable[[], datetime]
Candidate = Union[LogRecord, Mapping[str, Any]]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class PreparedCandidate:
    """A candidate that passed every pure stage and awaits the storage check."""

    record: LogRecord
    predicate: And
    size_bytes: int
    stage: AdmissionStage = AdmissionStage.QUERY_BUILT


def coerce_candidate(candidate: Candidate) -> LogRecord:
    if isinstance(candidate, LogRecord):
        return candidate
    return LogRecord.model_validate(dict(candidate))


def _stamp(record: LogRecord, now: datetime) -> LogRecord:
    if record.created_at is None:
        return record.model_copy(update={"created_at": now})
    if record.created_at.tzinfo is None:
        return record.model_copy(
            update={"created_at": record.created_at.replace(tzinfo=timezone.utc)}
        )
    return record


def prepare(
    candidate: Candidate,
    now: datetime,
    settings: Optional[Settings] = None,
) -> PreparedCandidate:
    """
    Run the synchronous admission stages.

    Raises
    ------
    PayloadTooLarge
        Serialized record exceeds ``settings.log_max_bytes``.
    DuplicateOrNoise
        HTTP noise, or no duplicate signature could be derived.
    """
    settings = settings or get_settings()
    record = _stamp(coerce_candidate(candidate), now)

    record = normalize_record(record)
    size = check_size(record, settings.log_max_bytes)
    ensure_not_noise(record.meta, settings.ignored_content_types)
    predicate = build_duplicate_query(record, now, DedupWindow.from_settings(settings))

    return PreparedCandidate(record=record, predicate=predicate, size_bytes=size)


def _reject_duplicate(prepared: PreparedCandidate) -> DuplicateOrNoise:
    log.debug(
        "Duplicate log rejected",
        extra={"query": render(prepared.predicate), "stage": prepared.stage.value},
    )
    return DuplicateOrNoise(reason=NoiseReason.DUPLICATE, stage=prepared.stage)


def _expiry(record: LogRecord, settings: Settings) -> datetime:
    if record.created_at is None:
        raise ValueError("record.created_at must be set before insert")
    return RetentionPolicy.from_settings(settings).expires_at(record.created_at)


def admit(
    candidate: Candidate,
    storage: LogStorage,
    clock: Clock = utc_now,
    settings: Optional[Settings] = None,
) -> str:
    """
    Admit one candidate and return the persisted id.

    Exactly one `count_matching` call is made per candidate that reaches the
    storage check, followed by at most one `insert`. Storage errors propagate
    unchanged.
    """
    settings = settings or get_settings()
    prepared = prepare(candidate, clock(), settings)

    if storage.count_matching(prepared.predicate) > 0:
        raise _reject_duplicate(prepared)

    persisted = storage.insert(prepared.record, _expiry(prepared.record, settings))
    log.debug(
        "Log admitted",
        extra={"log_id": persisted.id, "bytes": prepared.size_bytes, "storage": storage.name},
    )
    return persisted.id


async def admit_async(
    candidate: Candidate,
    storage: AsyncLogStorage,
    clock: Clock = utc_now,
    settings: Optional[Settings] = None,
) -> str:
    """Async variant of `admit` for producers running on an event loop."""
    settings = settings or get_settings()
    prepared = prepare(candidate, clock(), settings)

    if await storage.count_matching(prepared.predicate) > 0:
        raise _reject_duplicate(prepared)

    persisted: PersistedLog = await storage.insert(
        prepared.record, _expiry(prepared.record, settings)
    )
    log.debug("Log admitted", extra={"log_id": persisted.id, "storage": storage.name})
    return persisted.id


class LogAdmitter:
    """
    Long-lived admission front-end bound to one storage, clock and settings.

    Holds no per-candidate state, so one instance can be shared by many
    producer threads.
    """

    def __init__(
        self,
        storage: LogStorage,
        clock: Clock = utc_now,
        settings: Optional[Settings] = None,
    ) -> None:
        self.storage = storage
        self.clock = clock
        self.settings = settings or get_settings()

    def admit(self, candidate: Candidate) -> str:
        return admit(candidate, self.storage, clock=self.clock, settings=self.settings)

    def try_admit(self, candidate: Candidate) -> Optional[str]:
        """Admit, returning None instead of raising for duplicates and noise."""
        try:
            return self.admit(candidate)
        except DuplicateOrNoise:
            return None

    def purge_expired(self) -> int:
        return self.storage.purge_expired(self.clock())


__all__ = [
    "Clock",
    "LogAdmitter",
    "PreparedCandidate",
    "admit",
    "admit_async",
    "coerce_candidate",
    "prepare",
    "utc_now",
]
