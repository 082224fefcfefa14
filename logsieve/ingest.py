"""
Batch ingest runner: admit many candidates concurrently and summarize outcomes.

Usage (example from CLI):
    from logsieve.ingest import IngestConfig, read_candidates, run_ingest

    summary = run_ingest(read_candidates("logs.jsonl"), storage, IngestConfig(concurrency=8))
    print(summary.as_dict())

Each worker thread admits candidates independently; no state is shared
between attempts beyond the storage backend. Duplicates, noise and oversized
payloads are expected outcomes and only counted. Storage and validation
failures follow the failure policy:

- ``tolerant``: count the failure and keep going
- ``strict``: cancel pending work and re-raise the first failure
"""

from __future__ import annotations

import itertools
import json
from collections import Counter
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Literal, Mapping, Optional

from pydantic import ValidationError

from logsieve.admission.engine import Candidate, Clock, LogAdmitter, utc_now
from logsieve.config import Settings, get_settings
from logsieve.domain.errors import DuplicateOrNoise, PayloadTooLarge
from logsieve.storage.abstract import LogStorage
from logsieve.utils.logging import get_logger
from logsieve.utils.profiler import profile_block

log = get_logger(__name__)

FailurePolicy = Literal["tolerant", "strict"]
_MAX_RECORDED_ERRORS = 20


@dataclass(frozen=True)
class IngestConfig:
    concurrency: Optional[int] = None
    failure_policy: Optional[FailurePolicy] = None
    batch_size: int = 256


@dataclass(frozen=True)
class _Outcome:
    kind: str
    log_id: Optional[str] = None
    reason: Optional[str] = None
    error: Optional[BaseException] = None


@dataclass
class IngestSummary:
    """Counts per admission outcome, plus profiler stats for the whole run."""

    submitted: int = 0
    accepted: int = 0
    too_large: int = 0
    invalid: int = 0
    failed: int = 0
    rejected: Counter = field(default_factory=Counter)
    errors: List[str] = field(default_factory=list)
    profile: Dict[str, Any] = field(default_factory=dict)

    @property
    def rejected_total(self) -> int:
        return sum(self.rejected.values())

    def record(self, outcome: _Outcome) -> None:
        self.submitted += 1
        if outcome.kind == "accepted":
            self.accepted += 1
        elif outcome.kind == "rejected":
            self.rejected[outcome.reason or "duplicate"] += 1
        elif outcome.kind == "too_large":
            self.too_large += 1
        else:
            if outcome.kind == "invalid":
                self.invalid += 1
            else:
                self.failed += 1
            if len(self.errors) < _MAX_RECORDED_ERRORS:
                self.errors.append(f"{type(outcome.error).__name__}: {outcome.error}")

    def as_dict(self) -> Dict[str, Any]:
        return {
            "submitted": self.submitted,
            "accepted": self.accepted,
            "rejected": dict(sorted(self.rejected.items())),
            "rejected_total": self.rejected_total,
            "too_large": self.too_large,
            "invalid": self.invalid,
            "failed": self.failed,
            "errors": list(self.errors),
            "profile": dict(self.profile),
        }


def read_candidates(path: Path | str) -> Iterator[Dict[str, Any]]:
    """Yield one candidate dict per non-blank line of a JSONL file."""
    with Path(path).open("r", encoding="utf-8") as f:
        for line_no, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                yield json.loads(line)
            except json.JSONDecodeError as exc:
                raise ValueError(f"{path}:{line_no}: invalid JSON ({exc.msg})") from exc


def _admit_one(admitter: LogAdmitter, candidate: Candidate) -> _Outcome:
    try:
        log_id = admitter.admit(candidate)
    except DuplicateOrNoise as exc:
        return _Outcome("rejected", reason=exc.reason.value)
    except PayloadTooLarge as exc:
        log.warning(
            "Oversized log dropped", extra={"size": exc.size, "limit": exc.limit}
        )
        return _Outcome("too_large")
    except ValidationError as exc:
        return _Outcome("invalid", error=exc)
    except Exception as exc:  # noqa: BLE001 - storage failures are handled by the policy
        log.exception("Log admission failed", extra={"storage": admitter.storage.name})
        return _Outcome("failed", error=exc)
    return _Outcome("accepted", log_id=log_id)


def _batches(items: Iterable[Candidate], size: int) -> Iterator[List[Candidate]]:
    iterator = iter(items)
    while True:
        batch = list(itertools.islice(iterator, size))
        if not batch:
            return
        yield batch


def run_ingest(
    candidates: Iterable[Candidate | Mapping[str, Any]],
    storage: LogStorage,
    config: Optional[IngestConfig] = None,
    clock: Clock = utc_now,
    settings: Optional[Settings] = None,
) -> IngestSummary:
    """
    Admit candidates with a thread pool and return an `IngestSummary`.

    Parameters
    ----------
    candidates : iterable
        Raw candidate dicts or `LogRecord` instances.
    storage : LogStorage
        Backend shared by all workers.
    config : IngestConfig, optional
        Concurrency and failure policy; defaults come from settings.
    """
    settings = settings or get_settings()
    config = config or IngestConfig()
    concurrency = max(config.concurrency or settings.ingest_concurrency, 1)
    policy = config.failure_policy or settings.ingest_failure_policy
    if policy not in ("tolerant", "strict"):
        raise ValueError(f"Unknown failure policy '{policy}'. Available: tolerant, strict")

    admitter = LogAdmitter(storage, clock=clock, settings=settings)
    summary = IngestSummary()
    log.info(
        "[INGEST START]",
        extra={"storage": storage.name, "concurrency": concurrency, "failure_policy": policy},
    )

    with profile_block("ingest") as stats:
        with ThreadPoolExecutor(max_workers=concurrency, thread_name_prefix="ingest") as pool:
            for batch in _batches(candidates, max(config.batch_size, concurrency)):
                futures: List[Future[_Outcome]] = [
                    pool.submit(_admit_one, admitter, candidate) for candidate in batch
                ]
                for future in futures:
                    outcome = future.result()
                    summary.record(outcome)
                    if outcome.error is not None and policy == "strict":
                        for pending in futures:
                            pending.cancel()
                        raise outcome.error

    summary.profile = stats.as_dict()
    log.info(
        "[INGEST COMPLETE]",
        extra={
            "submitted": summary.submitted,
            "accepted": summary.accepted,
            "rejected": summary.rejected_total,
            "too_large": summary.too_large,
            "failed": summary.failed + summary.invalid,
        },
    )
    return summary


__all__ = ["IngestConfig", "IngestSummary", "read_candidates", "run_ingest"]
