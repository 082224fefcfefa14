"""
Admission error taxonomy.

Callers are expected to treat `DuplicateOrNoise` (and its `EmptyPredicateGuard`
variant) as a normal, silent drop, and `PayloadTooLarge` as a non-retryable
rejection of that particular payload. Storage failures are never wrapped here.
"""

from __future__ import annotations

import enum
from typing import Optional


class AdmissionStage(str, enum.Enum):
    """Per-candidate admission state; transitions only move forward."""

    CREATED = "created"
    NORMALIZED = "normalized"
    SIZE_CHECKED = "size_checked"
    CLASSIFICATION_CHECKED = "classification_checked"
    QUERY_BUILT = "query_built"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class NoiseReason(str, enum.Enum):
    DUPLICATE = "duplicate"
    NOT_MODIFIED = "not_modified"
    IGNORED_CONTENT_TYPE = "ignored_content_type"
    SOURCE_MAP = "source_map"
    EMPTY_PREDICATE = "empty_predicate"


class AdmissionError(Exception):
    """
    Base class for candidates rejected during admission.

    `stage` is the last state the candidate reached before it was rejected.
    """

    def __init__(self, message: str, stage: Optional[AdmissionStage] = None) -> None:
        super().__init__(message)
        self.stage = stage


class PayloadTooLarge(AdmissionError):
    """Serialized candidate exceeds the configured byte limit."""

    def __init__(self, size: int, limit: int) -> None:
        super().__init__(
            f"Log byte size {size} exceeds maximum of {limit}",
            stage=AdmissionStage.NORMALIZED,
        )
        self.size = size
        self.limit = limit


class DuplicateOrNoise(AdmissionError):
    """
    Candidate duplicates a record inside its window, or is HTTP noise.

    `reason` is informational only (logs, ingest summaries); callers must not
    branch on it.
    """

    is_duplicate_log = True

    def __init__(
        self,
        reason: NoiseReason = NoiseReason.DUPLICATE,
        stage: Optional[AdmissionStage] = None,
    ) -> None:
        super().__init__("Duplicate log in past hour prevented", stage=stage)
        self.reason = reason


class EmptyPredicateGuard(DuplicateOrNoise):
    """No signature clause could be derived, so the candidate is dropped."""

    def __init__(self) -> None:
        super().__init__(
            reason=NoiseReason.EMPTY_PREDICATE,
            stage=AdmissionStage.CLASSIFICATION_CHECKED,
        )


__all__ = [
    "AdmissionError",
    "AdmissionStage",
    "DuplicateOrNoise",
    "EmptyPredicateGuard",
    "NoiseReason",
    "PayloadTooLarge",
]
