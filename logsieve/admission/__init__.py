"""
Admission package for logsieve.

Re-exports the admission pipeline and its individual stages.
"""

from logsieve.admission.classifier import classify_noise, ensure_not_noise
from logsieve.admission.engine import (
    LogAdmitter,
    PreparedCandidate,
    admit,
    admit_async,
    prepare,
    utc_now,
)
from logsieve.admission.normalizer import normalize_error, normalize_record
from logsieve.admission.query_builder import DedupWindow, build_duplicate_query
from logsieve.admission.size_guard import check_size, serialized_size

__all__ = [
    # Pipeline
    "LogAdmitter",
    "PreparedCandidate",
    "admit",
    "admit_async",
    "prepare",
    "utc_now",
    # Stages
    "DedupWindow",
    "build_duplicate_query",
    "check_size",
    "classify_noise",
    "ensure_not_noise",
    "normalize_error",
    "normalize_record",
    "serialized_size",
]
