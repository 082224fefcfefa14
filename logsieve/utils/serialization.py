"""
Safe JSON serialization for log documents.

Log metadata is semi-structured and may carry values the `json` module rejects
(datetimes, sets, arbitrary objects) or even self-references. `safe_dumps`
renders all of them instead of failing.
"""

from __future__ import annotations

import json
from datetime import date, datetime
from typing import Any

CIRCULAR = "[Circular]"


def _decycle(value: Any, ancestors: frozenset[int]) -> Any:
    """Copy containers, replacing back-references with a marker."""
    if isinstance(value, dict):
        if id(value) in ancestors:
            return CIRCULAR
        inner = ancestors | {id(value)}
        return {str(k): _decycle(v, inner) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        if id(value) in ancestors:
            return CIRCULAR
        inner = ancestors | {id(value)}
        return [_decycle(v, inner) for v in value]
    return value


def _default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (set, frozenset)):
        return sorted(str(v) for v in value)
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def safe_dumps(value: Any) -> str:
    """Compact JSON that never fails on cycles or unknown objects."""
    return json.dumps(
        _decycle(value, frozenset()),
        default=_default,
        separators=(",", ":"),
        ensure_ascii=False,
    )


__all__ = ["CIRCULAR", "safe_dumps"]
