"""
Turn raised exceptions into plain, storable dicts.

Server-side producers often attach the live exception object to a log entry
(`err` or `meta.err`); client-side producers send an already-parsed dict. Both
end up in the same shape before any size or duplicate computation runs.
"""

from __future__ import annotations

import json
import traceback
from typing import Any, Dict

from logsieve.domain.models import LogRecord

# Attributes every exception carries; not part of the custom payload.
_SKIPPED_ATTRIBUTES = frozenset({"args", "with_traceback", "add_note"})


def _json_safe(value: Any) -> bool:
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return False
    return True


def _stack(exc: BaseException) -> str:
    if exc.__traceback__ is not None:
        lines = traceback.format_exception(type(exc), exc, exc.__traceback__)
    else:
        lines = traceback.format_exception_only(type(exc), exc)
    return "".join(lines).rstrip("\n")


def normalize_error(value: Any) -> Any:
    """
    Return a structured dict for exceptions; anything else passes through.

    The dict always has ``name``, ``message`` and ``stack``. Custom attributes
    set on the instance (``exc.response_code = 550``) are copied when they are
    JSON-serializable, otherwise stored as their ``str()``.
    """
    if not isinstance(value, BaseException):
        return value

    parsed: Dict[str, Any] = {
        "name": type(value).__name__,
        "message": str(value),
        "stack": _stack(value),
    }
    for key, attr in vars(value).items():
        if key.startswith("_") or key in _SKIPPED_ATTRIBUTES or key in parsed:
            continue
        parsed[key] = attr if _json_safe(attr) else str(attr)
    notes = getattr(value, "__notes__", None)
    if notes:
        parsed["notes"] = [str(note) for note in notes]
    if value.__cause__ is not None:
        parsed["cause"] = normalize_error(value.__cause__)
    return parsed


def normalize_record(record: LogRecord) -> LogRecord:
    """Normalize `err` and `meta.err`, returning a new record."""
    meta = record.meta
    if isinstance(meta.err, BaseException):
        meta = meta.model_copy(update={"err": normalize_error(meta.err)})
    update: Dict[str, Any] = {"meta": meta}
    if isinstance(record.err, BaseException):
        update["err"] = normalize_error(record.err)
    return record.model_copy(update=update)


__all__ = ["normalize_error", "normalize_record"]
