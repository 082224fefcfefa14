"""
Logging setup for logsieve's own diagnostics.

Admission decisions, ingest failures and storage maintenance are logged with
structured fields passed through ``extra=`` (``log_id``, ``reason``, ``query``,
``storage``, ``bytes``). Both formatters surface those fields: the console
formatter appends them as ``key=value`` pairs, the JSON formatter promotes them
to top-level keys so the service's own logs can be shipped as JSON lines.

Usage:
    from logsieve.utils.logging import configure_logging, get_logger

    configure_logging(level="DEBUG", json_logs=True)
    log = get_logger(__name__)
    log.debug("Duplicate log rejected", extra={"reason": "duplicate"})
"""

from __future__ import annotations

import json
import logging
import logging.config
from datetime import datetime, timezone
from typing import Any, Dict, Optional

ROOT_LOGGER = "logsieve"

CONSOLE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
CONSOLE_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Driver loggers are chatty at DEBUG (one line per pool checkout).
QUIET_LOGGERS = ("psycopg", "psycopg.pool")

# Attributes present on every LogRecord; anything else came from `extra=`.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None)).keys()
) | {"message", "asctime", "extra"}


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    fields = {
        key: value
        for key, value in vars(record).items()
        if key not in _RESERVED_ATTRS and not key.startswith("_")
    }
    # older call sites attach one nested `extra` dict instead of keyword fields
    nested = getattr(record, "extra", None)
    if isinstance(nested, dict):
        fields.update(nested)
    return fields


def _json_formatter(record: logging.LogRecord) -> str:
    """Serialize a record and its extra fields as one JSON line."""
    payload: Dict[str, Any] = {
        "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
        "level": record.levelname,
        "logger": record.name,
        "message": record.getMessage(),
    }
    if record.exc_info:
        payload["exc_info"] = logging.Formatter().formatException(record.exc_info)
    if record.stack_info:
        payload["stack_info"] = record.stack_info
    payload.update(_extra_fields(record))
    return json.dumps(payload, default=str)


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        return _json_formatter(record)


class ConsoleFormatter(logging.Formatter):
    """Human formatter that appends extra fields as ``key=value`` pairs."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = _extra_fields(record)
        if not fields:
            return line
        pairs = " ".join(f"{key}={value}" for key, value in sorted(fields.items()))
        head, sep, tail = line.partition("\n")
        return f"{head} | {pairs}{sep}{tail}"


def _logging_config(level: str, json_logs: bool) -> Dict[str, Any]:
    level = level.upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {
                "()": ConsoleFormatter,
                "fmt": CONSOLE_FORMAT,
                "datefmt": CONSOLE_DATEFMT,
            },
            "json": {"()": JsonFormatter},
        },
        "handlers": {
            "stderr": {
                "class": "logging.StreamHandler",
                "formatter": "json" if json_logs else "console",
                "level": level,
            }
        },
        "loggers": {name: {"level": "WARNING"} for name in QUIET_LOGGERS},
        "root": {"handlers": ["stderr"], "level": level},
    }


def configure_logging(
    level: str = "INFO",
    json_logs: bool = False,
    force: bool = True,
) -> None:
    """
    Install logsieve's handler on the root logger.

    Parameters
    ----------
    level : str
        Threshold for logsieve and everything else routed through root.
        Case-insensitive, so ``LOG_LEVEL=debug`` works.
    json_logs : bool
        Emit one JSON object per line instead of the console layout.
    force : bool
        Replace an existing root configuration. With ``False`` an application
        embedding logsieve keeps its own handlers untouched.
    """
    if not force and logging.getLogger().handlers:
        return
    logging.config.dictConfig(_logging_config(level, json_logs))


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return ``name``'s logger, or the package logger when no name is given."""
    return logging.getLogger(name or ROOT_LOGGER)


__all__ = ["ConsoleFormatter", "JsonFormatter", "configure_logging", "get_logger"]
