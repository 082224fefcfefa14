from __future__ import annotations

import pytest

from logsieve.admission.size_guard import check_size, serialized_size
from logsieve.domain.errors import AdmissionStage, PayloadTooLarge
from logsieve.domain.models import LogRecord
from logsieve.utils.serialization import CIRCULAR, safe_dumps

MAX_BYTES = 20_480


def _padded(total_bytes: int) -> LogRecord:
    """A record whose serialized size is exactly `total_bytes`."""
    overhead = serialized_size(LogRecord(message=""))
    return LogRecord(message="x" * (total_bytes - overhead))


def test_record_at_limit_is_accepted() -> None:
    record = _padded(MAX_BYTES)

    assert check_size(record, MAX_BYTES) == MAX_BYTES


def test_record_one_byte_over_limit_is_rejected() -> None:
    record = _padded(MAX_BYTES + 1)

    with pytest.raises(PayloadTooLarge) as excinfo:
        check_size(record, MAX_BYTES)

    assert excinfo.value.size == MAX_BYTES + 1
    assert excinfo.value.limit == MAX_BYTES
    assert excinfo.value.stage is AdmissionStage.NORMALIZED
    assert str(excinfo.value) == f"Log byte size {MAX_BYTES + 1} exceeds maximum of {MAX_BYTES}"


def test_size_counts_utf8_bytes_not_characters() -> None:
    base = serialized_size(LogRecord(message=""))

    assert serialized_size(LogRecord(message="é" * 10)) == base + 20
    assert serialized_size(LogRecord(message="日本")) == base + 6


def test_nested_meta_counts_towards_size() -> None:
    small = LogRecord.model_validate({"message": "m", "meta": {"level": "info"}})
    large = LogRecord.model_validate(
        {"message": "m", "meta": {"level": "info", "headers": {"cookie": "a" * MAX_BYTES}}}
    )

    check_size(small, MAX_BYTES)
    with pytest.raises(PayloadTooLarge):
        check_size(large, MAX_BYTES)


def test_safe_dumps_marks_cycles() -> None:
    payload = {"name": "loop"}
    payload["self"] = payload

    assert safe_dumps(payload) == '{"name":"loop","self":"' + CIRCULAR + '"}'


def test_safe_dumps_keeps_repeated_siblings() -> None:
    shared = {"a": 1}

    assert safe_dumps({"x": shared, "y": shared}) == '{"x":{"a":1},"y":{"a":1}}'


def test_safe_dumps_renders_unknown_objects() -> None:
    rendered = safe_dumps({"tags": {"b", "a"}, "raw": b"bytes", "obj": object()})

    assert '"tags":["a","b"]' in rendered
    assert '"raw":"bytes"' in rendered
    assert '"obj":"<object object at' in rendered
