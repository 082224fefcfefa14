from __future__ import annotations

from logsieve.admission.normalizer import normalize_error, normalize_record
from logsieve.domain.models import LogRecord

SMTP_RESPONSE_CODE = 550


class SMTPError(Exception):
    pass


def _raised(exc: BaseException) -> BaseException:
    try:
        raise exc
    except BaseException as caught:  # noqa: BLE001
        return caught


def test_raised_exception_becomes_dict() -> None:
    parsed = normalize_error(_raised(ValueError("bad recipient")))

    assert parsed["name"] == "ValueError"
    assert parsed["message"] == "bad recipient"
    assert "Traceback" in parsed["stack"]
    assert parsed["stack"].endswith("ValueError: bad recipient")


def test_unraised_exception_still_has_stack_line() -> None:
    parsed = normalize_error(KeyError("missing"))

    assert parsed["name"] == "KeyError"
    assert parsed["stack"].startswith("KeyError")


def test_custom_attributes_are_copied() -> None:
    exc = SMTPError("mailbox unavailable")
    exc.response_code = SMTP_RESPONSE_CODE
    exc.connection = object()

    parsed = normalize_error(exc)

    assert parsed["name"] == "SMTPError"
    assert parsed["response_code"] == SMTP_RESPONSE_CODE
    assert isinstance(parsed["connection"], str)


def test_cause_is_normalized_recursively() -> None:
    try:
        try:
            raise TimeoutError("read timed out")
        except TimeoutError as inner:
            raise RuntimeError("delivery failed") from inner
    except RuntimeError as outer:
        parsed = normalize_error(outer)

    assert parsed["cause"]["name"] == "TimeoutError"
    assert parsed["cause"]["message"] == "read timed out"


def test_non_exceptions_pass_through() -> None:
    already_parsed = {"name": "Error", "message": "from the browser"}

    assert normalize_error(already_parsed) is already_parsed
    assert normalize_error("plain string") == "plain string"
    assert normalize_error(None) is None


def test_normalize_record_handles_err_and_meta_err() -> None:
    record = LogRecord(
        message="smtp",
        err=SMTPError("top-level"),
        meta={"level": "error", "err": SMTPError("nested")},
    )

    normalized = normalize_record(record)

    assert normalized.err["message"] == "top-level"
    assert normalized.meta.err["message"] == "nested"
    # the input record is left untouched
    assert isinstance(record.err, SMTPError)
    assert isinstance(record.meta.err, SMTPError)


def test_normalize_record_keeps_dict_errors() -> None:
    record = LogRecord(message="client", err={"name": "TypeError", "message": "x is undefined"})

    assert normalize_record(record).err == {"name": "TypeError", "message": "x is undefined"}
