from __future__ import annotations

from typing import Any, Dict, Optional

import pytest

from logsieve.admission.classifier import classify_noise, ensure_not_noise
from logsieve.config import DEFAULT_IGNORED_CONTENT_TYPES
from logsieve.domain.errors import AdmissionStage, DuplicateOrNoise, NoiseReason
from logsieve.domain.models import parse_meta


def _http_meta(
    status_code: Optional[int] = 200,
    content_type: Optional[str] = "text/html",
    url: str = "/",
) -> Any:
    headers: Dict[str, Any] = {}
    if content_type is not None:
        headers["content-type"] = content_type
    return parse_meta(
        {
            "is_http": True,
            "request": {"id": "req-1", "method": "GET", "url": url},
            "response": {"status_code": status_code, "headers": headers},
        }
    )


def test_not_modified_without_content_type() -> None:
    meta = _http_meta(status_code=304, content_type=None)

    assert classify_noise(meta, DEFAULT_IGNORED_CONTENT_TYPES) is NoiseReason.NOT_MODIFIED


def test_not_modified_with_content_type_is_kept() -> None:
    meta = _http_meta(status_code=304, content_type="text/html")

    assert classify_noise(meta, DEFAULT_IGNORED_CONTENT_TYPES) is None


@pytest.mark.parametrize(
    "content_type",
    [
        "application/javascript; charset=utf-8",
        "application/manifest+json",
        "font/woff2",
        "image/svg+xml",
        "text/css; charset=utf-8",
    ],
)
def test_ignored_content_types(content_type: str) -> None:
    meta = _http_meta(content_type=content_type)

    assert classify_noise(meta, DEFAULT_IGNORED_CONTENT_TYPES) is NoiseReason.IGNORED_CONTENT_TYPE


@pytest.mark.parametrize(
    "content_type",
    ["text/html; charset=utf-8", "application/json", "application/javascript"],
)
def test_regular_content_types_are_kept(content_type: str) -> None:
    # prefixes match exactly, so plain "application/javascript" is not filtered
    meta = _http_meta(content_type=content_type)

    assert classify_noise(meta, DEFAULT_IGNORED_CONTENT_TYPES) is None


@pytest.mark.parametrize("url", ["/js/app.js.map", "/css/site.css.map"])
def test_source_maps_served_as_json(url: str) -> None:
    meta = _http_meta(content_type="application/json; charset=utf-8", url=url)

    assert classify_noise(meta, DEFAULT_IGNORED_CONTENT_TYPES) is NoiseReason.SOURCE_MAP


def test_source_map_url_with_other_content_type_is_kept() -> None:
    meta = _http_meta(content_type="text/plain", url="/js/app.js.map")

    assert classify_noise(meta, DEFAULT_IGNORED_CONTENT_TYPES) is None


def test_non_http_meta_is_never_noise() -> None:
    meta = parse_meta({"level": "info", "response": {"status_code": 304}})

    assert classify_noise(meta, DEFAULT_IGNORED_CONTENT_TYPES) is None


def test_custom_ignore_list() -> None:
    meta = _http_meta(content_type="video/mp4")

    assert classify_noise(meta, ["video"]) is NoiseReason.IGNORED_CONTENT_TYPE
    assert classify_noise(meta, []) is None


def test_ensure_not_noise_raises_duplicate_signal() -> None:
    with pytest.raises(DuplicateOrNoise) as excinfo:
        ensure_not_noise(_http_meta(content_type="image/png"), DEFAULT_IGNORED_CONTENT_TYPES)

    assert excinfo.value.is_duplicate_log is True
    assert excinfo.value.reason is NoiseReason.IGNORED_CONTENT_TYPE
    assert excinfo.value.stage is AdmissionStage.SIZE_CHECKED
    assert str(excinfo.value) == "Duplicate log in past hour prevented"


def test_ensure_not_noise_passes_regular_pages() -> None:
    assert ensure_not_noise(_http_meta(), DEFAULT_IGNORED_CONTENT_TYPES) is None
