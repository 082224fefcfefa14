"""
HTTP noise classification.

Some access-log traffic is never worth storing no matter how unique it is:
cacheable 304s, static assets, and source maps served as JSON. These are
rejected with the same signal as a duplicate.
"""

from __future__ import annotations

from typing import Optional, Sequence

from logsieve.domain.errors import AdmissionStage, DuplicateOrNoise, NoiseReason
from logsieve.domain.models import HttpMeta, Meta

SOURCE_MAP_SUFFIXES = (".css.map", ".js.map")


def classify_noise(meta: Meta, ignored_content_types: Sequence[str]) -> Optional[NoiseReason]:
    """Return why an HTTP entry is noise, or None when it should be kept."""
    if not isinstance(meta, HttpMeta):
        return None

    content_type = meta.response.content_type

    # 304 Not Modified without a body type has nothing new to log
    if meta.response.status_code == 304 and not content_type:
        return NoiseReason.NOT_MODIFIED

    if content_type and any(content_type.startswith(prefix) for prefix in ignored_content_types):
        return NoiseReason.IGNORED_CONTENT_TYPE

    url = meta.request.url
    if (
        url
        and content_type
        and content_type.startswith("application/json")
        and url.endswith(SOURCE_MAP_SUFFIXES)
    ):
        return NoiseReason.SOURCE_MAP

    return None


def ensure_not_noise(meta: Meta, ignored_content_types: Sequence[str]) -> None:
    reason = classify_noise(meta, ignored_content_types)
    if reason is not None:
        raise DuplicateOrNoise(reason=reason, stage=AdmissionStage.SIZE_CHECKED)


__all__ = ["SOURCE_MAP_SUFFIXES", "classify_noise", "ensure_not_noise"]
