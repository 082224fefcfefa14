"""
Storage-layer schema contract: indexed paths and retention.

Every path the duplicate-query builder can emit is listed in
`PARTIAL_INDEX_FIELDS` so backends can keep the existence check cheap under
concurrent load. Indexes are partial: a record only enters an index when the
path is present.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Tuple

from logsieve.config import Settings

PARTIAL_INDEX_FIELDS: Tuple[str, ...] = (
    "err.response_code",
    "message",
    "meta.is_http",
    "meta.level",
    "meta.request.id",
    "meta.request.method",
    "meta.request.url",
    "meta.response.headers.content-type",
    "meta.response.headers.x-request-id",
    "meta.response.status_code",
    "meta.user.ip_address",
    "meta.app.hostname",
    "user",
    "domains",
)


@dataclass(frozen=True)
class RetentionPolicy:
    """Fixed time-to-live measured from `created_at`."""

    ttl: timedelta = timedelta(days=30)

    @classmethod
    def from_settings(cls, settings: Settings) -> "RetentionPolicy":
        return cls(ttl=settings.retention_ttl)

    def expires_at(self, created_at: datetime) -> datetime:
        return created_at + self.ttl

    def is_expired(self, created_at: datetime, now: datetime) -> bool:
        return now >= self.expires_at(created_at)


__all__ = ["PARTIAL_INDEX_FIELDS", "RetentionPolicy"]
