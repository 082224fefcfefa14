"""
Domain models for logsieve.

A `LogRecord` is a candidate log entry. Its `meta` bag is parsed once, at
construction, into one of two shapes:

- `HttpMeta` for access logs (``is_http`` true) with request/response details
- `PlainMeta` for everything else (protocol logs, internal jobs)

Unknown keys are preserved on both shapes so the stored document keeps whatever
the producer sent.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Ids and levels arrive as strings or numbers (pino levels are 30/40/50).
Identifier = Union[str, int]


class RequestInfo(BaseModel):
    id: Optional[Identifier] = None
    method: Optional[str] = None
    url: Optional[str] = None

    model_config = ConfigDict(extra="allow")


class ResponseInfo(BaseModel):
    status_code: Optional[int] = None
    headers: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="allow")

    @field_validator("headers", mode="before")
    @classmethod
    def _lowercase_header_names(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {str(k).lower(): v for k, v in value.items()}
        return value

    @property
    def content_type(self) -> Optional[str]:
        value = self.headers.get("content-type")
        return str(value) if value else None

    @property
    def request_id(self) -> Optional[Identifier]:
        value = self.headers.get("x-request-id")
        return value if value else None


class ClientInfo(BaseModel):
    """The `meta.user` block: who made the request, not who owns the log."""

    ip_address: Optional[str] = None

    model_config = ConfigDict(extra="allow")


class HttpMeta(BaseModel):
    is_http: Literal[True] = True
    level: Optional[Identifier] = None
    err: Any = None
    request: RequestInfo = Field(default_factory=RequestInfo)
    response: ResponseInfo = Field(default_factory=ResponseInfo)
    user: ClientInfo = Field(default_factory=ClientInfo)

    model_config = ConfigDict(extra="allow")


class PlainMeta(BaseModel):
    is_http: Literal[False] = False
    level: Optional[Identifier] = None
    err: Any = None

    model_config = ConfigDict(extra="allow")


Meta = Union[HttpMeta, PlainMeta]


def parse_meta(raw: Any) -> Meta:
    """Decide the meta shape once from the ``is_http`` flag."""
    if isinstance(raw, (HttpMeta, PlainMeta)):
        return raw
    if raw is None:
        return PlainMeta()
    if not isinstance(raw, dict):
        raise ValueError(f"meta must be a mapping, got {type(raw).__name__}")
    if raw.get("is_http"):
        return HttpMeta.model_validate({**raw, "is_http": True})
    return PlainMeta.model_validate({**raw, "is_http": False})


class LogRecord(BaseModel):
    """
    Candidate log record.

    `user` and `domains` are opaque identifiers; `domains` is a snapshot of the
    domains relevant when the log was captured and is never recomputed here.
    """

    user: Optional[Identifier] = None
    domains: List[str] = Field(default_factory=list)
    err: Any = None
    message: Optional[str] = None
    meta: Meta = Field(default_factory=PlainMeta)
    created_at: Optional[datetime] = None

    @model_validator(mode="before")
    @classmethod
    def _fold_http_flag(cls, data: Any) -> Any:
        # Some producers put `is_http` next to `meta` instead of inside it.
        if isinstance(data, dict) and "is_http" in data:
            data = dict(data)
            flag = data.pop("is_http")
            meta = data.get("meta")
            if isinstance(meta, dict):
                data["meta"] = {**meta, "is_http": flag}
            elif meta is None:
                data["meta"] = {"is_http": flag}
        return data

    @field_validator("meta", mode="before")
    @classmethod
    def _parse_meta(cls, value: Any) -> Meta:
        return parse_meta(value)

    @property
    def is_http(self) -> bool:
        return isinstance(self.meta, HttpMeta)

    def to_document(self) -> Dict[str, Any]:
        """Plain nested dict as it will be stored (None-valued fields dropped)."""
        return self.model_dump(mode="python", exclude_none=True)


class PersistedLog(BaseModel):
    """A record accepted by admission and written to storage."""

    id: str
    object: Literal["log"] = "log"
    created_at: datetime
    expires_at: datetime
    document: Dict[str, Any]

    model_config = {
        "frozen": True,
        "populate_by_name": True,
    }


__all__ = [
    "ClientInfo",
    "Identifier",
    "HttpMeta",
    "LogRecord",
    "Meta",
    "PersistedLog",
    "PlainMeta",
    "RequestInfo",
    "ResponseInfo",
    "parse_meta",
]
