"""Response envelope returned by every request the client makes.

Every transport response that carries an HTTP status is wrapped as:
{ ok, status, status_text, data, headers, success, timestamp }

``ok`` and ``success`` are always equal and true iff the status is 2xx.
On failure ``data`` is always an ErrorBody.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Generic, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SkipValidation,
    ValidationError,
    model_validator,
)

T = TypeVar("T")

_UNKNOWN_ERROR = "Unknown error"


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def is_success_status(status: int) -> bool:
    return 200 <= status < 300


class ErrorBody(BaseModel):
    """Failure body sent by the backend.

    Unknown fields are ignored and every field is optional. A body that is
    not a JSON object, or does not fit the fields, ends up in ``raw``.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    success: bool | None = None
    error: str | None = None
    message: str | None = None
    code: str | int | None = None
    details: Any = None
    raw: Any = None

    @classmethod
    def from_payload(cls, payload: Any) -> ErrorBody:
        if isinstance(payload, dict):
            try:
                return cls.model_validate({**payload, "raw": payload})
            except ValidationError:
                return cls(raw=payload)
        return cls(raw=payload)

    def describe(self, default: str = _UNKNOWN_ERROR) -> str:
        """Human readable reason: ``error``, then ``message``, then *default*."""
        return self.error or self.message or default

    def dump_raw(self) -> str | None:
        """JSON text of the original body, used as a last-resort error string."""
        if self.raw is None:
            return None
        try:
            return json.dumps(self.raw, default=str)
        except (TypeError, ValueError):
            return str(self.raw)


class NetworkResponse(BaseModel, Generic[T]):
    """Uniform success/failure envelope."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    ok: bool
    status: int
    status_text: str = ""
    data: SkipValidation[T | ErrorBody | None] = None
    headers: dict[str, str] = Field(default_factory=dict)
    success: bool
    timestamp: str = Field(default_factory=_utc_timestamp)

    @model_validator(mode="after")
    def _check_invariants(self) -> NetworkResponse[T]:
        if self.ok != is_success_status(self.status):
            raise ValueError(f"ok={self.ok} does not match status {self.status}")
        if self.success != self.ok:
            raise ValueError("success must mirror ok")
        if not self.ok and not isinstance(self.data, ErrorBody):
            raise ValueError("failed responses must carry an ErrorBody")
        return self

    @classmethod
    def from_transport(
        cls,
        status: int,
        status_text: str,
        payload: Any,
        headers: dict[str, str],
    ) -> NetworkResponse[Any]:
        """Build the envelope for a response that arrived with *status*."""
        ok = is_success_status(status)
        data = payload if ok else ErrorBody.from_payload(payload)
        return cls(
            ok=ok,
            status=status,
            status_text=status_text,
            data=data,
            headers=headers,
            success=ok,
        )

    @property
    def error_body(self) -> ErrorBody | None:
        return self.data if isinstance(self.data, ErrorBody) else None
