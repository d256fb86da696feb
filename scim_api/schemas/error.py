"""Error envelope schemas shared by single-error and bulk responses."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field


class StatusPayload(BaseModel):
    """Numeric status plus reason phrase, e.g. ``{"value": 404, "reason": "Not Found"}``."""

    model_config = ConfigDict(frozen=True)

    value: int
    reason: str


class ErrorResponseBody(BaseModel):
    """Top-level API error response envelope."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    error: str
    time: int
    message: str | None = None
    status_code: StatusPayload = Field(alias="statusCode")
    details: dict[str, Any] | None = None
