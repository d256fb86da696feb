"""Status and timestamp encoding shared by error and bulk responses."""

from __future__ import annotations

from datetime import datetime
from http import HTTPStatus

from scim_api.schemas.error import StatusPayload

CLASS_REASONS = {
    1: "Informational",
    2: "Success",
    3: "Redirection",
    4: "Client Error",
    5: "Server Error",
}


def reason_phrase(status: int) -> str:
    """Standard reason phrase, or the status class name for non-standard codes (499 -> ``Client Error``)."""
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return CLASS_REASONS.get(status // 100, "Unknown Status")


def encode_status(status: int) -> StatusPayload:
    """Encode a status as ``{"value": <code>, "reason": <phrase>}``."""
    return StatusPayload(value=int(status), reason=reason_phrase(status))


def transport_status(status: int) -> int:
    """Numeric status for the response status line."""
    return int(status)


def encode_timestamp(moment: datetime) -> int:
    """Unix epoch seconds, truncated."""
    return int(moment.timestamp())
