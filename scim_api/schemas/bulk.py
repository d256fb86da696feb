"""Pydantic schemas for SCIM bulk operation responses."""

from __future__ import annotations

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field

from scim_api.schemas.error import ErrorResponseBody
from scim_api.schemas.error import StatusPayload

BULK_RESPONSE_SCHEMA = "urn:ietf:params:scim:api:messages:2.0:BulkResponse"


class BulkOperationResult(BaseModel):
    """Outcome of one operation inside a bulk request."""

    model_config = ConfigDict(populate_by_name=True)

    method: str
    bulk_id: str | None = Field(default=None, alias="bulkId")
    location: str | None = None
    status: StatusPayload
    response: ErrorResponseBody | None = None


class BulkResponse(BaseModel):
    """Bulk response envelope."""

    model_config = ConfigDict(populate_by_name=True)

    schemas: list[str] = Field(default_factory=lambda: [BULK_RESPONSE_SCHEMA])
    operations: list[BulkOperationResult] = Field(default_factory=list, alias="Operations")
