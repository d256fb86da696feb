"""Domain error hierarchy raised by SCIM request processing."""

from __future__ import annotations

from collections.abc import Mapping
from collections.abc import Sequence
from http import HTTPStatus
from typing import Any
from typing import ClassVar

from scim_api.core.status import reason_phrase


class DomainError(Exception):
    """Base class for expected failures that carry their own status and message code.

    Subclasses fix ``status_code`` and ``message_code``; the class name is used as
    the wire ``error`` tag unless ``error_name`` is overridden.
    """

    status_code: int = HTTPStatus.BAD_REQUEST
    message_code: ClassVar[str] = "error.invalid_request"
    error_name: ClassVar[str] = "DomainError"

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if "error_name" not in cls.__dict__:
            cls.error_name = cls.__name__

    def __init__(
        self,
        default_message: str,
        *,
        message_args: Sequence[Any] = (),
        user_info: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(default_message)
        self.default_message = default_message
        self.message_args = tuple(message_args)
        self.user_info = dict(user_info) if user_info else None


class InvalidRequestError(DomainError):
    """Request payload or parameters failed validation."""

    status_code = HTTPStatus.BAD_REQUEST
    message_code = "error.invalid_request"

    def __init__(self, reason: str, *, issues: Sequence[Mapping[str, str]] | None = None) -> None:
        user_info = {"issues": [dict(issue) for issue in issues]} if issues else None
        super().__init__(f"Invalid request: {reason}", message_args=[reason], user_info=user_info)


class InvalidFilterError(DomainError):
    status_code = HTTPStatus.BAD_REQUEST
    message_code = "error.invalid_filter"

    def __init__(self, filter_expression: str) -> None:
        super().__init__(
            f"Invalid filter expression: {filter_expression}",
            message_args=[filter_expression],
            user_info={"filter": filter_expression},
        )


class InvalidPathError(DomainError):
    status_code = HTTPStatus.BAD_REQUEST
    message_code = "error.invalid_path"

    def __init__(self, path: str, *, reason: str | None = None) -> None:
        user_info: dict[str, Any] = {"path": path}
        if reason:
            user_info["reason"] = reason
        super().__init__(f"Invalid attribute path: {path}", message_args=[path], user_info=user_info)


class PermissionDeniedError(DomainError):
    status_code = HTTPStatus.FORBIDDEN
    message_code = "error.permission_denied"

    def __init__(self, action: str, resource: str) -> None:
        super().__init__(
            f"Permission denied for {action} on {resource}",
            message_args=[action, resource],
        )


class ResourceNotFoundError(DomainError):
    """Convenience error for missing resources of any type."""

    status_code = HTTPStatus.NOT_FOUND
    message_code = "error.resource_not_found"

    def __init__(self, resource_type: str, resource_id: str) -> None:
        super().__init__(
            f"{resource_type} {resource_id} not found",
            message_args=[resource_type, resource_id],
        )


class UserNotFoundError(DomainError):
    status_code = HTTPStatus.NOT_FOUND
    message_code = "user.not_found"

    def __init__(self, user_name: str) -> None:
        super().__init__(f"User {user_name} not found", message_args=[user_name])


class GroupNotFoundError(DomainError):
    status_code = HTTPStatus.NOT_FOUND
    message_code = "group.not_found"

    def __init__(self, group_name: str) -> None:
        super().__init__(f"Group {group_name} not found", message_args=[group_name])


class ResourceConflictError(DomainError):
    status_code = HTTPStatus.CONFLICT
    message_code = "error.conflict"

    def __init__(self, resource_type: str, conflicting_id: str) -> None:
        super().__init__(
            f"{resource_type} conflicts with existing resource {conflicting_id}",
            message_args=[resource_type, conflicting_id],
            user_info={"conflictingId": conflicting_id},
        )


class UserConflictError(DomainError):
    status_code = HTTPStatus.CONFLICT
    message_code = "user.conflict"

    def __init__(self, user_name: str, conflicting_id: str) -> None:
        super().__init__(
            f"User {user_name} conflicts with existing user {conflicting_id}",
            message_args=[user_name],
            user_info={"conflictingId": conflicting_id},
        )


class PreconditionFailedError(DomainError):
    """Raised when an ``If-Match`` version does not match the stored resource."""

    status_code = HTTPStatus.PRECONDITION_FAILED
    message_code = "error.precondition_failed"

    def __init__(self, expected_version: str, actual_version: str) -> None:
        super().__init__(
            f"Version mismatch: expected {expected_version}, found {actual_version}",
            message_args=[expected_version],
            user_info={"expectedVersion": expected_version, "actualVersion": actual_version},
        )


class HttpStatusError(DomainError):
    """Framework-level HTTP failure (unknown route, method not allowed) in the domain envelope."""

    message_code = "error.http_status"

    def __init__(self, status: int, detail: str | None = None) -> None:
        phrase = reason_phrase(status)
        super().__init__(detail or phrase, message_args=[int(status), phrase])
        self.status_code = status
