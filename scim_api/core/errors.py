"""Error classification, error response construction and handler registration."""

from __future__ import annotations

from collections.abc import Callable
from collections.abc import Iterable
from collections.abc import Mapping
from collections.abc import Sequence
from dataclasses import dataclass
from dataclasses import replace
from datetime import datetime
from datetime import timezone
from http import HTTPStatus
from types import MappingProxyType
from typing import Any
import logging

from fastapi import FastAPI
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.base import RequestResponseEndpoint
from starlette.responses import Response

from scim_api.core.exceptions import DomainError
from scim_api.core.exceptions import HttpStatusError
from scim_api.core.exceptions import InvalidRequestError
from scim_api.core.i18n import LocalizationResolver
from scim_api.core.i18n import negotiate_locale
from scim_api.core.i18n import normalize_locale
from scim_api.core.logging import FailureSink
from scim_api.core.status import encode_status
from scim_api.core.status import encode_timestamp
from scim_api.core.status import transport_status
from scim_api.schemas.bulk import BulkOperationResult
from scim_api.schemas.error import ErrorResponseBody

GENERIC_ERROR_NAME = "GenericException"

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class UnclassifiedFailure:
    """Any failure that is not a :class:`DomainError`; only its text is reported."""

    failure: BaseException

    @property
    def text(self) -> str:
        return str(self.failure)


@dataclass(frozen=True)
class ErrorResponse:
    """Error entity produced for one failed request."""

    error_name: str
    error_time: datetime
    status: int
    message: str | None = None
    details: Mapping[str, Any] | None = None


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {key: _thaw(item) for key, item in value.items()}
    if isinstance(value, tuple):
        return [_thaw(item) for item in value]
    return value


def classify(failure: BaseException) -> DomainError | UnclassifiedFailure:
    """Tag a failure as a domain error or an unclassified failure."""
    if isinstance(failure, DomainError):
        return failure
    return UnclassifiedFailure(failure)


class ErrorResponseBuilder:
    """Build :class:`ErrorResponse` entities from classified failures."""

    def __init__(
        self,
        resolver: LocalizationResolver,
        *,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._resolver = resolver
        self._now = now

    def from_domain_error(self, error: DomainError, locale: str) -> ErrorResponse:
        """Populate from the error's own status and context; the message is resolved for ``locale``.

        Raises whatever the resolver raises when the message code cannot be resolved.
        """
        message = self._resolver.resolve(error.message_code, error.message_args, locale)
        details = _freeze(error.user_info) if error.user_info else None
        return ErrorResponse(
            error_name=error.error_name,
            error_time=self._now(),
            status=error.status_code,
            message=message,
            details=details,
        )

    def from_unclassified(self, failure: UnclassifiedFailure) -> ErrorResponse:
        return ErrorResponse(
            error_name=GENERIC_ERROR_NAME,
            error_time=self._now(),
            status=HTTPStatus.INTERNAL_SERVER_ERROR,
            message=failure.text or None,
        )


def to_body(response: ErrorResponse) -> ErrorResponseBody:
    """Encode an error entity into its wire schema."""
    return ErrorResponseBody(
        error=response.error_name,
        time=encode_timestamp(response.error_time),
        message=response.message,
        status_code=encode_status(response.status),
        details=_thaw(response.details) if response.details else None,
    )


def render(response: ErrorResponse, *, headers: Mapping[str, str] | None = None) -> JSONResponse:
    """Serialize an error entity and set the matching transport status."""
    payload = to_body(response).model_dump(mode="json", by_alias=True, exclude_none=True)
    return JSONResponse(
        status_code=transport_status(response.status),
        content=payload,
        headers=dict(headers) if headers else None,
    )


class ErrorHandler:
    """Terminal handler turning any failure into exactly one error response.

    Every call records the failure once on the sink. A domain error whose message
    cannot be resolved is reported as an unclassified failure of the resolver
    fault, so a broken catalog never masks itself as a client error.
    """

    def __init__(
        self,
        resolver: LocalizationResolver,
        sink: FailureSink,
        *,
        default_locale: str,
        supported_locales: Iterable[str] | None = None,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.builder = ErrorResponseBuilder(resolver, now=now)
        self._sink = sink
        self._default_locale = normalize_locale(default_locale)
        self._supported_locales = frozenset(supported_locales or (self._default_locale,))

    def locale_for(self, accept_language: str | None) -> str:
        """Locale to report in for a request's ``Accept-Language`` header."""
        return negotiate_locale(accept_language, self._supported_locales, self._default_locale)

    def _record(self, message: str) -> None:
        try:
            self._sink.record(message)
        except Exception:
            logger.exception("Failure sink could not record: %s", message)

    def handle(self, failure: BaseException, locale: str | None = None) -> ErrorResponse:
        classified = classify(failure)
        if isinstance(classified, UnclassifiedFailure):
            self._record(classified.text or type(failure).__name__)
            return self.builder.from_unclassified(classified)

        self._record(classified.default_message)
        try:
            return self.builder.from_domain_error(classified, locale or self._default_locale)
        except Exception as fault:
            logger.error(
                "Could not resolve message code %r for %s: %s",
                classified.message_code,
                classified.error_name,
                fault,
            )
            return self.builder.from_unclassified(UnclassifiedFailure(fault))

    def respond(
        self,
        failure: BaseException,
        locale: str | None = None,
        *,
        headers: Mapping[str, str] | None = None,
    ) -> JSONResponse:
        """Handle ``failure`` and render the result as a JSON response."""
        response = self.handle(failure, locale)
        try:
            return render(response, headers=headers)
        except (TypeError, ValueError) as exc:
            logger.error("Could not serialize details of %s: %s", response.error_name, exc)
            return render(replace(response, details=None), headers=headers)

    def bulk_failure(
        self,
        method: str,
        bulk_id: str | None,
        failure: BaseException,
        locale: str | None = None,
    ) -> BulkOperationResult:
        """Bulk operation entry for a failed operation, sharing the single-error encoding."""
        response = self.handle(failure, locale)
        return BulkOperationResult(
            method=method,
            bulk_id=bulk_id,
            status=encode_status(response.status),
            response=to_body(response),
        )


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Funnel every failure escaping a route into the error handler."""

    def __init__(self, app: Any, *, handler: ErrorHandler) -> None:
        super().__init__(app)
        self._handler = handler

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            locale = self._handler.locale_for(request.headers.get("accept-language"))
            return self._handler.respond(exc, locale)


REQUEST_SOURCES = frozenset({"body", "query", "path", "header", "cookie"})


def _issue_field(location: Sequence[Any]) -> str:
    """Dotted attribute path of a validation issue, without the request source prefix."""
    attribute_path = [str(part) for part in location if part not in REQUEST_SOURCES]
    if attribute_path:
        return ".".join(attribute_path)
    return str(location[0]) if location else "request"


def _validation_issues(exc: RequestValidationError) -> list[dict[str, str]]:
    return [
        {"field": _issue_field(issue.get("loc", ())), "issue": str(issue.get("msg", "Invalid value"))}
        for issue in exc.errors()
    ]


def _handler_for(request: Request) -> ErrorHandler:
    return request.app.state.error_handler


async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report FastAPI validation errors as invalid requests."""
    handler = _handler_for(request)
    error = InvalidRequestError("request validation failed", issues=_validation_issues(exc))
    return handler.respond(error, handler.locale_for(request.headers.get("accept-language")))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Report framework HTTP exceptions (unknown route, wrong method) in the error envelope."""
    handler = _handler_for(request)
    detail = exc.detail if isinstance(exc.detail, str) and exc.detail else None
    error = HttpStatusError(exc.status_code, detail)
    return handler.respond(
        error,
        handler.locale_for(request.headers.get("accept-language")),
        headers=exc.headers,
    )


def register_error_handlers(app: FastAPI, handler: ErrorHandler) -> None:
    """Attach the error handler and its interceptors to a FastAPI app instance."""

    app.state.error_handler = handler
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_middleware(ErrorHandlingMiddleware, handler=handler)
