"""Unit tests for the error handling interceptors registered on a FastAPI app."""

from __future__ import annotations

from datetime import datetime
from datetime import timezone
from uuid import UUID

from fastapi import FastAPI
from fastapi.testclient import TestClient
from starlette.exceptions import HTTPException as StarletteHTTPException

from scim_api.core.errors import ErrorHandler
from scim_api.core.errors import register_error_handlers
from scim_api.core.exceptions import DomainError
from scim_api.core.exceptions import InvalidPathError
from scim_api.core.exceptions import UserConflictError
from scim_api.core.exceptions import UserNotFoundError
from scim_api.core.i18n import MessageCatalog

FIXED_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)
FIXED_EPOCH = 1704067200


def _build_client(sink) -> TestClient:
    catalog = MessageCatalog()
    handler = ErrorHandler(
        catalog,
        sink,
        default_locale="en",
        supported_locales=catalog.supported_locales,
        now=lambda: FIXED_TIME,
    )
    app = FastAPI()
    register_error_handlers(app, handler)

    @app.get("/query")
    def query(limit: int) -> dict[str, int]:
        return {"limit": limit}

    @app.get("/users/{user_name}")
    def get_user(user_name: str) -> None:
        raise UserNotFoundError(user_name)

    @app.post("/users")
    def create_user() -> None:
        raise UserConflictError("bob", "u-42")

    @app.patch("/users/{user_name}")
    async def patch_user(user_name: str) -> None:
        raise InvalidPathError("name.familyName[", reason="unterminated filter")

    @app.get("/divide")
    def divide() -> float:
        return 1 / 0

    @app.get("/audit/{event_id}")
    def get_audit_event(event_id: str) -> None:
        raise DomainError(
            "audit event is locked",
            message_args=[event_id],
            user_info={"id": UUID(int=42), "at": datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)},
        )

    @app.get("/opaque")
    def opaque() -> None:
        raise DomainError("opaque context", message_args=["opaque"], user_info={"handle": object()})

    @app.get("/closed")
    def closed() -> None:
        raise StarletteHTTPException(status_code=499, detail="Client closed request")

    @app.get("/http")
    def http_error() -> None:
        raise StarletteHTTPException(status_code=404, detail="Client not found")

    return TestClient(app)


def test_domain_errors_use_error_envelope(sink) -> None:
    client = _build_client(sink)

    response = client.get("/users/alice")

    assert response.status_code == 404
    assert response.json() == {
        "error": "UserNotFoundError",
        "time": FIXED_EPOCH,
        "message": "User alice does not exist",
        "statusCode": {"value": 404, "reason": "Not Found"},
    }
    assert sink.records == ["User alice not found"]


def test_domain_error_details_are_included(sink) -> None:
    client = _build_client(sink)

    response = client.post("/users")

    assert response.status_code == 409
    payload = response.json()
    assert payload["error"] == "UserConflictError"
    assert payload["statusCode"] == {"value": 409, "reason": "Conflict"}
    assert payload["details"] == {"conflictingId": "u-42"}


def test_async_route_errors_are_handled(sink) -> None:
    client = _build_client(sink)

    response = client.patch("/users/alice")

    assert response.status_code == 400
    payload = response.json()
    assert payload["error"] == "InvalidPathError"
    assert payload["details"] == {"path": "name.familyName[", "reason": "unterminated filter"}


def test_unhandled_errors_are_reported_as_generic_exception(sink) -> None:
    client = _build_client(sink)

    response = client.get("/divide")

    assert response.status_code == 500
    assert response.json() == {
        "error": "GenericException",
        "time": FIXED_EPOCH,
        "message": "division by zero",
        "statusCode": {"value": 500, "reason": "Internal Server Error"},
    }
    assert sink.records == ["division by zero"]


def test_accept_language_selects_message_locale(sink) -> None:
    client = _build_client(sink)

    response = client.get("/users/alice", headers={"Accept-Language": "de-CH,de;q=0.9,en;q=0.5"})

    assert response.json()["message"] == "Benutzer alice existiert nicht"


def test_unsupported_language_falls_back_to_default(sink) -> None:
    client = _build_client(sink)

    response = client.get("/users/alice", headers={"Accept-Language": "ja"})

    assert response.json()["message"] == "User alice does not exist"


def test_request_validation_errors_are_invalid_requests(sink) -> None:
    client = _build_client(sink)

    response = client.get("/query")

    assert response.status_code == 400
    payload = response.json()
    assert payload["error"] == "InvalidRequestError"
    assert payload["message"] == "Invalid request: request validation failed"
    assert payload["details"]["issues"][0]["field"] == "limit"


def test_http_exceptions_use_error_envelope(sink) -> None:
    client = _build_client(sink)

    response = client.get("/http")

    assert response.status_code == 404
    payload = response.json()
    assert payload["error"] == "HttpStatusError"
    assert payload["message"] == "Not Found"
    assert payload["statusCode"] == {"value": 404, "reason": "Not Found"}
    assert "details" not in payload
    assert sink.records == ["Client not found"]


def test_method_not_allowed_keeps_allow_header(sink) -> None:
    client = _build_client(sink)

    response = client.delete("/divide")

    assert response.status_code == 405
    assert "GET" in response.headers["allow"]
    assert response.json()["statusCode"] == {"value": 405, "reason": "Method Not Allowed"}


def test_details_with_uuid_and_datetime_are_json_encoded(sink) -> None:
    client = _build_client(sink)

    response = client.get("/audit/evt-1")

    assert response.status_code == 400
    assert response.headers["content-type"] == "application/json"
    assert response.json()["details"] == {
        "id": "00000000-0000-0000-0000-00000000002a",
        "at": "2024-01-02T03:04:05Z",
    }


def test_unserializable_details_are_dropped(sink) -> None:
    client = _build_client(sink)

    response = client.get("/opaque")

    assert response.status_code == 400
    payload = response.json()
    assert payload["error"] == "DomainError"
    assert "details" not in payload


def test_non_standard_http_status_is_preserved(sink) -> None:
    client = _build_client(sink)

    response = client.get("/closed")

    assert response.status_code == 499
    payload = response.json()
    assert payload["error"] == "HttpStatusError"
    assert payload["statusCode"] == {"value": 499, "reason": "Client Error"}
    assert payload["message"] == "Client Error"
