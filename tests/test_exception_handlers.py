"""Tests for global exception handlers.

Every error type maps to its HTTP status and leaves as the same envelope:
``{"error": str, "code": str, "request_id": ...}`` with CORS headers.
"""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.core.errors import (
    AppError,
    AuthenticationAppError,
    ConflictAppError,
    InternalAppError,
    NotFoundAppError,
    RateLimitAppError,
    StoreAppError,
    ValidationAppError,
)
from app.core.exception_handlers import general_exception_handler, setup_exception_handlers


@pytest.fixture
def app_with_handlers() -> FastAPI:
    """Create FastAPI app with exception handlers registered."""
    app = FastAPI()
    setup_exception_handlers(app)
    return app


@pytest.fixture
def client(app_with_handlers: FastAPI) -> TestClient:
    return TestClient(app_with_handlers)


class TestAppErrorHandler:
    """AppError subclasses map to their HTTP statuses."""

    @pytest.mark.parametrize(
        ("error_cls", "status"),
        [
            (ValidationAppError, 400),
            (StoreAppError, 400),
            (AuthenticationAppError, 401),
            (NotFoundAppError, 404),
            (ConflictAppError, 409),
            (RateLimitAppError, 429),
            (InternalAppError, 500),
        ],
    )
    def test_status_mapping(
        self, client: TestClient, app_with_handlers: FastAPI, error_cls: type[AppError], status: int
    ) -> None:
        @app_with_handlers.get("/raise")
        async def raise_error():
            raise error_cls(code="some_code", message="Something happened")

        response = client.get("/raise")

        assert response.status_code == status
        data = response.json()
        assert data["error"] == "Something happened"
        assert data["code"] == "some_code"
        assert "request_id" in data
        assert response.headers["Access-Control-Allow-Origin"] == "*"

    def test_details_included_when_present(self, client: TestClient, app_with_handlers: FastAPI) -> None:
        @app_with_handlers.get("/details")
        async def raise_error():
            raise ValidationAppError(code="invalid_field", message="Invalid rating", details={"field": "rating"})

        data = client.get("/details").json()

        assert data["details"] == {"field": "rating"}

    def test_details_omitted_when_absent(self, client: TestClient, app_with_handlers: FastAPI) -> None:
        @app_with_handlers.get("/no-details")
        async def raise_error():
            raise ValidationAppError(code="x", message="y")

        assert "details" not in client.get("/no-details").json()

    def test_rate_limit_headers(self, client: TestClient, app_with_handlers: FastAPI) -> None:
        @app_with_handlers.get("/throttled")
        async def raise_error():
            raise RateLimitAppError(
                code="rate_limit_exceeded",
                message="Rate limit exceeded",
                details={"limit": 10, "remaining": 0, "reset_at": 1700000000, "retry_after": 42},
            )

        response = client.get("/throttled")

        assert response.status_code == 429
        assert response.headers["Retry-After"] == "42"
        assert response.headers["X-RateLimit-Limit"] == "10"
        assert response.headers["X-RateLimit-Remaining"] == "0"
        assert response.headers["X-RateLimit-Reset"] == "1700000000"


class TestHttpExceptionHandler:
    def test_unknown_path_uses_envelope(self, client: TestClient) -> None:
        response = client.get("/does-not-exist")

        assert response.status_code == 404
        assert response.json()["error"] == "Not found"

    def test_wrong_method_uses_envelope(self, client: TestClient, app_with_handlers: FastAPI) -> None:
        @app_with_handlers.post("/only-post")
        async def only_post():
            return {"ok": True}

        response = client.get("/only-post")

        assert response.status_code == 405
        assert response.json()["code"] == "method_not_allowed"
        assert "POST" in response.headers["Allow"]


class TestGeneralExceptionHandler:
    """Fallback handler for unexpected exceptions."""

    def test_unexpected_exception_handler_registered(self, app_with_handlers: FastAPI) -> None:
        assert Exception in app_with_handlers.exception_handlers

    def test_general_exception_handler_hides_details(self) -> None:
        request = AsyncMock()
        request.url.path = "/reviews"
        request.method = "POST"

        exc = RuntimeError("connection to db-internal:5432 failed")
        response = asyncio.run(general_exception_handler(request, exc))

        data = json.loads(bytes(response.body).decode())
        assert response.status_code == 500
        assert data["code"] == "internal_server_error"
        assert "db-internal" not in data["error"]
        assert "RuntimeError" not in bytes(response.body).decode()
        assert response.headers["Access-Control-Allow-Origin"] == "*"

    def test_multiple_handler_setups_does_not_fail(self) -> None:
        app = FastAPI()

        setup_exception_handlers(app)
        setup_exception_handlers(app)

        assert AppError in app.exception_handlers
