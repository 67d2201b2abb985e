"""Global exception handlers for consistent error responses.

Every failure leaves the service as the same JSON envelope::

    {"error": "<human message>", "code": "<machine code>", "request_id": "..."}

Design:
- AppError subclasses → mapped HTTP status (400, 401, 404, 409, 429, 500)
- Framework HTTP errors (404, 405) → same envelope, original status
- Unexpected Exception → generic 500 (safety net, nothing leaked)
- CORS headers are set here too, since the 500 safety net runs outside
  the middleware stack
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.core.errors import (
    AppError,
    AuthenticationAppError,
    ConflictAppError,
    InternalAppError,
    NotFoundAppError,
    RateLimitAppError,
)
from app.core.logging import get_request_id
from app.core.middleware import cors_headers

logger = logging.getLogger(__name__)


def _status_for(exc: AppError) -> int:
    if isinstance(exc, AuthenticationAppError):
        return 401
    if isinstance(exc, NotFoundAppError):
        return 404
    if isinstance(exc, RateLimitAppError):
        return 429
    if isinstance(exc, ConflictAppError):
        return 409
    if isinstance(exc, InternalAppError):
        return 500
    # ValidationAppError, StoreAppError and anything else client-caused
    return 400


def _rate_limit_headers(exc: RateLimitAppError) -> dict[str, str]:
    details = exc.details or {}
    if not settings.app.rate_limit_include_headers:
        return {}
    headers: dict[str, str] = {}
    if "retry_after" in details:
        headers["Retry-After"] = str(details["retry_after"])
    if "limit" in details:
        headers["X-RateLimit-Limit"] = str(details["limit"])
    if "remaining" in details:
        headers["X-RateLimit-Remaining"] = str(details["remaining"])
    if "reset_at" in details:
        headers["X-RateLimit-Reset"] = str(details["reset_at"])
    return headers


def error_response(
    status_code: int,
    message: str,
    code: str,
    *,
    details: dict | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build the error envelope with CORS headers attached.

    Args:
        status_code: HTTP status to return.
        message: Human-readable message placed under ``error``.
        code: Machine-readable error code.
        details: Optional structured context.
        headers: Extra response headers (e.g. Retry-After).

    Returns:
        JSONResponse carrying the envelope.
    """
    content: dict = {
        "error": message,
        "code": code,
        "request_id": get_request_id(),
    }
    if details:
        content["details"] = details

    return JSONResponse(
        status_code=status_code,
        content=content,
        headers={**cors_headers(), **(headers or {})},
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle domain application errors with the shared envelope.

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with the mapped status code.
    """
    status_code = _status_for(exc)
    log = logger.error if status_code >= 500 else logger.warning
    log(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": status_code,
            "has_details": bool(exc.details),
            "request_path": request.url.path,
        },
    )

    headers = _rate_limit_headers(exc) if isinstance(exc, RateLimitAppError) else None
    return error_response(
        status_code,
        exc.message,
        exc.code,
        details=dict(exc.details) if exc.details else None,
        headers=headers,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Wrap framework HTTP errors (unknown path, wrong method) in the envelope."""
    if exc.status_code == 405:
        message, code = "Method not allowed", "method_not_allowed"
    elif exc.status_code == 404:
        message, code = "Not found", "not_found"
    else:
        message, code = str(exc.detail), "http_error"

    logger.info(
        "http_error_handled",
        extra={
            "status_code": exc.status_code,
            "request_path": request.url.path,
            "request_method": request.method,
        },
    )
    return error_response(exc.status_code, message, code, headers=exc.headers)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors (safety net).

    Logs the failure for debugging while returning a generic message, so no
    stack traces or collaborator internals reach the client.
    """
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
        },
    )

    return error_response(
        500,
        "An unexpected error occurred. Please try again later.",
        "internal_server_error",
    )


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with the FastAPI app.

    Example:
        >>> from fastapi import FastAPI
        >>> app = FastAPI()
        >>> setup_exception_handlers(app)
    """
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(StarletteHTTPException)(http_exception_handler)
    app.exception_handler(Exception)(general_exception_handler)
