"""HTTP middleware for request correlation and CORS.

- ``request_id_middleware`` accepts an incoming X-Request-ID header or
  generates a UUID, stores it in contextvars for log correlation and echoes it
  (plus the request duration) on the response.
- ``cors_middleware`` answers preflight ``OPTIONS`` requests without touching
  auth or routing, and stamps permissive CORS headers on every response.

Usage:
    app.middleware("http")(cors_middleware)
    app.middleware("http")(request_id_middleware)
"""

from __future__ import annotations

import time
import uuid

from fastapi import Request, Response

from app.core.config import settings
from app.core.logging import clear_request_id, set_request_id

ALLOWED_METHODS = "GET, POST, OPTIONS"


def cors_headers() -> dict[str, str]:
    """CORS headers attached to every response, errors included."""

    return {
        "Access-Control-Allow-Origin": settings.app.cors_allow_origin,
        "Access-Control-Allow-Headers": settings.app.cors_allow_headers,
        "Access-Control-Allow-Methods": ALLOWED_METHODS,
    }


async def cors_middleware(request: Request, call_next) -> Response:
    """Short-circuit preflight requests and add CORS headers to responses.

    Preflight requests never require a credential, so they are answered here
    before routing and dependency resolution run.
    """

    if request.method == "OPTIONS":
        return Response(
            status_code=200,
            headers=cors_headers(),
            media_type="application/json",
        )

    response: Response = await call_next(request)
    for name, value in cors_headers().items():
        response.headers.setdefault(name, value)
    return response


async def request_id_middleware(request: Request, call_next) -> Response:
    """HTTP middleware for request ID generation and propagation.

    If the client provides the configured request id header (default
    X-Request-ID), that value is used. Otherwise a new UUID is generated.
    The ID is stored in contextvars for the lifetime of the request and
    propagated back in the response headers.

    Args:
        request: The incoming HTTP request object.
        call_next: The next middleware/route handler in the stack.

    Returns:
        Response: The downstream response with request id and duration headers.
    """

    header_name = settings.log.request_id_header
    request_id = request.headers.get(header_name) or str(uuid.uuid4())
    set_request_id(request_id)
    start = time.perf_counter()
    try:
        response: Response = await call_next(request)
    finally:
        clear_request_id()

    duration_ms = (time.perf_counter() - start) * 1000
    response.headers[header_name] = request_id
    response.headers.setdefault("X-Request-Duration-ms", f"{duration_ms:.2f}")
    return response
