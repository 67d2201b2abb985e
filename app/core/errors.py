"""Application-level exception types.

This module defines domain errors used across services/adapters, enabling
consistent error handling, logging, and API responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients."""

    code: str
    message: str
    hint: str
    field: str
    http_status: int
    retry_after: int
    limit: int
    remaining: int
    reset_at: int
    store_code: str
    request_id: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when request input or business-rule validation fails."""


class AuthenticationAppError(AppError):
    """Raised when the caller cannot be authenticated."""


class RateLimitAppError(AppError):
    """Raised when the caller exceeded the review submission budget."""


class NotFoundAppError(AppError):
    """Raised when a requested resource (e.g. a profile) does not exist."""


class ConflictAppError(AppError):
    """Raised when the store reports a uniqueness violation."""


class StoreAppError(AppError):
    """Raised when the store rejects a request (constraint, policy, bad filter)."""


class InternalAppError(AppError):
    """Raised on transport failures or unexpected collaborator responses."""
