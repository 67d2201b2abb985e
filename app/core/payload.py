"""Request payload parsing for the API endpoints.

Bodies and query strings are read only after the caller has been
authenticated, then validated into a pydantic model in one step, so handlers
never touch raw dicts.
"""

from __future__ import annotations

import logging
from typing import NoReturn, TypeVar

from fastapi import Request
from pydantic import BaseModel, ValidationError

from app.core.errors import ValidationAppError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

# Pydantic error types that mean "the field was not really provided"
_MISSING_TYPES = {"missing", "string_too_short"}


def _first_error(exc: ValidationError) -> tuple[str, str, str]:
    error = exc.errors()[0]
    field = ".".join(str(part) for part in error.get("loc", ())) or "body"
    return field, error.get("type", ""), error.get("msg", "invalid value")


def _raise_validation_error(
    exc: ValidationError,
    model: type[BaseModel],
    missing_message: str,
) -> NoReturn:
    """Translate the first pydantic error into a ValidationAppError."""
    field, error_type, msg = _first_error(exc)
    logger.info(
        "payload.rejected",
        extra={"model": model.__name__, "field": field, "error_type": error_type},
    )
    if error_type == "json_invalid":
        raise ValidationAppError(
            code="invalid_json",
            message="Request body must be valid JSON",
        ) from exc
    if error_type == "model_type" and field == "body":
        raise ValidationAppError(
            code="invalid_body",
            message="Request body must be a JSON object",
        ) from exc
    if error_type in _MISSING_TYPES:
        raise ValidationAppError(
            code="missing_fields",
            message=missing_message,
            details={"field": field},
        ) from exc
    raise ValidationAppError(
        code="invalid_field",
        message=f"Invalid {field}: {msg}",
        details={"field": field},
    ) from exc


async def parse_json_body(
    request: Request,
    model: type[ModelT],
    *,
    missing_message: str,
) -> ModelT:
    """Read the request body and validate it into ``model``.

    Args:
        request: Incoming request.
        model: Pydantic model describing the body.
        missing_message: Message used when a required field is absent/empty.

    Returns:
        The validated model instance.

    Raises:
        ValidationAppError: If the body is not a JSON object or fails validation.
    """
    raw = await request.body()
    if not raw.strip():
        raise ValidationAppError(code="missing_fields", message=missing_message)

    try:
        return model.model_validate_json(raw)
    except ValidationError as exc:
        _raise_validation_error(exc, model, missing_message)


def parse_query_params(
    request: Request,
    model: type[ModelT],
    *,
    missing_message: str,
) -> ModelT:
    """Validate the query string into ``model`` (lax, so "2" becomes 2)."""
    try:
        return model.model_validate(dict(request.query_params))
    except ValidationError as exc:
        _raise_validation_error(exc, model, missing_message)
