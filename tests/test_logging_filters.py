"""Tests for sensitive data filtering in logs."""

from __future__ import annotations

import json
import logging
from io import StringIO

from app.core.logging import (
    JsonFormatter,
    RequestIdFilter,
    SensitiveDataFilter,
    clear_request_id,
    hash_identifier,
    scrub_text,
    set_request_id,
)


def _capture(name: str) -> tuple[logging.Logger, StringIO]:
    logger = logging.getLogger(name)
    logger.setLevel(logging.INFO)
    logger.handlers.clear()
    logger.propagate = False

    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.addFilter(RequestIdFilter())
    handler.addFilter(SensitiveDataFilter())
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)
    return logger, stream


def test_sensitive_filter_redacts_credentials():
    logger, stream = _capture("test_redaction")

    logger.info(
        "auth_event",
        extra={
            "authorization": "Bearer eyJhbGciOi.secret",
            "access_token": "eyJhbGciOi.other",
            "apikey": "anon-key-123",
            "user_id": "u1",
        },
    )

    output = stream.getvalue()
    assert "eyJhbGciOi" not in output
    assert "anon-key-123" not in output
    assert "[REDACTED]" in output
    assert "u1" in output


def test_sensitive_filter_redacts_nested_dicts():
    logger, stream = _capture("test_nested")

    logger.info(
        "nested_event",
        extra={
            "headers": {"Authorization": "Bearer top-secret", "user-agent": "pytest"},
            "safe_data": {"count": 5},
        },
    )

    output = stream.getvalue()
    assert "top-secret" not in output
    assert "pytest" in output


def test_sensitive_filter_allows_safe_fields():
    logger, stream = _capture("test_safe_fields")

    logger.info(
        "review.created",
        extra={"review_id": "r-1", "cafe_id": "c1", "rating": 4},
    )

    record = json.loads(stream.getvalue())
    assert record["message"] == "review.created"
    assert record["cafe_id"] == "c1"
    assert record["rating"] == 4
    assert "[REDACTED]" not in stream.getvalue()


def test_request_id_attached_from_context():
    logger, stream = _capture("test_request_id")

    set_request_id("req-abc")
    try:
        logger.info("follow.created")
    finally:
        clear_request_id()

    assert json.loads(stream.getvalue())["request_id"] == "req-abc"


def test_hash_identifier_is_short_and_stable():
    assert hash_identifier("token") == hash_identifier("token")
    assert hash_identifier("token") != hash_identifier("other")
    assert len(hash_identifier("token")) == 16


def test_bearer_tokens_in_free_text_are_masked():
    logger, stream = _capture("test_free_text")

    logger.info(
        "store rejected Bearer eyJhbGciOi.payload.sig",
        extra={"error_msg": "upstream echoed authorization: bearer abc.def"},
    )

    output = stream.getvalue()
    assert "eyJhbGciOi" not in output
    assert "abc.def" not in output
    assert output.count("Bearer [REDACTED]") == 2


def test_scrub_text_leaves_plain_text_alone():
    assert scrub_text("review.created for cafe c1") == "review.created for cafe c1"
