"""Tests for CORS headers and preflight handling."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from app.main import app

client = TestClient(app)


def test_health_has_cors_headers():
    resp = client.get("/health")

    assert resp.json() == {"status": "ok"}
    assert resp.headers["Access-Control-Allow-Origin"] == "*"
    assert resp.headers["Access-Control-Allow-Methods"] == "GET, POST, OPTIONS"


@pytest.mark.parametrize("path", ["/follow", "/reviews", "/leaderboard", "/profile"])
def test_preflight_short_circuits(path: str):
    resp = client.options(
        path,
        headers={"Origin": "https://app.example", "Access-Control-Request-Method": "POST"},
    )

    assert resp.status_code == 200
    assert resp.content == b""
    assert resp.headers["Content-Type"] == "application/json"
    assert resp.headers["Access-Control-Allow-Origin"] == "*"
    assert "content-type" in resp.headers["Access-Control-Allow-Headers"]


def test_auth_errors_have_cors_headers():
    resp = client.post("/reviews", json={"cafe_id": "c1", "rating": 4})

    assert resp.status_code == 401
    assert resp.headers["Access-Control-Allow-Origin"] == "*"
    assert resp.headers["Content-Type"].startswith("application/json")
