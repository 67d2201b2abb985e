"""Pytest configuration shared across all test modules.

Loaded by pytest before any test module, so the environment below is in place
before ``app.core.config.settings`` is first imported.
"""

import os

# Must run before any import that builds settings
os.environ["APP_ENV"] = "testing"
os.environ.setdefault("APP_BACKEND", "memory")
os.environ.setdefault("APP_STATIC_TOKENS", "token-u1:u1,token-u2:u2,token-u3:u3")
os.environ.setdefault("APP_REVIEW_RATE_LIMIT_ENABLED", "true")
os.environ.setdefault("APP_REVIEW_RATE_LIMIT_REQUESTS", "10")
os.environ.setdefault("APP_REVIEW_RATE_LIMIT_WINDOW_SECONDS", "3600")
os.environ.setdefault("LOG_LEVEL", "WARNING")
