"""Tests for app/core/request_logging.py - Redacted request logging."""

import logging

from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.core.request_logging import (
    RequestLoggingMiddleware,
    redact_path,
    redact_query,
)


def test_redact_path_masks_verification_token():
    assert redact_path("/auth/verify-email/abc123") == "/auth/verify-email/***"


def test_redact_path_leaves_other_paths():
    assert redact_path("/users/me") == "/users/me"


def test_redact_query_masks_sensitive_keys():
    query = "token=abc&page=2&new_password=x&api_key=k&code=c"

    assert redact_query(query) == (
        "token=***&page=2&new_password=***&api_key=***&code=***"
    )


def test_redact_query_empty():
    assert redact_query("") == ""


def test_middleware_logs_redacted_request(caplog):
    app = FastAPI()

    @app.get("/auth/verify-email/{token}")
    def verify(token: str):
        return {"ok": True}

    app.add_middleware(RequestLoggingMiddleware)
    caplog.set_level(logging.INFO, logger="app.request")

    TestClient(app).get("/auth/verify-email/supersecret?token=supersecret")

    messages = [r.getMessage() for r in caplog.records if r.name == "app.request"]
    assert len(messages) == 1
    assert messages[0].startswith("GET /auth/verify-email/***?token=*** -> 200")
    assert "supersecret" not in messages[0]
