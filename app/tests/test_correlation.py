# app/tests/test_correlation.py
"""
Tests for correlation ID middleware and request logging.

These tests verify:
1. Client-provided X-Request-Id is echoed when safe
2. Unsafe or missing ids are replaced with a UUID
3. Each request logs one [REQUEST] line without raw input
"""
import logging
import uuid

import pytest
from fastapi.testclient import TestClient

from app.correlation import validate_request_id
from app.main import app


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


class TestValidateRequestId:
    """Tests for request ID validation."""

    def test_valid_alphanumeric(self):
        """Valid alphanumeric ID is accepted."""
        assert validate_request_id("abc123-DEF_456") == "abc123-DEF_456"

    def test_empty_and_none_rejected(self):
        assert validate_request_id("") is None
        assert validate_request_id(None) is None

    def test_length_boundary(self):
        """IDs longer than 64 chars are rejected."""
        assert validate_request_id("a" * 64) == "a" * 64
        assert validate_request_id("a" * 65) is None

    def test_special_chars_rejected(self):
        assert validate_request_id("abc@123") is None
        assert validate_request_id("abc 123") is None
        assert validate_request_id("abc/123") is None


class TestMiddleware:
    """Tests for the middleware on live requests."""

    def test_client_id_echoed(self, client):
        response = client.get("/health", headers={"X-Request-Id": "trace-42"})
        assert response.headers["X-Request-Id"] == "trace-42"

    def test_unsafe_id_replaced(self, client):
        response = client.get("/health", headers={"X-Request-Id": "bad id!"})
        request_id = response.headers["X-Request-Id"]
        assert request_id != "bad id!"
        uuid.UUID(request_id)

    def test_request_id_in_body(self, client):
        response = client.post(
            "/analyze", json={"text": "A vs B"}, headers={"X-Request-Id": "trace-43"}
        )
        assert response.json()["request_id"] == "trace-43"

    def test_request_logged_without_text(self, client, caplog):
        with caplog.at_level(logging.INFO, logger="app.correlation"):
            client.post("/analyze", json={"text": "秘密球队 vs B"})

        assert "[REQUEST]" in caplog.text
        assert "POST /analyze status=200" in caplog.text
        assert "秘密球队" not in caplog.text
