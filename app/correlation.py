# app/correlation.py
"""
Request correlation for tracing and access logging.

Provides:
- X-Request-Id handling (client-provided if safe, else UUID4)
- request.state.request_id for routes and error bodies
- One [REQUEST] log line per request (method, path, status, duration)
"""
from __future__ import annotations

import logging
import re
import time
import uuid
from typing import Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

_logger = logging.getLogger(__name__)

MAX_REQUEST_ID_LENGTH = 64
# Alphanumeric, hyphens, underscores only (safe for logging)
SAFE_REQUEST_ID_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")


def validate_request_id(request_id: Optional[str]) -> Optional[str]:
    """Return ``request_id`` when it is short and log-safe, else None."""
    if not request_id or len(request_id) > MAX_REQUEST_ID_LENGTH:
        return None
    if not SAFE_REQUEST_ID_PATTERN.match(request_id):
        return None
    return request_id


def get_request_id(request: Request) -> str:
    """Request ID set by the middleware, or "unknown" outside it."""
    return getattr(request.state, "request_id", None) or "unknown"


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Attach a request ID to every request/response and log the outcome."""

    async def dispatch(self, request: Request, call_next):
        request_id = validate_request_id(request.headers.get("x-request-id")) or str(uuid.uuid4())
        request.state.request_id = request_id

        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - started) * 1000

        response.headers["X-Request-Id"] = request_id
        _logger.info(
            f"[REQUEST] id={request_id} {request.method} {request.url.path} "
            f"status={response.status_code} duration_ms={duration_ms:.1f}"
        )
        return response
