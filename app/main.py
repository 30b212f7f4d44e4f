"""Footy Analyzer API - FastAPI application entrypoint."""
import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from app.config import load_config, log_config_snapshot
from app.correlation import CorrelationIdMiddleware
from app.history_store import get_history_store
from app.routers import analyze
from app.routers import history

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Load and validate configuration at startup
_config = load_config()
log_config_snapshot(_config)

# Export config value for middleware (validated)
MAX_REQUEST_SIZE_BYTES = _config.max_request_size_bytes


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject requests exceeding size limit to prevent payload bombs."""

    async def dispatch(self, request: Request, call_next):
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > MAX_REQUEST_SIZE_BYTES:
            return JSONResponse(
                status_code=413,
                content={
                    "error": "Request entity too large",
                    "detail": f"Body exceeds {MAX_REQUEST_SIZE_BYTES} bytes",
                    "code": "PAYLOAD_TOO_LARGE",
                },
            )
        return await call_next(request)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Cache-Control"] = "no-store"
        return response


# Capture service start time for uptime reporting
_SERVICE_START_TIME = datetime.now(timezone.utc)

app = FastAPI(
    title="Footy Analyzer",
    description="Market-text parser and research-only rule engine",
    version=_config.service_version,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

# Middleware stack (the last one added is the outermost)
# 1. CorrelationId: outermost, adds X-Request-Id and logs each request
# 2. SecurityHeaders: adds security headers to every response, 413 included
# 3. RequestSizeLimit: innermost, rejects oversized requests before routing
app.add_middleware(RequestSizeLimitMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(CorrelationIdMiddleware)

app.include_router(analyze.router)
app.include_router(history.router)


@app.get("/health")
async def health():
    """Health check with service observability."""
    return {
        "status": "healthy",
        "service": _config.service_name,
        "version": _config.service_version,
        "environment": _config.environment,
        "default_lang": _config.default_lang.value,
        "hard_rule_default": _config.hard_rule_default,
        "history_count": get_history_store().count(),
        "started_at": _SERVICE_START_TIME.isoformat(),
    }
