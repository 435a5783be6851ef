"""HTTP request/response logging middleware.

Single-use tokens travel in URLs (`/auth/verify-email/{token}`, `?token=`),
so paths and query strings are redacted before they reach the log.
"""

from __future__ import annotations

import logging
import re
import time
from typing import Any
from urllib.parse import parse_qsl, urlencode

from fastapi import FastAPI
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.core.logging import env_bool

REDACTED = "***"

_SENSITIVE_QUERY_KEYS = ("token", "password", "secret", "code", "key")
_TOKEN_PATH_PATTERN = re.compile(r"(/verify-email/)[^/]+")


def redact_path(path: str) -> str:
    """Mask token path segments."""
    return _TOKEN_PATH_PATTERN.sub(rf"\1{REDACTED}", path)


def redact_query(query: str) -> str:
    """Mask values of query parameters whose names look sensitive."""
    if not query:
        return ""
    pairs = []
    for key, value in parse_qsl(query, keep_blank_values=True):
        if any(sensitive in key.lower() for sensitive in _SENSITIVE_QUERY_KEYS):
            value = REDACTED
        pairs.append((key, value))
    return urlencode(pairs, safe="*")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: FastAPI) -> None:
        super().__init__(app)
        self.logger = logging.getLogger("app.request")

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start = time.perf_counter()
        response: Response | None = None
        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = (time.perf_counter() - start) * 1000.0

            status_code: int | None = response.status_code if response else None
            path = redact_path(request.url.path)
            query = redact_query(request.url.query)

            extra: dict[str, Any] = {
                "method": request.method,
                "path": path,
                "query": query,
                "status_code": status_code,
                "duration_ms": round(duration_ms, 2),
                "client_ip": request.client.host if request.client else None,
                "user_agent": request.headers.get("user-agent"),
                # Set by get_current_user on authenticated requests
                "user_id": getattr(request.state, "user_id", None),
            }

            if status_code is None or status_code >= 500:
                log = self.logger.error
            else:
                log = self.logger.info

            log(
                "%s %s%s -> %s (%.2fms)",
                request.method,
                path,
                f"?{query}" if query else "",
                status_code,
                duration_ms,
                extra=extra,
            )


def add_request_logging_middleware(app: FastAPI) -> None:
    """Attach request logging middleware (enabled by default)."""

    if not env_bool("LOG_REQUESTS", default=True):
        return
    app.add_middleware(RequestLoggingMiddleware)
