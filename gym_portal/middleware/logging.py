"""
Request Logging Middleware

Logs method, path, status and duration for every request.
"""

import time
from typing import Callable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from gym_portal.config import logger
from gym_portal.core.security.utils import get_client_ip


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs request/response information for observability.

    Only ``request.url.path`` is logged. Query strings may carry the legacy
    ``api_key`` parameter and must never reach the logs.
    """

    def __init__(self, app: ASGIApp, exclude_paths: Optional[set] = None):
        super().__init__(app)
        self.exclude_paths = exclude_paths or {"/health", "/healthz", "/ready"}

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in self.exclude_paths:
            return await call_next(request)

        start_time = time.time()
        request_id = getattr(request.state, "request_id", "unknown")

        logger.info(
            "Request: %s %s | client=%s | request_id=%s",
            request.method,
            request.url.path,
            get_client_ip(request),
            request_id,
        )

        try:
            response = await call_next(request)
        except Exception as exc:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                "Request failed: %s %s | error=%s | duration=%.2fms | request_id=%s",
                request.method,
                request.url.path,
                type(exc).__name__,
                duration_ms,
                request_id,
            )
            raise

        duration_ms = (time.time() - start_time) * 1000
        logger.info(
            "Response: %s %s | status=%d | duration=%.2fms | request_id=%s",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            request_id,
        )
        return response
