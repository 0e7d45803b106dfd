"""
Error Sanitization Middleware

Last line of defence: anything that escapes the exception handlers becomes a
generic 500 in the standard error envelope.
"""

from typing import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from gym_portal.config import logger


class ErrorSanitizationMiddleware(BaseHTTPMiddleware):
    """
    Converts unhandled exceptions into ``{"error": ..., "request_id": ...}``.

    The full traceback is logged server-side; the client never sees it.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            request_id = getattr(request.state, "request_id", "unknown")
            logger.exception("Unhandled exception in request %s: %s", request_id, exc)
            return JSONResponse(
                status_code=500,
                content={"error": "Internal server error", "request_id": request_id},
            )
