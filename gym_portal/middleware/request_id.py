"""
Request ID Middleware

Tags each request with an ID used in logs and echoed to the client.
"""

from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from gym_portal.core.security.constants import REQUEST_ID_HEADER
from gym_portal.core.security.utils import get_request_id


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Accepts a well-formed incoming X-Request-ID or generates one, stores it
    on ``request.state`` and returns it in the response headers.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = get_request_id(request)
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
