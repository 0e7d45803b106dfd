"""
Security Headers Middleware

Adds security headers to all responses.
"""

from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Adds security headers to all responses.

    The API serves JSON only, so the content security policy denies
    everything; API responses are additionally marked uncacheable since
    they carry member personal data.
    """

    def __init__(self, app: ASGIApp, hsts_max_age: int = 31536000, include_subdomains: bool = True):
        super().__init__(app)

        hsts_parts = [f"max-age={hsts_max_age}"]
        if include_subdomains:
            hsts_parts.append("includeSubDomains")
        self.hsts_header = "; ".join(hsts_parts)

        self.csp_policy = "default-src 'none'; frame-ancestors 'none'; base-uri 'none'"

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
        response.headers.setdefault("Strict-Transport-Security", self.hsts_header)

        # Swagger UI needs scripts and styles from its CDN
        if not request.url.path.startswith(("/docs", "/redoc")):
            response.headers.setdefault("Content-Security-Policy", self.csp_policy)

        if request.url.path.startswith(("/api", "/auth")):
            response.headers.setdefault("Cache-Control", "no-store, no-cache, must-revalidate, private")
            response.headers.setdefault("Pragma", "no-cache")

        return response
