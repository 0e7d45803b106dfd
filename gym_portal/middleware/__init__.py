"""
Security middleware stack for Gym Portal.

Provides:
- Request ID injection
- Security headers (CSP, HSTS, etc.)
- Request/response logging
- Error sanitization
"""

from gym_portal.middleware.request_id import RequestIDMiddleware
from gym_portal.middleware.security_headers import SecurityHeadersMiddleware
from gym_portal.middleware.logging import RequestLoggingMiddleware
from gym_portal.middleware.error_sanitization import ErrorSanitizationMiddleware

__all__ = [
    "RequestIDMiddleware",
    "SecurityHeadersMiddleware",
    "RequestLoggingMiddleware",
    "ErrorSanitizationMiddleware",
]
