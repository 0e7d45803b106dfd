"""
Security Utilities

Request ID tracking, hashing, masking, and security event logging.
"""

import hashlib
import re
import secrets
from typing import Any, Dict, Optional

from fastapi import Request

from gym_portal.config import logger
from gym_portal.core.security.constants import REQUEST_ID_HEADER


def generate_request_id() -> str:
    """Generate a unique request ID."""
    return secrets.token_hex(16)


def get_request_id(request: Request) -> str:
    """Get the request ID assigned by middleware, or derive one from headers."""
    state_id = getattr(request.state, "request_id", None)
    if state_id:
        return state_id
    request_id = request.headers.get(REQUEST_ID_HEADER)
    if request_id and len(request_id) <= 64 and re.match(r"^[a-zA-Z0-9_-]+$", request_id):
        return request_id
    return generate_request_id()


def get_client_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def hash_token(token: str) -> str:
    """
    Create a secure hash of a token for logging.

    Never log raw tokens - use this for audit trails.
    """
    return hashlib.sha256(token.encode()).hexdigest()[:16]


def constant_time_equals(candidate: Optional[str], expected: Optional[str]) -> bool:
    """Exact string match that does not leak timing; empty values never match."""
    if not candidate or not expected:
        return False
    return secrets.compare_digest(candidate.encode(), expected.encode())


def mask_sensitive_data(
    data: Dict[str, Any],
    sensitive_keys: frozenset = frozenset({"token", "password", "secret", "key", "authorization", "code"})
) -> Dict[str, Any]:
    """
    Mask sensitive data in dictionaries for safe logging.
    """
    masked = {}
    for key, value in data.items():
        key_lower = key.lower()
        if any(s in key_lower for s in sensitive_keys):
            masked[key] = "[REDACTED]"
        elif isinstance(value, dict):
            masked[key] = mask_sensitive_data(value, sensitive_keys)
        else:
            masked[key] = value
    return masked


def log_security_event(
    event_type: str,
    request: Optional[Request] = None,
    member_id: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
    level: str = "warning"
) -> None:
    """
    Log a security-relevant event with structured data.
    """
    log_data: Dict[str, Any] = {
        "security_event": event_type,
        "member_id": member_id,
    }

    if request:
        log_data["client_ip"] = get_client_ip(request)
        log_data["path"] = str(request.url.path)
        log_data["method"] = request.method
        log_data["request_id"] = get_request_id(request)

    if details:
        log_data["details"] = mask_sensitive_data(details)

    log_func = getattr(logger, level, logger.warning)
    log_func("Security event: %s | %s", event_type, log_data)
