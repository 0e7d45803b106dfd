"""
Security module for Gym Portal.

Provides:
- Input validation (email, phone, UUID, positive amounts)
- Request ID tracking
- Constant-time secret comparison
- Security event logging
"""

from gym_portal.core.security.constants import (
    EMAIL_PATTERN,
    PHONE_PATTERN,
    UUID_PATTERN,
    MAX_NAME_LENGTH,
    MAX_TEXT_LENGTH,
    MAX_URL_LENGTH,
    MAX_SEARCH_LENGTH,
    TRANSACTION_STATUSES,
    REQUEST_ID_HEADER,
)
from gym_portal.core.security.validation import (
    ValidationError,
    validate_email,
    validate_phone,
    validate_uuid,
    validate_positive,
    validate_transaction_status,
    sanitize_text,
)
from gym_portal.core.security.utils import (
    constant_time_equals,
    generate_request_id,
    get_client_ip,
    get_request_id,
    hash_token,
    mask_sensitive_data,
    log_security_event,
)

__all__ = [
    # Constants
    "EMAIL_PATTERN",
    "PHONE_PATTERN",
    "UUID_PATTERN",
    "MAX_NAME_LENGTH",
    "MAX_TEXT_LENGTH",
    "MAX_URL_LENGTH",
    "MAX_SEARCH_LENGTH",
    "TRANSACTION_STATUSES",
    "REQUEST_ID_HEADER",
    # Validation
    "ValidationError",
    "validate_email",
    "validate_phone",
    "validate_uuid",
    "validate_positive",
    "validate_transaction_status",
    "sanitize_text",
    # Utils
    "constant_time_equals",
    "generate_request_id",
    "get_client_ip",
    "get_request_id",
    "hash_token",
    "mask_sensitive_data",
    "log_security_event",
]
