"""
Input Validation Module

Format checks shared by request schemas and route handlers.
"""

import math
import re
from typing import Any, List, Optional

from gym_portal.core.security.constants import (
    EMAIL_PATTERN,
    MAX_TEXT_LENGTH,
    PHONE_PATTERN,
    TRANSACTION_STATUSES,
    UUID_PATTERN,
)


class ValidationError(ValueError):
    """Raised when input validation fails.

    Subclasses ``ValueError`` so that raising it inside a pydantic validator
    is reported as a field error rather than escaping as a server error.
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        missing: Optional[List[str]] = None,
    ):
        self.message = message
        self.field = field
        self.missing = missing or []
        super().__init__(message)


def validate_email(email: str) -> str:
    """Validate email address format (``local@domain.tld``)."""
    if not isinstance(email, str) or not EMAIL_PATTERN.match(email.strip()):
        raise ValidationError("Invalid email format", field="email")
    return email.strip()


def validate_phone(phone: str) -> str:
    """Validate a loose international phone number (7-15 characters)."""
    if not isinstance(phone, str) or not PHONE_PATTERN.match(phone.strip()):
        raise ValidationError("Invalid phone format", field="phone")
    return phone.strip()


def validate_uuid(value: Any, label: str = "ID", field: Optional[str] = None) -> str:
    """
    Validate canonical UUID text form and normalize it to lowercase.

    Raises:
        ValidationError: "Invalid <label> format" when the value is not a UUID.
    """
    if not isinstance(value, str) or not UUID_PATTERN.match(value.strip()):
        raise ValidationError(f"Invalid {label} format", field=field)
    return value.strip().lower()


def validate_positive(value: Any, message: str, field: Optional[str] = None) -> Any:
    """Reject zero, negative, non-finite and non-numeric values."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(message, field=field)
    if not math.isfinite(value) or value <= 0:
        raise ValidationError(message, field=field)
    return value


def validate_transaction_status(status: str) -> str:
    status = (status or "").strip().lower()
    if status not in TRANSACTION_STATUSES:
        raise ValidationError(
            f"Invalid status. Allowed: {', '.join(sorted(TRANSACTION_STATUSES))}",
            field="status",
        )
    return status


def sanitize_text(text: Optional[str], max_length: int = MAX_TEXT_LENGTH) -> Optional[str]:
    """
    Strip control characters and truncate free text.

    Preserves most Unicode for internationalization.
    """
    if text is None:
        return None

    text = re.sub(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]", "", text)
    if len(text) > max_length:
        text = text[:max_length]
    return text.strip()
