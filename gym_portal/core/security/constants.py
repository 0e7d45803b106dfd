"""
Security Constants

Centralized constants for security module.
"""

import re

# Input format patterns
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^\+?[\d\s\-\(\)]{7,15}$")
UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)

# Maximum lengths for user inputs
MAX_NAME_LENGTH = 100
MAX_TEXT_LENGTH = 2000
MAX_URL_LENGTH = 2048
MAX_SEARCH_LENGTH = 100

# Transaction lifecycle
TRANSACTION_STATUSES = frozenset({"pending", "completed", "failed", "cancelled"})

# Request ID header
REQUEST_ID_HEADER = "X-Request-ID"
