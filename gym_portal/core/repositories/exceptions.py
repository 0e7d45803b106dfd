"""
Repository exceptions for clean error handling.

Every store failure is classified once into one of these and surfaced
immediately; the message is safe to return to API clients.
"""


class RepositoryError(Exception):
    """Base exception for all repository errors (store unreachable or failing)."""

    def __init__(self, message: str = "Internal server error"):
        self.message = message
        super().__init__(message)


class NotFoundError(RepositoryError):
    """Raised when a requested record does not exist."""
    pass


class ConflictError(RepositoryError):
    """Raised when a write would violate uniqueness or referential rules."""
    pass
