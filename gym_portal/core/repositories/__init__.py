"""
Repository layer for Firestore data access.

Route handlers receive a ``Repository`` per request through FastAPI
dependencies, so tests can substitute any implementation of the interface.
"""

from gym_portal.core.repositories.base import (
    MEMBERS_COLLECTION,
    PRICING_PLANS_COLLECTION,
    TRANSACTIONS_COLLECTION,
    Repository,
)
from gym_portal.core.repositories.exceptions import (
    ConflictError,
    NotFoundError,
    RepositoryError,
)

__all__ = [
    "MEMBERS_COLLECTION",
    "PRICING_PLANS_COLLECTION",
    "TRANSACTIONS_COLLECTION",
    "Repository",
    "RepositoryError",
    "NotFoundError",
    "ConflictError",
]
