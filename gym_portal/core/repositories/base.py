"""
Data access interface.

Defines the operations route handlers and services rely on, independent of
the store that backs them.
"""

import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from gym_portal.core.query import Filter, ListQuery, Page
from gym_portal.core.repositories.exceptions import NotFoundError

MEMBERS_COLLECTION = "members"
PRICING_PLANS_COLLECTION = "pricing_plans"
TRANSACTIONS_COLLECTION = "transactions"


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class Repository(ABC):
    """
    CRUD and query access to one collection of records.

    Records are plain dictionaries carrying their ``id``. Implementations
    raise ``NotFoundError`` for missing records and ``RepositoryError`` for
    store failures.
    """

    def __init__(self, collection_name: str, entity_name: str):
        self.collection_name = collection_name
        self.entity_name = entity_name

    # -------------------------------------------------------------------------
    # Store operations
    # -------------------------------------------------------------------------

    @abstractmethod
    def get(self, record_id: str) -> Dict[str, Any]:
        """Fetch one record or raise ``NotFoundError``."""

    @abstractmethod
    def get_many(self, record_ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        """Fetch several records by id; missing ids are absent from the result."""

    @abstractmethod
    def find_one(self, field: str, value: Any) -> Optional[Dict[str, Any]]:
        """Return any record whose ``field`` equals ``value``."""

    @abstractmethod
    def insert(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """Persist a fully-formed record (id and timestamps already set)."""

    @abstractmethod
    def apply_update(self, record_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        """Merge ``changes`` into an existing record and return the result."""

    @abstractmethod
    def delete(self, record_id: str) -> None:
        """Delete a record or raise ``NotFoundError``."""

    @abstractmethod
    def list(self, query: ListQuery) -> Page:
        """Filtered, sorted, paginated read."""

    @abstractmethod
    def count(self, filters: Optional[List[Filter]] = None) -> int:
        """Number of records matching all ``filters``."""

    # -------------------------------------------------------------------------
    # Shared behaviour
    # -------------------------------------------------------------------------

    def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        now = utc_now_iso()
        record = dict(data)
        record["id"] = str(uuid.uuid4())
        record["created_at"] = now
        record["updated_at"] = now
        return self.insert(record)

    def update(self, record_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        update_data = {k: v for k, v in changes.items() if k not in ("id", "created_at")}
        update_data["updated_at"] = utc_now_iso()
        return self.apply_update(record_id, update_data)

    def exists(self, record_id: str) -> bool:
        try:
            self.get(record_id)
        except NotFoundError:
            return False
        return True

    def not_found(self) -> NotFoundError:
        return NotFoundError(f"{self.entity_name} not found")
