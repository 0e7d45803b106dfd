"""
Firestore-backed repository.

Each collection stores one document per record, keyed by the record's UUID.
Equality and range filters, ordering, offsets and counts are evaluated by
Firestore; free-text search is evaluated in process over the filtered set.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from google.api_core import exceptions as google_exceptions
from google.cloud import firestore
from google.cloud.firestore_v1 import FieldFilter

from gym_portal.core.firebase_client import get_firestore_client
from gym_portal.core.query import Filter, ListQuery, Page, paginate_records
from gym_portal.core.repositories.base import Repository
from gym_portal.core.repositories.exceptions import ConflictError, RepositoryError

logger = logging.getLogger(__name__)


class FirestoreRepository(Repository):
    """
    Repository for one top-level Firestore collection.

    Store failures are logged with full detail and re-raised as
    ``RepositoryError`` carrying a generic, client-safe message.
    """

    def __init__(
        self,
        collection_name: str,
        entity_name: str,
        db: Optional[firestore.Client] = None,
    ):
        super().__init__(collection_name, entity_name)
        self.db = db or get_firestore_client()
        self.collection = self.db.collection(collection_name)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _to_record(doc: Any) -> Dict[str, Any]:
        data = doc.to_dict() or {}
        data["id"] = doc.id
        return data

    def _failure(self, action: str, exc: Exception, plural: bool = False) -> RepositoryError:
        noun = self.collection_name.replace("_", " ") if plural else self.entity_name.lower()
        logger.error(
            "Firestore %s failed on %s: %s", action, self.collection_name, exc, exc_info=True
        )
        return RepositoryError(f"Failed to {action} {noun}")

    def _filtered(self, filters: Iterable[Filter]):
        query = self.collection
        for item in filters:
            query = query.where(filter=FieldFilter(item.field, item.op, item.value))
        return query

    @staticmethod
    def _count(query) -> int:
        results = query.count(alias="total").get()
        return int(results[0][0].value) if results and results[0] else 0

    # -------------------------------------------------------------------------
    # Repository interface
    # -------------------------------------------------------------------------

    def get(self, record_id: str) -> Dict[str, Any]:
        try:
            doc = self.collection.document(record_id).get()
        except google_exceptions.GoogleAPIError as e:
            raise self._failure("fetch", e) from e
        if not doc.exists:
            raise self.not_found()
        return self._to_record(doc)

    def get_many(self, record_ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        refs = [self.collection.document(record_id) for record_id in set(record_ids) if record_id]
        if not refs:
            return {}
        try:
            snapshots = list(self.db.get_all(refs))
        except google_exceptions.GoogleAPIError as e:
            raise self._failure("fetch", e, plural=True) from e
        return {doc.id: self._to_record(doc) for doc in snapshots if doc.exists}

    def find_one(self, field: str, value: Any) -> Optional[Dict[str, Any]]:
        try:
            docs = list(
                self.collection.where(filter=FieldFilter(field, "==", value)).limit(1).stream()
            )
        except google_exceptions.GoogleAPIError as e:
            raise self._failure("fetch", e, plural=True) from e
        return self._to_record(docs[0]) if docs else None

    def insert(self, record: Dict[str, Any]) -> Dict[str, Any]:
        doc_ref = self.collection.document(record["id"])
        try:
            # create() fails instead of overwriting an existing document
            doc_ref.create(record)
        except google_exceptions.Conflict as e:
            logger.warning("Document %s/%s already exists", self.collection_name, record["id"])
            raise ConflictError(f"{self.entity_name} already exists") from e
        except google_exceptions.GoogleAPIError as e:
            raise self._failure("create", e) from e
        logger.debug("Created %s %s", self.entity_name.lower(), record["id"])
        return record

    def apply_update(self, record_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        doc_ref = self.collection.document(record_id)
        try:
            doc_ref.update(changes)
        except google_exceptions.NotFound as e:
            raise self.not_found() from e
        except google_exceptions.GoogleAPIError as e:
            raise self._failure("update", e) from e
        logger.debug("Updated %s %s: %s", self.entity_name.lower(), record_id, sorted(changes))
        return self.get(record_id)

    def delete(self, record_id: str) -> None:
        doc_ref = self.collection.document(record_id)
        try:
            if not doc_ref.get().exists:
                raise self.not_found()
            doc_ref.delete()
        except google_exceptions.GoogleAPIError as e:
            raise self._failure("delete", e) from e
        logger.debug("Deleted %s %s", self.entity_name.lower(), record_id)

    def list(self, query: ListQuery) -> Page:
        try:
            filtered = self._filtered(query.filters)

            if query.search:
                rows = [self._to_record(doc) for doc in filtered.stream()]
                return paginate_records(rows, query)

            total = self._count(filtered)
            direction = firestore.Query.DESCENDING if query.descending else firestore.Query.ASCENDING
            docs = (
                filtered.order_by(query.sort, direction=direction)
                .offset(query.offset)
                .limit(query.limit)
                .stream()
            )
            return Page(rows=[self._to_record(doc) for doc in docs], total=total)
        except google_exceptions.GoogleAPIError as e:
            raise self._failure("fetch", e, plural=True) from e

    def count(self, filters: Optional[List[Filter]] = None) -> int:
        try:
            return self._count(self._filtered(filters or []))
        except google_exceptions.GoogleAPIError as e:
            raise self._failure("count", e, plural=True) from e
