"""
Shared fixtures: an in-memory repository standing in for Firestore, an app
with its repositories overridden, and canned member tokens.
"""

import copy
import os
import tempfile

# Configuration is read at import time
os.environ.setdefault("ADMIN_API_KEY", "test-admin-key")
os.environ.setdefault("ALLOWED_HOSTS", "*")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_FILE_PATH", os.path.join(tempfile.mkdtemp(), "gym_portal.log"))

from typing import Any, Dict, Iterable, List, Optional

import pytest
from fastapi.testclient import TestClient
from firebase_admin import auth as firebase_auth

from gym_portal.core.query import Filter, ListQuery, Page, paginate_records
from gym_portal.core.repositories import (
    MEMBERS_COLLECTION,
    PRICING_PLANS_COLLECTION,
    TRANSACTIONS_COLLECTION,
    ConflictError,
    Repository,
)
from gym_portal.dependencies import (
    get_member_repository,
    get_plan_repository,
    get_transaction_repository,
)
from gym_portal.main import create_app

ADMIN_KEY = "test-admin-key"
MEMBER_TOKEN = "member-token"
OTHER_MEMBER_TOKEN = "other-member-token"
EXPIRED_TOKEN = "expired-token"


class InMemoryRepository(Repository):
    """Dictionary-backed ``Repository`` with the same semantics as Firestore."""

    def __init__(self, collection_name: str, entity_name: str):
        super().__init__(collection_name, entity_name)
        self.records: Dict[str, Dict[str, Any]] = {}

    def get(self, record_id: str) -> Dict[str, Any]:
        if record_id not in self.records:
            raise self.not_found()
        return copy.deepcopy(self.records[record_id])

    def get_many(self, record_ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        return {
            record_id: copy.deepcopy(self.records[record_id])
            for record_id in set(record_ids)
            if record_id in self.records
        }

    def find_one(self, field: str, value: Any) -> Optional[Dict[str, Any]]:
        for record in self.records.values():
            if record.get(field) == value:
                return copy.deepcopy(record)
        return None

    def insert(self, record: Dict[str, Any]) -> Dict[str, Any]:
        if record["id"] in self.records:
            raise ConflictError(f"{self.entity_name} already exists")
        self.records[record["id"]] = copy.deepcopy(record)
        return copy.deepcopy(record)

    def apply_update(self, record_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        if record_id not in self.records:
            raise self.not_found()
        self.records[record_id].update(copy.deepcopy(changes))
        return self.get(record_id)

    def delete(self, record_id: str) -> None:
        if record_id not in self.records:
            raise self.not_found()
        del self.records[record_id]

    def list(self, query: ListQuery) -> Page:
        return paginate_records(copy.deepcopy(list(self.records.values())), query)

    def count(self, filters: Optional[List[Filter]] = None) -> int:
        filters = filters or []
        return sum(1 for r in self.records.values() if all(f.matches(r) for f in filters))


# -----------------------------------------------------------------------------
# Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def members_repo():
    return InMemoryRepository(MEMBERS_COLLECTION, "Member")


@pytest.fixture
def plans_repo():
    return InMemoryRepository(PRICING_PLANS_COLLECTION, "Pricing plan")


@pytest.fixture
def transactions_repo():
    return InMemoryRepository(TRANSACTIONS_COLLECTION, "Transaction")


@pytest.fixture
def member(members_repo):
    """A stored member the default bearer token resolves to."""
    return members_repo.create({
        "first_name": "Ada",
        "last_name": "Lovelace",
        "email": "ada@example.com",
        "phone": "+1 555-123-4567",
        "photo_url": None,
        "address": None,
        "health_issues": None,
        "subscription_plan_id": None,
        "subscription_start_date": None,
        "subscription_expiry_date": None,
        "last_fee_paid_date": None,
    })


@pytest.fixture
def other_member(members_repo):
    return members_repo.create({
        "first_name": "Grace",
        "last_name": "Hopper",
        "email": "grace@example.com",
        "phone": "+1 555-987-6543",
        "subscription_plan_id": None,
        "subscription_expiry_date": None,
    })


@pytest.fixture
def plan(plans_repo):
    return plans_repo.create({
        "name": "Gold",
        "description": "All areas",
        "price": 59.0,
        "duration_days": 30,
        "features": ["gym_floor", "sauna"],
        "is_active": True,
    })


@pytest.fixture
def fake_tokens(monkeypatch, member, other_member):
    """Replace provider token verification with a lookup table."""
    claims = {
        MEMBER_TOKEN: {"uid": "firebase-uid-1", "member_id": member["id"], "email": member["email"]},
        OTHER_MEMBER_TOKEN: {"uid": other_member["id"], "email": other_member["email"]},
    }

    def verify(token):
        if token == EXPIRED_TOKEN:
            raise firebase_auth.InvalidIdTokenError("Token expired")
        if token not in claims:
            raise ValueError("Malformed token")
        return claims[token]

    monkeypatch.setattr("gym_portal.core.auth.verify_id_token", verify)
    return claims


@pytest.fixture
def app(members_repo, plans_repo, transactions_repo):
    application = create_app()
    application.dependency_overrides[get_member_repository] = lambda: members_repo
    application.dependency_overrides[get_plan_repository] = lambda: plans_repo
    application.dependency_overrides[get_transaction_repository] = lambda: transactions_repo
    return application


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def admin_headers():
    return {"X-API-Key": ADMIN_KEY}


@pytest.fixture
def member_headers(fake_tokens):
    return {"Authorization": f"Bearer {MEMBER_TOKEN}"}


@pytest.fixture
def other_member_headers(fake_tokens):
    return {"Authorization": f"Bearer {OTHER_MEMBER_TOKEN}"}
