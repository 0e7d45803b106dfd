"""
FastAPI dependency providers.

Repositories are created per request and injected into the services; tests
replace the ``get_*_repository`` providers through ``app.dependency_overrides``.
"""

from fastapi import Depends

from gym_portal.core.repositories import (
    MEMBERS_COLLECTION,
    PRICING_PLANS_COLLECTION,
    TRANSACTIONS_COLLECTION,
    Repository,
)
from gym_portal.core.repositories.firestore import FirestoreRepository
from gym_portal.core.services import MemberService, PlanService, TransactionService


def get_member_repository() -> Repository:
    return FirestoreRepository(MEMBERS_COLLECTION, "Member")


def get_plan_repository() -> Repository:
    return FirestoreRepository(PRICING_PLANS_COLLECTION, "Pricing plan")


def get_transaction_repository() -> Repository:
    return FirestoreRepository(TRANSACTIONS_COLLECTION, "Transaction")


def get_member_service(
    members: Repository = Depends(get_member_repository),
    plans: Repository = Depends(get_plan_repository),
) -> MemberService:
    return MemberService(members, plans)


def get_plan_service(
    plans: Repository = Depends(get_plan_repository),
    members: Repository = Depends(get_member_repository),
) -> PlanService:
    return PlanService(plans, members)


def get_transaction_service(
    transactions: Repository = Depends(get_transaction_repository),
    members: Repository = Depends(get_member_repository),
    plans: Repository = Depends(get_plan_repository),
) -> TransactionService:
    return TransactionService(transactions, members, plans)
