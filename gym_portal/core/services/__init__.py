"""
Service layer: pre-checks and orchestration per entity.
"""

from gym_portal.core.services.members import MemberService
from gym_portal.core.services.plans import PLAN_IN_USE_MESSAGE, PlanService
from gym_portal.core.services.transactions import TransactionService

__all__ = [
    "MemberService",
    "PlanService",
    "PLAN_IN_USE_MESSAGE",
    "TransactionService",
]
