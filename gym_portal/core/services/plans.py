"""
Pricing Plan Service

Plans are publicly readable. Names are unique, and a plan referenced by any
member cannot be deleted.
"""

from typing import Any, Dict, List, Optional, Tuple

from gym_portal.config import logger
from gym_portal.core.query import PageParams, build_list_query, build_pagination
from gym_portal.core.repositories import ConflictError, Repository
from gym_portal.core.security import ValidationError
from gym_portal.schemas import PricingPlanCreate, PricingPlanUpdate

PLAN_SORTABLE = ("price", "name", "duration_days", "created_at", "updated_at")
PLAN_SEARCH_FIELDS = ("name", "description")

PLAN_IN_USE_MESSAGE = "Cannot delete pricing plan that is currently in use by members"


class PlanService:
    """Service layer for pricing plan operations."""

    def __init__(self, plans: Repository, members: Repository):
        self._plans = plans
        self._members = members

    def list_plans(
        self,
        params: PageParams,
        active_only: bool = False,
    ) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
        query = build_list_query(
            params,
            sortable=PLAN_SORTABLE,
            default_sort="price",
            default_order="asc",
            search_fields=PLAN_SEARCH_FIELDS,
        )
        if active_only:
            query.where("is_active", "==", True)

        page = self._plans.list(query)
        return page.rows, build_pagination(query.page, query.limit, page.total)

    def get_plan(self, plan_id: str) -> Dict[str, Any]:
        return self._plans.get(plan_id)

    def create_plan(self, payload: PricingPlanCreate) -> Dict[str, Any]:
        record = payload.to_record()
        self._ensure_unique_name(record["name"])

        plan = self._plans.create(record)
        logger.info("Created pricing plan %s (%s)", plan["id"], plan["name"])
        return plan

    def update_plan(self, plan_id: str, payload: PricingPlanUpdate) -> Dict[str, Any]:
        changes = payload.to_changes()
        if not changes:
            raise ValidationError("No fields to update")

        self._plans.get(plan_id)
        if "name" in changes:
            self._ensure_unique_name(changes["name"], exclude_id=plan_id)

        plan = self._plans.update(plan_id, changes)
        logger.info("Updated pricing plan %s: %s", plan_id, sorted(changes))
        return plan

    def delete_plan(self, plan_id: str) -> None:
        """
        Delete a plan that no member references.

        Raises:
            NotFoundError: If the plan does not exist
            ConflictError: If any member is subscribed to it
        """
        self._plans.get(plan_id)

        if self._members.find_one("subscription_plan_id", plan_id) is not None:
            logger.info("Refusing to delete pricing plan %s: in use", plan_id)
            raise ConflictError(PLAN_IN_USE_MESSAGE)

        self._plans.delete(plan_id)
        logger.info("Deleted pricing plan %s", plan_id)

    def _ensure_unique_name(self, name: str, exclude_id: Optional[str] = None) -> None:
        existing = self._plans.find_one("name", name)
        if existing and existing["id"] != exclude_id:
            raise ConflictError("Pricing plan with this name already exists")

    def ensure_default_plans_exist(self) -> List[Dict[str, Any]]:
        """
        Create any default plan whose name is not taken yet.

        Returns:
            The plans created by this call
        """
        created = []
        for plan in default_plans():
            if self._plans.find_one("name", plan.name) is not None:
                logger.debug("Default plan %s already exists", plan.name)
                continue
            try:
                created.append(self.create_plan(plan))
                logger.info("Created default plan: %s", plan.name)
            except ConflictError as e:
                # Created concurrently
                logger.debug("Default plan %s already exists: %s", plan.name, e)
        return created


def default_plans() -> List[PricingPlanCreate]:
    """Plans a fresh gym starts with."""
    return [
        PricingPlanCreate(
            name="Monthly",
            description="Full gym access, billed monthly",
            price=49.0,
            duration_days=30,
            features=["gym_floor", "locker_room"],
        ),
        PricingPlanCreate(
            name="Quarterly",
            description="Three months of full gym access",
            price=129.0,
            duration_days=90,
            features=["gym_floor", "locker_room", "group_classes"],
        ),
        PricingPlanCreate(
            name="Annual",
            description="Twelve months of access with personal training sessions",
            price=449.0,
            duration_days=365,
            features=["gym_floor", "locker_room", "group_classes", "personal_training"],
        ),
    ]
