"""
Member Service

Business rules around member records: uniqueness of email and phone,
existence of the referenced pricing plan, and subscription statistics.
"""

from typing import Any, Dict, List, Optional, Tuple

from gym_portal.config import logger
from gym_portal.core.query import (
    Filter,
    PageParams,
    build_list_query,
    build_pagination,
    today_iso,
)
from gym_portal.core.repositories import ConflictError, NotFoundError, Repository
from gym_portal.core.security import ValidationError
from gym_portal.schemas import MemberCreate, MemberUpdate

MEMBER_SORTABLE = (
    "created_at",
    "updated_at",
    "first_name",
    "last_name",
    "email",
    "subscription_expiry_date",
    "subscription_start_date",
    "last_fee_paid_date",
)
MEMBER_SEARCH_FIELDS = ("first_name", "last_name", "email", "phone")


class MemberService:
    """Service layer for member operations."""

    def __init__(self, members: Repository, plans: Repository):
        self._members = members
        self._plans = plans

    def list_members(
        self,
        params: PageParams,
        subscription_plan_id: Optional[str] = None,
        active_only: bool = False,
    ) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
        """
        List members with search, plan filter and active-subscription filter.

        Returns:
            Tuple of (rows, pagination summary)
        """
        query = build_list_query(
            params,
            sortable=MEMBER_SORTABLE,
            default_sort="created_at",
            default_order="desc",
            search_fields=MEMBER_SEARCH_FIELDS,
        )
        if subscription_plan_id:
            query.where("subscription_plan_id", "==", subscription_plan_id)
        if active_only:
            query.where("subscription_expiry_date", ">=", today_iso())

        page = self._members.list(query)
        return page.rows, build_pagination(query.page, query.limit, page.total)

    def get_member(self, member_id: str) -> Dict[str, Any]:
        return self._members.get(member_id)

    def create_member(self, payload: MemberCreate) -> Dict[str, Any]:
        record = payload.to_record()
        self._ensure_plan_exists(record.get("subscription_plan_id"))
        self._ensure_unique(record["email"], record["phone"])

        member = self._members.create(record)
        logger.info("Created member %s", member["id"])
        return member

    def update_member(self, member_id: str, payload: MemberUpdate) -> Dict[str, Any]:
        changes = payload.to_changes()
        if not changes:
            raise ValidationError("No fields to update")

        # 404 before any other check
        self._members.get(member_id)

        if "subscription_plan_id" in changes:
            self._ensure_plan_exists(changes["subscription_plan_id"])
        self._ensure_unique(changes.get("email"), changes.get("phone"), exclude_id=member_id)

        member = self._members.update(member_id, changes)
        logger.info("Updated member %s: %s", member_id, sorted(changes))
        return member

    def delete_member(self, member_id: str) -> None:
        self._members.delete(member_id)
        logger.info("Deleted member %s", member_id)

    def get_stats(self) -> Dict[str, int]:
        """Counts of all members, active, expired and unsubscribed members."""
        today = today_iso()
        return {
            "totalMembers": self._members.count(),
            "activeSubscriptions": self._members.count(
                [Filter("subscription_expiry_date", ">=", today)]
            ),
            "expiredSubscriptions": self._members.count(
                [Filter("subscription_expiry_date", "<", today)]
            ),
            "noSubscription": self._members.count(
                [Filter("subscription_plan_id", "==", None)]
            ),
        }

    # -------------------------------------------------------------------------
    # Pre-checks
    # -------------------------------------------------------------------------

    def _ensure_plan_exists(self, plan_id: Optional[str]) -> None:
        if plan_id and not self._plans.exists(plan_id):
            raise NotFoundError("Pricing plan not found")

    def _ensure_unique(
        self,
        email: Optional[str],
        phone: Optional[str],
        exclude_id: Optional[str] = None,
    ) -> None:
        for field, value in (("email", email), ("phone", phone)):
            if not value:
                continue
            existing = self._members.find_one(field, value)
            if existing and existing["id"] != exclude_id:
                if exclude_id:
                    raise ConflictError("Email or phone already exists for another member")
                raise ConflictError("Member with this email or phone already exists")
