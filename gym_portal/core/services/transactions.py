"""
Transaction Service

Payment transactions reference a member and, optionally, a pricing plan.
Reads embed a short summary of both.
"""

from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from gym_portal.config import logger
from gym_portal.core.query import PageParams, build_list_query, build_pagination
from gym_portal.core.repositories import NotFoundError, Repository
from gym_portal.core.security import ValidationError
from gym_portal.schemas import TransactionCreate, TransactionUpdate

TRANSACTION_SORTABLE = ("created_at", "updated_at", "transaction_date", "amount", "status")
TRANSACTION_SEARCH_FIELDS = ("payment_method", "status", "notes")

MEMBER_SUMMARY_FIELDS = ("id", "first_name", "last_name", "email", "phone")
PLAN_SUMMARY_FIELDS = ("id", "name", "price", "duration_days")


def _summary(record: Optional[Dict[str, Any]], fields: Tuple[str, ...]) -> Optional[Dict[str, Any]]:
    if record is None:
        return None
    return {name: record.get(name) for name in fields}


class TransactionService:
    """Service layer for transaction operations."""

    def __init__(self, transactions: Repository, members: Repository, plans: Repository):
        self._transactions = transactions
        self._members = members
        self._plans = plans

    def list_transactions(
        self,
        params: PageParams,
        member_id: Optional[str] = None,
        plan_id: Optional[str] = None,
        status: Optional[str] = None,
        payment_method: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
        query = build_list_query(
            params,
            sortable=TRANSACTION_SORTABLE,
            default_sort="created_at",
            default_order="desc",
            search_fields=TRANSACTION_SEARCH_FIELDS,
        )
        if member_id:
            query.where("member_id", "==", member_id)
        if plan_id:
            query.where("plan_id", "==", plan_id)
        if status:
            query.where("status", "==", status)
        if payment_method:
            query.where("payment_method", "==", payment_method.lower())
        if date_from and date_to and date_from > date_to:
            raise ValidationError("date_from must not be after date_to", field="date_from")
        if date_from:
            query.where("transaction_date", ">=", date_from.isoformat())
        if date_to:
            query.where("transaction_date", "<=", date_to.isoformat())

        page = self._transactions.list(query)
        rows = self._embed(page.rows)
        return rows, build_pagination(query.page, query.limit, page.total)

    def get_transaction(self, transaction_id: str) -> Dict[str, Any]:
        """Fetch one transaction with its member and plan summaries."""
        return self._embed([self._transactions.get(transaction_id)])[0]

    def create_transaction(self, payload: TransactionCreate) -> Dict[str, Any]:
        record = payload.to_record()
        self._ensure_references(record.get("member_id"), record.get("plan_id"))

        transaction = self._transactions.create(record)
        logger.info(
            "Recorded transaction %s for member %s: amount=%s status=%s",
            transaction["id"], transaction["member_id"],
            transaction["amount"], transaction["status"],
        )
        return self._embed([transaction])[0]

    def update_transaction(self, transaction_id: str, payload: TransactionUpdate) -> Dict[str, Any]:
        changes = payload.to_changes()
        if not changes:
            raise ValidationError("No fields to update")

        self._transactions.get(transaction_id)
        self._ensure_references(changes.get("member_id"), changes.get("plan_id"))

        transaction = self._transactions.update(transaction_id, changes)
        logger.info("Updated transaction %s: %s", transaction_id, sorted(changes))
        return self._embed([transaction])[0]

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _ensure_references(self, member_id: Optional[str], plan_id: Optional[str]) -> None:
        if member_id and not self._members.exists(member_id):
            raise NotFoundError("Member not found")
        if plan_id and not self._plans.exists(plan_id):
            raise NotFoundError("Pricing plan not found")

    def _embed(self, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Attach ``member`` and ``plan`` summaries, fetched in one batch each."""
        if not rows:
            return rows
        members = self._members.get_many(r.get("member_id") for r in rows)
        plans = self._plans.get_many(r.get("plan_id") for r in rows)
        return [
            {
                **row,
                "member": _summary(members.get(row.get("member_id")), MEMBER_SUMMARY_FIELDS),
                "plan": _summary(plans.get(row.get("plan_id")), PLAN_SUMMARY_FIELDS),
            }
            for row in rows
        ]
