from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from gym_portal.core.auth import AdminPrincipal, Principal, ensure_owner, require_admin, require_principal
from gym_portal.core.query import PageParams, get_page_params
from gym_portal.core.security import validate_transaction_status, validate_uuid
from gym_portal.core.services import TransactionService
from gym_portal.dependencies import get_transaction_service
from gym_portal.schemas import (
    DataResponse,
    ListResponse,
    TransactionCreate,
    TransactionRecord,
    TransactionUpdate,
)

router = APIRouter(prefix="/api/transactions", tags=["Transactions"])


@router.get("", response_model=ListResponse[TransactionRecord])
async def list_transactions(
    _: AdminPrincipal = Depends(require_admin),
    service: TransactionService = Depends(get_transaction_service),
    params: PageParams = Depends(get_page_params),
    member_id: Optional[str] = Query(None),
    plan_id: Optional[str] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    payment_method: Optional[str] = Query(None, max_length=50),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
):
    """List transactions with reference, status and date-range filters (admin only)."""
    rows, pagination = service.list_transactions(
        params,
        member_id=validate_uuid(member_id, "member ID", field="member_id") if member_id else None,
        plan_id=validate_uuid(plan_id, "pricing plan ID", field="plan_id") if plan_id else None,
        status=validate_transaction_status(status_filter) if status_filter else None,
        payment_method=payment_method,
        date_from=date_from,
        date_to=date_to,
    )
    return {"data": rows, "pagination": pagination}


@router.post("", response_model=DataResponse[TransactionRecord], status_code=status.HTTP_201_CREATED)
async def create_transaction(
    payload: TransactionCreate,
    _: AdminPrincipal = Depends(require_admin),
    service: TransactionService = Depends(get_transaction_service),
):
    """Record a payment transaction (admin only)."""
    return {"data": service.create_transaction(payload)}


@router.get("/{transaction_id}", response_model=DataResponse[TransactionRecord])
async def get_transaction(
    transaction_id: str,
    principal: Principal = Depends(require_principal),
    service: TransactionService = Depends(get_transaction_service),
):
    """Fetch a transaction; members may only read their own."""
    transaction = service.get_transaction(validate_uuid(transaction_id, "transaction ID"))
    ensure_owner(principal, transaction.get("member_id"))
    return {"data": transaction}


@router.put("/{transaction_id}", response_model=DataResponse[TransactionRecord])
async def update_transaction(
    transaction_id: str,
    payload: TransactionUpdate,
    _: AdminPrincipal = Depends(require_admin),
    service: TransactionService = Depends(get_transaction_service),
):
    """Apply a partial update to a transaction (admin only)."""
    return {
        "data": service.update_transaction(
            validate_uuid(transaction_id, "transaction ID"), payload
        )
    }
