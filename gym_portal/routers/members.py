from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from gym_portal.core.auth import AdminPrincipal, MemberPrincipal, require_admin, require_member
from gym_portal.core.query import PageParams, get_page_params
from gym_portal.core.security import validate_uuid
from gym_portal.core.services import MemberService
from gym_portal.dependencies import get_member_service
from gym_portal.schemas import (
    DataResponse,
    ListResponse,
    MemberCreate,
    MemberRecord,
    MemberStats,
    MemberUpdate,
)

router = APIRouter(prefix="/api/members", tags=["Members"])


# Fixed paths are declared before /{member_id} so they are not captured by it

@router.get("/me", response_model=DataResponse[MemberRecord])
async def get_my_profile(
    principal: MemberPrincipal = Depends(require_member),
    service: MemberService = Depends(get_member_service),
):
    """Profile of the member identified by the bearer token."""
    return {"data": service.get_member(principal.member_id)}


@router.get("/stats", response_model=DataResponse[MemberStats])
async def get_member_stats(
    _: AdminPrincipal = Depends(require_admin),
    service: MemberService = Depends(get_member_service),
):
    """Subscription counts across all members (admin only)."""
    return {"data": service.get_stats()}


@router.get("", response_model=ListResponse[MemberRecord])
async def list_members(
    _: AdminPrincipal = Depends(require_admin),
    service: MemberService = Depends(get_member_service),
    params: PageParams = Depends(get_page_params),
    subscription_plan_id: Optional[str] = Query(None),
    active_only: bool = Query(False),
):
    """List members with search, plan filter and pagination (admin only)."""
    if subscription_plan_id:
        subscription_plan_id = validate_uuid(
            subscription_plan_id, "pricing plan ID", field="subscription_plan_id"
        )
    rows, pagination = service.list_members(
        params,
        subscription_plan_id=subscription_plan_id,
        active_only=active_only,
    )
    return {"data": rows, "pagination": pagination}


@router.post("", response_model=DataResponse[MemberRecord], status_code=status.HTTP_201_CREATED)
async def create_member(
    payload: MemberCreate,
    _: AdminPrincipal = Depends(require_admin),
    service: MemberService = Depends(get_member_service),
):
    """Create a member (admin only)."""
    return {"data": service.create_member(payload)}


@router.get("/{member_id}", response_model=DataResponse[MemberRecord])
async def get_member(
    member_id: str,
    _: AdminPrincipal = Depends(require_admin),
    service: MemberService = Depends(get_member_service),
):
    return {"data": service.get_member(validate_uuid(member_id, "member ID"))}


@router.put("/{member_id}", response_model=DataResponse[MemberRecord])
async def update_member(
    member_id: str,
    payload: MemberUpdate,
    _: AdminPrincipal = Depends(require_admin),
    service: MemberService = Depends(get_member_service),
):
    """Apply a partial update to a member (admin only)."""
    return {"data": service.update_member(validate_uuid(member_id, "member ID"), payload)}


@router.delete("/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_member(
    member_id: str,
    _: AdminPrincipal = Depends(require_admin),
    service: MemberService = Depends(get_member_service),
) -> Response:
    service.delete_member(validate_uuid(member_id, "member ID"))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
