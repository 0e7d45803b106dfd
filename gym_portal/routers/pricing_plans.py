from fastapi import APIRouter, Depends, Query, Response, status

from gym_portal.core.auth import AdminPrincipal, require_admin
from gym_portal.core.query import PageParams, get_page_params
from gym_portal.core.security import validate_uuid
from gym_portal.core.services import PlanService
from gym_portal.dependencies import get_plan_service
from gym_portal.schemas import (
    DataResponse,
    ListResponse,
    PricingPlanCreate,
    PricingPlanRecord,
    PricingPlanUpdate,
)

router = APIRouter(prefix="/api/pricing_plans", tags=["Pricing Plans"])


# -----------------------------------------------------------------------------
# Public
# -----------------------------------------------------------------------------

@router.get("", response_model=ListResponse[PricingPlanRecord])
async def list_pricing_plans(
    service: PlanService = Depends(get_plan_service),
    params: PageParams = Depends(get_page_params),
    active_only: bool = Query(False),
):
    """List pricing plans, cheapest first by default."""
    rows, pagination = service.list_plans(params, active_only=active_only)
    return {"data": rows, "pagination": pagination}


@router.get("/{plan_id}", response_model=DataResponse[PricingPlanRecord])
async def get_pricing_plan(
    plan_id: str,
    service: PlanService = Depends(get_plan_service),
):
    return {"data": service.get_plan(validate_uuid(plan_id, "pricing plan ID"))}


# -----------------------------------------------------------------------------
# Admin
# -----------------------------------------------------------------------------

@router.post("", response_model=DataResponse[PricingPlanRecord], status_code=status.HTTP_201_CREATED)
async def create_pricing_plan(
    payload: PricingPlanCreate,
    _: AdminPrincipal = Depends(require_admin),
    service: PlanService = Depends(get_plan_service),
):
    """Create a pricing plan (admin only)."""
    return {"data": service.create_plan(payload)}


@router.put("/{plan_id}", response_model=DataResponse[PricingPlanRecord])
async def update_pricing_plan(
    plan_id: str,
    payload: PricingPlanUpdate,
    _: AdminPrincipal = Depends(require_admin),
    service: PlanService = Depends(get_plan_service),
):
    """Apply a partial update to a pricing plan (admin only)."""
    return {"data": service.update_plan(validate_uuid(plan_id, "pricing plan ID"), payload)}


@router.delete("/{plan_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_pricing_plan(
    plan_id: str,
    _: AdminPrincipal = Depends(require_admin),
    service: PlanService = Depends(get_plan_service),
) -> Response:
    """Delete a pricing plan no member is subscribed to (admin only)."""
    service.delete_plan(validate_uuid(plan_id, "pricing plan ID"))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
