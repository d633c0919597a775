"""
Plans API routes.

Public endpoints for the pricing page.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query

from common.core.exceptions import AppException
from packages.billing.dependencies import get_backend
from packages.billing.models.domain.enums import PlanType
from packages.billing.models.schemas.billing import PlanResponse, PlansResponse
from packages.billing.providers.backend import SubscriptionBackendInterface
from packages.billing.routes.errors import to_http_exception
from packages.billing.services.plan_catalog import PlanCatalog

router = APIRouter()


@router.get("", response_model=PlansResponse)
async def list_plans(
    plan_type: Optional[PlanType] = Query(default=None, alias="type"),
    backend: SubscriptionBackendInterface = Depends(get_backend),
):
    """
    List active plans.

    With ``type``, only plans offered to that audience (plans of type BOTH
    are offered to everyone).
    """
    try:
        plans = await PlanCatalog(backend).list_plans(plan_type)
    except AppException as e:
        raise to_http_exception(e)
    return PlansResponse(plans=[PlanResponse.from_domain(plan) for plan in plans])


@router.get("/{plan_id}", response_model=PlanResponse)
async def get_plan(
    plan_id: str,
    backend: SubscriptionBackendInterface = Depends(get_backend),
):
    try:
        plan = await PlanCatalog(backend).get_plan(plan_id)
    except AppException as e:
        raise to_http_exception(e)
    return PlanResponse.from_domain(plan)
