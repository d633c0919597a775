"""
Entitlement API routes.

Feature checks for the signed-in actor. Every answer fails closed.
"""

from fastapi import APIRouter, Depends

from packages.billing.dependencies import get_entitlement_gate
from packages.billing.models.schemas.billing import EntitlementResponse
from packages.entitlements.gate import EntitlementGate

router = APIRouter()


@router.get("", response_model=list[str])
async def list_entitlements(gate: EntitlementGate = Depends(get_entitlement_gate)):
    """Feature keys granted by the actor's active subscription."""
    return await gate.features()


@router.get("/{feature_key}", response_model=EntitlementResponse)
async def check_entitlement(
    feature_key: str, gate: EntitlementGate = Depends(get_entitlement_gate)
):
    check = await gate.check(feature_key)
    return EntitlementResponse(**check.model_dump())
