"""FastAPI dependencies for billing and entitlement routes."""

from typing import Annotated, Optional
from fastapi import Depends, HTTPException, Header, status

from packages.billing.providers.backend import (
    SubscriptionBackendInterface,
    get_subscription_backend,
)
from packages.billing.services.checkout_service import CheckoutService
from packages.entitlements.cache import EntitlementCache
from packages.entitlements.gate import EntitlementGate


def get_backend() -> SubscriptionBackendInterface:
    """Get the configured subscription backend."""
    return get_subscription_backend()


async def get_actor_id(
    x_actor_id: Annotated[Optional[str], Header()] = None,
) -> str:
    """Id of the already-authenticated actor, forwarded by the gateway."""
    if not x_actor_id or not x_actor_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-Actor-Id header missing",
        )
    return x_actor_id.strip()


def get_checkout_service(
    backend: SubscriptionBackendInterface = Depends(get_backend),
) -> CheckoutService:
    return CheckoutService(backend)


def get_entitlement_gate(
    actor_id: str = Depends(get_actor_id),
    backend: SubscriptionBackendInterface = Depends(get_backend),
) -> EntitlementGate:
    return EntitlementGate(EntitlementCache(actor_id, backend))
