"""
Subscription API routes.

Price previews for new subscriptions and search renewals.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from common.core.exceptions import AppException
from packages.billing.dependencies import (
    get_actor_id,
    get_backend,
    get_checkout_service,
)
from packages.billing.models.schemas.billing import (
    CalculatePriceRequest,
    PriceBreakdownResponse,
    RenewalQuoteRequest,
    RenewalQuoteResponse,
)
from packages.billing.providers.backend import SubscriptionBackendInterface
from packages.billing.routes.errors import to_http_exception
from packages.billing.services.checkout_service import CheckoutService

router = APIRouter()


@router.post("/calculate-price", response_model=PriceBreakdownResponse)
async def calculate_price(
    request: CalculatePriceRequest,
    checkout: CheckoutService = Depends(get_checkout_service),
):
    """Itemized price for a plan configuration. Nothing is submitted."""
    try:
        breakdown = await checkout.preview(request.to_domain())
    except AppException as e:
        raise to_http_exception(e)
    return PriceBreakdownResponse.from_domain(breakdown)


@router.post("/renewals/quote", response_model=RenewalQuoteResponse)
async def quote_renewal(
    request: RenewalQuoteRequest,
    actor_id: str = Depends(get_actor_id),
    backend: SubscriptionBackendInterface = Depends(get_backend),
    checkout: CheckoutService = Depends(get_checkout_service),
):
    """Price of additional searches on the actor's current subscription."""
    try:
        subscription = await backend.fetch_subscription(actor_id)
        if subscription is None or subscription.id != request.subscription_id:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="No such subscription for this actor",
            )

        # Load the plan so the quote is computed locally
        await checkout.catalog.get_plan(subscription.plan_id, require_active=False)
        quote = await checkout.quote_renewal(
            subscription, request.additional_searches
        )
    except AppException as e:
        raise to_http_exception(e)
    return RenewalQuoteResponse.from_domain(quote)
