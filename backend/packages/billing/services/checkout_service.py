"""
Checkout flow: price, submit, and keep the actor's entitlements fresh.
"""

from typing import Optional

from common.core.otel_axiom_exporter import trace_span, get_logger
from packages.billing.exceptions import InvalidRequest
from packages.billing.models.domain.pricing import PriceBreakdown, PricingRequest
from packages.billing.models.domain.renewal import (
    RenewalPriceQuote,
    RenewalReceipt,
    RenewalRequest,
)
from packages.billing.models.domain.subscription import Subscription
from packages.billing.providers.backend.interface import SubscriptionBackendInterface
from packages.billing.services.plan_catalog import PlanCatalog
from packages.billing.services.pricing_calculator import PricingCalculator
from packages.billing.services.renewal_calculator import RenewalCalculator
from packages.entitlements.cache import EntitlementCache

logger = get_logger(__name__)


class CheckoutService:
    """
    Orchestrates subscription and renewal submissions for one actor.

    Prices are always recomputed locally before anything is submitted, and
    the actor's entitlement cache is invalidated after every successful
    submission.
    """

    def __init__(
        self,
        backend: SubscriptionBackendInterface,
        cache: Optional[EntitlementCache] = None,
        catalog: Optional[PlanCatalog] = None,
        calculator: Optional[PricingCalculator] = None,
        renewal_calculator: Optional[RenewalCalculator] = None,
    ):
        self.backend = backend
        self.cache = cache
        self.catalog = catalog or PlanCatalog(backend)
        self.calculator = calculator or PricingCalculator()
        self.renewal_calculator = renewal_calculator or RenewalCalculator()

    @trace_span
    async def preview(self, request: PricingRequest) -> PriceBreakdown:
        """Live price for the configuration being edited."""
        plan = await self.catalog.get_plan(request.plan_id)
        return self.calculator.calculate(plan, request)

    @trace_span
    async def submit(
        self,
        actor_id: str,
        request: PricingRequest,
        payment_evidence_ref: Optional[str] = None,
    ) -> Subscription:
        """
        Submit a subscription request for administrator approval.

        Raises:
            InvalidRequest / PlanUnavailable: the configuration does not price
            SubmissionFailed: the backend refused the submission
        """
        breakdown = await self.preview(request)

        subscription = await self.backend.submit_subscription(
            actor_id, request, payment_evidence_ref
        )
        logger.info(
            f"Subscription {subscription.id} submitted for actor {actor_id}",
            extra={
                "actor_id": actor_id,
                "plan_id": request.plan_id,
                "final_price": str(breakdown.final_price),
            },
        )

        await self._invalidate()
        return subscription

    @trace_span
    async def quote_renewal(
        self, subscription: Subscription, additional_searches: int
    ) -> RenewalPriceQuote:
        """
        Price extra searches.

        Computed locally when the subscription's plan has already been loaded,
        otherwise asked of the backend.
        """
        plan = self.catalog.peek(subscription.plan_id)
        if plan is not None:
            return self.renewal_calculator.quote(subscription, plan, additional_searches)

        if additional_searches < 1:
            raise InvalidRequest("At least one additional search is required")
        return await self.backend.quote_renewal_price(
            subscription.id, additional_searches
        )

    @trace_span
    async def submit_renewal(
        self, actor_id: str, subscription: Subscription, request: RenewalRequest
    ) -> RenewalReceipt:
        if request.subscription_id != subscription.id:
            raise InvalidRequest(
                f"Renewal targets subscription {request.subscription_id}, not {subscription.id}"
            )

        quote = await self.quote_renewal(subscription, request.additional_searches)
        receipt = await self.backend.submit_renewal(actor_id, request)
        logger.info(
            f"Renewal {receipt.id} submitted for subscription {subscription.id}",
            extra={
                "actor_id": actor_id,
                "subscription_id": subscription.id,
                "total_price": str(quote.total_price),
            },
        )

        await self._invalidate()
        return receipt

    async def _invalidate(self) -> None:
        if self.cache is not None:
            await self.cache.invalidate()
