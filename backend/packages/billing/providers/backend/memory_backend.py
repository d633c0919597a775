"""
In-process subscription backend.

Implements the backend contract plus the administrator side (approve, reject,
expire) and order-placement search consumption, using the same calculators
and lifecycle as the client. Used for local runs and tests.
"""

from datetime import datetime
from typing import Optional

from common.core.otel_axiom_exporter import trace_span, get_logger
from packages.billing.exceptions import (
    FetchFailure,
    NO_SEARCHES_ERROR_CODE,
    NO_SEARCHES_OR_POINTS_AVAILABLE,
    PlanUnavailable,
    SubmissionFailed,
)
from packages.billing.models.domain.enums import PlanType
from packages.billing.models.domain.plans import Plan
from packages.billing.models.domain.pricing import PricingRequest
from packages.billing.models.domain.renewal import (
    RenewalPriceQuote,
    RenewalReceipt,
    RenewalRequest,
)
from packages.billing.models.domain.subscription import Subscription
from packages.billing.providers.backend.interface import SubscriptionBackendInterface
from packages.billing.services.pricing_calculator import PricingCalculator
from packages.billing.services.renewal_calculator import RenewalCalculator
from packages.billing.services.subscription_lifecycle import SubscriptionLifecycle

logger = get_logger(__name__)


class InMemorySubscriptionBackend(SubscriptionBackendInterface):
    """Dictionary-backed store of plans, subscriptions and renewals."""

    def __init__(
        self,
        plans: Optional[list[Plan]] = None,
        lifecycle: Optional[SubscriptionLifecycle] = None,
    ):
        self.lifecycle = lifecycle or SubscriptionLifecycle()
        self.calculator = PricingCalculator()
        self.renewal_calculator = RenewalCalculator(self.lifecycle)

        self._plans: dict[str, Plan] = {plan.id: plan for plan in plans or []}
        self._subscriptions: dict[str, Subscription] = {}
        self._current_by_actor: dict[str, str] = {}
        self._renewals: dict[str, RenewalReceipt] = {}

    # ------------------------------------------------------------------
    # Plans (administrator side)
    # ------------------------------------------------------------------

    def put_plan(self, plan: Plan) -> None:
        """Create or replace a plan definition."""
        self._plans[plan.id] = plan

    # ------------------------------------------------------------------
    # Backend contract
    # ------------------------------------------------------------------

    @trace_span
    async def fetch_subscription(self, actor_id: str) -> Optional[Subscription]:
        subscription_id = self._current_by_actor.get(actor_id)
        if subscription_id is None:
            return None
        return self._subscriptions[subscription_id]

    @trace_span
    async def fetch_plan(self, plan_id: str) -> Optional[Plan]:
        return self._plans.get(plan_id)

    @trace_span
    async def list_plans(self, plan_type: Optional[PlanType] = None) -> list[Plan]:
        return [
            plan
            for plan in self._plans.values()
            if plan_type is None or plan.plan_type.serves(plan_type)
        ]

    @trace_span
    async def submit_subscription(
        self,
        actor_id: str,
        request: PricingRequest,
        payment_evidence_ref: Optional[str] = None,
    ) -> Subscription:
        """Price and store a PENDING subscription. Pricing errors propagate as-is."""
        plan = self._plans.get(request.plan_id)
        if plan is None:
            raise PlanUnavailable(request.plan_id, "plan not found")

        breakdown = self.calculator.calculate(plan, request)
        subscription = self.lifecycle.submit(
            actor_id, plan, breakdown, payment_evidence_ref=payment_evidence_ref
        )

        self._subscriptions[subscription.id] = subscription
        self._current_by_actor[actor_id] = subscription.id
        return subscription

    @trace_span
    async def submit_renewal(
        self, actor_id: str, request: RenewalRequest
    ) -> RenewalReceipt:
        subscription = self._subscriptions.get(request.subscription_id)
        if subscription is None or subscription.actor_id != actor_id:
            raise SubmissionFailed(
                f"Subscription {request.subscription_id} not found for actor {actor_id}"
            )

        quote = self._quote(subscription, request.additional_searches)
        receipt = self.lifecycle.open_renewal(subscription, request, quote)
        self._renewals[receipt.id] = receipt
        return receipt

    @trace_span
    async def quote_renewal_price(
        self, subscription_id: str, additional_searches: int
    ) -> RenewalPriceQuote:
        subscription = self._subscriptions.get(subscription_id)
        if subscription is None:
            raise FetchFailure(
                f"Subscription {subscription_id} not found", status_code=404
            )
        return self._quote(subscription, additional_searches)

    def _quote(
        self, subscription: Subscription, additional_searches: int
    ) -> RenewalPriceQuote:
        plan = self._plans.get(subscription.plan_id)
        if plan is None:
            raise PlanUnavailable(subscription.plan_id, "plan not found")
        return self.renewal_calculator.quote(subscription, plan, additional_searches)

    # ------------------------------------------------------------------
    # Administrator actions
    # ------------------------------------------------------------------

    def get_subscription(self, subscription_id: str) -> Subscription:
        subscription = self._subscriptions.get(subscription_id)
        if subscription is None:
            raise FetchFailure(
                f"Subscription {subscription_id} not found", status_code=404
            )
        return subscription

    def get_renewal(self, renewal_id: str) -> RenewalReceipt:
        receipt = self._renewals.get(renewal_id)
        if receipt is None:
            raise FetchFailure(f"Renewal {renewal_id} not found", status_code=404)
        return receipt

    def approve_subscription(
        self, subscription_id: str, now: Optional[datetime] = None
    ) -> Subscription:
        approved = self.lifecycle.approve(self.get_subscription(subscription_id), now)
        self._subscriptions[subscription_id] = approved
        return approved

    def reject_subscription(self, subscription_id: str, reason: str) -> Subscription:
        rejected = self.lifecycle.reject(self.get_subscription(subscription_id), reason)
        self._subscriptions[subscription_id] = rejected
        return rejected

    def approve_renewal(self, renewal_id: str) -> RenewalReceipt:
        receipt = self.get_renewal(renewal_id)
        subscription = self.get_subscription(receipt.subscription_id)

        updated, approved = self.lifecycle.approve_renewal(subscription, receipt)
        self._subscriptions[updated.id] = updated
        self._renewals[renewal_id] = approved
        return approved

    def reject_renewal(self, renewal_id: str) -> RenewalReceipt:
        rejected = self.lifecycle.reject_renewal(self.get_renewal(renewal_id))
        self._renewals[renewal_id] = rejected
        return rejected

    def expire_due(self, now: Optional[datetime] = None) -> list[Subscription]:
        """Expire every approved subscription whose period has ended."""
        expired = []
        for subscription in list(self._subscriptions.values()):
            if (
                subscription.status != self.lifecycle.effective_status(subscription, now)
            ):
                updated = self.lifecycle.expire(subscription, now)
                self._subscriptions[updated.id] = updated
                expired.append(updated)

        if expired:
            logger.info(f"Expired {len(expired)} subscriptions")
        return expired

    # ------------------------------------------------------------------
    # Order placement
    # ------------------------------------------------------------------

    def consume_search(self, actor_id: str, now: Optional[datetime] = None) -> Subscription:
        """
        Spend one search for a product query: credits first, then points.

        Only an approved, unexpired subscription can spend searches.

        Raises:
            SubmissionFailed: with NO_SEARCHES_OR_POINTS_AVAILABLE when both are
            spent or the subscription no longer grants entitlements
        """
        subscription_id = self._current_by_actor.get(actor_id)
        subscription = self._subscriptions.get(subscription_id) if subscription_id else None
        if not self.lifecycle.grants_entitlements(subscription, now):
            logger.info(
                f"Search refused for actor {actor_id}: no active subscription",
                extra={"actor_id": actor_id},
            )
            raise SubmissionFailed(
                NO_SEARCHES_OR_POINTS_AVAILABLE, error_code=NO_SEARCHES_ERROR_CODE
            )

        credits = subscription.search_credits
        if credits is None or credits.is_exhausted():
            raise SubmissionFailed(
                NO_SEARCHES_OR_POINTS_AVAILABLE, error_code=NO_SEARCHES_ERROR_CODE
            )

        if credits.remaining > 0:
            credits = credits.model_copy(update={"remaining": credits.remaining - 1})
        else:
            credits = credits.model_copy(
                update={"points_earned": credits.points_earned - 1}
            )

        updated = subscription.model_copy(update={"search_credits": credits})
        self._subscriptions[updated.id] = updated
        return updated
