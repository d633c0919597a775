"""Pricing for partial renewals ("buy more searches")."""

from typing import Optional

from common.core.otel_axiom_exporter import trace_span
from packages.billing.exceptions import InvalidRequest, PlanUnavailable
from packages.billing.models.domain.enums import SubscriptionStatus
from packages.billing.models.domain.money import Money
from packages.billing.models.domain.plans import Plan
from packages.billing.models.domain.renewal import RenewalPriceQuote
from packages.billing.models.domain.subscription import Subscription
from packages.billing.services.subscription_lifecycle import SubscriptionLifecycle


class RenewalCalculator:
    """
    Prices extra searches on an approved subscription.

    Uses the plan's *current* price per search. Seats, offer tiers and optional
    features play no part: a renewal is a pure metered add-on.
    """

    def __init__(self, lifecycle: Optional[SubscriptionLifecycle] = None):
        self.lifecycle = lifecycle or SubscriptionLifecycle()

    @trace_span
    def quote(
        self, subscription: Subscription, plan: Plan, additional_searches: int
    ) -> RenewalPriceQuote:
        if additional_searches < 1:
            raise InvalidRequest("At least one additional search is required")
        if plan.id != subscription.plan_id:
            raise InvalidRequest(
                f"Plan {plan.id} is not the plan of subscription {subscription.id}"
            )

        status = self.lifecycle.effective_status(subscription)
        if status != SubscriptionStatus.APPROVED:
            raise InvalidRequest(
                f"Searches can only be added to an approved subscription (is {status.value})"
            )
        if subscription.search_credits is None:
            raise InvalidRequest(
                f"Subscription {subscription.id} does not track search credits"
            )
        if not plan.has_metered_search:
            raise PlanUnavailable(plan.id, "plan does not sell metered searches")

        unit_price = plan.search_config.price_per_search
        return RenewalPriceQuote(
            subscription_id=subscription.id,
            additional_searches=additional_searches,
            unit_price=unit_price,
            total_price=Money.extend(unit_price, additional_searches),
        )
