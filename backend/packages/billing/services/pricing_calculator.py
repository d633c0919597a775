"""
Subscription price calculation.

``PricingCalculator.calculate`` is a pure function of the plan and the request:
no I/O, no shared state, same inputs always give the same breakdown. The UI
uses it for live previews and the checkout flow re-runs it before submitting.
"""

from typing import Optional

from common.core.otel_axiom_exporter import trace_span, get_logger
from packages.billing.exceptions import InvalidRequest, PlanUnavailable
from packages.billing.models.domain.money import Money
from packages.billing.models.domain.plans import Plan
from packages.billing.models.domain.pricing import PriceBreakdown, PricingRequest
from packages.billing.services.offer_selector import OfferSelector

logger = get_logger(__name__)


class PricingCalculator:
    """Turns a plan plus a requested configuration into an itemized price."""

    def __init__(self, offer_selector: Optional[OfferSelector] = None):
        self.offer_selector = offer_selector or OfferSelector()

    @trace_span
    def calculate(self, plan: Plan, request: PricingRequest) -> PriceBreakdown:
        """
        Price ``request`` against ``plan``.

        Raises:
            PlanUnavailable: plan is inactive
            InvalidRequest: seat count below 1, unknown feature key, or
                searches requested on a plan without metered search
        """
        if request.plan_id != plan.id:
            raise InvalidRequest(
                f"Request is for plan {request.plan_id}, not {plan.id}"
            )
        if not plan.active:
            raise PlanUnavailable(plan.id, "plan is inactive")
        if request.seat_count < 1:
            raise InvalidRequest("Seat count must be at least 1")
        if request.requested_searches < 0:
            raise InvalidRequest("Requested searches cannot be negative")

        base_price = plan.price_per_seat * request.seat_count
        searches, searches_price = self._price_searches(plan, request.requested_searches)
        features_price = self._price_features(plan, request.selected_feature_keys)

        subtotal = base_price + searches_price + features_price

        applied_offer = self.offer_selector.select(
            plan.offer_tiers, request.seat_count, plan_id=plan.id
        )
        if applied_offer is not None:
            discount_amount = min(
                subtotal.percentage(applied_offer.discount_percent), subtotal
            )
        else:
            discount_amount = Money.zero()

        final_price = subtotal - discount_amount

        return PriceBreakdown(
            plan_id=plan.id,
            plan_name=plan.name,
            price_per_seat=plan.price_per_seat,
            seat_count=request.seat_count,
            requested_searches=searches,
            base_price=base_price,
            searches_price=searches_price,
            features_price=features_price,
            subtotal=subtotal,
            applied_offer=applied_offer,
            discount_amount=discount_amount,
            final_price=final_price,
            available_offers=sorted(
                (t for t in plan.offer_tiers if t.discount_percent > 0),
                key=lambda t: t.min_seat_count,
            ),
            selected_feature_keys=request.selected_feature_keys,
        )

    def _price_searches(self, plan: Plan, requested: int) -> tuple[int, Money]:
        """Return the charged search count and its price."""
        if requested == 0:
            return 0, Money.zero()

        config = plan.search_config
        if config is None:
            raise InvalidRequest(f"Plan {plan.id} does not sell product searches")

        if config.unlimited:
            # Searches are included; nothing to charge
            return 0, Money.zero()

        if config.price_per_search is None:
            raise InvalidRequest(f"Plan {plan.id} has no price per search")

        if not config.allows(requested):
            raise InvalidRequest(
                f"Requested searches must be between {config.range_from} and {config.range_to}"
            )

        return requested, Money.extend(config.price_per_search, requested)

    def _price_features(self, plan: Plan, selected: frozenset[str]) -> Money:
        unknown = sorted(key for key in selected if plan.get_optional_feature(key) is None)
        if unknown:
            raise InvalidRequest(
                f"Features not offered by plan {plan.id}: {', '.join(unknown)}"
            )

        # Sum in plan order so the result never depends on set iteration order
        return Money.sum(
            feature.price for feature in plan.optional_features if feature.key in selected
        )
