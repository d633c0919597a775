"""Domain models for billing."""

from packages.billing.models.domain.enums import (
    SubscriptionStatus,
    RenewalStatus,
    BillingFrequency,
    PlanType,
    PlanFeatureKey,
    FeatureKind,
)
from packages.billing.models.domain.money import Money
from packages.billing.models.domain.plans import (
    OfferTier,
    SearchConfig,
    IncludedFeature,
    PricedFeature,
    PlanFeature,
    Plan,
    resolve_plan_features,
)
from packages.billing.models.domain.pricing import PricingRequest, PriceBreakdown
from packages.billing.models.domain.subscription import SearchCredits, Subscription
from packages.billing.models.domain.renewal import (
    RenewalRequest,
    RenewalPriceQuote,
    RenewalReceipt,
)

__all__ = [
    # Enums
    "SubscriptionStatus",
    "RenewalStatus",
    "BillingFrequency",
    "PlanType",
    "PlanFeatureKey",
    "FeatureKind",
    # Money
    "Money",
    # Plans
    "OfferTier",
    "SearchConfig",
    "IncludedFeature",
    "PricedFeature",
    "PlanFeature",
    "Plan",
    "resolve_plan_features",
    # Pricing
    "PricingRequest",
    "PriceBreakdown",
    # Subscription
    "SearchCredits",
    "Subscription",
    # Renewal
    "RenewalRequest",
    "RenewalPriceQuote",
    "RenewalReceipt",
]
