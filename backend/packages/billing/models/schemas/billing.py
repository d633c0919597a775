"""
API schemas for billing operations.

Request and response models for billing endpoints.
"""

from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from packages.billing.feature_labels import feature_label
from packages.billing.models.domain.enums import BillingFrequency, PlanType
from packages.billing.models.domain.money import Money
from packages.billing.models.domain.plans import (
    OfferTier,
    Plan,
    PricedFeature,
    SearchConfig,
)
from packages.billing.models.domain.pricing import PriceBreakdown, PricingRequest
from packages.billing.models.domain.renewal import RenewalPriceQuote


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Plan Schemas
# ============================================================================


class OfferTierResponse(ApiModel):
    min_seat_count: int
    discount_percent: Decimal
    description: str = ""

    @classmethod
    def from_domain(cls, tier: OfferTier) -> "OfferTierResponse":
        return cls(**tier.model_dump())


class SearchConfigResponse(ApiModel):
    range_from: Optional[int] = None
    range_to: Optional[int] = None
    unlimited: bool = False
    price_per_search: Optional[Decimal] = None

    @classmethod
    def from_domain(cls, config: SearchConfig) -> "SearchConfigResponse":
        return cls(**config.model_dump())


class PlanFeatureResponse(ApiModel):
    key: str
    label: str
    label_ar: str
    price: Optional[Money] = Field(
        default=None, description="Set for optional add-ons the buyer may select"
    )


class PlanResponse(ApiModel):
    """Plan as shown on the pricing page."""

    id: str
    name: str
    description: Optional[str] = None
    price_per_seat: Money
    billing_frequency: BillingFrequency
    plan_type: PlanType
    features: list[PlanFeatureResponse]
    search_config: Optional[SearchConfigResponse] = None
    offer_tiers: list[OfferTierResponse]
    active: bool
    exclusive: bool
    is_popular: bool

    @classmethod
    def from_domain(cls, plan: Plan) -> "PlanResponse":
        return cls(
            id=plan.id,
            name=plan.name,
            description=plan.description,
            price_per_seat=plan.price_per_seat,
            billing_frequency=plan.billing_frequency,
            plan_type=plan.plan_type,
            features=[
                PlanFeatureResponse(
                    key=feature.key,
                    label=feature_label(feature.key, "en"),
                    label_ar=feature_label(feature.key, "ar"),
                    price=feature.price if isinstance(feature, PricedFeature) else None,
                )
                for feature in plan.features
            ],
            search_config=(
                SearchConfigResponse.from_domain(plan.search_config)
                if plan.search_config
                else None
            ),
            offer_tiers=[
                OfferTierResponse.from_domain(tier)
                for tier in sorted(plan.offer_tiers, key=lambda t: t.min_seat_count)
            ],
            active=plan.active,
            exclusive=plan.exclusive,
            is_popular=plan.is_popular,
        )


class PlansResponse(ApiModel):
    plans: list[PlanResponse]


# ============================================================================
# Pricing Schemas
# ============================================================================


class CalculatePriceRequest(ApiModel):
    """Configuration to price. Bounds are enforced by the calculator."""

    plan_id: str
    seat_count: int
    requested_searches: int = 0
    selected_features: list[str] = Field(default_factory=list)

    def to_domain(self) -> PricingRequest:
        return PricingRequest(
            plan_id=self.plan_id,
            seat_count=self.seat_count,
            requested_searches=self.requested_searches,
            selected_feature_keys=frozenset(self.selected_features),
        )


class PriceBreakdownResponse(ApiModel):
    plan_id: str
    plan_name: str
    price_per_seat: Money
    seat_count: int
    requested_searches: int

    base_price: Money
    searches_price: Money
    features_price: Money
    subtotal: Money

    applied_offer: Optional[OfferTierResponse] = None
    discount_percent: Decimal
    discount_amount: Money
    final_price: Money

    available_offers: list[OfferTierResponse]
    selected_features: list[str]

    @classmethod
    def from_domain(cls, breakdown: PriceBreakdown) -> "PriceBreakdownResponse":
        return cls(
            **breakdown.model_dump(
                exclude={"selected_feature_keys", "applied_offer", "available_offers"}
            ),
            applied_offer=(
                OfferTierResponse.from_domain(breakdown.applied_offer)
                if breakdown.applied_offer
                else None
            ),
            available_offers=[
                OfferTierResponse.from_domain(tier) for tier in breakdown.available_offers
            ],
            discount_percent=breakdown.discount_percent,
            selected_features=sorted(breakdown.selected_feature_keys),
        )


# ============================================================================
# Renewal Schemas
# ============================================================================


class RenewalQuoteRequest(ApiModel):
    subscription_id: str
    additional_searches: int


class RenewalQuoteResponse(ApiModel):
    subscription_id: str
    additional_searches: int
    unit_price: Decimal
    total_price: Money

    @classmethod
    def from_domain(cls, quote: RenewalPriceQuote) -> "RenewalQuoteResponse":
        return cls(**quote.model_dump())


# ============================================================================
# Entitlement Schemas
# ============================================================================


class EntitlementResponse(ApiModel):
    """Whether the actor may use a feature, plus the search credit signals."""

    feature_key: str
    granted: bool
    search_credits_exhausted: bool
    search_credits_low: bool
