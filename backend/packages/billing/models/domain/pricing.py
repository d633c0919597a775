"""Domain models for price calculation."""

from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from packages.billing.models.domain.money import Money
from packages.billing.models.domain.plans import OfferTier


class PricingRequest(BaseModel):
    """
    Configuration a buyer asks to be priced.

    Bounds are checked by ``PricingCalculator`` so that bad input surfaces as
    ``InvalidRequest`` rather than a model validation error.
    """

    model_config = ConfigDict(frozen=True)

    plan_id: str
    seat_count: int
    requested_searches: int = 0
    selected_feature_keys: frozenset[str] = Field(default_factory=frozenset)


class PriceBreakdown(BaseModel):
    """Itemized price for a ``PricingRequest``."""

    model_config = ConfigDict(frozen=True)

    plan_id: str
    plan_name: str
    price_per_seat: Money
    seat_count: int
    requested_searches: int = 0

    base_price: Money
    searches_price: Money
    features_price: Money
    subtotal: Money

    applied_offer: Optional[OfferTier] = None
    discount_amount: Money
    final_price: Money

    available_offers: list[OfferTier] = Field(default_factory=list)
    selected_feature_keys: frozenset[str] = Field(default_factory=frozenset)

    @property
    def discount_percent(self) -> Decimal:
        if self.applied_offer is None:
            return Decimal(0)
        return self.applied_offer.discount_percent
