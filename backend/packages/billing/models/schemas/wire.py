"""
Marketplace API wire models.

The marketplace backend speaks camelCase JSON with its own field names
(``pricePerUser``, ``numberOfUsers`` ...). These models parse that payload and
map it onto the billing domain models.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from common.core.otel_axiom_exporter import get_logger
from packages.billing.models.domain.enums import (
    BillingFrequency,
    PlanType,
    RenewalStatus,
    SubscriptionStatus,
)
from packages.billing.models.domain.money import Money
from packages.billing.models.domain.plans import OfferTier, Plan, SearchConfig
from packages.billing.models.domain.pricing import PricingRequest
from packages.billing.models.domain.renewal import (
    RenewalPriceQuote,
    RenewalReceipt,
    RenewalRequest,
)
from packages.billing.models.domain.subscription import SearchCredits, Subscription

logger = get_logger(__name__)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # The backend sends naive timestamps in UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )


# ============================================================================
# Plans
# ============================================================================


class SpecialOfferWire(WireModel):
    min_user_count: int
    discount_percentage: Decimal
    description: Optional[str] = ""

    def to_domain(self) -> OfferTier:
        return OfferTier(
            min_seat_count=self.min_user_count,
            discount_percent=self.discount_percentage,
            description=self.description or "",
        )


class ProductSearchesConfigWire(WireModel):
    range_from: Optional[int] = Field(default=None, alias="from")
    range_to: Optional[int] = Field(default=None, alias="to")
    unlimited: Optional[bool] = False
    price_per_search: Optional[Decimal] = None

    def to_domain(self) -> SearchConfig:
        return SearchConfig(
            range_from=self.range_from,
            range_to=self.range_to,
            unlimited=bool(self.unlimited),
            price_per_search=self.price_per_search,
        )


class PlanWire(WireModel):
    id: str
    name: str
    description: Optional[str] = None
    price_per_user: Decimal
    billing_frequency: BillingFrequency
    plan_type: PlanType
    special_offers: Optional[list[SpecialOfferWire]] = None
    active: bool = True
    exclusive: bool = False
    is_popular: Optional[bool] = False
    features: Optional[list[Union[str, dict[str, Any]]]] = None
    product_searches_config: Optional[ProductSearchesConfigWire] = None

    def to_domain(self) -> Plan:
        return Plan(
            id=self.id,
            name=self.name,
            description=self.description,
            price_per_seat=self.price_per_user,
            billing_frequency=self.billing_frequency,
            plan_type=self.plan_type,
            features=self.features or [],
            search_config=(
                self.product_searches_config.to_domain()
                if self.product_searches_config
                else None
            ),
            offer_tiers=[offer.to_domain() for offer in self.special_offers or []],
            active=self.active,
            exclusive=self.exclusive,
            is_popular=bool(self.is_popular),
        )


# ============================================================================
# Subscriptions
# ============================================================================


class UserSubscriptionWire(WireModel):
    id: str
    user_id: str
    plan_id: str
    plan_name: str
    number_of_users: int
    used_users: int = 0
    remaining_users: Optional[int] = None
    total: Decimal = Decimal(0)
    discount: Decimal = Decimal(0)
    final_price: Decimal = Decimal(0)
    file_path: Optional[str] = None
    status: SubscriptionStatus
    submission_date: Optional[datetime] = None
    subscription_date: Optional[datetime] = None
    expiry_date: Optional[datetime] = None
    number_of_searches_purchased: Optional[int] = None
    remaining_searches: Optional[int] = None
    points_earned: Optional[int] = None
    selected_features: Optional[list[str]] = None

    @field_validator("submission_date", "subscription_date", "expiry_date")
    @classmethod
    def normalize_timezone(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(v)

    def _search_credits(self) -> Optional[SearchCredits]:
        if self.remaining_searches is None:
            return None

        purchased = self.number_of_searches_purchased
        if purchased is None or purchased < self.remaining_searches:
            if purchased is not None:
                logger.warning(
                    f"Subscription {self.id} reports more remaining than purchased searches",
                    extra={
                        "subscription_id": self.id,
                        "purchased": purchased,
                        "remaining": self.remaining_searches,
                    },
                )
            purchased = self.remaining_searches

        return SearchCredits(
            purchased=purchased,
            remaining=self.remaining_searches,
            points_earned=self.points_earned or 0,
        )

    def to_domain(self) -> Subscription:
        return Subscription(
            id=self.id,
            actor_id=self.user_id,
            plan_id=self.plan_id,
            plan_name_snapshot=self.plan_name,
            seat_count=self.number_of_users,
            used_seats=self.used_users,
            status=self.status,
            submission_date=self.submission_date or self.subscription_date,
            activation_date=self.subscription_date,
            expiry_date=self.expiry_date,
            subtotal_snapshot=self.total,
            discount_snapshot=self.discount,
            final_price_snapshot=self.final_price,
            selected_features=frozenset(self.selected_features or []),
            searches_purchased=self.number_of_searches_purchased,
            search_credits=self._search_credits(),
            payment_evidence_ref=self.file_path,
        )


class SubmitSubscriptionWire(WireModel):
    plan_id: str
    number_of_users: int
    subscription_file: Optional[str] = None
    number_of_searches: Optional[int] = None
    selected_features: Optional[list[str]] = None

    @classmethod
    def from_domain(
        cls, request: PricingRequest, evidence_ref: Optional[str]
    ) -> "SubmitSubscriptionWire":
        return cls(
            plan_id=request.plan_id,
            number_of_users=request.seat_count,
            subscription_file=evidence_ref,
            number_of_searches=request.requested_searches or None,
            selected_features=sorted(request.selected_feature_keys) or None,
        )


# ============================================================================
# Renewals
# ============================================================================


class RenewSearchesWire(WireModel):
    subscription_id: str
    number_of_searches: int
    subscription_file: Optional[str] = None

    @classmethod
    def from_domain(cls, request: RenewalRequest) -> "RenewSearchesWire":
        return cls(
            subscription_id=request.subscription_id,
            number_of_searches=request.additional_searches,
            subscription_file=request.payment_evidence_ref,
        )


class RenewalQuoteWire(WireModel):
    subscription_id: str
    number_of_searches: int
    price_per_search: Decimal
    total_price: Decimal

    def to_domain(self) -> RenewalPriceQuote:
        return RenewalPriceQuote(
            subscription_id=self.subscription_id,
            additional_searches=self.number_of_searches,
            unit_price=self.price_per_search,
            total_price=self.total_price,
        )


class RenewalReceiptWire(WireModel):
    id: str
    subscription_id: str
    number_of_searches: int
    total_price: Decimal = Decimal(0)
    status: RenewalStatus = RenewalStatus.PENDING
    submission_date: datetime
    file_path: Optional[str] = None

    @field_validator("submission_date")
    @classmethod
    def normalize_timezone(cls, v: datetime) -> datetime:
        return _as_utc(v)

    def to_domain(self) -> RenewalReceipt:
        return RenewalReceipt(
            id=self.id,
            subscription_id=self.subscription_id,
            additional_searches=self.number_of_searches,
            total_price=Money(self.total_price),
            status=self.status,
            submission_date=self.submission_date,
            payment_evidence_ref=self.file_path,
        )
