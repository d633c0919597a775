from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from packages.billing.models.domain.enums import (
    BillingFrequency,
    PlanType,
    SubscriptionStatus,
)
from packages.billing.models.domain.plans import OfferTier, Plan, SearchConfig
from packages.billing.models.domain.subscription import SearchCredits, Subscription

FIXED_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class BillingFactory:
    """Factory for creating billing test objects."""

    @staticmethod
    def create_customer_plan(
        id: str = "plan-customer",
        price_per_seat: str = "100",
        offer_tiers: Optional[list[OfferTier]] = None,
        search_config: Optional[SearchConfig] = None,
        features: Optional[list[Any]] = None,
        active: bool = True,
        billing_frequency: BillingFrequency = BillingFrequency.MONTHLY,
    ) -> Plan:
        """Customer plan with two volume tiers, metered searches and two add-ons."""
        return Plan(
            id=id,
            name="Customer Pro",
            description="Plan for buyers",
            price_per_seat=price_per_seat,
            billing_frequency=billing_frequency,
            plan_type=PlanType.CUSTOMER,
            features=(
                features
                if features is not None
                else [
                    {"feature": "CUSTOMER_PRIVATE_ORDERS", "price": "50"},
                    {"feature": "CUSTOMER_ADVANCED_REPORTS", "price": "25.50"},
                    {"feature": "CUSTOMER_VIEW_SUPPLIER_OFFERS"},
                ]
            ),
            search_config=(
                search_config
                if search_config is not None
                else SearchConfig(range_from=10, range_to=100, price_per_search="2")
            ),
            offer_tiers=(
                offer_tiers
                if offer_tiers is not None
                else [
                    OfferTier(min_seat_count=10, discount_percent=5, description="10+"),
                    OfferTier(min_seat_count=20, discount_percent=10, description="20+"),
                ]
            ),
            active=active,
        )

    @staticmethod
    def create_supplier_plan(id: str = "plan-supplier", active: bool = True) -> Plan:
        return Plan(
            id=id,
            name="Supplier Basic",
            price_per_seat="80",
            billing_frequency=BillingFrequency.QUARTERLY,
            plan_type=PlanType.SUPPLIER,
            features=["SUPPLIER_ADVERTISEMENTS", "SUPPLIER_SPECIAL_OFFERS"],
            active=active,
        )

    @staticmethod
    def create_shared_plan(id: str = "plan-both") -> Plan:
        return Plan(
            id=id,
            name="Everyone",
            price_per_seat="10",
            billing_frequency=BillingFrequency.YEARLY,
            plan_type=PlanType.BOTH,
        )

    @staticmethod
    def create_subscription(
        id: str = "sub-1",
        actor_id: str = "actor-1",
        plan_id: str = "plan-customer",
        status: SubscriptionStatus = SubscriptionStatus.APPROVED,
        selected_features: frozenset[str] = frozenset({"CUSTOMER_PRIVATE_ORDERS"}),
        search_credits: Optional[SearchCredits] = None,
        expiry_date: Optional[datetime] = None,
        activation_date: Optional[datetime] = None,
    ) -> Subscription:
        """Approved subscription, valid for 30 days from ``FIXED_NOW``, unless overridden."""
        if status == SubscriptionStatus.APPROVED:
            activation_date = activation_date or FIXED_NOW - timedelta(days=1)
            expiry_date = expiry_date or FIXED_NOW + timedelta(days=29)
        return Subscription(
            id=id,
            actor_id=actor_id,
            plan_id=plan_id,
            plan_name_snapshot="Customer Pro",
            seat_count=12,
            status=status,
            billing_frequency=BillingFrequency.MONTHLY,
            submission_date=FIXED_NOW - timedelta(days=2),
            activation_date=activation_date,
            expiry_date=expiry_date,
            subtotal_snapshot="1200",
            discount_snapshot="60",
            final_price_snapshot="1140",
            selected_features=selected_features,
            searches_purchased=(
                search_credits.purchased if search_credits is not None else None
            ),
            search_credits=search_credits,
        )
