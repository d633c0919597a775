"""
Domain models for subscriptions.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from packages.billing.models.domain.enums import BillingFrequency, SubscriptionStatus
from packages.billing.models.domain.money import Money


class SearchCredits(BaseModel):
    """Metered search balance attached to a subscription."""

    model_config = ConfigDict(frozen=True)

    purchased: int = Field(ge=0)
    remaining: int = Field(ge=0)
    points_earned: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def validate_balance(self) -> "SearchCredits":
        if self.remaining > self.purchased:
            raise ValueError("remaining searches cannot exceed purchased searches")
        return self

    def is_exhausted(self) -> bool:
        """No searches left and no points to spend instead."""
        return self.remaining == 0 and self.points_earned == 0

    def is_low(self, threshold: int) -> bool:
        return self.remaining <= threshold and self.points_earned <= threshold

    def add(self, searches: int) -> "SearchCredits":
        return self.model_copy(
            update={
                "purchased": self.purchased + searches,
                "remaining": self.remaining + searches,
            }
        )


class Subscription(BaseModel):
    """
    Actor subscription domain model.

    Holds everything frozen at submission time (plan name, price, selected
    features) so later plan edits never change an existing subscription.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    actor_id: str

    # Plan snapshot
    plan_id: str
    plan_name_snapshot: str

    # Seats
    seat_count: int = Field(ge=1)
    used_seats: int = Field(default=0, ge=0)

    status: SubscriptionStatus
    billing_frequency: Optional[BillingFrequency] = None

    # Lifecycle dates
    submission_date: datetime
    activation_date: Optional[datetime] = None
    expiry_date: Optional[datetime] = None

    # Pricing snapshot
    subtotal_snapshot: Money = Field(default_factory=Money.zero)
    discount_snapshot: Money = Field(default_factory=Money.zero)
    final_price_snapshot: Money = Field(default_factory=Money.zero)

    selected_features: frozenset[str] = Field(default_factory=frozenset)
    # Searches bought at submission; None when the plan has no metered search
    searches_purchased: Optional[int] = Field(default=None, ge=0)
    search_credits: Optional[SearchCredits] = None

    payment_evidence_ref: Optional[str] = None
    rejection_reason: Optional[str] = None

    @model_validator(mode="after")
    def validate_seats(self) -> "Subscription":
        if self.used_seats > self.seat_count:
            raise ValueError("used seats cannot exceed seat count")
        return self

    @computed_field
    @property
    def remaining_seats(self) -> int:
        return self.seat_count - self.used_seats

    def has_selected_feature(self, key: str) -> bool:
        return key in self.selected_features

    def search_credits_exhausted(self) -> bool:
        """Derived signal matching the order flow's NO_SEARCHES_OR_POINTS_AVAILABLE."""
        return self.search_credits is not None and self.search_credits.is_exhausted()
