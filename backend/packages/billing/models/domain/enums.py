"""
Billing enums - strongly typed enumerations for plans and subscription states.
"""

from enum import Enum


class SubscriptionStatus(str, Enum):
    """
    Subscription status lifecycle.

    Flow: pending -> approved | rejected, approved -> expired
    """

    PENDING = "PENDING"  # Submitted with payment evidence, awaiting admin review
    APPROVED = "APPROVED"  # Admin approved, entitlements active until expiry
    REJECTED = "REJECTED"  # Admin rejected, terminal
    EXPIRED = "EXPIRED"  # Billing period elapsed, terminal

    def has_access(self) -> bool:
        """Check if this status grants plan features."""
        return self == SubscriptionStatus.APPROVED

    def is_terminal(self) -> bool:
        """Check if no further transition can leave this status."""
        return self in (SubscriptionStatus.REJECTED, SubscriptionStatus.EXPIRED)


class RenewalStatus(str, Enum):
    """Status of a "buy more searches" request."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class BillingFrequency(str, Enum):
    """How often a plan is billed."""

    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    YEARLY = "YEARLY"

    def get_period_days(self) -> int:
        """Get the length of one billing period in days."""
        periods = {
            BillingFrequency.MONTHLY: 30,
            BillingFrequency.QUARTERLY: 90,
            BillingFrequency.YEARLY: 365,
        }
        return periods[self]


class PlanType(str, Enum):
    """Audience a plan is sold to."""

    CUSTOMER = "CUSTOMER"
    SUPPLIER = "SUPPLIER"
    BOTH = "BOTH"

    def serves(self, audience: "PlanType") -> bool:
        """Check if a plan of this type can be offered to the given audience."""
        return (
            self == PlanType.BOTH
            or audience == PlanType.BOTH
            or self == audience
        )


class PlanFeatureKey(str, Enum):
    """Feature keys known to the marketplace. The backend may send others."""

    SUPPLIER_ADVERTISEMENTS = "SUPPLIER_ADVERTISEMENTS"
    SUPPLIER_PRIVATE_ORDERS = "SUPPLIER_PRIVATE_ORDERS"
    SUPPLIER_SPECIAL_OFFERS = "SUPPLIER_SPECIAL_OFFERS"
    SUPPLIER_ADVANCED_REPORTS = "SUPPLIER_ADVANCED_REPORTS"
    CUSTOMER_PRIVATE_ORDERS = "CUSTOMER_PRIVATE_ORDERS"
    CUSTOMER_RAW_MATERIALS_ADVANCE = "CUSTOMER_RAW_MATERIALS_ADVANCE"
    CUSTOMER_VIEW_SUPPLIER_OFFERS = "CUSTOMER_VIEW_SUPPLIER_OFFERS"
    CUSTOMER_ADVANCED_REPORTS = "CUSTOMER_ADVANCED_REPORTS"


class FeatureKind(str, Enum):
    """Discriminator for plan feature entries."""

    INCLUDED = "included"  # Listed on the plan, not sold separately
    PRICED = "priced"  # Optional add-on with its own price
