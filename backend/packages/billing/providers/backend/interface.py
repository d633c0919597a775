"""
Interface for the marketplace subscription backend.

The backend owns plans, subscriptions and renewals. This package only reads
them and submits requests; approval happens on the administrator side.
"""

from abc import ABC, abstractmethod
from typing import Optional

from packages.billing.models.domain.enums import PlanType
from packages.billing.models.domain.plans import Plan
from packages.billing.models.domain.pricing import PricingRequest
from packages.billing.models.domain.renewal import (
    RenewalPriceQuote,
    RenewalReceipt,
    RenewalRequest,
)
from packages.billing.models.domain.subscription import Subscription


class SubscriptionBackendInterface(ABC):
    """Abstract interface for subscription backends."""

    @abstractmethod
    async def fetch_subscription(self, actor_id: str) -> Optional[Subscription]:
        """
        Get the actor's current subscription.

        Returns:
            The subscription, or None if the actor has none

        Raises:
            FetchFailure: backend unreachable or returned an error
        """
        pass

    @abstractmethod
    async def fetch_plan(self, plan_id: str) -> Optional[Plan]:
        """
        Get a plan definition.

        Returns:
            The plan, or None if it does not exist

        Raises:
            FetchFailure: backend unreachable or returned an error
        """
        pass

    @abstractmethod
    async def list_plans(self, plan_type: Optional[PlanType] = None) -> list[Plan]:
        """
        List plans, optionally only those offered to ``plan_type``.

        Raises:
            FetchFailure: backend unreachable or returned an error
        """
        pass

    @abstractmethod
    async def submit_subscription(
        self,
        actor_id: str,
        request: PricingRequest,
        payment_evidence_ref: Optional[str] = None,
    ) -> Subscription:
        """
        Submit a subscription request with its payment evidence.

        Returns:
            The created subscription in PENDING status

        Raises:
            SubmissionFailed: backend refused the submission
        """
        pass

    @abstractmethod
    async def submit_renewal(
        self, actor_id: str, request: RenewalRequest
    ) -> RenewalReceipt:
        """
        Submit a request for additional searches.

        Returns:
            A PENDING renewal receipt

        Raises:
            SubmissionFailed: backend refused the renewal
        """
        pass

    @abstractmethod
    async def quote_renewal_price(
        self, subscription_id: str, additional_searches: int
    ) -> RenewalPriceQuote:
        """
        Ask the backend to price additional searches.

        Raises:
            FetchFailure: backend unreachable or returned an error
        """
        pass
