"""
Subscription lifecycle state machine.

    PENDING --approve--> APPROVED --(now > expiry)--> EXPIRED
    PENDING --reject---> REJECTED

REJECTED and EXPIRED are terminal. Renewals never move the parent subscription;
they are separate pending credit adjustments that only touch ``search_credits``
once approved.

Transitions are pure: they return new frozen models and never mutate input.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from common.core.otel_axiom_exporter import trace_span, get_logger
from packages.billing.exceptions import InvalidRequest, InvalidTransition
from packages.billing.models.domain.enums import (
    BillingFrequency,
    RenewalStatus,
    SubscriptionStatus,
)
from packages.billing.models.domain.plans import Plan
from packages.billing.models.domain.pricing import PriceBreakdown
from packages.billing.models.domain.renewal import (
    RenewalPriceQuote,
    RenewalReceipt,
    RenewalRequest,
)
from packages.billing.models.domain.subscription import SearchCredits, Subscription

logger = get_logger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SubscriptionLifecycle:
    """Applies lifecycle transitions to subscriptions and renewals."""

    def __init__(self, clock: Optional[Clock] = None):
        self.clock = clock or utc_now

    # ------------------------------------------------------------------
    # Status queries
    # ------------------------------------------------------------------

    def effective_status(
        self, subscription: Subscription, now: Optional[datetime] = None
    ) -> SubscriptionStatus:
        """Status with time-based expiry applied."""
        if subscription.status == SubscriptionStatus.APPROVED and self._is_past_expiry(
            subscription, now
        ):
            return SubscriptionStatus.EXPIRED
        return subscription.status

    def grants_entitlements(
        self, subscription: Optional[Subscription], now: Optional[datetime] = None
    ) -> bool:
        """Only an approved, unexpired subscription grants features."""
        if subscription is None:
            return False
        return self.effective_status(subscription, now).has_access()

    # ------------------------------------------------------------------
    # Subscription transitions
    # ------------------------------------------------------------------

    @trace_span
    def submit(
        self,
        actor_id: str,
        plan: Plan,
        breakdown: PriceBreakdown,
        payment_evidence_ref: Optional[str] = None,
        subscription_id: Optional[str] = None,
    ) -> Subscription:
        """Open a PENDING subscription frozen from a price breakdown."""
        if breakdown.plan_id != plan.id:
            raise InvalidRequest(
                f"Price breakdown is for plan {breakdown.plan_id}, not {plan.id}"
            )

        subscription = Subscription(
            id=subscription_id or str(uuid.uuid4()),
            actor_id=actor_id,
            plan_id=plan.id,
            plan_name_snapshot=plan.name,
            seat_count=breakdown.seat_count,
            status=SubscriptionStatus.PENDING,
            billing_frequency=plan.billing_frequency,
            submission_date=self.clock(),
            subtotal_snapshot=breakdown.subtotal,
            discount_snapshot=breakdown.discount_amount,
            final_price_snapshot=breakdown.final_price,
            selected_features=breakdown.selected_feature_keys,
            searches_purchased=(
                breakdown.requested_searches if plan.has_metered_search else None
            ),
            payment_evidence_ref=payment_evidence_ref,
        )

        logger.info(
            f"Submitted subscription {subscription.id} for actor {actor_id}",
            extra={
                "subscription_id": subscription.id,
                "actor_id": actor_id,
                "plan_id": plan.id,
                "final_price": str(breakdown.final_price),
            },
        )
        return subscription

    @trace_span
    def approve(
        self, subscription: Subscription, now: Optional[datetime] = None
    ) -> Subscription:
        """Activate a pending subscription and start search credit accounting."""
        self._require_status(subscription, SubscriptionStatus.PENDING, "approve")

        activated_at = now or self.clock()
        frequency = subscription.billing_frequency or BillingFrequency.MONTHLY
        expires_at = activated_at + timedelta(days=frequency.get_period_days())

        search_credits = subscription.search_credits
        if search_credits is None and subscription.searches_purchased is not None:
            search_credits = SearchCredits(
                purchased=subscription.searches_purchased,
                remaining=subscription.searches_purchased,
            )

        approved = subscription.model_copy(
            update={
                "status": SubscriptionStatus.APPROVED,
                "activation_date": activated_at,
                "expiry_date": expires_at,
                "search_credits": search_credits,
            }
        )
        self._log_transition(subscription, approved)
        return approved

    @trace_span
    def reject(self, subscription: Subscription, reason: str) -> Subscription:
        self._require_status(subscription, SubscriptionStatus.PENDING, "reject")
        if not reason or not reason.strip():
            raise InvalidRequest("A rejection reason is required")

        rejected = subscription.model_copy(
            update={
                "status": SubscriptionStatus.REJECTED,
                "rejection_reason": reason.strip(),
            }
        )
        self._log_transition(subscription, rejected)
        return rejected

    @trace_span
    def expire(
        self, subscription: Subscription, now: Optional[datetime] = None
    ) -> Subscription:
        self._require_status(subscription, SubscriptionStatus.APPROVED, "expire")
        if not self._is_past_expiry(subscription, now):
            raise InvalidTransition(
                f"Subscription {subscription.id} has not reached its expiry date"
            )

        expired = subscription.model_copy(update={"status": SubscriptionStatus.EXPIRED})
        self._log_transition(subscription, expired)
        return expired

    # ------------------------------------------------------------------
    # Renewal transitions
    # ------------------------------------------------------------------

    @trace_span
    def open_renewal(
        self,
        subscription: Subscription,
        request: RenewalRequest,
        quote: RenewalPriceQuote,
        receipt_id: Optional[str] = None,
    ) -> RenewalReceipt:
        """Attach a pending credit adjustment. The subscription is unchanged."""
        if request.subscription_id != subscription.id:
            raise InvalidRequest(
                f"Renewal targets subscription {request.subscription_id}, not {subscription.id}"
            )
        if (
            quote.subscription_id != subscription.id
            or quote.additional_searches != request.additional_searches
        ):
            raise InvalidRequest("Renewal quote does not match the request")
        if self.effective_status(subscription) != SubscriptionStatus.APPROVED:
            raise InvalidTransition(
                f"Cannot renew searches on a {self.effective_status(subscription).value} subscription"
            )

        receipt = RenewalReceipt(
            id=receipt_id or str(uuid.uuid4()),
            subscription_id=subscription.id,
            additional_searches=request.additional_searches,
            total_price=quote.total_price,
            submission_date=self.clock(),
            payment_evidence_ref=request.payment_evidence_ref,
        )

        logger.info(
            f"Opened renewal {receipt.id} for subscription {subscription.id}",
            extra={
                "renewal_id": receipt.id,
                "subscription_id": subscription.id,
                "additional_searches": request.additional_searches,
            },
        )
        return receipt

    @trace_span
    def approve_renewal(
        self, subscription: Subscription, receipt: RenewalReceipt
    ) -> tuple[Subscription, RenewalReceipt]:
        """Merge approved searches into the subscription's credit balance."""
        self._require_pending_renewal(receipt)
        if receipt.subscription_id != subscription.id:
            raise InvalidRequest(
                f"Renewal {receipt.id} belongs to subscription {receipt.subscription_id}"
            )
        if self.effective_status(subscription) != SubscriptionStatus.APPROVED:
            raise InvalidTransition(
                f"Cannot credit searches to a {self.effective_status(subscription).value} subscription"
            )
        if subscription.search_credits is None:
            raise InvalidTransition(
                f"Subscription {subscription.id} has no search credit balance"
            )

        credits = subscription.search_credits.add(receipt.additional_searches)
        updated = subscription.model_copy(update={"search_credits": credits})
        approved = receipt.model_copy(update={"status": RenewalStatus.APPROVED})

        logger.info(
            f"Approved renewal {receipt.id}: +{receipt.additional_searches} searches",
            extra={
                "renewal_id": receipt.id,
                "subscription_id": subscription.id,
                "purchased": credits.purchased,
                "remaining": credits.remaining,
            },
        )
        return updated, approved

    @trace_span
    def reject_renewal(self, receipt: RenewalReceipt) -> RenewalReceipt:
        self._require_pending_renewal(receipt)
        rejected = receipt.model_copy(update={"status": RenewalStatus.REJECTED})
        logger.info(
            f"Rejected renewal {receipt.id}",
            extra={"renewal_id": receipt.id, "subscription_id": receipt.subscription_id},
        )
        return rejected

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _is_past_expiry(
        self, subscription: Subscription, now: Optional[datetime]
    ) -> bool:
        if subscription.expiry_date is None:
            return False
        return (now or self.clock()) > subscription.expiry_date

    def _require_status(
        self,
        subscription: Subscription,
        expected: SubscriptionStatus,
        action: str,
    ) -> None:
        if subscription.status != expected:
            raise InvalidTransition(
                f"Cannot {action} subscription {subscription.id} in status {subscription.status.value}"
            )

    def _require_pending_renewal(self, receipt: RenewalReceipt) -> None:
        if receipt.status != RenewalStatus.PENDING:
            raise InvalidTransition(
                f"Renewal {receipt.id} is already {receipt.status.value}"
            )

    def _log_transition(self, before: Subscription, after: Subscription) -> None:
        logger.info(
            f"Subscription {before.id} moved from {before.status.value} to {after.status.value}",
            extra={
                "subscription_id": before.id,
                "actor_id": before.actor_id,
                "old_status": before.status.value,
                "new_status": after.status.value,
            },
        )
