"""
Entitlement gate - feature checks for the signed-in actor.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict

from common.core.config import settings
from common.core.otel_axiom_exporter import trace_span, get_logger
from packages.billing.exceptions import is_search_credits_exhausted_error
from packages.billing.models.domain.subscription import Subscription
from packages.billing.providers.backend import get_subscription_backend
from packages.billing.providers.backend.interface import SubscriptionBackendInterface
from packages.entitlements.cache import EntitlementCache
from packages.entitlements.exceptions import FeatureNotEntitled

logger = get_logger(__name__)


class EntitlementCheck(BaseModel):
    model_config = ConfigDict(frozen=True)

    feature_key: str
    granted: bool
    search_credits_exhausted: bool
    search_credits_low: bool


class EntitlementGate:
    """
    Answers feature and search-credit questions from the actor's cache.

    Every check fails closed: no subscription, a pending or expired one, or a
    failed fetch all read as "not entitled".
    """

    def __init__(
        self, cache: EntitlementCache, low_credit_threshold: Optional[int] = None
    ):
        self.cache = cache
        self.low_credit_threshold = (
            low_credit_threshold
            if low_credit_threshold is not None
            else settings.low_search_credit_threshold
        )

    @classmethod
    def for_actor(
        cls,
        actor_id: str,
        backend: Optional[SubscriptionBackendInterface] = None,
    ) -> "EntitlementGate":
        return cls(EntitlementCache(actor_id, backend or get_subscription_backend()))

    @property
    def actor_id(self) -> str:
        return self.cache.actor_id

    @trace_span
    async def has_feature(self, key: str) -> bool:
        return await self.cache.has_feature(key)

    async def require_feature(self, key: str) -> None:
        """
        Raises:
            FeatureNotEntitled: the current subscription does not grant ``key``
        """
        if not await self.has_feature(key):
            raise FeatureNotEntitled(self.actor_id, key)

    @trace_span
    async def check(self, key: str) -> EntitlementCheck:
        """Feature grant and search credit signals from a single subscription read."""
        subscription = await self.cache.get()
        return EntitlementCheck(
            feature_key=key,
            granted=self._grants(subscription)
            and subscription.has_selected_feature(key),
            search_credits_exhausted=self._credits_exhausted(subscription),
            search_credits_low=self._credits_low(subscription),
        )

    async def features(self) -> list[str]:
        """Selected feature keys of the active subscription, sorted."""
        subscription = await self.cache.get()
        if not self._grants(subscription):
            return []
        return sorted(subscription.selected_features)

    async def search_credits_exhausted(self) -> bool:
        """True when there is nothing left to spend, or no active subscription."""
        return self._credits_exhausted(await self.cache.get())

    async def search_credits_low(self) -> bool:
        return self._credits_low(await self.cache.get())

    def _grants(self, subscription: Optional[Subscription]) -> bool:
        return self.cache.lifecycle.grants_entitlements(subscription)

    def _credits_exhausted(self, subscription: Optional[Subscription]) -> bool:
        if not self._grants(subscription):
            return True
        return subscription.search_credits_exhausted()

    def _credits_low(self, subscription: Optional[Subscription]) -> bool:
        if not self._grants(subscription):
            return False
        credits = subscription.search_credits
        return credits is not None and credits.is_low(self.low_credit_threshold)

    async def handle_order_error(
        self, message: Optional[str] = None, error_code: Optional[str] = None
    ) -> bool:
        """
        Inspect an order-placement error.

        When it means search credits ran out, the cached subscription is
        dropped so the next check sees the new balance. Returns whether the
        error was a credits error.
        """
        if not is_search_credits_exhausted_error(message, error_code):
            return False

        logger.info(
            f"Search credits exhausted for actor {self.actor_id}",
            extra={"actor_id": self.actor_id, "error_code": error_code},
        )
        await self.cache.invalidate()
        return True
