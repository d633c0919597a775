"""Unit tests for EntitlementGate."""

from unittest.mock import AsyncMock, patch

import pytest

from packages.billing.models.domain.enums import SubscriptionStatus
from packages.billing.models.domain.subscription import SearchCredits
from packages.entitlements.cache import CacheState, EntitlementCache
from packages.entitlements.exceptions import FeatureNotEntitled
from packages.entitlements.gate import EntitlementGate
from tests.factories.billing_factory import BillingFactory


def make_gate(lifecycle, *subscriptions, threshold=5):
    backend = AsyncMock()
    backend.fetch_subscription = AsyncMock(side_effect=list(subscriptions))
    cache = EntitlementCache("actor-1", backend, lifecycle)
    return EntitlementGate(cache, low_credit_threshold=threshold), backend


@pytest.mark.asyncio
class TestEntitlementGate:
    async def test_has_and_require_feature(self, lifecycle):
        gate, _ = make_gate(lifecycle, BillingFactory.create_subscription())

        assert await gate.has_feature("CUSTOMER_PRIVATE_ORDERS")
        await gate.require_feature("CUSTOMER_PRIVATE_ORDERS")

        with pytest.raises(FeatureNotEntitled) as exc_info:
            await gate.require_feature("CUSTOMER_ADVANCED_REPORTS")
        assert exc_info.value.feature_key == "CUSTOMER_ADVANCED_REPORTS"

    async def test_features(self, lifecycle):
        subscription = BillingFactory.create_subscription(
            selected_features=frozenset({"B_FEATURE", "A_FEATURE"})
        )
        gate, _ = make_gate(lifecycle, subscription)
        assert await gate.features() == ["A_FEATURE", "B_FEATURE"]

    async def test_no_subscription_means_no_features(self, lifecycle):
        gate, _ = make_gate(lifecycle, None, None, None, None)

        assert await gate.features() == []
        assert not await gate.has_feature("CUSTOMER_PRIVATE_ORDERS")
        assert await gate.search_credits_exhausted()
        assert not await gate.search_credits_low()

    async def test_pending_subscription_means_no_features(self, lifecycle):
        gate, _ = make_gate(
            lifecycle,
            BillingFactory.create_subscription(status=SubscriptionStatus.PENDING),
        )
        assert await gate.features() == []

    async def test_search_credit_signals(self, lifecycle):
        plenty, _ = make_gate(
            lifecycle,
            BillingFactory.create_subscription(
                search_credits=SearchCredits(purchased=50, remaining=40)
            ),
        )
        assert not await plenty.search_credits_exhausted()
        assert not await plenty.search_credits_low()

        low, _ = make_gate(
            lifecycle,
            BillingFactory.create_subscription(
                search_credits=SearchCredits(purchased=50, remaining=3, points_earned=1)
            ),
        )
        assert not await low.search_credits_exhausted()
        assert await low.search_credits_low()

        empty, _ = make_gate(
            lifecycle,
            BillingFactory.create_subscription(
                search_credits=SearchCredits(purchased=50, remaining=0)
            ),
        )
        assert await empty.search_credits_exhausted()

    async def test_untracked_searches_are_never_exhausted(self, lifecycle):
        gate, _ = make_gate(lifecycle, BillingFactory.create_subscription())
        assert not await gate.search_credits_exhausted()
        assert not await gate.search_credits_low()

    async def test_order_error_for_exhausted_credits_invalidates(self, lifecycle):
        gate, backend = make_gate(
            lifecycle,
            BillingFactory.create_subscription(),
            BillingFactory.create_subscription(),
        )
        await gate.has_feature("CUSTOMER_PRIVATE_ORDERS")
        assert gate.cache.state == CacheState.READY

        assert await gate.handle_order_error("NO_SEARCHES_OR_POINTS_AVAILABLE") is True
        assert gate.cache.state == CacheState.STALE

        await gate.has_feature("CUSTOMER_PRIVATE_ORDERS")
        assert backend.fetch_subscription.await_count == 2

    async def test_unrelated_order_error_keeps_cache(self, lifecycle):
        gate, _ = make_gate(lifecycle, BillingFactory.create_subscription())
        await gate.has_feature("CUSTOMER_PRIVATE_ORDERS")

        assert await gate.handle_order_error("Supplier offline", error_code="500") is False
        assert gate.cache.state == CacheState.READY

    async def test_for_actor_uses_configured_backend(self):
        backend = AsyncMock()
        with patch(
            "packages.entitlements.gate.get_subscription_backend", return_value=backend
        ):
            gate = EntitlementGate.for_actor("actor-9")

        assert gate.actor_id == "actor-9"
        assert gate.cache.backend is backend

    async def test_default_threshold_from_settings(self, lifecycle):
        with patch("packages.entitlements.gate.settings") as mock_settings:
            mock_settings.low_search_credit_threshold = 7
            gate, _ = make_gate(lifecycle, None, threshold=None)
        assert gate.low_credit_threshold == 7

    async def test_check_reads_subscription_once(self, lifecycle):
        gate, backend = make_gate(lifecycle, None, None, None)

        check = await gate.check("CUSTOMER_PRIVATE_ORDERS")

        assert check.feature_key == "CUSTOMER_PRIVATE_ORDERS"
        assert check.granted is False
        assert check.search_credits_exhausted is True
        assert check.search_credits_low is False
        assert backend.fetch_subscription.await_count == 1

    async def test_check_with_low_credits(self, lifecycle):
        gate, _ = make_gate(
            lifecycle,
            BillingFactory.create_subscription(
                search_credits=SearchCredits(purchased=50, remaining=3, points_earned=1)
            ),
        )

        check = await gate.check("CUSTOMER_PRIVATE_ORDERS")

        assert check.granted is True
        assert check.search_credits_exhausted is False
        assert check.search_credits_low is True
