"""Unit tests for InMemorySubscriptionBackend."""

from datetime import timedelta
from unittest.mock import patch

import pytest

from packages.billing.exceptions import (
    FetchFailure,
    InvalidRequest,
    InvalidTransition,
    NO_SEARCHES_ERROR_CODE,
    NO_SEARCHES_OR_POINTS_AVAILABLE,
    SubmissionFailed,
    is_search_credits_exhausted_error,
)
from packages.billing.models.domain.enums import RenewalStatus, SubscriptionStatus
from packages.billing.models.domain.money import Money
from packages.billing.models.domain.pricing import PricingRequest
from packages.billing.models.domain.renewal import RenewalRequest
from packages.billing.providers.backend.http_backend import HttpSubscriptionBackend
from packages.billing.providers.backend.memory_backend import (
    InMemorySubscriptionBackend,
)
from common.core.constants import SubscriptionBackendKind


async def submit_and_approve(backend, actor_id="actor-1", searches=10):
    subscription = await backend.submit_subscription(
        actor_id,
        PricingRequest(
            plan_id="plan-customer",
            seat_count=2,
            requested_searches=searches,
            selected_feature_keys=frozenset({"CUSTOMER_PRIVATE_ORDERS"}),
        ),
        payment_evidence_ref="receipt.pdf",
    )
    return backend.approve_subscription(subscription.id)


@pytest.mark.asyncio
class TestInMemorySubscriptionBackend:
    async def test_no_subscription(self, memory_backend):
        assert await memory_backend.fetch_subscription("nobody") is None

    async def test_submit_and_fetch(self, memory_backend):
        subscription = await memory_backend.submit_subscription(
            "actor-1", PricingRequest(plan_id="plan-customer", seat_count=12)
        )

        fetched = await memory_backend.fetch_subscription("actor-1")
        assert fetched == subscription
        assert fetched.status == SubscriptionStatus.PENDING
        assert fetched.final_price_snapshot == Money(1140)

    async def test_submit_propagates_pricing_errors(self, memory_backend):
        with pytest.raises(InvalidRequest):
            await memory_backend.submit_subscription(
                "actor-1", PricingRequest(plan_id="plan-customer", seat_count=0)
            )

    async def test_approve_and_reject(self, memory_backend, fixed_now):
        approved = await submit_and_approve(memory_backend)
        assert approved.status == SubscriptionStatus.APPROVED
        assert approved.expiry_date == fixed_now + timedelta(days=30)
        assert approved.search_credits.remaining == 10

        other = await memory_backend.submit_subscription(
            "actor-2", PricingRequest(plan_id="plan-supplier", seat_count=1)
        )
        rejected = memory_backend.reject_subscription(other.id, "Wrong receipt")
        assert rejected.rejection_reason == "Wrong receipt"
        assert (await memory_backend.fetch_subscription("actor-2")).status == (
            SubscriptionStatus.REJECTED
        )

    async def test_unknown_subscription(self, memory_backend):
        with pytest.raises(FetchFailure):
            memory_backend.get_subscription("missing")
        with pytest.raises(FetchFailure):
            await memory_backend.quote_renewal_price("missing", 1)

    async def test_renewal_flow(self, memory_backend):
        approved = await submit_and_approve(memory_backend)

        quote = await memory_backend.quote_renewal_price(approved.id, 25)
        assert quote.total_price == Money(50)

        receipt = await memory_backend.submit_renewal(
            "actor-1", RenewalRequest(subscription_id=approved.id, additional_searches=25)
        )
        assert receipt.status == RenewalStatus.PENDING
        # Submitting does not touch the balance
        assert memory_backend.get_subscription(approved.id).search_credits.remaining == 10

        assert memory_backend.approve_renewal(receipt.id).status == RenewalStatus.APPROVED
        credits = memory_backend.get_subscription(approved.id).search_credits
        assert (credits.purchased, credits.remaining) == (35, 35)

    async def test_reject_renewal(self, memory_backend):
        approved = await submit_and_approve(memory_backend)
        receipt = await memory_backend.submit_renewal(
            "actor-1", RenewalRequest(subscription_id=approved.id, additional_searches=25)
        )

        assert memory_backend.reject_renewal(receipt.id).status == RenewalStatus.REJECTED
        with pytest.raises(InvalidTransition):
            memory_backend.approve_renewal(receipt.id)

    async def test_renewal_for_someone_elses_subscription(self, memory_backend):
        approved = await submit_and_approve(memory_backend)
        with pytest.raises(SubmissionFailed):
            await memory_backend.submit_renewal(
                "actor-2", RenewalRequest(subscription_id=approved.id, additional_searches=1)
            )

    async def test_expire_due(self, memory_backend, fixed_now):
        approved = await submit_and_approve(memory_backend)

        assert memory_backend.expire_due(fixed_now + timedelta(days=1)) == []
        expired = memory_backend.expire_due(fixed_now + timedelta(days=31))

        assert [s.id for s in expired] == [approved.id]
        assert memory_backend.get_subscription(approved.id).status == (
            SubscriptionStatus.EXPIRED
        )

    async def test_consume_search(self, memory_backend):
        await submit_and_approve(memory_backend, searches=10)

        for _ in range(10):
            memory_backend.consume_search("actor-1")

        subscription = await memory_backend.fetch_subscription("actor-1")
        assert subscription.search_credits_exhausted()

        with pytest.raises(SubmissionFailed) as exc_info:
            memory_backend.consume_search("actor-1")
        assert str(exc_info.value) == NO_SEARCHES_OR_POINTS_AVAILABLE
        assert is_search_credits_exhausted_error(
            str(exc_info.value), exc_info.value.error_code
        )

    async def test_consume_search_spends_points_after_credits(self, memory_backend):
        approved = await submit_and_approve(memory_backend, searches=10)
        subscription = memory_backend.get_subscription(approved.id)
        credits = subscription.search_credits.model_copy(
            update={"remaining": 0, "points_earned": 2}
        )
        memory_backend._subscriptions[approved.id] = subscription.model_copy(
            update={"search_credits": credits}
        )

        updated = memory_backend.consume_search("actor-1")
        assert updated.search_credits.points_earned == 1

    async def test_consume_search_refused_after_expiry(self, memory_backend, fixed_now):
        approved = await submit_and_approve(memory_backend, searches=10)

        with pytest.raises(SubmissionFailed) as exc_info:
            memory_backend.consume_search("actor-1", now=fixed_now + timedelta(days=31))
        assert exc_info.value.error_code == NO_SEARCHES_ERROR_CODE

        subscription = memory_backend.get_subscription(approved.id)
        assert subscription.search_credits.remaining == 10

    async def test_consume_search_refused_while_pending(self, memory_backend):
        await memory_backend.submit_subscription(
            "actor-1",
            PricingRequest(plan_id="plan-customer", seat_count=1, requested_searches=10),
        )

        with pytest.raises(SubmissionFailed):
            memory_backend.consume_search("actor-1")


class TestBackendFactory:
    def test_selects_backend_from_settings(self):
        from packages.billing.providers.backend import factory

        with patch.object(factory, "_subscription_backend", None), patch.object(
            factory.settings, "subscription_backend", SubscriptionBackendKind.MEMORY
        ):
            backend = factory.get_subscription_backend()
            assert isinstance(backend, InMemorySubscriptionBackend)
            assert factory.get_subscription_backend() is backend

        with patch.object(factory, "_subscription_backend", None), patch.object(
            factory.settings, "subscription_backend", SubscriptionBackendKind.HTTP
        ):
            assert isinstance(factory.get_subscription_backend(), HttpSubscriptionBackend)


class TestSearchCreditsErrorSignal:
    @pytest.mark.parametrize(
        "message,code,expected",
        [
            (None, "518", True),
            ("NO_SEARCHES_OR_POINTS_AVAILABLE", None, True),
            ("Customer has no searches left", None, True),
            ("Supplier offline", "500", False),
            (None, None, False),
        ],
    )
    def test_recognises_exhausted_credits(self, message, code, expected):
        assert is_search_credits_exhausted_error(message, code) is expected
