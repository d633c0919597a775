# Shared pytest configuration and fixtures for all test types
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from api.main import app
from packages.billing.dependencies import get_backend
from packages.billing.providers.backend.memory_backend import (
    InMemorySubscriptionBackend,
)
from packages.billing.services.subscription_lifecycle import SubscriptionLifecycle
from tests.factories.billing_factory import BillingFactory, FIXED_NOW


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def lifecycle():
    """Lifecycle whose clock is pinned to ``FIXED_NOW``."""
    return SubscriptionLifecycle(clock=lambda: FIXED_NOW)


@pytest.fixture
def customer_plan():
    return BillingFactory.create_customer_plan()


@pytest.fixture
def supplier_plan():
    return BillingFactory.create_supplier_plan()


@pytest.fixture
def shared_plan():
    return BillingFactory.create_shared_plan()


@pytest.fixture
def memory_backend(customer_plan, supplier_plan, shared_plan, lifecycle):
    """In-memory backend seeded with one plan per audience."""
    return InMemorySubscriptionBackend(
        plans=[customer_plan, supplier_plan, shared_plan], lifecycle=lifecycle
    )


@pytest_asyncio.fixture(scope="function")
async def client(memory_backend):
    """Create a test client backed by the in-memory subscription store."""
    app.dependency_overrides[get_backend] = lambda: memory_backend

    try:
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()
