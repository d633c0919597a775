"""
Factory for getting the subscription backend instance.
"""

from typing import Optional

from common.core.config import settings
from common.core.constants import SubscriptionBackendKind
from common.core.otel_axiom_exporter import get_logger
from packages.billing.providers.backend.interface import SubscriptionBackendInterface
from packages.billing.providers.backend.http_backend import HttpSubscriptionBackend
from packages.billing.providers.backend.memory_backend import (
    InMemorySubscriptionBackend,
)

logger = get_logger(__name__)

# Global instance
_subscription_backend: Optional[SubscriptionBackendInterface] = None


def get_subscription_backend() -> SubscriptionBackendInterface:
    """
    Get the configured subscription backend.

    Returns:
        SubscriptionBackendInterface: The backend selected by
        ``settings.subscription_backend``
    """
    global _subscription_backend

    if _subscription_backend is None:
        if settings.subscription_backend == SubscriptionBackendKind.MEMORY:
            _subscription_backend = InMemorySubscriptionBackend()
        else:
            _subscription_backend = HttpSubscriptionBackend()
        logger.info(
            f"Initialized {settings.subscription_backend.value} subscription backend"
        )

    return _subscription_backend
