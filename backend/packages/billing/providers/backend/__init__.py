"""
Subscription backend providers - where plans and subscriptions live.
"""

from packages.billing.providers.backend.interface import SubscriptionBackendInterface
from packages.billing.providers.backend.factory import get_subscription_backend

__all__ = [
    "SubscriptionBackendInterface",
    "get_subscription_backend",
]
