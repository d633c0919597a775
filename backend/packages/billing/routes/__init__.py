"""Billing API routes."""

from packages.billing.routes import plans, subscriptions

__all__ = ["plans", "subscriptions"]
