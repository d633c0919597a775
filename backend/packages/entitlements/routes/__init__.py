"""Entitlement API routes."""

from packages.entitlements.routes import entitlements

__all__ = ["entitlements"]
