"""
Billing package - plans, pricing, subscriptions and renewals.

Prices are computed locally from the plan definition so the buyer sees the
same number the backend will charge. Plans and subscriptions themselves live
behind a ``SubscriptionBackendInterface`` (HTTP or in-memory).
"""
