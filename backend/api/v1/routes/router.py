from fastapi import APIRouter

from api.v1.routes import health
from packages.billing.routes import plans, subscriptions
from packages.entitlements.routes import entitlements

api_router = APIRouter()

# Health check (no auth required)
api_router.include_router(health.router, prefix="/health", tags=["health"])

# Plans (no auth - public pricing info)
api_router.include_router(plans.router, prefix="/billing/plans", tags=["billing"])

# Actor-scoped routes (actor id supplied by the gateway)
api_router.include_router(
    subscriptions.router, prefix="/billing/subscriptions", tags=["billing"]
)
api_router.include_router(
    entitlements.router, prefix="/billing/entitlements", tags=["entitlements"]
)
