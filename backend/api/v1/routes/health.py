from fastapi import APIRouter, Depends

from common.core.config import settings
from common.core.otel_axiom_exporter import get_logger
from packages.billing.dependencies import get_backend
from packages.billing.exceptions import FetchFailure
from packages.billing.providers.backend import SubscriptionBackendInterface

logger = get_logger(__name__)

router = APIRouter()


@router.get("/")
async def health_check():
    # No logging - k8s probes hit this every 5-10s
    return {"status": "healthy", "service": settings.app_name}


@router.get("/backend")
async def backend_check(
    backend: SubscriptionBackendInterface = Depends(get_backend),
):
    try:
        await backend.list_plans()
        return {"status": "healthy", "backend": settings.subscription_backend.value}
    except FetchFailure as e:
        logger.error(f"Subscription backend health check failed: {e}")
        return {"status": "unhealthy", "backend": settings.subscription_backend.value}
