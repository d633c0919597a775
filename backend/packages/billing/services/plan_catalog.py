"""Read-only view of plan definitions."""

import logging
from typing import Optional

from common.core.otel_axiom_exporter import trace_span, get_logger, log_span_event
from packages.billing.exceptions import PlanUnavailable
from packages.billing.models.domain.enums import PlanType
from packages.billing.models.domain.plans import Plan
from packages.billing.providers.backend.interface import SubscriptionBackendInterface
from packages.billing.services.offer_selector import find_duplicate_tiers

logger = get_logger(__name__)


class PlanCatalog:
    """
    Plans as published by the administrator.

    Every plan that passes through the catalog is remembered so callers can
    price against it without another round trip (see ``peek``).
    """

    def __init__(self, backend: SubscriptionBackendInterface):
        self.backend = backend
        self._loaded: dict[str, Plan] = {}

    @trace_span
    async def get_plan(self, plan_id: str, require_active: bool = True) -> Plan:
        """
        Fetch a plan by id.

        Raises:
            PlanUnavailable: plan does not exist, or is inactive and
                ``require_active`` is set
            FetchFailure: backend unreachable
        """
        plan = await self.backend.fetch_plan(plan_id)
        if plan is None:
            self._loaded.pop(plan_id, None)
            raise PlanUnavailable(plan_id, "plan not found")

        self._remember(plan)
        if require_active and not plan.active:
            raise PlanUnavailable(plan_id, "plan is inactive")
        return plan

    @trace_span
    async def list_plans(
        self, plan_type: Optional[PlanType] = None, include_inactive: bool = False
    ) -> list[Plan]:
        """Plans offered to ``plan_type`` (plans of type BOTH serve everyone)."""
        plans = await self.backend.list_plans(plan_type)

        result = []
        for plan in plans:
            self._remember(plan)
            if plan_type is not None and not plan.plan_type.serves(plan_type):
                continue
            if not include_inactive and not plan.active:
                continue
            result.append(plan)

        logger.debug(
            f"Listed {len(result)} plans",
            extra={"plan_type": plan_type.value if plan_type else None},
        )
        return result

    def peek(self, plan_id: str) -> Optional[Plan]:
        """Plan last loaded through this catalog, without a fetch."""
        return self._loaded.get(plan_id)

    def _remember(self, plan: Plan) -> None:
        duplicates = find_duplicate_tiers(plan.offer_tiers)
        if duplicates and self._loaded.get(plan.id) != plan:
            log_span_event(
                "Catalog inconsistency: plan has duplicate offer tiers",
                attributes={
                    "plan_id": plan.id,
                    "min_seat_counts": duplicates,
                },
                level=logging.WARNING,
            )
        self._loaded[plan.id] = plan
