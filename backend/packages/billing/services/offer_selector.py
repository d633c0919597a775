"""Volume discount selection."""

import logging
from collections import Counter
from typing import Iterable, Optional

from common.core.otel_axiom_exporter import trace_span, log_span_event
from packages.billing.models.domain.plans import OfferTier


def find_duplicate_tiers(offer_tiers: Iterable[OfferTier]) -> list[int]:
    """Return the ``min_seat_count`` values that appear on more than one tier."""
    counts = Counter(tier.min_seat_count for tier in offer_tiers)
    return sorted(seats for seats, count in counts.items() if count > 1)


class OfferSelector:
    """
    Picks the single offer tier that applies to a seat count.

    The applicable tier is the one with the largest ``min_seat_count`` not above
    the seat count. Tiers never stack. Pure and stateless.
    """

    @trace_span
    def select(
        self,
        offer_tiers: Iterable[OfferTier],
        seat_count: int,
        plan_id: Optional[str] = None,
    ) -> Optional[OfferTier]:
        best: Optional[OfferTier] = None

        for tier in offer_tiers:
            if tier.min_seat_count > seat_count:
                continue

            if best is None or tier.min_seat_count > best.min_seat_count:
                best = tier
            elif tier.min_seat_count == best.min_seat_count:
                # Duplicate tier: keep the larger discount
                self._report_duplicate(plan_id, tier.min_seat_count)
                if tier.discount_percent > best.discount_percent:
                    best = tier

        return best

    def _report_duplicate(self, plan_id: Optional[str], min_seat_count: int) -> None:
        log_span_event(
            "Catalog inconsistency: duplicate offer tier",
            attributes={
                "plan_id": plan_id or "unknown",
                "min_seat_count": min_seat_count,
            },
            level=logging.WARNING,
        )
