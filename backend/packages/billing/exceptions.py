"""
Billing error taxonomy.

Business-as-usual outcomes (no applicable offer, no subscription) are plain
``None`` results, never exceptions.
"""

from typing import Optional

from common.core.exceptions import (
    ConflictError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)

# Marker the order-placement flow returns when a customer has nothing left to spend
NO_SEARCHES_OR_POINTS_AVAILABLE = "NO_SEARCHES_OR_POINTS_AVAILABLE"
NO_SEARCHES_ERROR_CODE = "518"


class InvalidRequest(ValidationError):
    """Malformed pricing or renewal input. Never retried."""

    pass


class PlanUnavailable(NotFoundError):
    """Plan is inactive, unknown, or cannot price what was asked."""

    def __init__(self, plan_id: str, reason: str = "plan is not available"):
        self.plan_id = plan_id
        self.reason = reason
        super().__init__(f"Plan {plan_id}: {reason}")


class FetchFailure(UpstreamError):
    """Network or backing-store failure while reading subscriptions or plans."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class SubmissionFailed(UpstreamError):
    """The backend refused a submission. Carries the upstream error verbatim."""

    def __init__(self, message: str, error_code: Optional[str] = None):
        self.error_code = error_code
        super().__init__(message)


class InvalidTransition(ConflictError):
    """Lifecycle transition not allowed from the current state."""

    pass


class CatalogInconsistency(UserWarning):
    """Plan data violates a catalog invariant. Reported, never raised."""

    pass


def is_search_credits_exhausted_error(
    message: Optional[str] = None, error_code: Optional[str] = None
) -> bool:
    """Check whether an order-placement error means search credits ran out."""
    if error_code == NO_SEARCHES_ERROR_CODE:
        return True
    if not message:
        return False
    lowered = message.lower()
    return (
        NO_SEARCHES_OR_POINTS_AVAILABLE in message
        or "no searches" in lowered
        or "no points" in lowered
    )
