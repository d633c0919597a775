"""Domain models for partial renewals (buying more searches)."""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, ConfigDict

from packages.billing.models.domain.enums import RenewalStatus
from packages.billing.models.domain.money import Money


class RenewalRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    subscription_id: str
    additional_searches: int
    payment_evidence_ref: Optional[str] = None


class RenewalPriceQuote(BaseModel):
    model_config = ConfigDict(frozen=True)

    subscription_id: str
    additional_searches: int
    unit_price: Decimal
    total_price: Money


class RenewalReceipt(BaseModel):
    """Pending credit adjustment attached to an approved subscription."""

    model_config = ConfigDict(frozen=True)

    id: str
    subscription_id: str
    additional_searches: int
    total_price: Money
    status: RenewalStatus = RenewalStatus.PENDING
    submission_date: datetime
    payment_evidence_ref: Optional[str] = None
