"""Domain models for billing plans."""

from decimal import Decimal
from typing import Annotated, Any, Literal, Optional, Union
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    field_validator,
    model_validator,
)

from packages.billing.models.domain.enums import (
    BillingFrequency,
    FeatureKind,
    PlanType,
)
from packages.billing.models.domain.money import Money


class OfferTier(BaseModel):
    """Volume discount: ``discount_percent`` off once ``min_seat_count`` seats are bought."""

    model_config = ConfigDict(frozen=True)

    min_seat_count: int = Field(ge=0)
    discount_percent: Decimal = Field(ge=0, le=100)
    description: str = ""


class SearchConfig(BaseModel):
    """Metered product-search settings (customer plans only)."""

    model_config = ConfigDict(frozen=True)

    range_from: Optional[int] = Field(default=None, ge=0)
    range_to: Optional[int] = Field(default=None, ge=0)
    unlimited: bool = False
    # Per-unit rate at full precision
    price_per_search: Optional[Decimal] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def validate_range(self) -> "SearchConfig":
        if (
            not self.unlimited
            and self.range_from is not None
            and self.range_to is not None
            and self.range_from > self.range_to
        ):
            raise ValueError("search range 'from' must not exceed 'to'")
        return self

    @property
    def is_metered(self) -> bool:
        """Searches are sold per unit (not unlimited, and priced)."""
        return not self.unlimited and self.price_per_search is not None

    def allows(self, searches: int) -> bool:
        """Check a requested search count against the configured range."""
        if self.unlimited:
            return True
        if self.range_from is not None and searches < self.range_from:
            return False
        if self.range_to is not None and searches > self.range_to:
            return False
        return True


class IncludedFeature(BaseModel):
    """Feature listed on a plan without a separate price."""

    model_config = ConfigDict(frozen=True)

    kind: Literal[FeatureKind.INCLUDED] = FeatureKind.INCLUDED
    key: str


class PricedFeature(BaseModel):
    """Optional add-on feature the buyer may select for a price."""

    model_config = ConfigDict(frozen=True)

    kind: Literal[FeatureKind.PRICED] = FeatureKind.PRICED
    key: str
    price: Money

    @field_validator("price")
    @classmethod
    def validate_price(cls, v: Money) -> Money:
        if v.is_negative():
            raise ValueError("feature price must not be negative")
        return v


PlanFeature = Annotated[
    Union[IncludedFeature, PricedFeature], Field(discriminator="kind")
]

_plan_feature_adapter: TypeAdapter[PlanFeature] = TypeAdapter(PlanFeature)


def resolve_plan_features(raw_features: Optional[list[Any]]) -> list[PlanFeature]:
    """
    Resolve the backend's feature list into tagged entries.

    The backend sends either bare keys (``"CUSTOMER_PRIVATE_ORDERS"``) or
    objects (``{"feature": ..., "price": ...}``). This runs once when a plan is
    loaded so nothing downstream has to inspect shapes again.
    """
    resolved: list[PlanFeature] = []
    for entry in raw_features or []:
        if isinstance(entry, (IncludedFeature, PricedFeature)):
            resolved.append(entry)
        elif isinstance(entry, str):
            if entry.strip():
                resolved.append(IncludedFeature(key=entry))
        elif isinstance(entry, dict) and "kind" in entry:
            # Already tagged, e.g. a plan read back from its own JSON dump
            resolved.append(_plan_feature_adapter.validate_python(entry))
        elif isinstance(entry, dict) and entry.get("feature"):
            key = str(entry["feature"])
            if entry.get("price") is None:
                resolved.append(IncludedFeature(key=key))
            else:
                resolved.append(PricedFeature(key=key, price=entry["price"]))
        else:
            raise ValueError(f"Unrecognised plan feature entry: {entry!r}")
    return resolved


class Plan(BaseModel):
    """Read-only plan definition as published by the administrator."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: Optional[str] = None
    price_per_seat: Money
    billing_frequency: BillingFrequency
    plan_type: PlanType
    features: list[PlanFeature] = Field(default_factory=list)
    search_config: Optional[SearchConfig] = None
    offer_tiers: list[OfferTier] = Field(default_factory=list)
    active: bool = True
    exclusive: bool = False
    is_popular: bool = False

    @field_validator("features", mode="before")
    @classmethod
    def resolve_features(cls, v: Any) -> list[PlanFeature]:
        return resolve_plan_features(v)

    @field_validator("price_per_seat")
    @classmethod
    def validate_price_per_seat(cls, v: Money) -> Money:
        if v.is_negative():
            raise ValueError("price per seat must not be negative")
        return v

    @model_validator(mode="before")
    @classmethod
    def scope_search_config(cls, data: Any) -> Any:
        # Product searches are only sold on customer plans
        if isinstance(data, dict) and data.get("search_config") is not None:
            plan_type = data.get("plan_type")
            if plan_type is not None and PlanType(plan_type) != PlanType.CUSTOMER:
                data = {**data, "search_config": None}
        return data

    @property
    def optional_features(self) -> list[PricedFeature]:
        """Priced add-ons, in plan order."""
        return [f for f in self.features if isinstance(f, PricedFeature)]

    @property
    def included_features(self) -> list[IncludedFeature]:
        return [f for f in self.features if isinstance(f, IncludedFeature)]

    def get_optional_feature(self, key: str) -> Optional[PricedFeature]:
        for feature in self.optional_features:
            if feature.key == key:
                return feature
        return None

    @property
    def has_metered_search(self) -> bool:
        return self.search_config is not None and self.search_config.is_metered