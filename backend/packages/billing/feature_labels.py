"""Display labels for plan feature keys."""

from typing import Literal

from packages.billing.models.domain.enums import PlanFeatureKey, PlanType

Language = Literal["en", "ar"]

PLAN_FEATURE_LABELS: dict[str, dict] = {
    # Supplier features
    PlanFeatureKey.SUPPLIER_ADVERTISEMENTS.value: {
        "en": "Advertisements",
        "ar": "الإعلانات",
        "plan_type": PlanType.SUPPLIER,
    },
    PlanFeatureKey.SUPPLIER_PRIVATE_ORDERS.value: {
        "en": "Private Orders",
        "ar": "الطلبات الخاصة",
        "plan_type": PlanType.SUPPLIER,
    },
    PlanFeatureKey.SUPPLIER_SPECIAL_OFFERS.value: {
        "en": "Special Offers",
        "ar": "العروض الخاصة",
        "plan_type": PlanType.SUPPLIER,
    },
    PlanFeatureKey.SUPPLIER_ADVANCED_REPORTS.value: {
        "en": "Advanced Reports",
        "ar": "التقارير المتقدمة",
        "plan_type": PlanType.SUPPLIER,
    },
    # Customer features
    PlanFeatureKey.CUSTOMER_PRIVATE_ORDERS.value: {
        "en": "Private Orders",
        "ar": "الطلبات الخاصة",
        "plan_type": PlanType.CUSTOMER,
    },
    PlanFeatureKey.CUSTOMER_RAW_MATERIALS_ADVANCE.value: {
        "en": "Raw Materials Advance",
        "ar": "سلفة الخامات",
        "plan_type": PlanType.CUSTOMER,
    },
    PlanFeatureKey.CUSTOMER_VIEW_SUPPLIER_OFFERS.value: {
        "en": "View Supplier Special Offers",
        "ar": "ظهور العروض الخاصة للموردين",
        "plan_type": PlanType.CUSTOMER,
    },
    PlanFeatureKey.CUSTOMER_ADVANCED_REPORTS.value: {
        "en": "Advanced Reports",
        "ar": "التقارير المتقدمة",
        "plan_type": PlanType.CUSTOMER,
    },
}


def features_for_plan_type(plan_type: PlanType) -> list[str]:
    """Feature keys an administrator may attach to a plan of this type."""
    return [
        key
        for key, entry in PLAN_FEATURE_LABELS.items()
        if plan_type == PlanType.BOTH or entry["plan_type"] == plan_type
    ]


def feature_label(key: str, lang: Language = "en") -> str:
    """Human-readable label; unknown keys are returned unchanged."""
    entry = PLAN_FEATURE_LABELS.get(key)
    return entry[lang] if entry else key
