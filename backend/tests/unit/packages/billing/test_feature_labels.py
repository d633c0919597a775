"""Unit tests for plan feature labels."""

from packages.billing.feature_labels import (
    PLAN_FEATURE_LABELS,
    feature_label,
    features_for_plan_type,
)
from packages.billing.models.domain.enums import PlanFeatureKey, PlanType


class TestFeatureLabels:
    def test_every_key_has_labels(self):
        assert set(PLAN_FEATURE_LABELS) == {key.value for key in PlanFeatureKey}
        for entry in PLAN_FEATURE_LABELS.values():
            assert entry["en"] and entry["ar"]

    def test_features_for_plan_type(self):
        supplier = features_for_plan_type(PlanType.SUPPLIER)
        customer = features_for_plan_type(PlanType.CUSTOMER)

        assert len(supplier) == 4
        assert all(key.startswith("SUPPLIER_") for key in supplier)
        assert all(key.startswith("CUSTOMER_") for key in customer)
        assert len(features_for_plan_type(PlanType.BOTH)) == 8

    def test_feature_label(self):
        assert feature_label("CUSTOMER_RAW_MATERIALS_ADVANCE") == "Raw Materials Advance"
        assert feature_label("CUSTOMER_RAW_MATERIALS_ADVANCE", "ar") == "سلفة الخامات"
        assert feature_label("BRAND_NEW_FEATURE") == "BRAND_NEW_FEATURE"
