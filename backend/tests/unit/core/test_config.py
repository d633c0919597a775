"""Unit tests for environment-driven settings."""

from common.core.config import Settings
from common.core.constants import Environment, SubscriptionBackendKind


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("AXIOM_TOKEN", raising=False)
        settings = Settings(_env_file=None)

        assert settings.environment == Environment.LOCAL
        assert settings.subscription_backend == SubscriptionBackendKind.HTTP
        assert settings.currency_decimal_places == 2
        assert settings.low_search_credit_threshold == 5
        assert not settings.telemetry_export_enabled
        assert "http://localhost:3000" in settings.cors_allowed_origins

    def test_loaded_from_environment(self, monkeypatch):
        monkeypatch.setenv("SUBSCRIPTION_BACKEND", "memory")
        monkeypatch.setenv("MARKETPLACE_API_BASE_URL", "https://api.example.test")
        monkeypatch.setenv("LOW_SEARCH_CREDIT_THRESHOLD", "12")
        monkeypatch.setenv("AXIOM_TOKEN", "xaat-token")
        monkeypatch.setenv("ENVIRONMENT", "production")

        settings = Settings(_env_file=None)

        assert settings.subscription_backend == SubscriptionBackendKind.MEMORY
        assert settings.marketplace_api_base_url == "https://api.example.test"
        assert settings.low_search_credit_threshold == 12
        assert settings.telemetry_export_enabled
        assert "http://localhost:3000" not in settings.cors_allowed_origins
