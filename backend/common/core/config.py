from typing import Optional, List
from pydantic_settings import BaseSettings, SettingsConfigDict

from common.core.constants import Environment, SubscriptionBackendKind


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Environment Profile
    environment: Environment = Environment.LOCAL

    # API Settings
    app_name: str = "marketplace-entitlements"
    api_version: str = "1.0.0"
    debug: bool = False

    # Marketplace backend (subscriptions, plans, renewals)
    subscription_backend: SubscriptionBackendKind = SubscriptionBackendKind.HTTP
    marketplace_api_base_url: str = "http://localhost:8080"
    marketplace_api_token: Optional[str] = None  # Bearer token of the signed-in actor
    marketplace_api_timeout_seconds: float = 30.0

    # Pricing
    currency_decimal_places: int = 2

    # Search credits
    low_search_credit_threshold: int = 5

    # OpenTelemetry
    otel_service_name: str = "marketplace-entitlements"
    otel_service_version: str = "1.0.0"

    # Axiom (export disabled when no token is configured)
    axiom_token: Optional[str] = None
    axiom_dataset: str = "marketplace"

    @property
    def telemetry_export_enabled(self) -> bool:
        return bool(self.axiom_token)

    @property
    def cors_allowed_origins(self) -> List[str]:
        """Auto-select CORS origins based on environment."""
        if self.environment == Environment.LOCAL:
            return [
                "http://localhost:3000",
                "http://localhost:5173",
            ]
        return [
            "https://rawneeded.com",
            "https://api.rawneeded.com",
        ]


settings = Settings()
