from enum import Enum


class Environment(str, Enum):
    """Environment profiles."""

    LOCAL = "local"
    DEV = "dev"
    STAGING = "staging"
    PRODUCTION = "production"


class SubscriptionBackendKind(str, Enum):
    """Backing store implementations for subscriptions and plans."""

    HTTP = "http"
    MEMORY = "memory"
