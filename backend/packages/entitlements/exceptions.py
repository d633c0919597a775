from common.core.exceptions import ForbiddenError


class FeatureNotEntitled(ForbiddenError):
    """The actor's subscription does not grant the requested feature."""

    def __init__(self, actor_id: str, feature_key: str):
        self.actor_id = actor_id
        self.feature_key = feature_key
        super().__init__(f"Feature {feature_key} is not in the current plan of {actor_id}")
