"""
Per-actor subscription cache with single-flight fetches.

State machine (all transitions happen under ``self._lock``):

    IDLE/STALE --get()--> FETCHING --+-result--> READY  (subscription found)
                                     +--------> IDLE   (none found, or fetch failed)
    FETCHING --invalidate()--> STALE   (in-flight result is discarded on arrival)
    READY    --invalidate()--> STALE

Concurrent ``get()`` calls while FETCHING await the same task. There is no
TTL: only ``invalidate()`` makes a cached subscription go away.
"""

import asyncio
from enum import Enum
from typing import Optional

from common.core.otel_axiom_exporter import trace_span, get_logger
from packages.billing.exceptions import FetchFailure
from packages.billing.models.domain.subscription import Subscription
from packages.billing.providers.backend.interface import SubscriptionBackendInterface
from packages.billing.services.subscription_lifecycle import SubscriptionLifecycle

logger = get_logger(__name__)


class CacheState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    READY = "ready"
    STALE = "stale"


class EntitlementCache:
    """Holds the actor's current subscription. Owned by the actor's session."""

    def __init__(
        self,
        actor_id: str,
        backend: SubscriptionBackendInterface,
        lifecycle: Optional[SubscriptionLifecycle] = None,
    ):
        self.actor_id = actor_id
        self.backend = backend
        self.lifecycle = lifecycle or SubscriptionLifecycle()

        self._lock = asyncio.Lock()
        self._state = CacheState.IDLE
        self._value: Optional[Subscription] = None
        self._inflight: Optional[asyncio.Task] = None
        # Bumped by invalidate(); a fetch started under an older generation is discarded
        self._generation = 0

    @property
    def state(self) -> CacheState:
        return self._state

    async def get(self, actor_id: Optional[str] = None) -> Optional[Subscription]:
        """
        Current subscription, fetching it if nothing is cached.

        Passing a different ``actor_id`` than the cache holds means the session
        changed hands: the cache is rebound and the old actor's state dropped.

        Returns None when the actor has no subscription or the fetch failed;
        either way the next call fetches again.
        """
        async with self._lock:
            if actor_id is not None and actor_id != self.actor_id:
                logger.info(
                    f"Entitlement cache switching actor {self.actor_id} -> {actor_id}"
                )
                self._reset()
                self.actor_id = actor_id

            if self._state == CacheState.READY:
                return self._value

            if self._state == CacheState.FETCHING:
                task = self._inflight
            else:
                task = asyncio.create_task(self._fetch(self.actor_id, self._generation))
                self._inflight = task
                self._state = CacheState.FETCHING

        # A cancelled caller must not cancel the fetch other callers share
        return await asyncio.shield(task)

    async def invalidate(self) -> None:
        """Drop the cached subscription. An in-flight fetch will not be cached."""
        async with self._lock:
            self._reset()

        logger.debug(
            f"Invalidated entitlement cache for actor {self.actor_id}",
            extra={"actor_id": self.actor_id},
        )

    async def has_feature(self, key: str) -> bool:
        """True only for a selected feature of an approved, unexpired subscription."""
        subscription = await self.get()
        if not self.lifecycle.grants_entitlements(subscription):
            return False
        return subscription.has_selected_feature(key)

    def peek(self) -> Optional[Subscription]:
        """Cached subscription, without fetching."""
        return self._value if self._state == CacheState.READY else None

    def peek_feature(self, key: str) -> Optional[bool]:
        """
        Answer from the cached subscription only.

        Returns None when nothing is cached yet, for callers that cannot await.
        """
        subscription = self.peek()
        if subscription is None:
            return None
        return self.lifecycle.grants_entitlements(
            subscription
        ) and subscription.has_selected_feature(key)

    @trace_span
    async def _fetch(self, actor_id: str, generation: int) -> Optional[Subscription]:
        try:
            subscription = await self.backend.fetch_subscription(actor_id)
        except FetchFailure as e:
            logger.warning(
                f"Failed to fetch subscription for actor {actor_id}: {e}",
                extra={"actor_id": actor_id, "status_code": e.status_code},
            )
            subscription = None
        except Exception:
            async with self._lock:
                self._install(generation, None)
            raise

        async with self._lock:
            self._install(generation, subscription)
        return subscription

    def _install(self, generation: int, subscription: Optional[Subscription]) -> None:
        """Store a fetch result. Caller holds ``self._lock``."""
        if generation != self._generation:
            logger.debug(
                f"Discarding subscription fetched before invalidation for actor {self.actor_id}",
                extra={"actor_id": self.actor_id},
            )
            return

        self._inflight = None
        self._value = subscription
        self._state = CacheState.READY if subscription is not None else CacheState.IDLE

    def _reset(self) -> None:
        """Forget the cached value and orphan any in-flight fetch. Caller holds ``self._lock``."""
        self._generation += 1
        self._value = None
        if self._state in (CacheState.FETCHING, CacheState.READY):
            self._state = CacheState.STALE
        self._inflight = None
