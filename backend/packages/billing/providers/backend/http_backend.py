"""
Marketplace REST API implementation of the subscription backend.
"""

from typing import Any, Optional

import httpx
from pydantic import ValidationError

from common.core.config import settings
from common.core.otel_axiom_exporter import trace_span, get_logger
from packages.billing.exceptions import FetchFailure, SubmissionFailed
from packages.billing.models.domain.enums import PlanType
from packages.billing.models.domain.plans import Plan
from packages.billing.models.domain.pricing import PricingRequest
from packages.billing.models.domain.renewal import (
    RenewalPriceQuote,
    RenewalReceipt,
    RenewalRequest,
)
from packages.billing.models.domain.subscription import Subscription
from packages.billing.models.schemas.wire import (
    PlanWire,
    RenewalQuoteWire,
    RenewalReceiptWire,
    RenewSearchesWire,
    SubmitSubscriptionWire,
    UserSubscriptionWire,
)
from packages.billing.providers.backend.interface import SubscriptionBackendInterface

logger = get_logger(__name__)


class ErrorEnvelope(Exception):
    """Error envelope returned by the marketplace API."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
    ):
        self.status_code = status_code
        self.error_code = error_code
        super().__init__(message)


class HttpSubscriptionBackend(SubscriptionBackendInterface):
    """Talks to the marketplace ``/api/v1`` endpoints over HTTP."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.marketplace_api_base_url).rstrip("/")
        self.token = token if token is not None else settings.marketplace_api_token
        self.timeout = timeout or settings.marketplace_api_timeout_seconds
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, Any]] = None,
    ) -> Any:
        """
        Send a request and unwrap the marketplace envelope.

        Success bodies look like ``{"content": {"data": ...}}`` (or just
        ``{"content": ...}``); failures carry ``{"error": {"errorMessage",
        "errorCode"}}``.
        """
        async with httpx.AsyncClient(
            base_url=self.base_url,
            headers=self._headers(),
            timeout=self.timeout,
            transport=self._transport,
        ) as client:
            response = await client.request(method, path, json=json, params=params)

        body: Any = {}
        if "application/json" in response.headers.get("content-type", ""):
            try:
                body = response.json()
            except ValueError as e:
                raise ErrorEnvelope(
                    f"Malformed response body ({response.status_code})",
                    status_code=response.status_code if response.is_error else None,
                ) from e
        if body is None:
            body = {}
        if not isinstance(body, dict):
            raise ErrorEnvelope(
                f"Unexpected response body ({response.status_code}): "
                f"expected an object, got {type(body).__name__}",
                status_code=response.status_code if response.is_error else None,
            )

        error = body.get("error")
        if response.is_error or error:
            if not isinstance(error, dict):
                error = {"errorMessage": str(error)} if error else {}
            raise ErrorEnvelope(
                error.get("errorMessage")
                or f"Server error ({response.status_code}): {response.reason_phrase}",
                status_code=response.status_code,
                error_code=error.get("errorCode"),
            )

        content = body.get("content")
        if isinstance(content, dict) and "data" in content:
            return content["data"]
        return content

    async def _read(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        try:
            return await self._request("GET", path, params=params)
        except ErrorEnvelope as e:
            if e.status_code == 404:
                return None
            raise FetchFailure(str(e), status_code=e.status_code) from e
        except httpx.HTTPError as e:
            raise FetchFailure(f"Unable to reach {self.base_url}: {e}") from e

    async def _write(self, path: str, payload: dict[str, Any]) -> Any:
        try:
            return await self._request("POST", path, json=payload)
        except ErrorEnvelope as e:
            raise SubmissionFailed(str(e), error_code=e.error_code) from e
        except httpx.HTTPError as e:
            raise SubmissionFailed(f"Unable to reach {self.base_url}: {e}") from e

    @trace_span
    async def fetch_subscription(self, actor_id: str) -> Optional[Subscription]:
        data = await self._read("/api/v1/user-subscriptions/my-subscription")
        if not data:
            return None

        try:
            subscription = UserSubscriptionWire.model_validate(data).to_domain()
        except ValidationError as e:
            raise FetchFailure(f"Malformed subscription payload: {e}") from e

        if subscription.actor_id != actor_id:
            raise FetchFailure(
                f"Backend returned the subscription of another actor for {actor_id}"
            )
        return subscription

    @trace_span
    async def fetch_plan(self, plan_id: str) -> Optional[Plan]:
        data = await self._read(f"/api/v1/plans/{plan_id}")
        if not data:
            return None
        return self._parse_plan(data)

    @trace_span
    async def list_plans(self, plan_type: Optional[PlanType] = None) -> list[Plan]:
        path = f"/api/v1/plans/type/{plan_type.value}" if plan_type else "/api/v1/plans"
        data = await self._read(path)
        if data is None:
            return []
        if not isinstance(data, list):
            raise FetchFailure(
                f"Malformed plan list payload: expected a list, got {type(data).__name__}"
            )
        return [self._parse_plan(item) for item in data]

    def _parse_plan(self, data: Any) -> Plan:
        try:
            return PlanWire.model_validate(data).to_domain()
        except ValidationError as e:
            raise FetchFailure(f"Malformed plan payload: {e}") from e

    @trace_span
    async def submit_subscription(
        self,
        actor_id: str,
        request: PricingRequest,
        payment_evidence_ref: Optional[str] = None,
    ) -> Subscription:
        payload = SubmitSubscriptionWire.from_domain(request, payment_evidence_ref)
        data = await self._write(
            "/api/v1/user-subscriptions/submit",
            payload.model_dump(by_alias=True, exclude_none=True),
        )
        logger.info(
            f"Submitted subscription request for actor {actor_id}",
            extra={"actor_id": actor_id, "plan_id": request.plan_id},
        )

        try:
            return UserSubscriptionWire.model_validate(data).to_domain()
        except ValidationError as e:
            raise SubmissionFailed(f"Malformed submission response: {e}") from e

    @trace_span
    async def submit_renewal(
        self, actor_id: str, request: RenewalRequest
    ) -> RenewalReceipt:
        payload = RenewSearchesWire.from_domain(request)
        data = await self._write(
            "/api/v1/user-subscriptions/renew-searches",
            payload.model_dump(by_alias=True, exclude_none=True),
        )
        logger.info(
            f"Submitted renewal for subscription {request.subscription_id}",
            extra={
                "actor_id": actor_id,
                "subscription_id": request.subscription_id,
                "additional_searches": request.additional_searches,
            },
        )

        try:
            return RenewalReceiptWire.model_validate(data).to_domain()
        except ValidationError as e:
            raise SubmissionFailed(f"Malformed renewal response: {e}") from e

    @trace_span
    async def quote_renewal_price(
        self, subscription_id: str, additional_searches: int
    ) -> RenewalPriceQuote:
        data = await self._read(
            f"/api/v1/user-subscriptions/{subscription_id}/renewal-price",
            params={"numberOfSearches": additional_searches},
        )
        if not data:
            raise FetchFailure(
                f"No renewal price available for subscription {subscription_id}",
                status_code=404,
            )

        try:
            return RenewalQuoteWire.model_validate(data).to_domain()
        except ValidationError as e:
            raise FetchFailure(f"Malformed renewal quote: {e}") from e
