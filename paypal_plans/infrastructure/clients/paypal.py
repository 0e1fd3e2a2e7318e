"""PayPal REST API HTTP client for payments, billing plans and agreements"""

import time
import httpx
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, List, Optional
from paypal_plans.domain.exceptions import GatewayError, GatewayUnavailableError
from paypal_plans.config import settings
from paypal_plans.infrastructure.observability.metrics import gateway_latency_histogram


def api_base_for_mode(mode: str) -> str:
    return settings.paypal_live_api_base if mode == "live" else settings.paypal_sandbox_api_base


@dataclass(frozen=True)
class PayPalClient:
    """
    Configured PayPal handle, immutable once built.

    Holds credentials and endpoint only; every operation opens its own
    session with :meth:`session`.
    """

    mode: str
    client_id: str
    client_secret: str = field(repr=False)
    base_url: str = ""
    timeout: float = 0.0
    transport: Optional[httpx.AsyncBaseTransport] = field(default=None, repr=False, compare=False)

    def __post_init__(self):
        if not self.base_url:
            object.__setattr__(self, "base_url", api_base_for_mode(self.mode))
        if not self.timeout:
            object.__setattr__(self, "timeout", settings.http_timeout_seconds)

    @asynccontextmanager
    async def session(self) -> AsyncIterator["PayPalSession"]:
        """Open an authenticated session; closed when the block exits"""
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self.transport,
        ) as http:
            paypal = PayPalSession(http)
            await paypal.authenticate(self.client_id, self.client_secret)
            yield paypal


class PayPalSession:
    """Authenticated request scope over a single httpx client"""

    def __init__(self, http: httpx.AsyncClient):
        self.http = http
        self.access_token: Optional[str] = None

    async def authenticate(self, client_id: str, client_secret: str) -> None:
        """
        Exchange client credentials for a bearer token.

        Raises:
            GatewayError: When PayPal rejects the credentials
            GatewayUnavailableError: On timeout or network failure
        """
        response = await self._send(
            "oauth_token",
            "POST",
            "/v1/oauth2/token",
            data={"grant_type": "client_credentials"},
            auth=(client_id, client_secret),
            headers={"Accept": "application/json"},
        )
        try:
            self.access_token = response.json()["access_token"]
        except (KeyError, ValueError, TypeError) as e:
            raise GatewayError(f"Invalid token response from PayPal: {e}") from e

    async def _send(self, operation: str, method: str, path: str, **kwargs: Any) -> httpx.Response:
        start_time = time.time()
        try:
            response = await self.http.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise GatewayUnavailableError(f"PayPal API timeout during {operation}") from e
        except httpx.RequestError as e:
            raise GatewayUnavailableError(f"PayPal API unreachable: {e}") from e
        finally:
            gateway_latency_histogram.labels(operation=operation).observe(time.time() - start_time)

        if response.status_code >= 400:
            raise _error_from_response(response)
        return response

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        json: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Authenticated JSON call; empty or 204 bodies come back as {}"""
        if self.access_token is None:
            raise RuntimeError("PayPal session is not authenticated")

        response = await self._send(
            operation,
            method,
            path,
            json=json,
            params=params,
            headers={"Authorization": f"Bearer {self.access_token}"},
        )
        if response.status_code == 204 or not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise GatewayError(f"Invalid JSON from PayPal during {operation}") from e

    # Payments

    async def create_payment(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("create_payment", "POST", "/v1/payments/payment", json=payload)

    async def execute_payment(self, payment_id: str, payer_id: str) -> Dict[str, Any]:
        return await self._request(
            "execute_payment",
            "POST",
            f"/v1/payments/payment/{payment_id}/execute",
            json={"payer_id": payer_id},
        )

    async def refund_sale(self, sale_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("refund_sale", "POST", f"/v1/payments/sale/{sale_id}/refund", json=payload)

    # Billing plans

    async def create_billing_plan(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("create_billing_plan", "POST", "/v1/payments/billing-plans", json=payload)

    async def update_billing_plan(self, plan_id: str, patch: List[Dict[str, Any]]) -> Dict[str, Any]:
        return await self._request(
            "update_billing_plan", "PATCH", f"/v1/payments/billing-plans/{plan_id}", json=patch
        )

    # Billing agreements

    async def create_billing_agreement(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request(
            "create_billing_agreement", "POST", "/v1/payments/billing-agreements", json=payload
        )

    async def execute_billing_agreement(self, token: str) -> Dict[str, Any]:
        return await self._request(
            "execute_billing_agreement",
            "POST",
            f"/v1/payments/billing-agreements/{token}/agreement-execute",
            json={},
        )

    async def cancel_billing_agreement(self, agreement_id: str, note: str) -> Dict[str, Any]:
        return await self._request(
            "cancel_billing_agreement",
            "POST",
            f"/v1/payments/billing-agreements/{agreement_id}/cancel",
            json={"note": note},
        )

    async def list_agreement_transactions(
        self, agreement_id: str, start_date: str, end_date: str
    ) -> List[Dict[str, Any]]:
        data = await self._request(
            "list_agreement_transactions",
            "GET",
            f"/v1/payments/billing-agreements/{agreement_id}/transactions",
            params={"start_date": start_date, "end_date": end_date},
        )
        return data.get("agreement_transaction_list", [])


def _error_from_response(response: httpx.Response) -> GatewayError:
    try:
        body = response.json() if response.content else {}
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}

    message = (
        body.get("message")
        or body.get("error_description")
        or f"PayPal API error: {response.status_code}"
    )
    return GatewayError(
        message,
        status_code=response.status_code,
        name=body.get("name") or body.get("error"),
        details=body.get("details") if isinstance(body.get("details"), list) else None,
        debug_id=body.get("debug_id"),
    )
