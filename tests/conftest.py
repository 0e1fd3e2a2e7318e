"""Pytest fixtures for testing"""

import json
import httpx
import pytest
from typing import Any, Dict, List, Optional, Tuple
from fastapi.testclient import TestClient
from paypal_plans.api.main import create_app
from paypal_plans.api.dependencies import get_paypal_client
from paypal_plans.infrastructure.clients.paypal import PayPalClient

TOKEN_PATH = "/v1/oauth2/token"


class FakePayPal:
    """In-memory stand-in for the PayPal REST API, served through httpx.MockTransport"""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.responses: Dict[Tuple[str, str], Tuple[int, Optional[Any]]] = {}

    def respond(self, method: str, path: str, status: int = 200, body: Optional[Any] = None) -> None:
        self.responses[(method, path)] = (status, body)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path)

        if key not in self.responses:
            if key == ("POST", TOKEN_PATH):
                return httpx.Response(200, json={"access_token": "test-token", "expires_in": 32400})
            return httpx.Response(404, json={"name": "RESOURCE_NOT_FOUND", "message": "Not found"})

        status, body = self.responses[key]
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=body)

    def calls(self) -> List[Tuple[str, str]]:
        """(method, path) of every API call, token exchanges excluded"""
        return [(r.method, r.url.path) for r in self.requests if r.url.path != TOKEN_PATH]

    def sent_json(self, method: str, path: str) -> Any:
        for request in reversed(self.requests):
            if request.method == method and request.url.path == path:
                return json.loads(request.content)
        raise AssertionError(f"No {method} {path} request was sent")

    def agreement_flow(self, plan_id: str = "P-TEST", token: str = "EC-TOKEN") -> None:
        """Successful create plan → activate → create agreement sequence"""
        self.respond("POST", "/v1/payments/billing-plans", 201, {"id": plan_id, "state": "CREATED"})
        self.respond("PATCH", f"/v1/payments/billing-plans/{plan_id}", 200, None)
        self.respond(
            "POST",
            "/v1/payments/billing-agreements",
            201,
            {
                "name": "Agreement",
                "plan": {"id": plan_id},
                "links": [
                    {"rel": "approval_url", "href": f"https://www.sandbox.paypal.com/webapps/billing?token={token}"},
                    {"rel": "execute", "href": f"https://api-m.sandbox.paypal.com/v1/payments/billing-agreements/{token}/agreement-execute"},
                ],
            },
        )


@pytest.fixture
def fake_paypal() -> FakePayPal:
    return FakePayPal()


@pytest.fixture
def paypal_client(fake_paypal: FakePayPal) -> PayPalClient:
    """PayPal handle whose HTTP traffic goes to the fake"""
    return PayPalClient(
        mode="sandbox",
        client_id="test-client-id",
        client_secret="test-client-secret",
        transport=httpx.MockTransport(fake_paypal.handler),
    )


@pytest.fixture
def client(paypal_client: PayPalClient) -> TestClient:
    """Create FastAPI test client backed by the fake PayPal"""
    app = create_app()
    app.dependency_overrides[get_paypal_client] = lambda: paypal_client
    return TestClient(app)


@pytest.fixture
def one_time_body() -> Dict[str, Any]:
    return {
        "amount": 100,
        "currency": "usd",
        "discount_type": "percentage",
        "discount": 10,
        "tax": 10,
        "return_url": "https://shop.example.com/paypal/return",
        "description": "Annual licence",
    }


@pytest.fixture
def recurring_body() -> Dict[str, Any]:
    return {
        "amount": 30,
        "currency": "eur",
        "discount_type": "flat",
        "discount": 5,
        "tax": 0,
        "frequency": "month",
        "trial_period_days": 7,
        "plan_name": "Pro",
        "return_url": "https://shop.example.com/paypal/return",
        "cancel_url": "https://shop.example.com/paypal/cancel",
    }


@pytest.fixture
def installment_body() -> Dict[str, Any]:
    return {
        "amount": 120,
        "initial_amount": 20,
        "currency": "usd",
        "discount_type": "percentage",
        "discount": 10,
        "tax": 0,
        "cycles": 4,
        "frequency": "month",
        "plan_name": "Laptop",
        "return_url": "https://shop.example.com/paypal/return",
    }
