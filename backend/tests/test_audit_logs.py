"""API tests for audit log endpoints."""

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from app.main import app


@pytest.fixture
def client():
    """Create a test client for the FastAPI app."""
    return TestClient(app)


@pytest.fixture
def settled_order_id(client, merchant_headers):
    order = client.post(
        "/v1/orders/",
        json={"order_name": "#7001", "subtotal_price": 2500},
        headers=merchant_headers,
    ).json()
    client.post(
        "/v1/wallet/top_up",
        json={"amount": 5000, "reference_id": "pay_audit"},
        headers=merchant_headers,
    )
    client.put(
        f"/v1/orders/{order['id']}/costs",
        json={"service_fee": 100},
        headers=merchant_headers,
    )
    client.post(f"/v1/orders/{order['id']}/settle", headers=merchant_headers)
    return order["id"]


class TestAuditLogsApi:
    def test_order_audit_trail(self, client, merchant_headers, settled_order_id):
        response = client.get(f"/v1/audit_logs/order/{settled_order_id}", headers=merchant_headers)
        assert response.status_code == 200
        logs = {log["action"]: log for log in response.json()}
        assert set(logs) == {"order.costs_updated", "order.settled"}
        settled = logs["order.settled"]
        assert settled["details"]["amount"] == 2600
        assert settled["actor_type"] == "user"
        assert settled["actor_id"] == "ops@example.com"
        assert logs["order.costs_updated"]["details"]["service_fee"] == {"old": None, "new": 100}

    def test_other_merchant_sees_nothing(self, client, settled_order_id):
        response = client.get(
            f"/v1/audit_logs/order/{settled_order_id}",
            headers={"X-Merchant-Id": str(uuid4())},
        )
        assert response.status_code == 200
        assert response.json() == []

    def test_requires_merchant(self, client, settled_order_id):
        response = client.get(f"/v1/audit_logs/order/{settled_order_id}")
        assert response.status_code == 401
