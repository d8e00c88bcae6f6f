"""API tests for fulfillment request endpoints."""

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from app.main import app


@pytest.fixture
def client():
    """Create a test client for the FastAPI app."""
    return TestClient(app)


@pytest.fixture
def request_id(client, merchant_headers):
    """Settle one order and return its fulfillment request id."""
    order = client.post(
        "/v1/orders/",
        json={"order_name": "#4001", "subtotal_price": 1200, "total_price": 1500},
        headers=merchant_headers,
    ).json()
    client.post(
        "/v1/wallet/top_up",
        json={"amount": 5000, "reference_id": "pay_1"},
        headers=merchant_headers,
    )
    settled = client.post(f"/v1/orders/{order['id']}/settle", headers=merchant_headers)
    return settled.json()["fulfillment_request_id"]


class TestFulfillmentRequestsApi:
    def test_list(self, client, merchant_headers, request_id):
        response = client.get("/v1/fulfillment_requests/", headers=merchant_headers)
        assert response.status_code == 200
        assert response.headers["X-Total-Count"] == "1"
        assert response.json()[0]["id"] == request_id

    def test_get(self, client, merchant_headers, request_id):
        response = client.get(f"/v1/fulfillment_requests/{request_id}", headers=merchant_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "pending"
        assert data["wallet_deducted_amount"] == 1200
        assert data["profit"] == 300
        assert data["customer_name"] == "Guest"
        assert data["status_history"][0]["changed_by"] == "ops@example.com"

    def test_get_other_merchant(self, client, request_id):
        response = client.get(
            f"/v1/fulfillment_requests/{request_id}", headers={"X-Merchant-Id": str(uuid4())}
        )
        assert response.status_code == 404

    def test_update_status(self, client, merchant_headers, request_id):
        response = client.post(
            f"/v1/fulfillment_requests/{request_id}/status",
            json={"status": "dispatched", "note": "Courier picked up"},
            headers=merchant_headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "dispatched"
        assert data["dispatched_at"] is not None
        assert data["status_history"][-1]["note"] == "Courier picked up"

    def test_invalid_transition_is_400(self, client, merchant_headers, request_id):
        client.post(
            f"/v1/fulfillment_requests/{request_id}/status",
            json={"status": "delivered"},
            headers=merchant_headers,
        )
        response = client.post(
            f"/v1/fulfillment_requests/{request_id}/status",
            json={"status": "pending"},
            headers=merchant_headers,
        )
        assert response.status_code == 400
        assert "terminal state" in response.json()["detail"]

    def test_unknown_status_is_422(self, client, merchant_headers, request_id):
        response = client.post(
            f"/v1/fulfillment_requests/{request_id}/status",
            json={"status": "teleported"},
            headers=merchant_headers,
        )
        assert response.status_code == 422

    def test_unknown_request_is_404(self, client, merchant_headers):
        response = client.post(
            f"/v1/fulfillment_requests/{uuid4()}/status",
            json={"status": "sourcing"},
            headers=merchant_headers,
        )
        assert response.status_code == 404
