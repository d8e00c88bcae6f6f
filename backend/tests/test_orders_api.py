"""API tests for order registration, cost configuration and settlement."""

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from app.main import app

ORDER_PAYLOAD = {
    "order_name": "#1001",
    "store_name": "Acme Store",
    "customer": {"first_name": "Asha", "last_name": "Rao", "email": "asha@example.com"},
    "line_items": [{"title": "Cotton Kurta", "sku": "KRT-001", "quantity": 1, "price": 6000}],
    "subtotal_price": 6000,
    "total_price": 6500,
}


@pytest.fixture
def client():
    """Create a test client for the FastAPI app."""
    return TestClient(app)


@pytest.fixture
def order(client, merchant_headers):
    response = client.post("/v1/orders/", json=ORDER_PAYLOAD, headers=merchant_headers)
    assert response.status_code == 201
    return response.json()


def _top_up(client, headers, amount, reference):
    response = client.post(
        "/v1/wallet/top_up",
        json={"amount": amount, "reference_id": reference},
        headers=headers,
    )
    assert response.status_code == 200
    return response.json()


class TestOrderRegistration:
    def test_create_order(self, order, merchant_id):
        assert order["merchant_id"] == str(merchant_id)
        assert order["settlement_status"] == "unsettled"
        assert order["product_cost"] is None
        assert order["shortfall"] == 0

    def test_missing_merchant_header(self, client):
        response = client.post("/v1/orders/", json=ORDER_PAYLOAD)
        assert response.status_code == 401

    def test_invalid_merchant_header(self, client):
        response = client.get("/v1/orders/", headers={"X-Merchant-Id": "not-a-uuid"})
        assert response.status_code == 400

    def test_negative_price_rejected(self, client, merchant_headers):
        payload = {**ORDER_PAYLOAD, "subtotal_price": -1}
        response = client.post("/v1/orders/", json=payload, headers=merchant_headers)
        assert response.status_code == 422

    def test_list_orders(self, client, merchant_headers, order):
        response = client.get("/v1/orders/", headers=merchant_headers)
        assert response.status_code == 200
        assert response.headers["X-Total-Count"] == "1"
        assert [o["id"] for o in response.json()] == [order["id"]]

        response = client.get(
            "/v1/orders/", params={"settlement_status": "settled"}, headers=merchant_headers
        )
        assert response.json() == []
        assert response.headers["X-Total-Count"] == "0"

    def test_get_order_of_other_merchant(self, client, order):
        response = client.get(
            f"/v1/orders/{order['id']}", headers={"X-Merchant-Id": str(uuid4())}
        )
        assert response.status_code == 404


class TestOrderCosts:
    def test_set_costs(self, client, merchant_headers, order):
        response = client.put(
            f"/v1/orders/{order['id']}/costs",
            json={"product_cost": 5000, "shipping_cost": 700},
            headers=merchant_headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["product_cost"] == 5000
        assert data["shipping_cost"] == 700
        assert data["service_fee"] is None

    def test_negative_cost_is_422(self, client, merchant_headers, order):
        response = client.put(
            f"/v1/orders/{order['id']}/costs",
            json={"service_fee": -5},
            headers=merchant_headers,
        )
        assert response.status_code == 422

    def test_unknown_order(self, client, merchant_headers):
        response = client.put(
            f"/v1/orders/{uuid4()}/costs", json={"product_cost": 1}, headers=merchant_headers
        )
        assert response.status_code == 404

    def test_costs_locked_after_settlement(self, client, merchant_headers, order):
        _top_up(client, merchant_headers, 10000, "pay_1")
        client.post(f"/v1/orders/{order['id']}/settle", headers=merchant_headers)

        response = client.put(
            f"/v1/orders/{order['id']}/costs",
            json={"shipping_cost": 500},
            headers=merchant_headers,
        )
        assert response.status_code == 409
        assert "settled" in response.json()["detail"]


class TestSettleEndpoint:
    def test_settle_success_and_replay(self, client, merchant_headers, order):
        _top_up(client, merchant_headers, 10000, "pay_1")

        first = client.post(f"/v1/orders/{order['id']}/settle", headers=merchant_headers)
        assert first.status_code == 200
        body = first.json()
        assert body["amount_charged"] == 6000
        assert body["new_balance"] == 4000
        assert body["replayed"] is False
        assert body["fulfillment_request_id"] is not None

        second = client.post(f"/v1/orders/{order['id']}/settle", headers=merchant_headers)
        assert second.status_code == 200
        assert second.json()["fulfillment_request_id"] == body["fulfillment_request_id"]
        assert second.json()["replayed"] is True

        wallet = client.get("/v1/wallet", headers=merchant_headers).json()
        assert wallet["balance"] == 4000

    def test_insufficient_funds_is_402(self, client, merchant_headers, order):
        _top_up(client, merchant_headers, 3000, "pay_1")

        response = client.post(f"/v1/orders/{order['id']}/settle", headers=merchant_headers)

        assert response.status_code == 402
        body = response.json()
        assert body["required"] == 6000
        assert body["balance"] == 3000
        assert body["shortfall"] == 3000
        assert "Insufficient wallet balance" in body["detail"]

        order_body = client.get(f"/v1/orders/{order['id']}", headers=merchant_headers).json()
        assert order_body["settlement_status"] == "awaiting_funds"
        assert order_body["shortfall"] == 3000

    def test_zero_cost_order_is_400(self, client, merchant_headers):
        payload = {**ORDER_PAYLOAD, "subtotal_price": 0, "total_price": 0}
        order = client.post("/v1/orders/", json=payload, headers=merchant_headers).json()
        response = client.post(f"/v1/orders/{order['id']}/settle", headers=merchant_headers)
        assert response.status_code == 400

    def test_unknown_order_is_404(self, client, merchant_headers):
        response = client.post(f"/v1/orders/{uuid4()}/settle", headers=merchant_headers)
        assert response.status_code == 404

    def test_resumable_after_top_up(self, client, merchant_headers, order):
        response = client.post(f"/v1/orders/{order['id']}/settle", headers=merchant_headers)
        assert response.status_code == 402
        assert client.get("/v1/orders/resumable", headers=merchant_headers).json() == []

        top_up = _top_up(client, merchant_headers, 6000, "pay_2")

        assert top_up["resumable_order_ids"] == [order["id"]]
        resumable = client.get("/v1/orders/resumable", headers=merchant_headers).json()
        assert [o["id"] for o in resumable] == [order["id"]]
        # Reported only; the merchant still has to settle it.
        assert resumable[0]["settlement_status"] == "awaiting_funds"
