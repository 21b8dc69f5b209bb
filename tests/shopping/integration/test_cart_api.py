"""Integration tests for the Cart API endpoints via TestClient."""

import json

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient
from shopping.api import routes
from shopping.api.routes import cart_router, coupon_router
from shopping.config import DEFAULT_STORAGE_KEY
from shopping.domain import shopping

CAKE_ID = "123e4567-e89b-12d3-a456-426614174000"
BALLOON_ID = "9b2f1c3e-4d5a-4b6c-8d7e-0f1a2b3c4d5e"


@pytest.fixture()
def client(storage, coupon_validator):
    app = FastAPI()

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        with shopping.domain_context():
            return await call_next(request)

    app.include_router(cart_router)
    app.include_router(coupon_router)
    return TestClient(app)


def _add_item(client, product_id=CAKE_ID, price=20.0, quantity=1, category="cakes", session=None):
    """Helper: POST /cart/items and return the cart."""
    headers = {"X-Cart-Session": session} if session else {}
    response = client.post(
        "/cart/items",
        json={
            "product": {"id": product_id, "name": "Birthday Cake", "price": price, "category": category},
            "quantity": quantity,
        },
        headers=headers,
    )
    assert response.status_code == 200
    return response.json()


class TestCartEndpoints:
    def test_empty_cart(self, client):
        response = client.get("/cart")
        assert response.status_code == 200
        body = response.json()
        assert body["items"] == []
        assert body["total"] == 0.0
        assert body["couponCode"] is None

    def test_add_item(self, client):
        body = _add_item(client, quantity=2)
        assert body["items"][0]["productId"] == CAKE_ID
        assert body["items"][0]["quantity"] == 2
        assert body["items"][0]["product"]["price"] == 20.0
        assert body["subtotal"] == 40.0
        assert body["tax"] == 9.2
        assert body["shipping"] == 0.0
        assert body["total"] == 49.2

    def test_add_item_requires_positive_quantity(self, client):
        response = client.post(
            "/cart/items",
            json={"product": {"id": CAKE_ID, "name": "Birthday Cake", "price": 20.0}, "quantity": 0},
        )
        assert response.status_code == 422

    def test_update_quantity(self, client):
        _add_item(client)
        response = client.put(f"/cart/items/{CAKE_ID}", json={"quantity": 3})
        assert response.status_code == 200
        assert response.json()["items"][0]["quantity"] == 3
        assert response.json()["subtotal"] == 60.0

    def test_update_quantity_to_zero_removes_item(self, client):
        _add_item(client)
        response = client.put(f"/cart/items/{CAKE_ID}", json={"quantity": 0})
        assert response.json()["items"] == []
        assert response.json()["total"] == 0.0

    def test_remove_item(self, client):
        _add_item(client)
        _add_item(client, product_id=BALLOON_ID, price=3.5, category="balloons")
        response = client.delete(f"/cart/items/{CAKE_ID}")
        assert [item["productId"] for item in response.json()["items"]] == [BALLOON_ID]

    def test_clear_cart(self, client):
        _add_item(client, quantity=2)
        client.post("/cart/coupon", json={"code": "SAVE5"})
        response = client.delete("/cart")
        body = response.json()
        assert body["items"] == []
        assert body["couponCode"] is None
        assert body["total"] == 0.0

    def test_cart_is_persisted(self, client, storage):
        _add_item(client, quantity=2)
        record = json.loads(storage.data[DEFAULT_STORAGE_KEY])
        assert record["version"] == 1
        assert record["state"]["items"][0]["productId"] == CAKE_ID


class TestCouponEndpoints:
    def test_apply_coupon(self, client):
        _add_item(client, quantity=2)
        response = client.post("/cart/coupon", json={"code": "save5"})
        assert response.status_code == 200
        body = response.json()
        assert body["applied"] is True
        assert body["reason"] is None
        assert body["cart"]["couponCode"] == "SAVE5"
        assert body["cart"]["discount"] == 5.0
        assert body["cart"]["total"] == 43.05

    def test_second_coupon_is_refused(self, client, coupon_validator):
        _add_item(client, quantity=2)
        client.post("/cart/coupon", json={"code": "SAVE5"})
        response = client.post("/cart/coupon", json={"code": "PARTY10"})
        body = response.json()
        assert body["applied"] is False
        assert body["reason"] == "already_applied"
        assert body["cart"]["couponCode"] == "SAVE5"
        assert len(coupon_validator.calls) == 1

    def test_unknown_coupon(self, client):
        _add_item(client, quantity=2)
        body = client.post("/cart/coupon", json={"code": "NOPE"}).json()
        assert body["applied"] is False
        assert body["reason"] == "rejected"
        assert body["message"] == "Invalid or expired coupon"
        assert body["cart"]["total"] == 49.2

    def test_remove_coupon(self, client):
        _add_item(client, quantity=2)
        client.post("/cart/coupon", json={"code": "SAVE5"})
        response = client.delete("/cart/coupon")
        assert response.json()["couponCode"] is None
        assert response.json()["total"] == 49.2

    def test_active_coupons(self, client):
        response = client.get("/coupons/active")
        assert response.status_code == 200
        codes = sorted(c["code"] for c in response.json()["coupons"])
        assert codes == ["PARTY10", "SAVE5"]


class TestCartSessions:
    def test_sessions_are_isolated(self, client):
        _add_item(client, quantity=2, session="alice")
        _add_item(client, product_id=BALLOON_ID, price=3.5, session="bob")

        alice = client.get("/cart", headers={"X-Cart-Session": "alice"}).json()
        bob = client.get("/cart", headers={"X-Cart-Session": "bob"}).json()
        assert [item["productId"] for item in alice["items"]] == [CAKE_ID]
        assert [item["productId"] for item in bob["items"]] == [BALLOON_ID]

    def test_sessions_use_their_own_storage_keys(self, client, storage):
        _add_item(client, session="alice")
        assert f"{DEFAULT_STORAGE_KEY}-alice" in storage.data
        assert DEFAULT_STORAGE_KEY not in storage.data

    def test_stored_cart_is_restored_on_first_request(self, client, storage):
        storage.data[DEFAULT_STORAGE_KEY] = json.dumps(
            {
                "state": {
                    "items": [
                        {
                            "productId": CAKE_ID,
                            "quantity": 1,
                            "product": {"id": CAKE_ID, "name": "Birthday Cake", "price": 10.0},
                        },
                        {"productId": "legacy-slug", "quantity": 3},
                    ],
                    "total": 123.45,
                },
                "version": 0,
            }
        )
        body = client.get("/cart").json()
        assert [item["productId"] for item in body["items"]] == [CAKE_ID]
        assert body["couponCode"] is None
        assert body["total"] == 18.29


class TestSessionLimit:
    def test_least_recently_used_session_is_dropped(self, client, monkeypatch):
        monkeypatch.setenv("CART_MAX_SESSIONS", "2")
        _add_item(client, session="alice")
        _add_item(client, product_id=BALLOON_ID, price=3.5, session="bob")
        client.get("/cart", headers={"X-Cart-Session": "alice"})
        client.get("/cart", headers={"X-Cart-Session": "carol"})

        assert list(routes._stores) == ["alice", "carol"]

    def test_dropped_session_is_restored_from_storage(self, client, monkeypatch):
        monkeypatch.setenv("CART_MAX_SESSIONS", "1")
        _add_item(client, quantity=2, session="alice")
        client.get("/cart", headers={"X-Cart-Session": "bob"})
        assert "alice" not in routes._stores

        alice = client.get("/cart", headers={"X-Cart-Session": "alice"}).json()
        assert [item["productId"] for item in alice["items"]] == [CAKE_ID]
        assert alice["total"] == 49.2
