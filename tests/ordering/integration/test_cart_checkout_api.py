"""Integration tests for session cart and checkout endpoints via TestClient."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from ordering.api.errors import register_storefront_exception_handlers
from ordering.api.routes import cart_router, checkout_router
from ordering.checkout.gateway import FakeOrderGateway, set_order_gateway
from ordering.checkout.whatsapp import FakeChatLauncher, set_chat_launcher
from ordering.order.order import Order
from protean import current_domain

CUSTOMER = {
    "name": "Jane Wanjiku",
    "phone": "0712345678",
    "address": "Moi Avenue, Nairobi",
    "email": "jane@example.com",
    "deliveryLocationId": "loc-cbd",
}


@pytest.fixture()
def client(catalogue, email_sender):
    app = FastAPI()
    app.include_router(cart_router)
    app.include_router(checkout_router)
    register_storefront_exception_handlers(app)
    return TestClient(app)


@pytest.fixture()
def launcher():
    launcher = FakeChatLauncher()
    set_chat_launcher(launcher)
    return launcher


def _fill_cart(client, session_id="sess-001"):
    response = client.post(
        f"/carts/{session_id}/lines",
        json={"productId": "prod-dress", "quantity": 2, "variations": {"Size": "M"}},
    )
    assert response.status_code == 200
    return response.json()


class TestCartAPI:
    def test_empty_cart(self, client):
        body = client.get("/carts/sess-001").json()

        assert body["lines"] == []
        assert body["totalItems"] == 0

    def test_add_line(self, client):
        body = _fill_cart(client)

        assert body["totalItems"] == 2
        assert body["totalPrice"] == 2000.0
        line = body["lines"][0]
        assert line["name"] == "Linen Dress"
        assert line["variations"] == {"Size": "M"}
        assert line["lineTotal"] == 2000.0

    def test_add_merges_same_variation(self, client):
        _fill_cart(client)
        body = _fill_cart(client)

        assert len(body["lines"]) == 1
        assert body["totalItems"] == 4

    def test_add_unknown_product_returns_404(self, client):
        response = client.post("/carts/sess-001/lines", json={"productId": "prod-missing", "quantity": 1})
        assert response.status_code == 404

    def test_set_quantity(self, client):
        _fill_cart(client)

        body = client.put("/carts/sess-001/lines/prod-dress", json={"quantity": 5}).json()

        assert body["totalItems"] == 5

    def test_set_quantity_zero_removes(self, client):
        _fill_cart(client)

        body = client.put("/carts/sess-001/lines/prod-dress", json={"quantity": 0}).json()

        assert body["lines"] == []

    def test_remove_line(self, client):
        _fill_cart(client)

        body = client.delete("/carts/sess-001/lines/prod-dress").json()

        assert body["totalItems"] == 0

    def test_end_session(self, client):
        _fill_cart(client)

        assert client.delete("/carts/sess-001").status_code == 204
        assert client.get("/carts/sess-001").json()["lines"] == []


class TestWebsiteCheckoutAPI:
    def test_checkout_places_order(self, client):
        _fill_cart(client)

        response = client.post("/checkout/sess-001", json={"channel": "website", "customer": CUSTOMER})

        assert response.status_code == 201
        body = response.json()
        assert body["orderNumber"].startswith("KF-")
        assert body["paymentMethod"] == "cod"
        order = current_domain.repository_for(Order).get(body["orderId"])
        assert order.total == 2200.0
        assert client.get("/carts/sess-001").json()["lines"] == []

    def test_empty_cart_returns_400(self, client):
        response = client.post("/checkout/sess-001", json={"customer": CUSTOMER})
        assert response.status_code == 400

    def test_incomplete_form_returns_400(self, client):
        _fill_cart(client)

        response = client.post("/checkout/sess-001", json={"customer": dict(CUSTOMER, name="")})

        assert response.status_code == 400
        assert client.get("/carts/sess-001").json()["totalItems"] == 2

    def test_unavailable_order_service_returns_503(self, client):
        gateway = FakeOrderGateway()
        gateway.configure(should_succeed=False)
        set_order_gateway(gateway)
        _fill_cart(client)

        response = client.post("/checkout/sess-001", json={"customer": CUSTOMER})

        assert response.status_code == 503
        assert response.json() == {"error": "Order service unavailable"}
        assert client.get("/carts/sess-001").json()["totalItems"] == 2


class TestWhatsAppCheckoutAPI:
    def test_returns_chat_link(self, client, launcher):
        _fill_cart(client)

        response = client.post("/checkout/sess-001", json={"channel": "whatsapp", "customer": CUSTOMER})

        assert response.status_code == 201
        body = response.json()
        assert body["orderNumber"] == "WhatsApp"
        assert body["persisted"] is True
        assert launcher.opened == [body["chatUrl"]]

    def test_unsaved_order_still_succeeds(self, client, launcher):
        gateway = FakeOrderGateway()
        gateway.configure(should_succeed=False)
        set_order_gateway(gateway)
        _fill_cart(client)

        response = client.post("/checkout/sess-001", json={"channel": "whatsapp", "customer": CUSTOMER})

        assert response.status_code == 201
        assert response.json()["persisted"] is False


class TestMpesaCheckoutAPI:
    def test_payment_instructions(self, client):
        _fill_cart(client)

        response = client.get(
            "/checkout/sess-001/mpesa",
            params={
                "name": "Jane Wanjiku",
                "phone": "0712345678",
                "address": "Moi Avenue",
                "delivery_location_id": "loc-cbd",
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body["amountDue"] == 2200.0
        assert body["deliveryFee"] == 200.0
        assert body["freeShipping"] is False

    def test_confirm_payment(self, client):
        _fill_cart(client)

        response = client.post(
            "/checkout/sess-001/mpesa",
            json={
                "customer": CUSTOMER,
                "message": "QFT4XY7ZAB Confirmed. Ksh2,200.00 sent to KALLITTOS FASHION from 254712345678.",
            },
        )

        assert response.status_code == 201
        order = current_domain.repository_for(Order).get(response.json()["orderId"])
        assert order.payment_method == "mpesa"
        assert order.mpesa.code == "QFT4XY7ZAB"
        assert order.mpesa.phone == "254712345678"

    def test_short_message_returns_400(self, client):
        _fill_cart(client)

        response = client.post("/checkout/sess-001/mpesa", json={"customer": CUSTOMER, "message": "paid"})

        assert response.status_code == 400
        assert client.get("/carts/sess-001").json()["totalItems"] == 2
