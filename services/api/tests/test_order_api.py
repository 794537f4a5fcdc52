from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from services.api.app.services.payment_base import (
    AuthenticationFailedError,
    GatewayCredentialFormatError,
    GatewayNotConfiguredError,
    GatewayRequestError,
)
from services.api.app.services.payment_mock import MockPaymentGateway

DELIVERY = {"delivery_address": "12 MG Road, Bengaluru", "phone": "9876543210"}


class _RaisingGateway:
    vendor = "RAZORPAY"
    key_id = "rzp_test_x"

    def __init__(self, exc: Exception) -> None:
        self._exc = exc

    def create_intent(self, amount_minor: int, currency: str, receipt: str) -> object:
        del amount_minor, currency, receipt
        raise self._exc

    def verify(self, gateway_order_id: str, gateway_payment_id: str, signature: str) -> bool:
        del gateway_order_id, gateway_payment_id, signature
        return False


@pytest.fixture()
def shopper(client: TestClient, make_user, make_menu_item, auth_headers) -> dict[str, str]:
    headers = auth_headers(make_user())
    lines = [(make_menu_item("Paneer", price=100), 2), (make_menu_item("Lassi", price=50), 1)]
    for menu_item_id, qty in lines:
        resp = client.post(
            "/v1/cart/add", json={"menu_item_id": menu_item_id, "quantity": qty}, headers=headers
        )
        assert resp.status_code == 200
    return headers


def _signature(gateway_order_id: str, gateway_payment_id: str) -> str:
    # Same secret the test env configures for the mock gateway.
    return MockPaymentGateway().sign_payment(gateway_order_id, gateway_payment_id)


def test_order_routes_require_bearer_token(client: TestClient) -> None:
    assert client.post("/v1/orders/create", json=DELIVERY).status_code == 401
    assert client.get("/v1/orders/my-orders").status_code == 401

    resp = client.get("/v1/orders/my-orders", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401
    assert resp.json()["error_code"] == "UNAUTHORIZED"


def test_create_then_verify_flow(client: TestClient, shopper: dict[str, str]) -> None:
    created = client.post("/v1/orders/create", json=DELIVERY, headers=shopper)
    assert created.status_code == 200

    data = created.json()
    order = data["order"]
    assert order["order_status"] == "pending"
    assert order["payment_status"] == "pending"
    assert order["total_amount"] == 250
    assert data["amount"] == 250 + 5000
    assert data["currency"] == "INR"
    assert data["gateway_order_id"] == order["gateway_order_id"]
    assert data["key_id"].startswith("rzp_test_")

    # Cart survives until the payment is verified.
    assert client.get("/v1/cart", headers=shopper).json()["total_amount"] == 250

    verify = client.post(
        "/v1/orders/verify",
        json={
            "order_id": order["id"],
            "gateway_order_id": data["gateway_order_id"],
            "gateway_payment_id": "pay_abc",
            "signature": _signature(data["gateway_order_id"], "pay_abc"),
        },
        headers=shopper,
    )
    assert verify.status_code == 200
    confirmed = verify.json()["order"]
    assert confirmed["order_status"] == "confirmed"
    assert confirmed["payment_status"] == "completed"
    assert confirmed["payment_id"] == "pay_abc"
    assert [h["status"] for h in confirmed["status_history"]] == ["pending", "confirmed"]

    cart = client.get("/v1/cart", headers=shopper).json()
    assert cart["items"] == []
    assert cart["total_amount"] == 0


def test_forged_signature_is_rejected(client: TestClient, shopper: dict[str, str]) -> None:
    data = client.post("/v1/orders/create", json=DELIVERY, headers=shopper).json()

    resp = client.post(
        "/v1/orders/verify",
        json={
            "order_id": data["order"]["id"],
            "gateway_order_id": data["gateway_order_id"],
            "gateway_payment_id": "pay_abc",
            "signature": "0" * 64,
        },
        headers=shopper,
    )
    assert resp.status_code == 400
    assert resp.json()["error_code"] == "SIGNATURE_MISMATCH"

    order = client.get(f"/v1/orders/{data['order']['id']}", headers=shopper).json()
    assert order["order_status"] == "pending"
    assert client.get("/v1/cart", headers=shopper).json()["total_amount"] == 250


def test_create_order_with_empty_cart(client: TestClient, make_user, auth_headers) -> None:
    resp = client.post("/v1/orders/create", json=DELIVERY, headers=auth_headers(make_user()))

    assert resp.status_code == 400
    assert resp.json() == {"detail": "Cart is empty", "error_code": "EMPTY_CART", "extra": {}}


def test_create_order_requires_delivery_details(
    client: TestClient, shopper: dict[str, str]
) -> None:
    resp = client.post("/v1/orders/create", json={"phone": "1"}, headers=shopper)
    assert resp.status_code == 400
    assert resp.json()["error_code"] == "VALIDATION_ERROR"


def test_direct_order(client: TestClient, shopper: dict[str, str]) -> None:
    resp = client.post("/v1/orders/create-direct", json=DELIVERY, headers=shopper)
    assert resp.status_code == 200

    order = resp.json()["order"]
    assert order["total_amount"] == 250
    assert order["order_status"] == "confirmed"
    assert order["payment_status"] == "completed"
    assert [i["name"] for i in order["items"]] == ["Paneer", "Lassi"]

    cart = client.get("/v1/cart", headers=shopper).json()
    assert cart["items"] == []
    assert cart["total_amount"] == 0

    mine = client.get("/v1/orders/my-orders", headers=shopper).json()
    assert [o["id"] for o in mine] == [order["id"]]


def test_order_visible_only_to_owner_or_admin(
    client: TestClient, shopper: dict[str, str], make_user, auth_headers
) -> None:
    order_id = client.post("/v1/orders/create-direct", json=DELIVERY, headers=shopper).json()[
        "order"
    ]["id"]

    stranger = client.get(f"/v1/orders/{order_id}", headers=auth_headers(make_user()))
    assert stranger.status_code == 403

    admin = client.get(f"/v1/orders/{order_id}", headers=auth_headers(make_user(role="admin")))
    assert admin.status_code == 200

    missing = client.get("/v1/orders/nope", headers=shopper)
    assert missing.status_code == 404


@pytest.mark.parametrize(
    ("exc", "status", "code"),
    [
        (GatewayNotConfiguredError(), 500, "GATEWAY_NOT_CONFIGURED"),
        (GatewayCredentialFormatError("bad key"), 500, "GATEWAY_CREDENTIAL_FORMAT"),
        (AuthenticationFailedError("Unauthorized"), 401, "AUTHENTICATION_FAILED"),
        (
            GatewayRequestError("Amount too small", gateway_code="BAD_REQUEST_ERROR"),
            400,
            "GATEWAY_REQUEST_FAILED",
        ),
    ],
)
def test_create_order_maps_gateway_errors(
    client: TestClient,
    shopper: dict[str, str],
    monkeypatch: pytest.MonkeyPatch,
    exc: Exception,
    status: int,
    code: str,
) -> None:
    import services.api.app.routers.order as order_router

    monkeypatch.setattr(order_router, "get_payment_gateway", lambda: _RaisingGateway(exc))

    resp = client.post("/v1/orders/create", json=DELIVERY, headers=shopper)
    assert resp.status_code == status
    assert resp.json()["error_code"] == code
    assert client.get("/v1/orders/my-orders", headers=shopper).json() == []


def test_gateway_error_exposes_remote_code(
    client: TestClient, shopper: dict[str, str], monkeypatch: pytest.MonkeyPatch
) -> None:
    import services.api.app.routers.order as order_router

    exc = GatewayRequestError("Amount too small", gateway_code="BAD_REQUEST_ERROR")
    monkeypatch.setattr(order_router, "get_payment_gateway", lambda: _RaisingGateway(exc))

    body = client.post("/v1/orders/create", json=DELIVERY, headers=shopper).json()
    assert body["detail"] == "Amount too small"
    assert body["extra"] == {"gateway_code": "BAD_REQUEST_ERROR"}


def test_unconfigured_gateway_from_env(
    client: TestClient, shopper: dict[str, str], monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("FOODIE_PAYMENT_GATEWAY", "razorpay")
    monkeypatch.delenv("RAZORPAY_KEY_ID", raising=False)
    monkeypatch.delenv("RAZORPAY_KEY_SECRET", raising=False)

    resp = client.post("/v1/orders/create", json=DELIVERY, headers=shopper)
    assert resp.status_code == 500
    assert resp.json()["error_code"] == "GATEWAY_NOT_CONFIGURED"

    # Direct settlement does not need the gateway.
    direct = client.post("/v1/orders/create-direct", json=DELIVERY, headers=shopper)
    assert direct.status_code == 200


def test_request_id_is_echoed(client: TestClient) -> None:
    resp = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert resp.status_code == 200
    assert resp.headers["X-Request-ID"] == "req-123"
    assert client.get("/health").headers["X-Request-ID"]
