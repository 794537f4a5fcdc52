from __future__ import annotations

from fastapi.testclient import TestClient


def test_menu_lists_available_items_only(client: TestClient, make_menu_item) -> None:
    dosa = make_menu_item("Dosa", price=120)
    make_menu_item("Sold out", price=90, available=False)

    menu = client.get("/v1/menu").json()
    assert [m["name"] for m in menu] == ["Dosa"]

    assert client.get("/v1/menu", params={"category": "mains"}).json()[0]["id"] == dosa
    assert client.get("/v1/menu", params={"category": "desserts"}).json() == []

    assert client.get(f"/v1/menu/{dosa}").json()["price"] == 120
    assert client.get("/v1/menu/missing").status_code == 404


def test_cart_requires_auth(client: TestClient) -> None:
    assert client.get("/v1/cart").status_code == 401


def test_cart_add_update_remove_clear(
    client: TestClient, make_user, make_menu_item, auth_headers
) -> None:
    headers = auth_headers(make_user())
    dosa = make_menu_item("Dosa", price=120)
    chai = make_menu_item("Chai", price=30)

    empty = client.get("/v1/cart", headers=headers).json()
    assert empty["items"] == []
    assert empty["total_amount"] == 0

    client.post("/v1/cart/add", json={"menu_item_id": dosa, "quantity": 1}, headers=headers)
    cart = client.post(
        "/v1/cart/add", json={"menu_item_id": chai, "quantity": 2}, headers=headers
    ).json()
    assert cart["total_amount"] == 180
    assert cart["items"][1]["menu_item"]["name"] == "Chai"
    assert cart["items"][1]["line_total"] == 60

    dosa_line = cart["items"][0]["id"]
    cart = client.put(
        f"/v1/cart/update/{dosa_line}", json={"quantity": 3}, headers=headers
    ).json()
    assert cart["total_amount"] == 420

    chai_line = cart["items"][1]["id"]
    cart = client.delete(f"/v1/cart/remove/{chai_line}", headers=headers).json()
    assert [line["id"] for line in cart["items"]] == [dosa_line]
    assert cart["total_amount"] == 360

    cleared = client.delete("/v1/cart/clear", headers=headers)
    assert cleared.status_code == 200
    assert cleared.json()["cart"]["items"] == []
    assert cleared.json()["cart"]["total_amount"] == 0


def test_cart_add_validation(client: TestClient, make_user, make_menu_item, auth_headers) -> None:
    headers = auth_headers(make_user())

    zero = client.post(
        "/v1/cart/add", json={"menu_item_id": make_menu_item(), "quantity": 0}, headers=headers
    )
    assert zero.status_code == 422

    missing = client.post(
        "/v1/cart/add", json={"menu_item_id": "missing", "quantity": 1}, headers=headers
    )
    assert missing.status_code == 400
    assert missing.json()["error_code"] == "VALIDATION_ERROR"


def test_cart_mutations_without_cart_are_not_found(
    client: TestClient, make_user, auth_headers
) -> None:
    headers = auth_headers(make_user())

    resp = client.put("/v1/cart/update/line-1", json={"quantity": 2}, headers=headers)
    assert resp.status_code == 404
    assert resp.json()["error_code"] == "NOT_FOUND"

    assert client.delete("/v1/cart/clear", headers=headers).status_code == 404
