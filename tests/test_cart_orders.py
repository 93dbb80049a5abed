import pytest

from tests.conftest import auth_header

SHIPPING = {
    "name": "Alice",
    "phone": "9876543210",
    "address": "12 Main Street",
    "city": "Pune",
    "pincode": "411001",
}


@pytest.fixture
def headers(user_tokens):
    return auth_header(user_tokens["token"])


@pytest.fixture
def product(create_product):
    return create_product()


def _add(client, headers, product, size_index=0, quantity=1):
    return client.post(
        "/api/v1/cart/items",
        headers=headers,
        json={"product_id": product["id"], "size_id": product["sizes"][size_index]["id"], "quantity": quantity},
    )


def test_cart_requires_login(client):
    assert client.get("/api/v1/cart").status_code == 401


def test_add_items_and_total(client, headers, product):
    res = _add(client, headers, product, 0, 2)
    assert res.status_code == 201
    assert res.get_json()["item"]["price"] == "4.50"

    _add(client, headers, product, 1, 1)
    res = client.get("/api/v1/cart", headers=headers)
    body = res.get_json()
    assert len(body["items"]) == 2
    assert body["total"] == "18.99"


def test_adding_same_size_merges_quantity(client, headers, product):
    _add(client, headers, product, 0, 1)
    res = _add(client, headers, product, 0, 2)
    assert res.status_code == 200
    assert res.get_json()["item"]["quantity"] == 3
    assert len(client.get("/api/v1/cart", headers=headers).get_json()["items"]) == 1


def test_default_size_is_first(client, headers, product):
    res = client.post("/api/v1/cart/items", headers=headers, json={"product_id": product["id"]})
    assert res.status_code == 201
    assert res.get_json()["item"]["size"] == "100g"


def test_unknown_product_or_size(client, headers, product):
    res = client.post("/api/v1/cart/items", headers=headers, json={"product_id": "nope"})
    assert res.status_code == 404
    res = client.post("/api/v1/cart/items", headers=headers, json={"product_id": product["id"], "size_id": "nope"})
    assert res.status_code == 400


def test_update_and_remove_item(client, headers, product):
    item = _add(client, headers, product).get_json()["item"]

    res = client.patch(f"/api/v1/cart/items/{item['id']}", headers=headers, json={"quantity": 5})
    assert res.status_code == 200
    assert res.get_json()["item"]["quantity"] == 5

    res = client.patch(f"/api/v1/cart/items/{item['id']}", headers=headers, json={"quantity": 0})
    assert res.status_code == 422

    res = client.delete(f"/api/v1/cart/items/{item['id']}", headers=headers)
    assert res.status_code == 200
    assert res.get_json()["removedItem"]["id"] == item["id"]
    assert client.get("/api/v1/cart", headers=headers).get_json()["items"] == []


def test_cannot_touch_someone_elses_item(client, headers, product, register, login):
    item = _add(client, headers, product).get_json()["item"]
    register(email="bob@example.com", name="Bob", phone="9876543211")
    bob = auth_header(login(email="bob@example.com")["token"])
    assert client.delete(f"/api/v1/cart/items/{item['id']}", headers=bob).status_code == 404


def test_clear_cart(client, headers, product):
    _add(client, headers, product)
    assert client.delete("/api/v1/cart", headers=headers).status_code == 200
    assert client.get("/api/v1/cart", headers=headers).get_json()["total"] == "0.00"


def test_order_from_empty_cart(client, headers):
    res = client.post("/api/v1/orders", headers=headers, json={"shipping_address": SHIPPING})
    assert res.status_code == 400
    assert res.get_json()["error"] == "Cart is empty"


def test_place_order_snapshots_cart_and_clears_it(client, headers, product):
    _add(client, headers, product, 1, 2)
    res = client.post("/api/v1/orders", headers=headers, json={"shipping_address": SHIPPING})
    assert res.status_code == 201
    order = res.get_json()["order"]
    assert order["status"] == "pending"
    assert order["total_amount"] == "19.98"
    assert order["shipping_address"]["city"] == "Pune"
    assert [(i["name"], i["size"], i["quantity"]) for i in order["items"]] == [("Herbal Tea", "250g", 2)]

    assert client.get("/api/v1/cart", headers=headers).get_json()["items"] == []

    res = client.get("/api/v1/orders", headers=headers)
    assert [o["id"] for o in res.get_json()["data"]] == [order["id"]]


def test_order_with_saved_address(client, headers, product):
    address = client.post("/api/v1/addresses", headers=headers, json=SHIPPING).get_json()["data"]
    _add(client, headers, product)
    res = client.post("/api/v1/orders", headers=headers, json={"address_id": address["id"]})
    assert res.status_code == 201
    assert res.get_json()["order"]["shipping_address"]["pincode"] == "411001"


def test_order_rejects_both_address_forms(client, headers, product):
    _add(client, headers, product)
    res = client.post("/api/v1/orders", headers=headers, json={"address_id": "x", "shipping_address": SHIPPING})
    assert res.status_code == 422


def test_orders_are_private_but_visible_to_admin(client, headers, product, register, login, admin_tokens):
    _add(client, headers, product)
    order = client.post("/api/v1/orders", headers=headers, json={"shipping_address": SHIPPING}).get_json()["order"]

    register(email="bob@example.com", name="Bob", phone="9876543211")
    bob = auth_header(login(email="bob@example.com")["token"])
    assert client.get(f"/api/v1/orders/{order['id']}", headers=bob).status_code == 404

    admin = auth_header(admin_tokens["token"])
    assert client.get(f"/api/v1/orders/{order['id']}", headers=admin).status_code == 200

    res = client.patch(f"/api/v1/admin/orders/{order['id']}/status", headers=admin, json={"status": "shipped"})
    assert res.status_code == 200
    assert res.get_json()["data"]["status"] == "shipped"

    res = client.get("/api/v1/admin/orders?status=shipped", headers=admin)
    assert [o["id"] for o in res.get_json()["data"]] == [order["id"]]
    res = client.get("/api/v1/admin/orders?status=lost", headers=admin)
    assert res.status_code == 400
