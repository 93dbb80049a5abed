from tests.conftest import auth_header

ADDRESS = {
    "name": "Alice",
    "phone": "9876543210",
    "address": "12 Main Street",
    "city": "Pune",
    "pincode": "411001",
}


def test_address_lifecycle(client, user_tokens):
    headers = auth_header(user_tokens["token"])

    res = client.post("/api/v1/addresses", headers=headers, json=ADDRESS)
    assert res.status_code == 201
    address_id = res.get_json()["data"]["id"]

    res = client.patch(f"/api/v1/addresses/{address_id}", headers=headers, json={"city": "Mumbai"})
    assert res.status_code == 200
    assert res.get_json()["data"]["city"] == "Mumbai"

    res = client.get("/api/v1/addresses", headers=headers)
    assert [a["city"] for a in res.get_json()["data"]] == ["Mumbai"]

    assert client.delete(f"/api/v1/addresses/{address_id}", headers=headers).status_code == 200
    assert client.get("/api/v1/addresses", headers=headers).get_json()["data"] == []


def test_duplicate_address_conflicts(client, user_tokens):
    headers = auth_header(user_tokens["token"])
    client.post("/api/v1/addresses", headers=headers, json=ADDRESS)
    res = client.post("/api/v1/addresses", headers=headers, json=ADDRESS)
    assert res.status_code == 409


def test_address_validation(client, user_tokens):
    res = client.post(
        "/api/v1/addresses",
        headers=auth_header(user_tokens["token"]),
        json={**ADDRESS, "pincode": "012345", "phone": "abc"},
    )
    assert res.status_code == 422
    assert {"pincode", "phone"} <= set(res.get_json()["details"])


def test_addresses_are_scoped_to_owner(client, user_tokens, register, login):
    headers = auth_header(user_tokens["token"])
    address_id = client.post("/api/v1/addresses", headers=headers, json=ADDRESS).get_json()["data"]["id"]

    register(email="bob@example.com", name="Bob", phone="9876543211")
    bob = auth_header(login(email="bob@example.com")["token"])
    assert client.get("/api/v1/addresses", headers=bob).get_json()["data"] == []
    assert client.patch(f"/api/v1/addresses/{address_id}", headers=bob, json={"city": "X"}).status_code == 404
    assert client.delete(f"/api/v1/addresses/{address_id}", headers=bob).status_code == 404
