from tests.conftest import auth_header


def _alice_id(client, admin_tokens):
    rows = client.get("/api/v1/admin/users", headers=auth_header(admin_tokens["token"])).get_json()["data"]
    return next(r["id"] for r in rows if r["email"] == "alice@example.com")


def test_list_users_is_paginated(client, register, admin_tokens):
    register()
    register(email="bob@example.com", name="Bob", phone="9876543211")
    res = client.get("/api/v1/admin/users?limit=2&page=1", headers=auth_header(admin_tokens["token"]))
    assert res.status_code == 200
    body = res.get_json()
    assert len(body["data"]) == 2
    assert body["meta"] == {"page": 1, "limit": 2, "total": 3, "pages": 2}


def test_list_users_bad_pagination(client, admin_tokens):
    res = client.get("/api/v1/admin/users?page=abc", headers=auth_header(admin_tokens["token"]))
    assert res.status_code == 400


def test_promote_user_revokes_their_sessions(client, user_tokens, admin_tokens, login):
    alice_id = _alice_id(client, admin_tokens)
    res = client.patch(
        f"/api/v1/admin/users/{alice_id}/role",
        headers=auth_header(admin_tokens["token"]),
        json={"role": "admin"},
    )
    assert res.status_code == 200
    assert res.get_json()["data"]["role"] == "admin"

    assert client.get("/api/v1/auth/verify", headers=auth_header(user_tokens["token"])).status_code == 401

    fresh = login()
    assert fresh["user"]["role"] == "admin"
    assert client.get("/api/v1/admin/users", headers=auth_header(fresh["token"])).status_code == 200


def test_admin_cannot_demote_self(client, admin_tokens):
    me = client.get("/api/v1/auth/verify", headers=auth_header(admin_tokens["token"])).get_json()["user"]
    res = client.patch(
        f"/api/v1/admin/users/{me['id']}/role",
        headers=auth_header(admin_tokens["token"]),
        json={"role": "user"},
    )
    assert res.status_code == 400


def test_unknown_role_rejected(client, user_tokens, admin_tokens):
    alice_id = _alice_id(client, admin_tokens)
    res = client.patch(
        f"/api/v1/admin/users/{alice_id}/role",
        headers=auth_header(admin_tokens["token"]),
        json={"role": "superuser"},
    )
    assert res.status_code == 422


def test_admin_sees_and_revokes_user_sessions(client, user_tokens, admin_tokens):
    alice_id = _alice_id(client, admin_tokens)
    headers = auth_header(admin_tokens["token"])

    res = client.get(f"/api/v1/admin/users/{alice_id}/sessions", headers=headers)
    assert res.status_code == 200
    assert len(res.get_json()["data"]) == 2

    res = client.post(f"/api/v1/admin/users/{alice_id}/revoke-sessions", headers=headers)
    assert res.status_code == 200
    assert res.get_json()["revoked"] == 2
    assert client.get("/api/v1/auth/verify", headers=auth_header(user_tokens["token"])).status_code == 401


def test_admin_routes_unknown_user(client, admin_tokens):
    res = client.get("/api/v1/admin/users/nope/sessions", headers=auth_header(admin_tokens["token"]))
    assert res.status_code == 404
    assert res.get_json()["code"] == "NOT_FOUND"


def test_purge_sessions_command(app, clock, user_tokens):
    clock.advance(days=8)
    result = app.test_cli_runner().invoke(args=["purge-sessions"])
    assert result.exit_code == 0
    assert "Purged 2 session record(s)" in result.output


def test_create_admin_command(app, client):
    runner = app.test_cli_runner()
    result = runner.invoke(
        args=["create-admin", "--name", "Root", "--email", "root@example.com", "--password", "S3cure-pass"]
    )
    assert result.exit_code == 0, result.output
    res = client.post("/api/v1/auth/login", json={"email": "root@example.com", "password": "S3cure-pass"})
    assert res.get_json()["user"]["role"] == "admin"

    again = runner.invoke(
        args=["create-admin", "--name", "Root", "--email", "root@example.com", "--password", "S3cure-pass"]
    )
    assert again.exit_code != 0
