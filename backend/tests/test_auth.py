from contentboard.core.config import settings


def test_register_sets_session_and_returns_user(client):
    r = client.post(
        "/api/register",
        json={"username": "  creator1 ", "password": "longenough", "email": "c1@example.com", "role": "admin"},
    )
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["username"] == "creator1"
    assert body["email"] == "c1@example.com"
    assert body["role"] == "editor"
    assert "passwordHash" not in body
    assert settings.session_cookie_name in r.cookies

    me = client.get("/api/user")
    assert me.status_code == 200
    assert me.json()["id"] == body["id"]


def test_register_duplicate_username_conflicts(client, make_user):
    make_user(username="taken")
    r = client.post("/api/register", json={"username": "taken", "password": "longenough"})
    assert r.status_code == 409
    assert r.json()["error_code"] == "conflict"


def test_register_validates_input(client):
    r = client.post("/api/register", json={"username": "ab", "password": "longenough"})
    assert r.status_code == 400
    assert r.json()["errors"][0]["field"] == "username"

    r = client.post("/api/register", json={"username": "creator2", "password": "short"})
    assert r.status_code == 400
    assert r.json()["errors"][0]["field"] == "password"

    r = client.post("/api/register", json={"username": "creator3", "password": "longenough", "email": "nope"})
    assert r.status_code == 400
    assert r.json()["errors"][0]["field"] == "email"


def test_register_can_be_disabled(client, monkeypatch):
    monkeypatch.setattr(settings, "allow_public_register", False)
    r = client.post("/api/register", json={"username": "creator4", "password": "longenough"})
    assert r.status_code == 403


def test_login_and_logout(client, make_user):
    make_user(username="alice", password="s3cret-pass")

    r = client.post("/api/login", json={"username": "alice", "password": "s3cret-pass"})
    assert r.status_code == 200
    assert r.json()["username"] == "alice"
    assert client.get("/api/user").status_code == 200

    r = client.post("/api/logout")
    assert r.status_code == 200
    assert r.json() == {"ok": True}
    assert client.get("/api/user").status_code == 401


def test_login_with_wrong_password(client, make_user):
    make_user(username="bob", password="right-password")
    r = client.post("/api/login", json={"username": "bob", "password": "wrong-password"})
    assert r.status_code == 401
    assert r.json()["message"] == "Invalid username or password"

    r = client.post("/api/login", json={"username": "nobody", "password": "whatever"})
    assert r.status_code == 401


def test_current_user_requires_session(client):
    r = client.get("/api/user")
    assert r.status_code == 401
    assert r.json()["ok"] is False


def test_bearer_token_identifies_user(client, editor):
    user, headers = editor
    r = client.get("/api/user", headers=headers)
    assert r.status_code == 200
    assert r.json()["username"] == user.username
    assert r.json()["role"] == "editor"


def test_change_password(client, make_user, login):
    make_user(username="carol", password="old-password")
    headers = login("carol", "old-password")

    r = client.post(
        "/api/user/password",
        json={"currentPassword": "wrong-password", "password": "new-password"},
        headers=headers,
    )
    assert r.status_code == 401

    r = client.post(
        "/api/user/password",
        json={"currentPassword": "old-password", "password": "tiny"},
        headers=headers,
    )
    assert r.status_code == 400

    r = client.post(
        "/api/user/password",
        json={"currentPassword": "old-password", "password": "new-password"},
        headers=headers,
    )
    assert r.status_code == 200

    assert client.post("/api/login", json={"username": "carol", "password": "old-password"}).status_code == 401
    assert client.post("/api/login", json={"username": "carol", "password": "new-password"}).status_code == 200


def test_login_is_rate_limited(client):
    statuses = [
        client.post("/api/login", json={"username": "nobody", "password": "whatever"}).status_code for _ in range(21)
    ]
    assert statuses[:20] == [401] * 20
    assert statuses[20] == 429


def test_rate_limited_response_has_retry_after(client):
    for _ in range(20):
        client.post("/api/login", json={"username": "nobody", "password": "whatever"})
    r = client.post("/api/login", json={"username": "nobody", "password": "whatever"})
    assert r.status_code == 429
    assert int(r.headers["Retry-After"]) > 0


def test_rate_limit_fails_open_without_redis(client, monkeypatch):
    import contentboard.core.rate_limit as rate_limit_module

    def _down():
        raise ConnectionError("redis down")

    monkeypatch.setattr(rate_limit_module, "get_redis", _down)
    statuses = {
        client.post("/api/login", json={"username": "nobody", "password": "whatever"}).status_code for _ in range(25)
    }
    assert statuses == {401}


def test_register_rejects_malformed_email(client):
    for email in ["bob@exa..mple.com", "bob@", "@example.com", "bob example@example.com"]:
        r = client.post("/api/register", json={"username": "creator5", "password": "longenough", "email": email})
        assert r.status_code == 400, email
        assert r.json()["errors"][0]["field"] == "email"


def test_register_blank_email_is_stored_as_null(client):
    r = client.post("/api/register", json={"username": "creator6", "password": "longenough", "email": "  "})
    assert r.status_code == 201
    assert r.json()["email"] is None
