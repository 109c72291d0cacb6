from conftest import login


def test_login_and_session(client):
    body = login(client)
    assert body["user"]["email"] == "admin@example.com"
    assert "passwordHash" not in body["user"]
    assert body["csrfToken"]

    r = client.get("/api/auth/session")
    assert r.status_code == 200
    assert r.json["user"]["role"] == "admin"


def test_login_email_is_normalized(client):
    r = client.post("/api/auth/login", json={"email": "  ADMIN@Example.com ", "password": "pw"})
    assert r.status_code == 200


def test_bad_password_is_401(client):
    r = client.post("/api/auth/login", json={"email": "admin@example.com", "password": "nope"})
    assert r.status_code == 401
    assert r.json["error"] == "Invalid credentials"


def test_login_requires_fields(client):
    r = client.post("/api/auth/login", json={"email": "admin@example.com"})
    assert r.status_code == 400
    assert "password" in r.json["issues"]


def test_login_rate_limited(client):
    for _ in range(5):
        r = client.post("/api/auth/login", json={"email": "admin@example.com", "password": "nope"})
        assert r.status_code == 401
    r = client.post("/api/auth/login", json={"email": "admin@example.com", "password": "pw"})
    assert r.status_code == 429


def test_logout_clears_session(client):
    login(client)
    r = client.post("/api/auth/logout")
    assert r.status_code == 200
    assert client.get("/api/auth/session").status_code == 401


def test_inactive_user_loses_session(app, client):
    from app.riel.db import session_scope
    from app.riel.models import User

    login(client, "editor@example.com")
    with session_scope(app) as s:
        s.query(User).filter(User.email == "editor@example.com").one().is_active = False
    assert client.get("/api/auth/session").status_code == 401


def test_csrf_enforced_for_cookie_sessions(app, monkeypatch):
    monkeypatch.setitem(app.config, "CSRF_ENABLED", True)
    c = app.test_client()
    token = login(c)["csrfToken"]

    r = c.patch("/api/notifications", json={"ids": "all"})
    assert r.status_code == 400
    assert r.json["error"] == "CSRF token missing or invalid."

    r = c.patch("/api/notifications", json={"ids": "all"}, headers={"X-CSRF-Token": token})
    assert r.status_code == 200


def test_csrf_not_required_for_public_subscribe(app, monkeypatch):
    monkeypatch.setitem(app.config, "CSRF_ENABLED", True)
    c = app.test_client()
    r = c.post("/api/subscribers", json={"email": "fan@example.com"})
    assert r.status_code == 201
