import app.riel.modules.films.routes as films_routes


def test_health_ok(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json["ok"] is True


def test_healthz_ok(client):
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.data == b"ok"


def test_unknown_route_is_json_404(client):
    r = client.get("/api/nope")
    assert r.status_code == 404
    assert "error" in r.json


def test_non_object_body_rejected(admin):
    r = admin.post("/api/films", json=["not", "an", "object"])
    assert r.status_code == 400
    assert r.json["issues"] == {"_body": ["Must be an object."]}


def _break_film_listing(monkeypatch):
    def _boom(s, f):
        raise RuntimeError("database exploded")

    monkeypatch.setattr(films_routes, "list_films", _boom)


def test_unhandled_error_shows_detail_outside_production(client, monkeypatch):
    _break_film_listing(monkeypatch)
    r = client.get("/api/films")
    assert r.status_code == 500
    assert r.json == {"error": "Internal server error: database exploded"}


def test_unhandled_error_is_generic_in_production(app, client, monkeypatch):
    monkeypatch.setitem(app.config, "ENV", "production")
    _break_film_listing(monkeypatch)
    r = client.get("/api/films")
    assert r.status_code == 500
    assert r.json == {"error": "Internal server error"}
