from app.riel.db import session_scope
from app.riel.modules.site_settings.models import SiteSettings


def test_first_read_creates_defaults_once(app, client):
    first = client.get("/api/settings")
    assert first.status_code == 200
    assert first.json["siteName"] == "Riel Films"
    assert first.json["socialLinks"] == []

    second = client.get("/api/settings").json
    assert second["id"] == first.json["id"]
    with session_scope(app) as s:
        assert s.query(SiteSettings).count() == 1


def test_put_updates_in_place(admin, editor, client):
    original = client.get("/api/settings").json

    r = editor.put(
        "/api/settings",
        json={
            "id": "ignored",
            "siteName": "Riel",
            "socialLinks": [{"platform": "instagram", "url": "https://instagram.com/riel"}],
        },
    )
    assert r.status_code == 200
    assert r.json["id"] == original["id"]
    assert r.json["siteName"] == "Riel"
    assert r.json["contactEmail"] == original["contactEmail"]

    assert client.get("/api/settings").json["socialLinks"] == [
        {"platform": "instagram", "url": "https://instagram.com/riel"}
    ]


def test_put_without_existing_row_creates_it(app, admin):
    r = admin.put("/api/settings", json={"contactEmail": "Hello@Riel.com"})
    assert r.status_code == 200
    assert r.json["contactEmail"] == "hello@riel.com"
    assert r.json["siteName"] == "Riel Films"
    with session_scope(app) as s:
        assert s.query(SiteSettings).count() == 1


def test_put_is_validated(admin):
    r = admin.put(
        "/api/settings",
        json={"siteName": "", "contactEmail": "nope", "socialLinks": [{"platform": "x"}], "theme": "dark"},
    )
    assert r.status_code == 400
    assert set(r.json["issues"]) == {"siteName", "contactEmail", "socialLinks.0.url", "theme"}


def test_put_requires_login(client):
    assert client.put("/api/settings", json={"siteName": "X"}).status_code == 401


def test_concurrent_first_read_reuses_the_winning_row(app, client, monkeypatch):
    from app.riel.modules.site_settings.models import DEFAULT_SETTINGS, SETTINGS_ID
    from app.riel.modules.site_settings.service import SettingsRepository

    # Another request created the row after this one looked for it.
    with session_scope(app) as s:
        s.add(SiteSettings(id=SETTINGS_ID, **{**DEFAULT_SETTINGS, "site_name": "Winner"}))

    real_current = SettingsRepository.current
    calls = []

    def _late_current(self):
        calls.append(1)
        return None if len(calls) == 1 else real_current(self)

    monkeypatch.setattr(SettingsRepository, "current", _late_current)
    r = client.get("/api/settings")
    assert r.status_code == 200
    assert r.json["id"] == SETTINGS_ID
    assert r.json["siteName"] == "Winner"
    with session_scope(app) as s:
        assert s.query(SiteSettings).count() == 1


def test_settings_row_uses_the_fixed_key(client):
    from app.riel.modules.site_settings.models import SETTINGS_ID

    assert client.get("/api/settings").json["id"] == SETTINGS_ID
