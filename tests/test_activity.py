from datetime import datetime, timedelta

import app.riel.audit as audit_module
from app.riel.modules.activity.service import relative_time


def test_feed_decorates_content_events(admin, editor):
    film = admin.post(
        "/api/films",
        json={
            "title": "Echoes",
            "slug": "echoes",
            "category": "Documentary",
            "year": "2023",
            "description": "0123456789",
            "image": "/echoes.jpg",
            "director": "D",
            "producer": "P",
            "duration": "80m",
            "releaseDate": "2023-05-01",
            "synopsis": "0123456789",
        },
    ).json

    r = editor.get("/api/activity?type=film")
    assert r.status_code == 200
    [item] = r.json["activities"]
    assert item["action"] == "created Echoes"
    assert item["item"] == "Echoes"
    assert item["user"] == "Ada Admin"
    assert item["userImage"] == "/images/avatar/placeholder.jpg"
    assert item["contentUrlPath"] == "/films/echoes"
    assert item["itemId"] == film["id"]
    assert item["isNew"] is True
    assert item["time"] == "Just now"


def test_feed_includes_logins_and_respects_limit(admin):
    r = admin.get("/api/activity")
    assert [a["action"] for a in r.json["activities"]] == ["logged in"]

    for i in range(3):
        admin.post("/api/activity", json={"pageType": "story", "event": "view", "contentTitle": f"S{i}"})
    assert len(admin.get("/api/activity?limit=2").json["activities"]) == 2


def test_log_activity(admin):
    r = admin.post(
        "/api/activity",
        json={"pageType": "dashboard", "event": "view", "extraData": {"tab": "overview"}},
        headers={"Referer": "/admin"},
    )
    assert r.status_code == 200
    assert r.json["success"] is True
    assert len(r.json["activityId"]) == 24

    [item] = admin.get("/api/activity?type=dashboard").json["activities"]
    assert item["action"] == "viewed dashboard section"


def test_log_activity_validation_and_auth(client, admin):
    assert client.post("/api/activity", json={"pageType": "x", "event": "view"}).status_code == 401
    assert client.get("/api/activity").status_code == 401

    r = admin.post("/api/activity", json={"event": "view", "actorId": "someone"})
    assert r.status_code == 400
    assert set(r.json["issues"]) == {"pageType", "actorId"}


def test_log_activity_store_failure_is_500(admin, monkeypatch):
    def _boom(ev):
        raise RuntimeError("audit store down")

    monkeypatch.setattr(audit_module, "_write_event", _boom)
    r = admin.post("/api/activity", json={"pageType": "film", "event": "view"})
    assert r.status_code == 500
    assert r.json["error"] == "Failed to log activity"


def test_relative_time():
    now = datetime(2024, 5, 10, 12, 0, 0)
    assert relative_time(now - timedelta(seconds=30), now) == "Just now"
    assert relative_time(now - timedelta(minutes=1), now) == "1 min ago"
    assert relative_time(now - timedelta(minutes=5), now) == "5 mins ago"
    assert relative_time(now - timedelta(hours=3), now) == "3 hours ago"
    assert relative_time(now - timedelta(days=2), now) == "2 days ago"
    assert relative_time(now - timedelta(days=30), now) == "2024-04-10"
