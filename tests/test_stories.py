from app.riel.modules.stories.service import estimate_read_time


def _story(**overrides):
    payload = {
        "title": "Behind the Lens",
        "slug": "behind-the-lens",
        "excerpt": "Notes from the edit suite.",
        "content": [
            {"type": "heading", "content": "Day one"},
            {"type": "paragraph", "content": "We started before dawn."},
            {"type": "image", "url": "https://cdn.example.com/a.jpg", "caption": "Dawn"},
            {"type": "quote", "content": "Keep rolling.", "attribution": "Director"},
        ],
        "author": "Riel Films",
        "date": "2024-03-01",
        "image": "/images/lens.jpg",
        "category": "Behind the Scenes",
    }
    payload.update(overrides)
    return payload


def test_create_and_fetch(admin, client):
    r = admin.post("/api/stories", json=_story())
    assert r.status_code == 201
    assert r.json["date"] == "2024-03-01T00:00:00"
    assert r.json["readTime"] == "1 min read"
    assert r.json["content"][2] == {"type": "image", "url": "https://cdn.example.com/a.jpg", "caption": "Dawn"}

    body = client.get("/api/stories/behind-the-lens").json
    assert body["id"] == r.json["id"]
    assert body["featured"] is False


def test_explicit_read_time_is_kept(admin):
    r = admin.post("/api/stories", json=_story(readTime="7 min read"))
    assert r.json["readTime"] == "7 min read"


def test_content_blocks_are_checked_per_type(admin):
    content = [
        {"type": "paragraph"},
        {"type": "video", "url": "https://x/y.mp4"},
        {"type": "image", "url": "https://x/y.jpg", "alt": "nope"},
        "text",
    ]
    r = admin.post("/api/stories", json=_story(content=content))
    assert r.status_code == 400
    issues = r.json["issues"]
    assert "content.0.content" in issues
    assert "content.1.type" in issues
    assert issues["content.2.alt"] == ["Unrecognized field."]
    assert issues["content.3"] == ["Must be an object."]


def test_empty_content_and_bad_date_rejected(admin):
    r = admin.post("/api/stories", json=_story(content=[], date="yesterday"))
    assert r.status_code == 400
    assert set(r.json["issues"]) == {"content", "date"}


def test_list_is_newest_date_first(admin, client):
    admin.post("/api/stories", json=_story(slug="old", date="2023-01-01"))
    admin.post("/api/stories", json=_story(slug="new", date="2024-06-01T10:00:00Z", featured=True))
    assert [s["slug"] for s in client.get("/api/stories").json] == ["new", "old"]
    assert [s["slug"] for s in client.get("/api/stories?featured=true").json] == ["new"]
    assert len(client.get("/api/stories?limit=1").json) == 1


def test_update_and_delete(admin, editor):
    story = admin.post("/api/stories", json=_story()).json
    r = editor.patch(f"/api/stories/id/{story['id']}", json={"content": [{"type": "paragraph", "content": "Short."}]})
    assert r.status_code == 200
    assert r.json["content"] == [{"type": "paragraph", "content": "Short."}]

    assert editor.delete(f"/api/stories/id/{story['id']}").status_code == 401
    assert admin.delete("/api/stories/behind-the-lens").status_code == 405
    r = admin.delete(f"/api/stories/id/{story['id']}")
    assert r.json["message"] == "Story deleted successfully"


def test_estimate_read_time():
    words = " ".join(["word"] * 401)
    assert estimate_read_time([{"type": "paragraph", "content": words}]) == "3 min read"
    assert estimate_read_time([{"type": "image", "url": "/a.jpg"}]) == "1 min read"


def test_zulu_dates_are_kept_in_utc(admin, new_york_tz):
    r = admin.post("/api/stories", json=_story(date="2024-06-01T10:00:00Z"))
    assert r.status_code == 201
    assert r.json["date"] == "2024-06-01T10:00:00"
