def _production(**overrides):
    payload = {
        "title": "Rising Waters",
        "slug": "rising-waters",
        "category": "Documentary",
        "status": "In Production",
        "description": "A river town and its floods.",
        "image": "/images/rising.jpg",
    }
    payload.update(overrides)
    return payload


def test_create_with_defaults(admin, client):
    r = admin.post("/api/productions", json=_production())
    assert r.status_code == 201

    body = client.get("/api/productions/rising-waters").json
    assert body["progress"] == 0
    assert body["featured"] is False
    assert body["team"] == []
    assert body["supportOptions"] == []
    assert body["director"] == ""


def test_status_and_progress_are_checked(admin):
    r = admin.post("/api/productions", json=_production(status="Shelved", progress=101))
    assert r.status_code == 400
    assert set(r.json["issues"]) == {"status", "progress"}

    r = admin.post("/api/productions", json=_production(progress=12.5))
    assert r.status_code == 400
    assert r.json["issues"]["progress"] == ["Must be an integer."]


def test_nested_sections_round_trip(admin):
    stages = [{"name": "Shoot", "status": "in-progress", "milestones": ["Day 1"]}]
    team = [{"name": "Ana", "role": "Director", "image": "/team/ana.jpg"}]
    r = admin.post("/api/productions", json=_production(stages=stages, team=team, progress=40))
    assert r.status_code == 201
    assert r.json["stages"] == stages
    assert r.json["team"] == [{"name": "Ana", "role": "Director", "bio": "", "image": "/team/ana.jpg"}]


def test_stage_status_is_checked(admin):
    r = admin.post("/api/productions", json=_production(stages=[{"name": "Edit", "status": "done"}]))
    assert r.status_code == 400
    assert "stages.0.status" in r.json["issues"]


def test_filters(admin, client):
    admin.post("/api/productions", json=_production())
    admin.post("/api/productions", json=_production(slug="b", status="Completed", featured=True))

    assert [p["slug"] for p in client.get("/api/productions?status=Completed").json] == ["b"]
    assert [p["slug"] for p in client.get("/api/productions?featured=false").json] == ["rising-waters"]


def test_update_delete_and_slug_routes(admin, editor, client):
    p = admin.post("/api/productions", json=_production()).json

    r = editor.patch(f"/api/productions/id/{p['id']}", json={"progress": 80})
    assert r.status_code == 200
    assert r.json["progress"] == 80

    assert editor.patch("/api/productions/rising-waters", json={"progress": 1}).status_code == 405
    assert editor.delete(f"/api/productions/id/{p['id']}").status_code == 401

    r = admin.delete(f"/api/productions/id/{p['id']}")
    assert r.json["message"] == "Production deleted successfully"
    assert client.get("/api/productions").json == []
