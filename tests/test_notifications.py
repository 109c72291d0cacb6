from datetime import datetime, timedelta

from app.riel.db import session_scope
from app.riel.modules.notifications.models import Notification
from app.riel.modules.notifications.service import notify


def _seed(app, user_id, count, *, read=False):
    base = datetime.utcnow()
    ids = []
    with session_scope(app) as s:
        for i in range(count):
            n = Notification(user_id=user_id, message=f"note {i}", read=read, timestamp=base - timedelta(minutes=i))
            s.add(n)
            s.flush()
            ids.append(n.id)
    return ids


def _read_flags(app, user_id):
    with session_scope(app) as s:
        return [n.read for n in s.query(Notification).filter(Notification.user_id == user_id)]


def test_inbox_is_scoped_and_paginated(app, admin, user_ids):
    _seed(app, user_ids["admin"], 17)
    _seed(app, user_ids["admin"], 2, read=True)
    _seed(app, user_ids["editor"], 4)

    r = admin.get("/api/notifications")
    assert r.status_code == 200
    assert len(r.json["notifications"]) == 15
    assert r.json["unreadCount"] == 17
    assert r.json["pagination"] == {"currentPage": 1, "totalPages": 2, "totalNotifications": 19, "limit": 15}
    assert r.json["notifications"][0]["message"] == "note 0"

    r = admin.get("/api/notifications?page=2&unread=true")
    assert len(r.json["notifications"]) == 2
    assert r.json["pagination"]["totalNotifications"] == 17

    assert admin.get("/api/notifications?limit=500").json["pagination"]["limit"] == 50


def test_anonymous_cannot_read_inbox(client):
    assert client.get("/api/notifications").status_code == 401


def test_mark_all_only_touches_own_inbox(app, admin, user_ids):
    _seed(app, user_ids["admin"], 3)
    _seed(app, user_ids["editor"], 2)

    r = admin.patch("/api/notifications", json={"ids": "all"})
    assert r.status_code == 200
    assert r.json == {"success": True, "message": "3 notification(s) marked as read"}

    assert _read_flags(app, user_ids["admin"]) == [True, True, True]
    assert _read_flags(app, user_ids["editor"]) == [False, False]


def test_mark_specific_ids_ignores_other_users(app, editor, user_ids):
    mine = _seed(app, user_ids["editor"], 2)
    theirs = _seed(app, user_ids["admin"], 1)

    r = editor.patch("/api/notifications", json={"ids": [mine[0], theirs[0]]})
    assert r.json["message"] == "1 notification(s) marked as read"
    assert _read_flags(app, user_ids["admin"]) == [False]


def test_mark_read_validation(admin):
    r = admin.patch("/api/notifications", json={"ids": ["nope"]})
    assert r.status_code == 400
    assert r.json["issues"] == {"ids.0": ["Invalid ID format"]}

    r = admin.patch("/api/notifications", json={"ids": "some", "userId": "x"})
    assert r.status_code == 400
    assert set(r.json["issues"]) == {"ids", "userId"}

    r = admin.patch("/api/notifications", json={"ids": []})
    assert r.json["message"] == "0 notification(s) marked as read"


def test_notify_dedupes_recipients(app, user_ids):
    with session_scope(app) as s:
        created = notify(s, [user_ids["admin"], user_ids["admin"]], "hello", type="success")
        assert len(created) == 1
    with session_scope(app) as s:
        assert s.query(Notification).one().type == "success"
