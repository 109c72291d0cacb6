import threading

from app.riel.db import session_scope
from app.riel.mailer import MailerError
from app.riel.modules.notifications.models import Notification
from app.riel.modules.subscribers.campaigns import deliver_campaign
from app.riel.modules.subscribers.models import CAMPAIGN_SENDING, Campaign

CONTENT = "<p>Our new film premieres next week.</p>"


def _subscribe(client, email, interests=None):
    r = client.post("/api/subscribers", json={"email": email, "interests": interests or []})
    assert r.status_code == 201


def test_zero_recipients_creates_nothing(admin):
    r = admin.post("/api/subscribers/send-email", json={"subject": "Hello", "content": CONTENT})
    assert r.status_code == 200
    assert r.json["message"] == "No subscribers match the specified criteria. Campaign not created."
    assert admin.get("/api/subscribers/campaigns").json["campaigns"] == []


def test_campaign_is_delivered_inline(app, admin, client, user_ids):
    _subscribe(client, "a@example.com", ["docs"])
    _subscribe(client, "b@example.com", ["shorts"])
    app.extensions["mailer"].sent.clear()

    r = admin.post("/api/subscribers/send-email", json={"subject": "Premiere", "content": CONTENT})
    assert r.status_code == 202
    campaign_id = r.json["campaignId"]
    assert "~2 recipients" in r.json["message"]

    body = admin.get(f"/api/subscribers/campaigns/{campaign_id}").json
    assert body["status"] == "sent"
    assert body["recipientCount"] == 2
    assert body["deliveredCount"] == 2
    assert body["sentAt"] is not None
    assert body["createdBy"] == user_ids["admin"]

    sent = app.extensions["mailer"].sent
    assert sorted(m["to"] for m in sent) == ["a@example.com", "b@example.com"]
    assert all("/unsubscribe?" in m["html"] for m in sent)

    sub = admin.get("/api/subscribers/a@example.com").json
    assert sub["lastEmailSent"] is not None

    with session_scope(app) as s:
        n = s.query(Notification).filter(Notification.related_item_id == campaign_id).one()
        assert n.user_id == user_ids["admin"]
        assert n.type == "success"


def test_interest_filter_narrows_audience(app, admin, client):
    _subscribe(client, "a@example.com", ["docs"])
    _subscribe(client, "b@example.com", ["shorts"])
    _subscribe(client, "c@example.com")
    app.extensions["mailer"].sent.clear()

    r = admin.post(
        "/api/subscribers/send-email",
        json={"subject": "Docs night", "content": CONTENT, "filter": {"interests": ["docs", "music"]}},
    )
    assert r.status_code == 202
    assert [m["to"] for m in app.extensions["mailer"].sent] == ["a@example.com"]

    r = admin.post(
        "/api/subscribers/send-email",
        json={"subject": "Jazz", "content": CONTENT, "filter": {"interests": ["jazz"]}},
    )
    assert r.status_code == 200


def test_unsubscribed_are_excluded(admin, client):
    _subscribe(client, "a@example.com")
    admin.patch("/api/subscribers/a@example.com", json={"subscribed": False})
    r = admin.post("/api/subscribers/send-email", json={"subject": "Hello", "content": CONTENT})
    assert r.status_code == 200


def test_campaign_validation(admin):
    r = admin.post("/api/subscribers/send-email", json={"subject": "Hi", "content": "short", "filter": {"x": 1}})
    assert r.status_code == 400
    assert set(r.json["issues"]) == {"subject", "content", "filter.x"}


def test_editor_cannot_send(editor):
    r = editor.post("/api/subscribers/send-email", json={"subject": "Hello", "content": CONTENT})
    assert r.status_code == 401


def test_partial_failure_is_recorded(app, admin, client):
    _subscribe(client, "a@example.com")
    _subscribe(client, "b@example.com")
    mailer = app.extensions["mailer"]
    real_send = mailer.send

    def flaky_send(*, to, subject, html):
        if to == "b@example.com":
            raise MailerError("mailbox full")
        return real_send(to=to, subject=subject, html=html)

    mailer.send = flaky_send
    campaign_id = admin.post("/api/subscribers/send-email", json={"subject": "Hello", "content": CONTENT}).json["campaignId"]
    body = admin.get(f"/api/subscribers/campaigns/{campaign_id}").json
    assert body["status"] == "partial_failure"
    assert body["deliveredCount"] == 1


def test_history_pagination_and_delete(admin, client):
    _subscribe(client, "a@example.com")
    ids = [
        admin.post("/api/subscribers/send-email", json={"subject": f"Issue {i}", "content": CONTENT}).json["campaignId"]
        for i in range(3)
    ]

    r = admin.get("/api/subscribers/campaigns?limit=2&page=2")
    assert r.json["pagination"] == {"currentPage": 2, "totalPages": 2, "totalCampaigns": 3, "limit": 2}
    assert len(r.json["campaigns"]) == 1
    assert "content" not in r.json["campaigns"][0]

    assert admin.get("/api/subscribers/campaigns/bad-id").json["error"] == "Invalid campaign ID format"
    assert admin.get("/api/subscribers/campaigns/0123456789abcdef01234567").status_code == 404

    r = admin.delete(f"/api/subscribers/campaigns/{ids[0]}")
    assert r.json["message"] == "Campaign deleted successfully"
    assert admin.get("/api/subscribers/campaigns").json["pagination"]["totalCampaigns"] == 2


def test_sending_campaign_cannot_be_deleted(app, admin, client):
    _subscribe(client, "a@example.com")
    campaign_id = admin.post("/api/subscribers/send-email", json={"subject": "Hello", "content": CONTENT}).json["campaignId"]
    with session_scope(app) as s:
        s.get(Campaign, campaign_id).status = CAMPAIGN_SENDING
    assert admin.delete(f"/api/subscribers/campaigns/{campaign_id}").status_code == 409


def test_delivery_skips_campaigns_that_are_not_queued(app, admin, client):
    _subscribe(client, "a@example.com")
    campaign_id = admin.post("/api/subscribers/send-email", json={"subject": "Hello", "content": CONTENT}).json["campaignId"]
    assert deliver_campaign(app, campaign_id) is None
    assert deliver_campaign(app, "0123456789abcdef01234567") is None


def test_threaded_delivery_finishes_in_background(app, admin, client, monkeypatch):
    _subscribe(client, "a@example.com")
    monkeypatch.setitem(app.config, "CAMPAIGN_DELIVERY_MODE", "thread")

    r = admin.post("/api/subscribers/send-email", json={"subject": "Hello", "content": CONTENT})
    assert r.status_code == 202
    campaign_id = r.json["campaignId"]
    for t in threading.enumerate():
        if t.name == f"campaign-{campaign_id}":
            t.join(timeout=10)

    assert admin.get(f"/api/subscribers/campaigns/{campaign_id}").json["status"] == "sent"
