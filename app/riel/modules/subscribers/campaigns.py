"""
Email campaigns: creation, history and stub delivery.

A campaign is stored as ``queued`` and handed to ``dispatch_campaign`` after
the creating request has committed. Delivery runs in its own session and
walks ``queued -> sending -> sent | sent_empty | partial_failure | failed``.
"""
from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import TYPE_CHECKING, Any

from flask import Flask

from app.riel.db import session_scope
from app.riel.errors import Conflict
from app.riel.mailer import MailerError, get_mailer
from app.riel.modules.notifications.service import notify
from app.riel.modules.subscribers.models import (
    CAMPAIGN_FAILED,
    CAMPAIGN_PARTIAL_FAILURE,
    CAMPAIGN_QUEUED,
    CAMPAIGN_SENDING,
    CAMPAIGN_SENT,
    CAMPAIGN_SENT_EMPTY,
    Campaign,
    Subscriber,
)
from app.riel.modules.subscribers.service import SubscriberRepository, issue_unsubscribe_token, unsubscribe_url
from app.riel.repository import Repository
from app.riel.validation import Field, Issues, schema

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

CAMPAIGN_FILTER_SCHEMA = schema(
    Field("interests", kind="list", items=Field("item", required=True, max_length=64)),
)


def _check_filter(value: dict, path: str) -> Issues:
    return CAMPAIGN_FILTER_SCHEMA.check(value, prefix=f"{path}.", wire_keys=True)[1]


CAMPAIGN_SCHEMA = schema(
    Field("subject", required=True, min_length=3, max_length=255),
    Field("content", required=True, min_length=20),
    Field("filter", kind="dict", nullable=True, check=_check_filter),
)


class CampaignRepository(Repository[Campaign]):
    model = Campaign
    entity_name = "Campaign"


def matching_recipients(s: "Session", audience: dict[str, Any] | None) -> list[Subscriber]:
    """Subscribed rows, narrowed to any-interest overlap when the filter names interests."""
    subs = SubscriberRepository(s).find_many({"subscribed": True})
    wanted = set((audience or {}).get("interests") or [])
    if not wanted:
        return subs
    return [sub for sub in subs if wanted.intersection(sub.interests or [])]


def create_campaign(s: "Session", actor_id: str, payload: dict) -> tuple[Campaign | None, int]:
    """Returns (campaign, recipient_count); no campaign is stored for an empty audience."""
    data = CAMPAIGN_SCHEMA.validate(payload)
    audience = {"interests": list(data["filter"].get("interests") or [])} if data.get("filter") else {}
    recipient_count = len(matching_recipients(s, audience))
    if recipient_count == 0:
        return None, 0
    campaign = CampaignRepository(s).create(
        {
            "subject": data["subject"],
            "content": data["content"],
            "filter": audience,
            "status": CAMPAIGN_QUEUED,
            "recipient_count": recipient_count,
            "created_by": actor_id,
        }
    )
    return campaign, recipient_count


def list_campaigns(s: "Session", *, limit: int, offset: int) -> tuple[list[Campaign], int]:
    repo = CampaignRepository(s)
    return repo.find_many(limit=limit, offset=offset), repo.count()


def delete_campaign(s: "Session", campaign_id: str) -> Campaign:
    repo = CampaignRepository(s)
    campaign = repo.get_or_404(campaign_id)
    if campaign.status == CAMPAIGN_SENDING:
        raise Conflict("Cannot delete a campaign that is currently sending")
    return repo.delete(campaign)


def _final_status(sent: int, total: int) -> str:
    if total == 0:
        return CAMPAIGN_SENT_EMPTY
    if sent == total:
        return CAMPAIGN_SENT
    return CAMPAIGN_PARTIAL_FAILURE if sent > 0 else CAMPAIGN_FAILED


def _render(campaign: Campaign, link: str) -> str:
    return f'{campaign.content}\n<p style="font-size:12px"><a href="{link}">Unsubscribe</a></p>'


def _mark_failed(app: Flask, campaign_id: str) -> None:
    try:
        with session_scope(app) as s:
            campaign = s.get(Campaign, campaign_id)
            if campaign is not None:
                campaign.status = CAMPAIGN_FAILED
                campaign.updated_at = datetime.utcnow()
    except Exception:
        logger.exception("Could not mark campaign %s as failed", campaign_id)


def deliver_campaign(app: Flask, campaign_id: str) -> str | None:
    """
    Sends a queued campaign through the configured mailer.

    Each recipient gets a fresh unsubscribe link. Returns the final status,
    or None when the campaign was missing or no longer queued.
    """
    mailer = get_mailer(app)
    ttl_hours = int(app.config["UNSUBSCRIBE_TOKEN_TTL_HOURS"])
    site_url = app.config["SITE_URL"]
    try:
        with session_scope(app) as s:
            campaign = s.get(Campaign, campaign_id)
            if campaign is None or campaign.status != CAMPAIGN_QUEUED:
                logger.info("Campaign %s not found or not queued; skipping delivery", campaign_id)
                return None
            campaign.status = CAMPAIGN_SENDING
            s.commit()

            recipients = matching_recipients(s, campaign.filter)
            sent = 0
            for sub in recipients:
                token = issue_unsubscribe_token(sub, ttl_hours=ttl_hours)
                html = _render(campaign, unsubscribe_url(site_url, sub.email, token))
                try:
                    ok = mailer.send(to=sub.email, subject=campaign.subject, html=html)
                except MailerError as e:
                    logger.warning("Campaign %s: send to %s failed: %s", campaign_id, sub.email, e)
                    ok = False
                if ok:
                    sent += 1
                    sub.last_email_sent = datetime.utcnow()

            status = _final_status(sent, len(recipients))
            now = datetime.utcnow()
            campaign.status = status
            campaign.sent_at = now
            campaign.updated_at = now
            campaign.delivered_count = sent
            if campaign.created_by:
                notify(
                    s,
                    [campaign.created_by],
                    f"Campaign '{campaign.subject}' finished: {sent}/{len(recipients)} delivered",
                    type="success" if status in (CAMPAIGN_SENT, CAMPAIGN_SENT_EMPTY) else "warning",
                    related_item_id=campaign.id,
                    related_item_type="email_campaign",
                    link="/admin/subscribers/campaigns",
                )
        logger.info("Campaign %s finished with status=%s delivered=%d", campaign_id, status, sent)
        return status
    except Exception:
        logger.exception("Campaign %s delivery failed", campaign_id)
        _mark_failed(app, campaign_id)
        return CAMPAIGN_FAILED


def dispatch_campaign(app: Flask, campaign_id: str) -> None:
    mode = (app.config.get("CAMPAIGN_DELIVERY_MODE") or "inline").lower()
    if mode == "thread":
        threading.Thread(
            target=deliver_campaign,
            args=(app, campaign_id),
            name=f"campaign-{campaign_id}",
            daemon=True,
        ).start()
        return
    deliver_campaign(app, campaign_id)
