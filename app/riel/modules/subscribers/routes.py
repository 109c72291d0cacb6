from __future__ import annotations

import logging

from flask import Blueprint, current_app, g, jsonify, request

from app.riel.audit import record_event
from app.riel.db import db_session
from app.riel.mailer import MailerError, get_mailer
from app.riel.modules.notifications.service import notify
from app.riel.modules.subscribers.campaigns import (
    CampaignRepository,
    create_campaign,
    delete_campaign,
    dispatch_campaign,
    list_campaigns,
)
from app.riel.modules.subscribers.service import (
    OUTCOME_CREATED,
    OUTCOME_EXISTS,
    SubscriberFilter,
    SubscriberRepository,
    admin_update_subscriber,
    delete_subscriber,
    list_subscribers,
    subscribe,
    unsubscribe_url,
    unsubscribe_with_token,
)
from app.riel.modules.users.service import admin_users
from app.riel.rbac import Capability, require_capability, user_has_capability
from app.riel.utils import json_body, parse_pagination, total_pages
from app.riel.validation import require_object_id

logger = logging.getLogger(__name__)

bp = Blueprint("subscribers", __name__)

CAMPAIGNS_DEFAULT_LIMIT = 20
CAMPAIGNS_MAX_LIMIT = 100


def _send_welcome(email: str, token: str) -> None:
    link = unsubscribe_url(current_app.config["SITE_URL"], email, token)
    try:
        get_mailer().send(
            to=email,
            subject="Welcome to Riel Films",
            html=f'<p>Thanks for subscribing.</p><p><a href="{link}">Unsubscribe</a></p>',
        )
    except MailerError as e:
        logger.warning("Welcome email to %s failed: %s", email, e)


# ---------- Public ----------
@bp.post("")
def subscribe_post():
    s = db_session()
    result = subscribe(s, json_body(), ttl_hours=int(current_app.config["UNSUBSCRIBE_TOKEN_TTL_HOURS"]))
    if result.outcome == OUTCOME_EXISTS:
        return jsonify({"message": result.message}), result.status_code

    sub = result.subscriber
    if result.outcome == OUTCOME_CREATED:
        notify(
            s,
            [u.id for u in admin_users(s)],
            f"New subscriber: {sub.email}",
            type="subscriber",
            related_item_id=sub.id,
            related_item_type="subscriber",
            link="/admin/subscribers/list",
        )
    s.commit()

    if result.token:
        _send_welcome(sub.email, result.token)
    record_event(
        page_type="subscriber",
        event="create" if result.outcome == OUTCOME_CREATED else "reactivate",
        item_id=sub.id,
        extra_data={"source": sub.source},
    )
    return jsonify({"message": result.message}), result.status_code


@bp.patch("/<email>")
def subscriber_update(email: str):
    s = db_session()
    payload = json_body()
    user = getattr(g, "current_user", None)

    if user_has_capability(user, Capability.MANAGE_SUBSCRIBERS) and "token" not in payload:
        sub = admin_update_subscriber(s, email, payload)
        s.commit()
        record_event(
            page_type="subscriber",
            event="update",
            item_id=sub.id,
            actor=user,
            page_url="/admin/subscribers/list",
            extra_data={"email": sub.email, "subscribed": sub.subscribed},
        )
        return jsonify({"message": "Subscriber updated successfully", "subscriber": sub.to_dict()})

    sub = unsubscribe_with_token(s, email, payload)
    s.commit()
    record_event(page_type="subscriber", event="unsubscribe", item_id=sub.id, extra_data={"via": "token"})
    return jsonify({"message": "Unsubscribed successfully", "subscriber": sub.to_dict()})


# ---------- Admin ----------
@bp.get("")
@require_capability(Capability.MANAGE_SUBSCRIBERS)
def subscribers_list():
    s = db_session()
    subs = list_subscribers(s, SubscriberFilter.from_args(request.args))
    return jsonify([sub.to_dict() for sub in subs])


@bp.get("/<email>")
@require_capability(Capability.MANAGE_SUBSCRIBERS)
def subscriber_get(email: str):
    s = db_session()
    return jsonify(SubscriberRepository(s).by_email_or_404(email).to_dict())


@bp.delete("/<email>")
@require_capability(Capability.MANAGE_SUBSCRIBERS)
def subscriber_delete(email: str):
    s = db_session()
    sub = delete_subscriber(s, email)
    s.commit()

    record_event(
        page_type="subscriber",
        event="delete",
        item_id=sub.id,
        actor=g.current_user,
        page_url="/admin/subscribers/list",
        extra_data={"email": sub.email},
    )
    return jsonify({"message": "Subscriber deleted successfully"})


@bp.post("/send-email")
@require_capability(Capability.MANAGE_SUBSCRIBERS)
def campaign_send():
    s = db_session()
    user = g.current_user
    campaign, recipient_count = create_campaign(s, user.id, json_body())
    if campaign is None:
        return jsonify({"message": "No subscribers match the specified criteria. Campaign not created."})
    s.commit()

    record_event(
        page_type="email_campaign",
        event="create",
        item_id=campaign.id,
        actor=user,
        page_url="/admin/subscribers/campaigns",
        extra_data={
            "subject": campaign.subject,
            "estimatedRecipients": recipient_count,
            "filters": campaign.filter or {},
        },
    )
    dispatch_campaign(current_app._get_current_object(), campaign.id)
    return (
        jsonify(
            {
                "message": f"Campaign '{campaign.subject}' created and queued for sending to ~{recipient_count} recipients.",
                "campaignId": campaign.id,
            }
        ),
        202,
    )


@bp.get("/campaigns")
@require_capability(Capability.MANAGE_SUBSCRIBERS)
def campaigns_list():
    s = db_session()
    page, limit, offset = parse_pagination(
        request.args, default_limit=CAMPAIGNS_DEFAULT_LIMIT, max_limit=CAMPAIGNS_MAX_LIMIT
    )
    campaigns, total = list_campaigns(s, limit=limit, offset=offset)
    return jsonify(
        {
            "campaigns": [c.to_summary_dict() for c in campaigns],
            "pagination": {
                "currentPage": page,
                "totalPages": total_pages(total, limit),
                "totalCampaigns": total,
                "limit": limit,
            },
        }
    )


@bp.get("/campaigns/<campaign_id>")
@require_capability(Capability.MANAGE_SUBSCRIBERS)
def campaign_get(campaign_id: str):
    s = db_session()
    campaign_id = require_object_id(campaign_id, "Invalid campaign ID format")
    return jsonify(CampaignRepository(s).get_or_404(campaign_id).to_dict())


@bp.delete("/campaigns/<campaign_id>")
@require_capability(Capability.MANAGE_SUBSCRIBERS)
def campaign_delete(campaign_id: str):
    s = db_session()
    campaign = delete_campaign(s, require_object_id(campaign_id, "Invalid campaign ID format"))
    s.commit()

    record_event(
        page_type="email_campaign",
        event="delete",
        item_id=campaign.id,
        actor=g.current_user,
        page_url="/admin/subscribers/campaigns",
        extra_data={"subject": campaign.subject},
    )
    return jsonify({"message": "Campaign deleted successfully"})
