from __future__ import annotations

from flask import Blueprint, g, jsonify, request

from app.riel.audit import record_event
from app.riel.db import db_session
from app.riel.errors import Internal
from app.riel.modules.activity.service import ACTIVITY_SCHEMA, recent_activity
from app.riel.rbac import Capability, require_capability, require_login
from app.riel.utils import json_body, parse_limit

bp = Blueprint("activity", __name__)

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


@bp.get("")
@require_capability(Capability.MANAGE_CONTENT)
def activity_list():
    s = db_session()
    limit = min(parse_limit(request.args.get("limit")) or DEFAULT_LIMIT, MAX_LIMIT)
    page_type = (request.args.get("type") or "").strip() or None
    return jsonify({"activities": recent_activity(s, limit=limit, page_type=page_type)})


@bp.post("")
@require_login()
def activity_post():
    data = ACTIVITY_SCHEMA.validate(json_body())
    extra = dict(data.get("extra_data") or {})
    if data.get("content_title"):
        extra["contentTitle"] = data["content_title"]

    activity_id = record_event(
        page_type=data["page_type"],
        event=data["event"],
        item_id=data.get("item_id"),
        actor=g.current_user,
        page_url=request.headers.get("Referer") or "",
        extra_data=extra,
    )
    if activity_id is None:
        raise Internal("Failed to log activity")
    return jsonify({"success": True, "activityId": activity_id})
