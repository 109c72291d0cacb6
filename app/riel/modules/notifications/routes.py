from __future__ import annotations

from flask import Blueprint, g, jsonify, request

from app.riel.audit import record_event
from app.riel.db import db_session
from app.riel.modules.notifications.service import MARK_ALL, list_inbox, mark_read, parse_mark_read_ids
from app.riel.rbac import Capability, require_capability
from app.riel.utils import json_body, parse_pagination, total_pages

bp = Blueprint("notifications", __name__)

DEFAULT_LIMIT = 15
MAX_LIMIT = 50


@bp.get("")
@require_capability(Capability.MANAGE_CONTENT)
def notifications_list():
    s = db_session()
    page, limit, offset = parse_pagination(request.args, default_limit=DEFAULT_LIMIT, max_limit=MAX_LIMIT)
    inbox = list_inbox(
        s,
        g.current_user.id,
        page=page,
        limit=limit,
        offset=offset,
        unread_only=request.args.get("unread") == "true",
    )
    return jsonify(
        {
            "notifications": [n.to_dict() for n in inbox.notifications],
            "unreadCount": inbox.unread_count,
            "pagination": {
                "currentPage": inbox.page,
                "totalPages": total_pages(inbox.total, inbox.limit),
                "totalNotifications": inbox.total,
                "limit": inbox.limit,
            },
        }
    )


@bp.patch("")
@require_capability(Capability.MANAGE_CONTENT)
def notifications_mark_read():
    s = db_session()
    user = g.current_user
    ids = parse_mark_read_ids(json_body())
    updated = mark_read(s, user.id, ids)
    s.commit()

    record_event(
        page_type="notification",
        event="mark_read",
        actor=user,
        page_url="/admin",
        extra_data={"count": MARK_ALL if ids == MARK_ALL else len(ids), "updated": updated},
    )
    return jsonify({"success": True, "message": f"{updated} notification(s) marked as read"})
