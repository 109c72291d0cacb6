from __future__ import annotations

from flask import Blueprint, g, jsonify

from app.riel.audit import record_event
from app.riel.db import db_session
from app.riel.modules.site_settings.service import get_or_create_settings, update_settings
from app.riel.rbac import Capability, require_capability
from app.riel.utils import json_body

bp = Blueprint("site_settings", __name__)


@bp.get("")
def settings_get():
    s = db_session()
    settings, created = get_or_create_settings(s)
    if created:
        s.commit()
    return jsonify(settings.to_dict())


@bp.put("")
@require_capability(Capability.MANAGE_CONTENT)
def settings_put():
    s = db_session()
    settings = update_settings(s, json_body())
    s.commit()

    record_event(
        page_type="settings",
        event="update",
        item_id=settings.id,
        actor=g.current_user,
        page_url="/admin/settings",
        extra_data={"siteName": settings.site_name},
    )
    return jsonify(settings.to_dict())
