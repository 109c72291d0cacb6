from __future__ import annotations

from flask import Blueprint, current_app, g, jsonify, request

from app.riel.audit import record_event
from app.riel.modules.media.service import store_upload
from app.riel.rbac import Capability, require_capability
from app.riel.storage import storage_from_config

bp = Blueprint("media", __name__)


@bp.post("")
@require_capability(Capability.MANAGE_CONTENT)
def upload_post():
    storage = storage_from_config(current_app.config)
    stored = store_upload(storage, current_app.config["UPLOAD_FOLDER"], request.files.get("file"))

    record_event(
        page_type="upload",
        event="create",
        item_id=stored.public_id,
        actor=g.current_user,
        extra_data={"url": stored.url},
    )
    return jsonify({"message": "File uploaded successfully", "url": stored.url, "public_id": stored.public_id})
