from __future__ import annotations

from flask import Blueprint, g, jsonify

from app.riel.audit import record_event
from app.riel.db import db_session
from app.riel.modules.users.service import UserRepository, create_user, delete_user, list_users, update_user
from app.riel.rbac import Capability, require_capability
from app.riel.utils import json_body
from app.riel.validation import require_object_id

bp = Blueprint("users", __name__)
# POST /api/auth/register is the older path for the same admin-only create.
register_bp = Blueprint("register", __name__)


@bp.get("")
@require_capability(Capability.MANAGE_USERS)
def users_list():
    s = db_session()
    return jsonify([u.to_dict() for u in list_users(s)])


@bp.post("")
@register_bp.post("/register")
@require_capability(Capability.MANAGE_USERS)
def user_create():
    s = db_session()
    user = create_user(s, json_body())
    s.commit()

    record_event(
        page_type="user",
        event="create",
        item_id=user.id,
        actor=g.current_user,
        page_url="/admin/users/create",
        extra_data={"userName": user.name, "role": user.role},
    )
    return jsonify(user.to_dict()), 201


@bp.get("/<user_id>")
@require_capability(Capability.MANAGE_USERS)
def user_get(user_id: str):
    s = db_session()
    return jsonify(UserRepository(s).get_or_404(require_object_id(user_id)).to_dict())


@bp.patch("/<user_id>")
@require_capability(Capability.MANAGE_USERS)
def user_update(user_id: str):
    s = db_session()
    user = update_user(s, g.current_user, require_object_id(user_id), json_body())
    s.commit()

    record_event(
        page_type="user",
        event="update",
        item_id=user.id,
        actor=g.current_user,
        page_url="/admin/users",
        extra_data={"userName": user.name, "role": user.role},
    )
    return jsonify(user.to_dict())


@bp.delete("/<user_id>")
@require_capability(Capability.MANAGE_USERS)
def user_delete(user_id: str):
    s = db_session()
    user = delete_user(s, g.current_user, require_object_id(user_id))
    s.commit()

    record_event(
        page_type="user",
        event="delete",
        item_id=user.id,
        actor=g.current_user,
        page_url="/admin/users",
        extra_data={"userName": user.name},
    )
    return jsonify({"message": "User deleted successfully"})
