from __future__ import annotations

import uuid
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timedelta

from flask import Blueprint, current_app, g, jsonify, request, session
from werkzeug.security import check_password_hash

from app.riel.audit import record_event
from app.riel.db import db_session
from app.riel.errors import TooManyRequests, Unauthorized
from app.riel.models import User
from app.riel.security import ensure_csrf_token
from app.riel.validation import Field, schema

bp = Blueprint("auth", __name__)
_login_attempts: dict[str, list[datetime]] = defaultdict(list)
_LOGIN_RATE_LIMIT = 5
_LOGIN_RATE_WINDOW = 300  # seconds

LOGIN_SCHEMA = schema(
    Field("email", required=True, email=True),
    Field("password", required=True),
    ignored=("csrf_token",),
)


@dataclass(frozen=True)
class Identity:
    id: str
    role: str


def _check_rate_limit(ip: str) -> bool:
    now = datetime.utcnow()
    cutoff = now - timedelta(seconds=_LOGIN_RATE_WINDOW)
    _login_attempts[ip] = [t for t in _login_attempts[ip] if t > cutoff]
    return len(_login_attempts[ip]) >= _LOGIN_RATE_LIMIT


def _record_attempt(ip: str) -> None:
    _login_attempts[ip].append(datetime.utcnow())


def load_current_user() -> None:
    """
    Loads g.current_user from the signed session cookie.
    Also assigns a simple per-request request_id (for audit/log correlation).
    Any resolution error leaves the request unauthenticated.
    """
    if not getattr(g, "request_id", None):
        g.request_id = uuid.uuid4().hex
    if request.path.startswith(("/static/", "/health", "/healthz")):
        g.current_user = None
        return

    user_id = session.get("user_id")
    if not user_id:
        g.current_user = None
        return

    try:
        s = db_session()
        user = s.get(User, str(user_id))
        if not user or not user.is_active:
            session.pop("user_id", None)
            g.current_user = None
            return
        g.current_user = user
    except Exception as e:
        current_app.logger.error("load_current_user DB error (clearing session): %s", e)
        session.pop("user_id", None)
        g.current_user = None


def current_identity() -> Identity | None:
    user: User | None = getattr(g, "current_user", None)
    if not user or not user.is_active:
        return None
    return Identity(id=user.id, role=user.role)


def authenticate(email: str, password: str) -> User | None:
    s = db_session()
    user = s.query(User).filter(User.email == email).one_or_none()
    if not user or not user.is_active or not user.password_hash:
        return None
    if not check_password_hash(user.password_hash, password):
        return None
    return user


@bp.post("/login")
def login_post():
    data = LOGIN_SCHEMA.validate(request.get_json(silent=True))
    email = data["email"]
    ip = request.remote_addr or "unknown"

    if _check_rate_limit(ip):
        raise TooManyRequests("Too many login attempts. Please wait 5 minutes.")

    _record_attempt(ip)

    user = authenticate(email, data["password"])
    if user is None:
        record_event(page_type="auth", event="login_failed", extra_data={"email": email})
        raise Unauthorized("Invalid credentials")

    # Fresh session on login; the CSRF token rotates with it.
    session.clear()
    session["user_id"] = user.id
    session.permanent = True
    _login_attempts[ip].clear()
    g.current_user = user
    record_event(page_type="auth", event="login", item_id=user.id, actor=user, extra_data={"userName": user.name})
    return jsonify({"message": "Logged in", "user": user.to_dict(), "csrfToken": ensure_csrf_token()})


@bp.post("/logout")
def logout():
    user = getattr(g, "current_user", None)
    if user:
        record_event(page_type="auth", event="logout", item_id=user.id, actor=user, extra_data={"userName": user.name})
    session.clear()
    return jsonify({"message": "Logged out"})


@bp.get("/session")
def session_get():
    user = getattr(g, "current_user", None)
    if not user:
        raise Unauthorized()
    return jsonify({"user": user.to_dict(), "csrfToken": ensure_csrf_token()})


@bp.get("/csrf")
def csrf_get():
    return jsonify({"csrfToken": ensure_csrf_token()})
