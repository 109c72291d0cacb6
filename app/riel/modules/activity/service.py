"""
Activity feed: recent audit rows decorated for the admin dashboard.

Rows are advisory; a missing actor or deleted content item degrades to
placeholder text instead of failing the feed.
"""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

from app.riel.models import AuditEvent, User
from app.riel.modules.films.models import Film
from app.riel.modules.productions.models import Production
from app.riel.modules.stories.models import Story
from app.riel.validation import Field, is_object_id, schema

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

FEED_EVENTS = ("create", "update", "delete", "publish", "view", "login", "logout")
DEFAULT_AVATAR = "/images/avatar/placeholder.jpg"
NEW_WINDOW = timedelta(minutes=30)

_ACTIONS = {
    "create": "created",
    "update": "updated",
    "delete": "deleted",
    "publish": "published",
    "view": "viewed",
    "login": "logged in",
    "logout": "logged out",
}

# pageType -> (model, public path prefix)
_CONTENT = {
    "film": (Film, "/films"),
    "production": (Production, "/productions"),
    "story": (Story, "/stories"),
}

ACTIVITY_SCHEMA = schema(
    Field("pageType", required=True, max_length=64),
    Field("event", required=True, max_length=64),
    Field("itemId", nullable=True, max_length=64),
    Field("contentTitle", nullable=True, max_length=255),
    Field("extraData", kind="dict", nullable=True),
)


def relative_time(ts: datetime, now: datetime) -> str:
    seconds = int((now - ts).total_seconds())
    if seconds < 60:
        return "Just now"
    if seconds < 3600:
        n, unit = seconds // 60, "min"
    elif seconds < 86400:
        n, unit = seconds // 3600, "hour"
    elif seconds < 604800:
        n, unit = seconds // 86400, "day"
    else:
        return ts.date().isoformat()
    return f"{n} {unit}{'s' if n > 1 else ''} ago"


def _content_ref(s: "Session", ev: AuditEvent) -> tuple[str, str]:
    extra = ev.extra_data or {}
    title = extra.get("contentTitle") or extra.get(f"{ev.page_type}Title") or "content"
    path = "#"
    target = _CONTENT.get(ev.page_type)
    if ev.item_id and target is not None and is_object_id(ev.item_id):
        model, prefix = target
        row = s.get(model, ev.item_id)
        if row is not None:
            title, path = row.title, f"{prefix}/{row.slug}"
    elif not ev.item_id and ev.page_type not in ("other", "system"):
        title = f"{ev.page_type} section"
    return title, path


def decorate(s: "Session", ev: AuditEvent, now: datetime, users: dict[str, User]) -> dict[str, Any]:
    extra = ev.extra_data or {}
    user = users.get(ev.actor_id or "")
    if user is not None:
        user_name, user_image = user.name or "Admin User", user.image or DEFAULT_AVATAR
    elif ev.event in ("login", "logout"):
        user_name, user_image = extra.get("userName") or "System User", DEFAULT_AVATAR
    else:
        user_name, user_image = "Anonymous Visitor", DEFAULT_AVATAR

    title, path = _content_ref(s, ev)
    action = _ACTIONS.get(ev.event, "interacted with")
    if ev.event not in ("login", "logout"):
        action = f"{action} {title}"

    return {
        "id": ev.id,
        "action": action,
        "item": title,
        "time": relative_time(ev.timestamp, now),
        "timestamp": ev.timestamp.isoformat(),
        "user": user_name,
        "userImage": user_image,
        "isNew": now - ev.timestamp < NEW_WINDOW,
        "type": ev.page_type,
        "itemId": ev.item_id or "",
        "contentUrlPath": path,
    }


def recent_activity(s: "Session", *, limit: int, page_type: str | None = None) -> list[dict[str, Any]]:
    q = (
        s.query(AuditEvent)
        .filter(AuditEvent.event.in_(FEED_EVENTS))
        .filter(AuditEvent.page_type != "system")
    )
    if page_type:
        q = q.filter(AuditEvent.page_type == page_type)
    events = q.order_by(AuditEvent.timestamp.desc()).limit(limit).all()

    actor_ids = {ev.actor_id for ev in events if ev.actor_id}
    users = {u.id: u for u in s.query(User).filter(User.id.in_(actor_ids)).all()} if actor_ids else {}
    now = datetime.utcnow()
    return [decorate(s, ev, now, users) for ev in events]
