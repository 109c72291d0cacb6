"""
Per-user notification inbox.

The owner is always taken from the session identity; no query here accepts a
client-supplied user id.
"""
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from app.riel.errors import InvalidInput
from app.riel.modules.notifications.models import Notification
from app.riel.repository import Repository
from app.riel.validation import is_object_id

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

MARK_ALL = "all"


class NotificationRepository(Repository[Notification]):
    model = Notification
    entity_name = "Notification"

    def default_order(self):
        return (Notification.timestamp.desc(),)


@dataclass(frozen=True)
class InboxPage:
    notifications: list[Notification]
    total: int
    unread_count: int
    page: int
    limit: int


def list_inbox(s: "Session", user_id: str, *, page: int, limit: int, offset: int, unread_only: bool) -> InboxPage:
    repo = NotificationRepository(s)
    criteria: dict[str, Any] = {"user_id": user_id}
    if unread_only:
        criteria["read"] = False
    items = repo.find_many(criteria, limit=limit, offset=offset)
    total = repo.count(criteria)
    unread = total if unread_only else repo.count({"user_id": user_id, "read": False})
    return InboxPage(notifications=items, total=total, unread_count=unread, page=page, limit=limit)


def parse_mark_read_ids(payload: dict[str, Any]) -> str | list[str]:
    unknown = [k for k in payload if k != "ids"]
    issues: dict[str, list[str]] = {k: ["Unrecognized field."] for k in unknown}
    ids = payload.get("ids")
    if ids == MARK_ALL:
        pass
    elif isinstance(ids, list):
        for i, value in enumerate(ids):
            if not isinstance(value, str) or not is_object_id(value):
                issues.setdefault(f"ids.{i}", []).append("Invalid ID format")
    else:
        issues.setdefault("ids", []).append('Must be "all" or an array of ids.')
    if issues:
        raise InvalidInput(issues=issues)
    return ids if ids == MARK_ALL else [v.lower() for v in ids]


def mark_read(s: "Session", user_id: str, ids: str | list[str]) -> int:
    q = s.query(Notification).filter(Notification.user_id == user_id)
    if ids == MARK_ALL:
        q = q.filter(Notification.read.is_(False))
    elif ids:
        q = q.filter(Notification.id.in_(ids))
    else:
        return 0
    return q.update({Notification.read: True}, synchronize_session=False)


def notify(
    s: "Session",
    user_ids: Iterable[str],
    message: str,
    *,
    type: str = "info",
    related_item_id: str | None = None,
    related_item_type: str | None = None,
    link: str | None = None,
) -> list[Notification]:
    """Adds one inbox item per user to the session; the caller commits."""
    created = []
    for user_id in dict.fromkeys(user_ids):
        n = Notification(
            user_id=user_id,
            message=message,
            type=type,
            related_item_id=related_item_id,
            related_item_type=related_item_type,
            link=link,
        )
        s.add(n)
        created.append(n)
    return created
