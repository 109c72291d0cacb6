from __future__ import annotations

import logging
from typing import Any

from flask import current_app, g, has_request_context, request

from app.riel.db import session_scope
from app.riel.models import AuditEvent, User

logger = logging.getLogger(__name__)


def _write_event(ev: AuditEvent) -> str:
    with session_scope(current_app) as s:
        s.add(ev)
        s.flush()
        return ev.id


def record_event(
    *,
    page_type: str,
    event: str,
    item_id: str | None = None,
    actor: User | str | None = None,
    page_url: str | None = None,
    extra_data: dict[str, Any] | None = None,
) -> str | None:
    """
    Best-effort activity/audit write.

    Runs in its own session, so call it after the primary transaction has
    committed. Failures are logged and swallowed; returns the event id or None.
    """
    actor_id = actor.id if isinstance(actor, User) else actor
    try:
        in_request = has_request_context()
        ev = AuditEvent(
            request_id=getattr(g, "request_id", None) if in_request else None,
            page_url=page_url if page_url is not None else (request.path if in_request else ""),
            page_type=page_type,
            event=event,
            item_id=item_id,
            actor_id=actor_id,
            extra_data=extra_data or None,
            user_agent=request.headers.get("User-Agent") if in_request else None,
        )
        return _write_event(ev)
    except Exception:
        logger.exception(
            "Failed to record audit event page_type=%s event=%s item_id=%s request_id=%s",
            page_type,
            event,
            item_id,
            getattr(g, "request_id", None) if has_request_context() else None,
        )
        return None
