from __future__ import annotations

import secrets
from datetime import date, datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, Index, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def new_object_id() -> str:
    """24-char lowercase hex id, same shape as the public id contract."""
    return secrets.token_hex(12)


def iso(value: datetime | date | None) -> str | None:
    if value is None:
        return None
    return value.isoformat()


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(24), primary_key=True, default=new_object_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    # Absent for OAuth-only accounts.
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    image: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    google_id: Mapped[str | None] = mapped_column(String(255), nullable=True, unique=True)
    role: Mapped[str] = mapped_column(String(32), nullable=False, default="editor")  # admin | editor
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "image": self.image,
            "role": self.role,
            "isActive": self.is_active,
            "hasPassword": self.password_hash is not None,
            "createdAt": iso(self.created_at),
            "updatedAt": iso(self.updated_at),
        }


class AuditEvent(Base):
    """
    Append-only activity/audit row.
    Advisory only: nothing reads it back to enforce business rules.
    """

    __tablename__ = "audit_events"
    __table_args__ = (
        Index("idx_audit_events_timestamp", "timestamp"),
        Index("idx_audit_events_page_type", "page_type"),
    )

    id: Mapped[str] = mapped_column(String(24), primary_key=True, default=new_object_id)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    request_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    page_url: Mapped[str] = mapped_column(String(1024), nullable=False, default="")
    page_type: Mapped[str] = mapped_column(String(64), nullable=False)  # e.g. "film"
    event: Mapped[str] = mapped_column(String(64), nullable=False)  # e.g. "update"
    item_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    actor_id: Mapped[str | None] = mapped_column(String(24), nullable=True)
    extra_data: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    user_agent: Mapped[str | None] = mapped_column(Text, nullable=True)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": iso(self.timestamp),
            "pageUrl": self.page_url,
            "pageType": self.page_type,
            "event": self.event,
            "itemId": self.item_id,
            "actorId": self.actor_id,
            "extraData": self.extra_data or {},
        }


# Ensure module models are imported so Base.metadata includes their tables.
# (Kept at bottom to avoid circular imports.)
from app.riel.modules.films.models import Film  # noqa: E402,F401
from app.riel.modules.productions.models import Production  # noqa: E402,F401
from app.riel.modules.stories.models import Story  # noqa: E402,F401
from app.riel.modules.subscribers.models import Campaign, Subscriber  # noqa: E402,F401
from app.riel.modules.notifications.models import Notification  # noqa: E402,F401
from app.riel.modules.site_settings.models import SiteSettings  # noqa: E402,F401
