from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.riel.models import Base, iso, new_object_id

CAMPAIGN_QUEUED = "queued"
CAMPAIGN_SENDING = "sending"
CAMPAIGN_SENT = "sent"
CAMPAIGN_SENT_EMPTY = "sent_empty"
CAMPAIGN_PARTIAL_FAILURE = "partial_failure"
CAMPAIGN_FAILED = "failed"


class Subscriber(Base):
    __tablename__ = "subscribers"
    __table_args__ = (
        Index("idx_subscribers_subscribed", "subscribed"),
        Index("idx_subscribers_source", "source"),
        Index("idx_subscribers_subscribed_at", "subscribed_at"),
    )

    id: Mapped[str] = mapped_column(String(24), primary_key=True, default=new_object_id)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)  # lower-cased, trimmed
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    subscribed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    subscribed_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    unsubscribed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)
    interests: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    source: Mapped[str] = mapped_column(String(64), nullable=False, default="website")
    last_email_sent: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)

    # SHA-256 of the outstanding unsubscribe token; the token itself is only mailed.
    unsubscribe_token_hash: Mapped[str | None] = mapped_column(String(64), nullable=True)
    unsubscribe_token_expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "subscribed": self.subscribed,
            "subscribedAt": iso(self.subscribed_at),
            "unsubscribedAt": iso(self.unsubscribed_at),
            "interests": self.interests or [],
            "source": self.source,
            "lastEmailSent": iso(self.last_email_sent),
            "createdAt": iso(self.created_at),
            "updatedAt": iso(self.updated_at),
        }


class Campaign(Base):
    __tablename__ = "campaigns"
    __table_args__ = (
        Index("idx_campaigns_status", "status"),
        Index("idx_campaigns_created_at", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(24), primary_key=True, default=new_object_id)
    subject: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    filter: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)  # audience selector
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=CAMPAIGN_QUEUED)
    recipient_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Populated by delivery (delivered) or provider webhooks (the rest).
    delivered_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    opened_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    clicked_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    bounced_count: Mapped[int | None] = mapped_column(Integer, nullable=True)

    created_by: Mapped[str | None] = mapped_column(String(24), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    sent_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)

    def to_summary_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "subject": self.subject,
            "status": self.status,
            "createdAt": iso(self.created_at),
            "sentAt": iso(self.sent_at),
            "recipientCount": self.recipient_count,
            "deliveredCount": self.delivered_count,
            "openedCount": self.opened_count,
            "clickedCount": self.clicked_count,
        }

    def to_dict(self) -> dict[str, Any]:
        out = self.to_summary_dict()
        out.update(
            {
                "content": self.content,
                "filter": self.filter or {},
                "bouncedCount": self.bounced_count,
                "createdBy": self.created_by,
                "updatedAt": iso(self.updated_at),
            }
        )
        return out
