from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.riel.models import Base, iso, new_object_id

PRODUCTION_STATUSES = ("Development", "Pre-Production", "In Production", "Post-Production", "Completed")
STAGE_STATUSES = ("completed", "in-progress", "upcoming")


class Production(Base):
    __tablename__ = "productions"
    __table_args__ = (
        Index("idx_productions_status", "status"),
        Index("idx_productions_category", "category"),
        Index("idx_productions_featured", "featured"),
        Index("idx_productions_created_at", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(24), primary_key=True, default=new_object_id)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    category: Mapped[str] = mapped_column(String(128), nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="Development")
    description: Mapped[str] = mapped_column(Text, nullable=False)
    image: Mapped[str] = mapped_column(String(1024), nullable=False)

    long_description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    director: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    producer: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    cinematographer: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    editor: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    timeline: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    start_date: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    estimated_completion: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    locations: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    logline: Mapped[str] = mapped_column(Text, nullable=False, default="")
    synopsis: Mapped[str] = mapped_column(Text, nullable=False, default="")
    progress: Mapped[int] = mapped_column(Integer, nullable=False, default=0)  # 0..100
    featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    team: Mapped[list] = mapped_column(JSON, nullable=False, default=list)  # [{name, role, bio, image}]
    stages: Mapped[list] = mapped_column(JSON, nullable=False, default=list)  # [{name, status, milestones}]
    faq: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    updates: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    support_options: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "slug": self.slug,
            "category": self.category,
            "status": self.status,
            "description": self.description,
            "longDescription": self.long_description,
            "image": self.image,
            "director": self.director,
            "producer": self.producer,
            "cinematographer": self.cinematographer,
            "editor": self.editor,
            "timeline": self.timeline,
            "startDate": self.start_date,
            "estimatedCompletion": self.estimated_completion,
            "locations": self.locations or [],
            "logline": self.logline,
            "synopsis": self.synopsis,
            "progress": self.progress,
            "featured": self.featured,
            "team": self.team or [],
            "stages": self.stages or [],
            "faq": self.faq or [],
            "updates": self.updates or [],
            "supportOptions": self.support_options or [],
            "createdAt": iso(self.created_at),
            "updatedAt": iso(self.updated_at),
        }
