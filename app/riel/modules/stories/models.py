from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.riel.models import Base, iso, new_object_id


class Story(Base):
    __tablename__ = "stories"
    __table_args__ = (
        Index("idx_stories_category", "category"),
        Index("idx_stories_featured", "featured"),
        Index("idx_stories_date", "date"),
    )

    id: Mapped[str] = mapped_column(String(24), primary_key=True, default=new_object_id)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    excerpt: Mapped[str] = mapped_column(Text, nullable=False)
    # Ordered blocks: {"type": paragraph|heading|image|quote, ...}
    content: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    author: Mapped[str] = mapped_column(String(255), nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    image: Mapped[str] = mapped_column(String(1024), nullable=False)
    category: Mapped[str] = mapped_column(String(128), nullable=False)
    read_time: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "slug": self.slug,
            "excerpt": self.excerpt,
            "content": self.content or [],
            "author": self.author,
            "date": iso(self.date),
            "image": self.image,
            "category": self.category,
            "readTime": self.read_time,
            "featured": self.featured,
            "createdAt": iso(self.created_at),
            "updatedAt": iso(self.updated_at),
        }
