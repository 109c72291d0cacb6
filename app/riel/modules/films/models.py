from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, Float, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.riel.models import Base, iso, new_object_id


class Film(Base):
    __tablename__ = "films"
    __table_args__ = (
        Index("idx_films_category", "category"),
        Index("idx_films_year", "year"),
        Index("idx_films_featured", "featured"),
        Index("idx_films_created_at", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(24), primary_key=True, default=new_object_id)

    # Required
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    category: Mapped[str] = mapped_column(String(128), nullable=False)
    year: Mapped[str] = mapped_column(String(4), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    image: Mapped[str] = mapped_column(String(1024), nullable=False)
    director: Mapped[str] = mapped_column(String(255), nullable=False)
    producer: Mapped[str] = mapped_column(String(255), nullable=False)
    duration: Mapped[str] = mapped_column(String(64), nullable=False)
    release_date: Mapped[str] = mapped_column(String(64), nullable=False)
    synopsis: Mapped[str] = mapped_column(Text, nullable=False)

    # Optional
    long_description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    languages: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    subtitles: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    awards: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    cast_crew: Mapped[list] = mapped_column(JSON, nullable=False, default=list)  # [{role, name}]
    gallery: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    trailer: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    quotes: Mapped[list] = mapped_column(JSON, nullable=False, default=list)  # [{text, source}]
    rating: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "slug": self.slug,
            "category": self.category,
            "year": self.year,
            "description": self.description,
            "longDescription": self.long_description,
            "image": self.image,
            "director": self.director,
            "producer": self.producer,
            "duration": self.duration,
            "languages": self.languages or [],
            "subtitles": self.subtitles or [],
            "releaseDate": self.release_date,
            "awards": self.awards or [],
            "castCrew": self.cast_crew or [],
            "gallery": self.gallery or [],
            "trailer": self.trailer,
            "synopsis": self.synopsis,
            "quotes": self.quotes or [],
            "rating": self.rating,
            "featured": self.featured,
            "createdAt": iso(self.created_at),
            "updatedAt": iso(self.updated_at),
        }
