from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.riel.models import Base, iso, new_object_id

# Primary key of the one settings row.
SETTINGS_ID = "0" * 23 + "1"

DEFAULT_SETTINGS: dict[str, Any] = {
    "site_name": "Riel Films",
    "site_description": "Authentic African storytelling through documentary film",
    "contact_email": "info@rielfilms.com",
    "contact_phone": "",
    "social_links": [],
    "logo_light": "/logo_foot.png",
    "logo_dark": "/logo_dark_bg.png",
    "meta_image": "/images/meta-image.jpg",
}


class SiteSettings(Base):
    """Singleton row; the service layer never creates a second one."""

    __tablename__ = "site_settings"

    id: Mapped[str] = mapped_column(String(24), primary_key=True, default=new_object_id)
    site_name: Mapped[str] = mapped_column(String(255), nullable=False, default=DEFAULT_SETTINGS["site_name"])
    site_description: Mapped[str] = mapped_column(Text, nullable=False, default=DEFAULT_SETTINGS["site_description"])
    contact_email: Mapped[str] = mapped_column(String(320), nullable=False, default=DEFAULT_SETTINGS["contact_email"])
    contact_phone: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    social_links: Mapped[list] = mapped_column(JSON, nullable=False, default=list)  # [{platform, url}]
    logo_light: Mapped[str] = mapped_column(String(1024), nullable=False, default=DEFAULT_SETTINGS["logo_light"])
    logo_dark: Mapped[str] = mapped_column(String(1024), nullable=False, default=DEFAULT_SETTINGS["logo_dark"])
    meta_image: Mapped[str] = mapped_column(String(1024), nullable=False, default=DEFAULT_SETTINGS["meta_image"])
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "siteName": self.site_name,
            "siteDescription": self.site_description,
            "contactEmail": self.contact_email,
            "contactPhone": self.contact_phone,
            "socialLinks": self.social_links or [],
            "logoLight": self.logo_light,
            "logoDark": self.logo_dark,
            "metaImage": self.meta_image,
            "updatedAt": iso(self.updated_at),
        }
