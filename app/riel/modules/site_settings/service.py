from __future__ import annotations

import copy
from typing import TYPE_CHECKING

from app.riel.errors import Conflict
from app.riel.modules.site_settings.models import DEFAULT_SETTINGS, SETTINGS_ID, SiteSettings
from app.riel.repository import Repository
from app.riel.validation import Field, schema

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

SETTINGS_SCHEMA = schema(
    Field("siteName", required=True, max_length=255),
    Field("siteDescription"),
    Field("contactEmail", email=True, max_length=320),
    Field("contactPhone", max_length=64),
    Field("socialLinks", kind="list", items=schema(
        Field("platform", required=True, max_length=64),
        Field("url", required=True, url=True),
    )),
    Field("logoLight", url=True, relative=True),
    Field("logoDark", url=True, relative=True),
    Field("metaImage", url=True, relative=True),
    ignored=("id", "createdAt", "updatedAt"),
)


class SettingsRepository(Repository[SiteSettings]):
    model = SiteSettings
    entity_name = "Settings"

    def current(self) -> SiteSettings | None:
        return self.s.query(SiteSettings).order_by(SiteSettings.created_at.asc()).first()


def _create_singleton(repo: SettingsRepository, data: dict) -> tuple[SiteSettings, bool]:
    # The fixed primary key makes a concurrent first write lose with a Conflict.
    try:
        return repo.create({**copy.deepcopy(DEFAULT_SETTINGS), **data, "id": SETTINGS_ID}), True
    except Conflict:
        winner = repo.current()
        if winner is None:
            raise
        return winner, False


def get_or_create_settings(s: "Session") -> tuple[SiteSettings, bool]:
    """Returns (settings, created). Creates the default row on first read."""
    repo = SettingsRepository(s)
    existing = repo.current()
    if existing is not None:
        return existing, False
    return _create_singleton(repo, {})


def update_settings(s: "Session", payload: dict) -> SiteSettings:
    data = SETTINGS_SCHEMA.validate(payload, partial=True)
    repo = SettingsRepository(s)
    existing = repo.current()
    if existing is None:
        existing, created = _create_singleton(repo, data)
        if created:
            return existing
    return repo.update(existing, data)
