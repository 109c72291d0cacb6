from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from app.riel.modules.films.models import Film
from app.riel.repository import Repository
from app.riel.utils import parse_bool_flag, parse_limit
from app.riel.validation import SLUG_RE, YEAR_RE, Field, schema

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from werkzeug.datastructures import MultiDict

_TEXT_ITEM = Field("item", required=True)
_URL_ITEM = Field("item", required=True, url=True, relative=True)

FILM_SCHEMA = schema(
    Field("title", required=True, max_length=255),
    Field("slug", required=True, max_length=255, pattern=SLUG_RE,
          pattern_message="Slug may only contain lowercase letters, numbers and single hyphens."),
    Field("category", required=True, max_length=128),
    Field("year", required=True, pattern=YEAR_RE, pattern_message="Year must be 4 digits."),
    Field("description", required=True, min_length=10),
    Field("longDescription"),
    Field("image", required=True, url=True, relative=True),
    Field("director", required=True),
    Field("producer", required=True),
    Field("duration", required=True),
    Field("languages", kind="list", items=_TEXT_ITEM),
    Field("subtitles", kind="list", items=_TEXT_ITEM),
    Field("releaseDate", required=True),
    Field("awards", kind="list", items=_TEXT_ITEM),
    Field("castCrew", kind="list", items=schema(Field("role", required=True), Field("name", required=True))),
    Field("gallery", kind="list", items=_URL_ITEM),
    Field("trailer", nullable=True, url=True),
    Field("synopsis", required=True, min_length=10),
    Field("quotes", kind="list", items=schema(Field("text", required=True), Field("source"))),
    Field("rating", kind="float", minimum=0, maximum=5, default=0),
    Field("featured", kind="bool", default=False),
)


@dataclass(frozen=True)
class FilmFilter:
    category: str | None = None
    year: str | None = None
    director: str | None = None
    featured: bool | None = None
    limit: int | None = None

    @classmethod
    def from_args(cls, args: "MultiDict[str, str]") -> "FilmFilter":
        return cls(
            category=(args.get("category") or "").strip() or None,
            year=(args.get("year") or "").strip() or None,
            director=(args.get("director") or "").strip() or None,
            featured=parse_bool_flag(args.get("featured")),
            limit=parse_limit(args.get("limit")),
        )

    def criteria(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.category is not None:
            out["category"] = self.category
        if self.year is not None:
            out["year"] = self.year
        if self.director is not None:
            out["director"] = self.director
        if self.featured is not None:
            out["featured"] = self.featured
        return out


class FilmRepository(Repository[Film]):
    model = Film
    entity_name = "Film"
    unique_fields = ("slug",)


def list_films(s: "Session", f: FilmFilter) -> list[Film]:
    return FilmRepository(s).find_many(f.criteria(), limit=f.limit)


def create_film(s: "Session", payload: dict) -> Film:
    data = FILM_SCHEMA.validate(payload)
    return FilmRepository(s).create(data)


def update_film(s: "Session", film_id: str, payload: dict) -> Film:
    data = FILM_SCHEMA.validate(payload, partial=True)
    repo = FilmRepository(s)
    film = repo.get_or_404(film_id)
    return repo.update(film, data)


def delete_film(s: "Session", film_id: str) -> Film:
    return FilmRepository(s).delete(film_id)
