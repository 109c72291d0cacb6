from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from app.riel.modules.productions.models import PRODUCTION_STATUSES, STAGE_STATUSES, Production
from app.riel.repository import Repository
from app.riel.utils import parse_bool_flag, parse_limit
from app.riel.validation import SLUG_RE, Field, schema

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from werkzeug.datastructures import MultiDict

_TEXT_ITEM = Field("item", required=True)

TEAM_MEMBER = schema(
    Field("name", required=True),
    Field("role", required=True),
    Field("bio"),
    Field("image", url=True, relative=True),
)
STAGE = schema(
    Field("name", required=True),
    Field("status", required=True, choices=STAGE_STATUSES),
    Field("milestones", kind="list", items=_TEXT_ITEM),
)
FAQ_ENTRY = schema(Field("question", required=True), Field("answer", required=True))
PRODUCTION_UPDATE = schema(
    Field("date", required=True),
    Field("title", required=True),
    Field("content", required=True),
    Field("image", url=True, relative=True),
)
SUPPORT_OPTION = schema(
    Field("title", required=True),
    Field("investment"),
    Field("description"),
    Field("perks", kind="list", items=_TEXT_ITEM),
)

PRODUCTION_SCHEMA = schema(
    Field("title", required=True, max_length=255),
    Field("slug", required=True, max_length=255, pattern=SLUG_RE,
          pattern_message="Slug may only contain lowercase letters, numbers and single hyphens."),
    Field("category", required=True, max_length=128),
    Field("status", required=True, choices=PRODUCTION_STATUSES),
    Field("description", required=True, min_length=10),
    Field("longDescription"),
    Field("image", required=True, url=True, relative=True),
    Field("director"),
    Field("producer"),
    Field("cinematographer"),
    Field("editor"),
    Field("timeline"),
    Field("startDate"),
    Field("estimatedCompletion"),
    Field("locations", kind="list", items=_TEXT_ITEM),
    Field("logline"),
    Field("synopsis"),
    Field("progress", kind="int", minimum=0, maximum=100, default=0),
    Field("featured", kind="bool", default=False),
    Field("team", kind="list", items=TEAM_MEMBER),
    Field("stages", kind="list", items=STAGE),
    Field("faq", kind="list", items=FAQ_ENTRY),
    Field("updates", kind="list", items=PRODUCTION_UPDATE),
    Field("supportOptions", kind="list", items=SUPPORT_OPTION),
)


@dataclass(frozen=True)
class ProductionFilter:
    status: str | None = None
    category: str | None = None
    featured: bool | None = None
    limit: int | None = None

    @classmethod
    def from_args(cls, args: "MultiDict[str, str]") -> "ProductionFilter":
        return cls(
            status=(args.get("status") or "").strip() or None,
            category=(args.get("category") or "").strip() or None,
            featured=parse_bool_flag(args.get("featured")),
            limit=parse_limit(args.get("limit")),
        )

    def criteria(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.status is not None:
            out["status"] = self.status
        if self.category is not None:
            out["category"] = self.category
        if self.featured is not None:
            out["featured"] = self.featured
        return out


class ProductionRepository(Repository[Production]):
    model = Production
    entity_name = "Production"
    unique_fields = ("slug",)


def list_productions(s: "Session", f: ProductionFilter) -> list[Production]:
    return ProductionRepository(s).find_many(f.criteria(), limit=f.limit)


def create_production(s: "Session", payload: dict) -> Production:
    data = PRODUCTION_SCHEMA.validate(payload)
    return ProductionRepository(s).create(data)


def update_production(s: "Session", production_id: str, payload: dict) -> Production:
    data = PRODUCTION_SCHEMA.validate(payload, partial=True)
    repo = ProductionRepository(s)
    return repo.update(repo.get_or_404(production_id), data)


def delete_production(s: "Session", production_id: str) -> Production:
    return ProductionRepository(s).delete(production_id)
