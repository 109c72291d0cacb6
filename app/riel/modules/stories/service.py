from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from app.riel.modules.stories.models import Story
from app.riel.repository import Repository
from app.riel.utils import parse_bool_flag, parse_limit
from app.riel.validation import SLUG_RE, Field, Issues, Schema, schema

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from werkzeug.datastructures import MultiDict

WORDS_PER_MINUTE = 200

_BLOCK_TYPES = ("paragraph", "heading", "image", "quote")
_TYPE = Field("type", required=True, choices=_BLOCK_TYPES)

BLOCK_SCHEMAS: dict[str, Schema] = {
    "paragraph": schema(_TYPE, Field("content", required=True)),
    "heading": schema(_TYPE, Field("content", required=True)),
    "image": schema(_TYPE, Field("url", required=True, url=True, relative=True), Field("caption")),
    "quote": schema(_TYPE, Field("content", required=True), Field("attribution")),
}


def _clean_block(block: Any, path: str) -> tuple[dict[str, Any], Issues]:
    if not isinstance(block, dict):
        return {}, {path: ["Must be an object."]}
    block_type = block.get("type")
    block_schema = BLOCK_SCHEMAS.get(block_type) if isinstance(block_type, str) else None
    if block_schema is None:
        return {}, {f"{path}.type": [f"Must be one of: {', '.join(_BLOCK_TYPES)}."]}
    return block_schema.check(block, prefix=f"{path}.", wire_keys=True)


def check_content_blocks(blocks: list, path: str) -> Issues:
    issues: Issues = {}
    for i, block in enumerate(blocks):
        for p, msgs in _clean_block(block, f"{path}.{i}")[1].items():
            issues.setdefault(p, []).extend(msgs)
    return issues


STORY_SCHEMA = schema(
    Field("title", required=True, max_length=255),
    Field("slug", required=True, max_length=255, pattern=SLUG_RE,
          pattern_message="Slug may only contain lowercase letters, numbers and single hyphens."),
    Field("excerpt", required=True, min_length=10),
    Field("content", kind="list", required=True, check=check_content_blocks),
    Field("author", required=True),
    Field("date", kind="datetime", required=True),
    Field("image", required=True, url=True, relative=True),
    Field("category", required=True, max_length=128),
    Field("readTime"),
    Field("featured", kind="bool", default=False),
)


def estimate_read_time(blocks: list[dict[str, Any]]) -> str:
    """Text-bearing blocks at 200 words per minute, at least one minute."""
    words = sum(
        len((b.get("content") or "").split())
        for b in blocks
        if b.get("type") in ("paragraph", "heading", "quote")
    )
    return f"{max(1, math.ceil(words / WORDS_PER_MINUTE))} min read"


@dataclass(frozen=True)
class StoryFilter:
    category: str | None = None
    featured: bool | None = None
    limit: int | None = None

    @classmethod
    def from_args(cls, args: "MultiDict[str, str]") -> "StoryFilter":
        return cls(
            category=(args.get("category") or "").strip() or None,
            featured=parse_bool_flag(args.get("featured")),
            limit=parse_limit(args.get("limit")),
        )

    def criteria(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.category is not None:
            out["category"] = self.category
        if self.featured is not None:
            out["featured"] = self.featured
        return out


class StoryRepository(Repository[Story]):
    model = Story
    entity_name = "Story"
    unique_fields = ("slug",)

    def default_order(self):
        return (Story.date.desc(), Story.created_at.desc())


def _normalize(data: dict[str, Any]) -> dict[str, Any]:
    if "content" in data:
        data["content"] = [_clean_block(b, "content")[0] for b in data["content"]]
    return data


def list_stories(s: "Session", f: StoryFilter) -> list[Story]:
    return StoryRepository(s).find_many(f.criteria(), limit=f.limit)


def create_story(s: "Session", payload: dict) -> Story:
    data = _normalize(STORY_SCHEMA.validate(payload))
    if not data.get("read_time"):
        data["read_time"] = estimate_read_time(data["content"])
    return StoryRepository(s).create(data)


def update_story(s: "Session", story_id: str, payload: dict) -> Story:
    data = _normalize(STORY_SCHEMA.validate(payload, partial=True))
    repo = StoryRepository(s)
    return repo.update(repo.get_or_404(story_id), data)


def delete_story(s: "Session", story_id: str) -> Story:
    return StoryRepository(s).delete(story_id)
