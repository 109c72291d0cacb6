from __future__ import annotations

import math
from typing import Any

from flask import request

from app.riel.errors import InvalidInput, MethodNotAllowed


def json_body() -> dict[str, Any]:
    """Parsed JSON object body; CSRF echo keys are not payload."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidInput("Request body must be a JSON object", issues={"_body": ["Must be an object."]})
    data.pop("csrf_token", None)
    return data


def parse_bool_flag(raw: str | None) -> bool | None:
    """Only the literal strings "true"/"false" filter; anything else means no filter."""
    if raw == "true":
        return True
    if raw == "false":
        return False
    return None


def parse_limit(raw: str | None) -> int | None:
    try:
        value = int((raw or "").strip())
    except ValueError:
        return None
    return value if value > 0 else None


def parse_pagination(args, *, default_limit: int, max_limit: int) -> tuple[int, int, int]:
    """Returns (page, limit, offset) with limit clamped to [1, max_limit] and page >= 1."""
    limit = parse_limit(args.get("limit")) or default_limit
    limit = max(1, min(max_limit, limit))
    page = parse_limit(args.get("page")) or 1
    return page, limit, (page - 1) * limit


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


def reject_slug_mutation(entity_plural: str) -> None:
    raise MethodNotAllowed(
        f"Updating or deleting {entity_plural} by slug is disabled. "
        f"Use /api/{entity_plural}/id/<id> instead."
    )
