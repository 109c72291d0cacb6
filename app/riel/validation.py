"""
Strict payload schemas.

A ``Schema`` is a set of declared ``Field``s keyed by their camelCase wire
name. Validation collects every failing field (dotted paths for nested
values) and raises ``InvalidInput`` once, with ``issues`` mapping field
path -> messages. Keys that are not declared are rejected, which is what
keeps clients from smuggling ids, emails or passwords into an update.
"""
from __future__ import annotations

import copy
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field as dc_field
from datetime import date, datetime, timezone
from typing import Any

from app.riel.errors import InvalidInput

# Patterns are applied with fullmatch; "$" would also accept a trailing newline.
SLUG_RE = re.compile(r"[a-z0-9]+(-[a-z0-9]+)*")
YEAR_RE = re.compile(r"[0-9]{4}")
OBJECT_ID_RE = re.compile(r"[0-9a-fA-F]{24}")
EMAIL_RE = re.compile(r"^\S+@\S+\.\S+$")
URL_RE = re.compile(r"^https?://[^\s/$.?#][^\s]*$", re.IGNORECASE)
# Site-relative asset paths ("/logo.png") are accepted where relative=True.
RELATIVE_PATH_RE = re.compile(r"^/[^\s]*$")

_MISSING = object()
_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")

Issues = dict[str, list[str]]


def snake_case(name: str) -> str:
    return _CAMEL_RE.sub("_", name).lower()


def is_object_id(value: str | None) -> bool:
    return bool(value) and bool(OBJECT_ID_RE.fullmatch(value or ""))


def normalize_email(value: str | None) -> str:
    return (value or "").strip().lower()


def parse_datetime(value: str) -> datetime:
    """Accept ``YYYY-MM-DD`` or a full ISO-8601 timestamp (trailing Z allowed)."""
    raw = value.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    if len(raw) == 10:
        return datetime.combine(date.fromisoformat(raw), datetime.min.time())
    dt = datetime.fromisoformat(raw)
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def _add(issues: Issues, path: str, message: str) -> None:
    issues.setdefault(path, []).append(message)


@dataclass(frozen=True)
class Field:
    name: str
    kind: str = "str"  # str | int | float | bool | list | dict | datetime
    required: bool = False
    nullable: bool = False
    default: Any = _MISSING
    attr: str | None = None
    min_length: int | None = None
    max_length: int | None = None
    pattern: re.Pattern[str] | None = None
    pattern_message: str = "Invalid format."
    minimum: float | None = None
    maximum: float | None = None
    choices: tuple[Any, ...] | None = None
    url: bool = False
    relative: bool = False
    email: bool = False
    # list element: either a scalar Field (name ignored) or a nested Schema
    items: "Field | Schema | None" = None
    check: Callable[[Any, str], Issues] | None = None

    @property
    def attr_name(self) -> str:
        return self.attr or snake_case(self.name)

    def default_value(self) -> Any:
        if self.default is not _MISSING:
            return copy.deepcopy(self.default)
        if self.nullable:
            return None
        return {"str": "", "list": [], "dict": {}, "bool": False}.get(self.kind)

    def has_default(self) -> bool:
        return self.default is not _MISSING or self.nullable or self.kind in ("str", "list", "dict", "bool")

    def clean(self, value: Any, path: str) -> tuple[Any, Issues]:
        issues: Issues = {}
        if value is None:
            if self.nullable:
                return None, issues
            _add(issues, path, "Required." if self.required else "May not be null.")
            return None, issues

        cleaner = getattr(self, f"_clean_{self.kind}")
        value = cleaner(value, path, issues)
        if issues:
            return None, issues
        # Blank values still have to be one of the choices.
        if self.choices is not None and value not in self.choices:
            _add(issues, path, f"Must be one of: {', '.join(str(c) for c in self.choices)}.")
            return None, issues
        if value is None or value == "":
            return value, issues

        if self.check is not None:
            for p, msgs in self.check(value, path).items():
                issues.setdefault(p, []).extend(msgs)
        return value, issues

    def _clean_str(self, value: Any, path: str, issues: Issues) -> Any:
        if not isinstance(value, str):
            _add(issues, path, "Must be a string.")
            return None
        value = value.strip()
        if self.email:
            value = normalize_email(value)
        if not value:
            if self.required:
                _add(issues, path, "Required.")
            return None if self.nullable else value
        if self.min_length is not None and len(value) < self.min_length:
            _add(issues, path, f"Must be at least {self.min_length} characters.")
        if self.max_length is not None and len(value) > self.max_length:
            _add(issues, path, f"Must be at most {self.max_length} characters.")
        if self.pattern is not None and not self.pattern.fullmatch(value):
            _add(issues, path, self.pattern_message)
        if self.url and not (URL_RE.match(value) or (self.relative and RELATIVE_PATH_RE.match(value))):
            _add(issues, path, "Must be a valid URL.")
        if self.email and not EMAIL_RE.match(value):
            _add(issues, path, "Must be a valid email address.")
        return value

    def _check_bounds(self, value: float, path: str, issues: Issues) -> None:
        if self.minimum is not None and value < self.minimum:
            _add(issues, path, f"Must be >= {self.minimum:g}.")
        if self.maximum is not None and value > self.maximum:
            _add(issues, path, f"Must be <= {self.maximum:g}.")

    def _clean_int(self, value: Any, path: str, issues: Issues) -> Any:
        if isinstance(value, bool) or not isinstance(value, int):
            if isinstance(value, float) and value.is_integer():
                value = int(value)
            else:
                _add(issues, path, "Must be an integer.")
                return None
        self._check_bounds(value, path, issues)
        return value

    def _clean_float(self, value: Any, path: str, issues: Issues) -> Any:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            _add(issues, path, "Must be a number.")
            return None
        value = float(value)
        self._check_bounds(value, path, issues)
        return value

    def _clean_bool(self, value: Any, path: str, issues: Issues) -> Any:
        if not isinstance(value, bool):
            _add(issues, path, "Must be true or false.")
            return None
        return value

    def _clean_datetime(self, value: Any, path: str, issues: Issues) -> Any:
        if not isinstance(value, str) or not value.strip():
            _add(issues, path, "Must be an ISO-8601 date.")
            return None
        try:
            return parse_datetime(value)
        except ValueError:
            _add(issues, path, "Must be an ISO-8601 date.")
            return None

    def _clean_dict(self, value: Any, path: str, issues: Issues) -> Any:
        if not isinstance(value, Mapping):
            _add(issues, path, "Must be an object.")
            return None
        return dict(value)

    def _clean_list(self, value: Any, path: str, issues: Issues) -> Any:
        if not isinstance(value, list):
            _add(issues, path, "Must be an array.")
            return None
        if self.required and not value:
            _add(issues, path, "Must contain at least one item.")
            return None
        if self.items is None:
            return list(value)
        out = []
        for i, item in enumerate(value):
            item_path = f"{path}.{i}"
            if isinstance(self.items, Schema):
                cleaned, item_issues = self.items.check(item, prefix=f"{item_path}.", wire_keys=True)
            else:
                cleaned, item_issues = self.items.clean(item, item_path)
            for p, msgs in item_issues.items():
                issues.setdefault(p, []).extend(msgs)
            out.append(cleaned)
        return out


@dataclass(frozen=True)
class Schema:
    fields: tuple[Field, ...]
    # Keys silently dropped instead of rejected (read-only echoes like "id").
    ignored: frozenset[str] = dc_field(default_factory=frozenset)

    @property
    def by_name(self) -> dict[str, Field]:
        return {f.name: f for f in self.fields}

    def check(
        self,
        payload: Any,
        *,
        partial: bool = False,
        prefix: str = "",
        wire_keys: bool = False,
    ) -> tuple[dict[str, Any], Issues]:
        """Validate without raising. Returns (clean data, issues)."""
        issues: Issues = {}
        clean: dict[str, Any] = {}
        if not isinstance(payload, Mapping):
            _add(issues, prefix.rstrip(".") or "_body", "Must be an object.")
            return clean, issues

        declared = self.by_name
        for key in payload:
            if key in self.ignored:
                continue
            if key not in declared:
                _add(issues, f"{prefix}{key}", "Unrecognized field.")

        for name, f in declared.items():
            path = f"{prefix}{name}"
            out_key = name if wire_keys else f.attr_name
            if name not in payload:
                if partial:
                    continue
                if f.required:
                    _add(issues, path, "Required.")
                elif f.has_default():
                    clean[out_key] = f.default_value()
                continue
            value, field_issues = f.clean(payload[name], path)
            if field_issues:
                for p, msgs in field_issues.items():
                    issues.setdefault(p, []).extend(msgs)
                continue
            clean[out_key] = value
        return clean, issues

    def validate(self, payload: Any, *, partial: bool = False) -> dict[str, Any]:
        clean, issues = self.check(payload, partial=partial)
        if issues:
            raise InvalidInput(issues=issues)
        return clean


def schema(*fields: Field, ignored: tuple[str, ...] = ()) -> Schema:
    return Schema(fields=tuple(fields), ignored=frozenset(ignored))


def require_object_id(value: str, message: str = "Invalid ID format") -> str:
    if not is_object_id(value):
        raise InvalidInput(message)
    return value.lower()
