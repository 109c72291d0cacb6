"""
Generic data-access layer shared by every entity module.

Uniqueness is checked up front so the common case gets a clear 409, and the
store's own unique constraints still decide any race: an ``IntegrityError``
at flush time is mapped to ``Conflict`` after rolling the session back.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any, ClassVar, Generic, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from app.riel.errors import Conflict, NotFound
from app.riel.models import Base

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=Base)


class Repository(Generic[M]):
    model: ClassVar[type[Base]]
    entity_name: ClassVar[str] = "Record"
    unique_fields: ClassVar[tuple[str, ...]] = ()

    def __init__(self, s: Session) -> None:
        self.s = s

    # ---------- ordering / querying ----------
    def default_order(self) -> tuple[Any, ...]:
        return (self.model.created_at.desc(),)  # type: ignore[attr-defined]

    def query(self, criteria: Mapping[str, Any] | None = None) -> Query:
        q = self.s.query(self.model)
        for attr, value in (criteria or {}).items():
            q = q.filter(getattr(self.model, attr) == value)
        return q

    def find_many(
        self,
        criteria: Mapping[str, Any] | None = None,
        *,
        order_by: tuple[Any, ...] | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[M]:
        q = self.query(criteria).order_by(*(order_by or self.default_order()))
        if offset:
            q = q.offset(offset)
        if limit:
            q = q.limit(limit)
        return q.all()

    def count(self, criteria: Mapping[str, Any] | None = None) -> int:
        return self.query(criteria).count()

    def find_one(self, **key: Any) -> M | None:
        return self.query(key).one_or_none()

    def get(self, id: str) -> M | None:
        return self.s.get(self.model, id)

    def get_or_404(self, id: str) -> M:
        obj = self.get(id)
        if obj is None:
            raise NotFound(f"{self.entity_name} not found")
        return obj

    def find_one_or_404(self, **key: Any) -> M:
        obj = self.find_one(**key)
        if obj is None:
            raise NotFound(f"{self.entity_name} not found")
        return obj

    # ---------- uniqueness ----------
    def _conflict(self, field: str) -> Conflict:
        return Conflict(f"{self.entity_name} with this {field} already exists")

    def check_unique(self, data: Mapping[str, Any], *, exclude_id: str | None = None) -> None:
        for field in self.unique_fields:
            value = data.get(field)
            if value is None:
                continue
            q = self.s.query(self.model.id).filter(getattr(self.model, field) == value)  # type: ignore[attr-defined]
            if exclude_id is not None:
                q = q.filter(self.model.id != exclude_id)  # type: ignore[attr-defined]
            if q.first() is not None:
                raise self._conflict(field)

    def _flush_or_conflict(self) -> None:
        try:
            self.s.flush()  # force unique constraint check now
        except IntegrityError as exc:
            self.s.rollback()
            logger.warning("%s write rejected by store constraint: %s", self.entity_name, str(exc.orig)[:200])
            raise Conflict(f"{self.entity_name} violates a uniqueness constraint") from exc

    # ---------- mutations ----------
    def create(self, data: Mapping[str, Any]) -> M:
        self.check_unique(data)
        obj = self.model(**data)
        self.s.add(obj)
        self._flush_or_conflict()
        return obj  # type: ignore[return-value]

    def update(self, target: M | str, data: Mapping[str, Any]) -> M:
        obj = self.get_or_404(target) if isinstance(target, str) else target
        changed = {k: v for k, v in data.items() if getattr(obj, k) != v}
        self.check_unique(changed, exclude_id=obj.id)  # type: ignore[attr-defined]
        for key, value in data.items():
            setattr(obj, key, value)
        if hasattr(obj, "updated_at"):
            obj.updated_at = datetime.utcnow()  # type: ignore[attr-defined]
        self._flush_or_conflict()
        return obj

    def delete(self, target: M | str) -> M:
        obj = self.get_or_404(target) if isinstance(target, str) else target
        self.s.delete(obj)
        self.s.flush()
        return obj
