"""
Subscriber lifecycle and unsubscribe tokens.

Tokens are random, mailed once, and stored only as a SHA-256 hex digest with
an expiry. Issuing a new token replaces the previous one; a successful
token unsubscribe consumes it.
"""
from __future__ import annotations

import hashlib
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any
from urllib.parse import urlencode

from app.riel.errors import Forbidden
from app.riel.modules.subscribers.models import Subscriber
from app.riel.repository import Repository
from app.riel.utils import parse_bool_flag
from app.riel.validation import Field, normalize_email, schema

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from werkzeug.datastructures import MultiDict

DEFAULT_SOURCE = "website"

OUTCOME_CREATED = "created"
OUTCOME_EXISTS = "exists"
OUTCOME_REACTIVATED = "reactivated"

_INTEREST = Field("item", required=True, max_length=64)

SUBSCRIBE_SCHEMA = schema(
    Field("email", required=True, email=True, max_length=320),
    Field("name", max_length=255),
    Field("source", max_length=64),
    Field("interests", kind="list", items=_INTEREST),
)

ADMIN_UPDATE_SCHEMA = schema(
    Field("name", max_length=255),
    Field("subscribed", kind="bool"),
    Field("interests", kind="list", items=_INTEREST),
    Field("source", required=True, max_length=64),
)

TOKEN_SCHEMA = schema(Field("token", required=True, max_length=256))


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def issue_unsubscribe_token(sub: Subscriber, *, ttl_hours: int, now: datetime | None = None) -> str:
    now = now or datetime.utcnow()
    token = secrets.token_urlsafe(32)
    sub.unsubscribe_token_hash = hash_token(token)
    sub.unsubscribe_token_expires_at = now + timedelta(hours=ttl_hours)
    return token


def verify_unsubscribe_token(sub: Subscriber, token: str, *, now: datetime | None = None) -> bool:
    now = now or datetime.utcnow()
    if not sub.unsubscribe_token_hash or not sub.unsubscribe_token_expires_at:
        return False
    if sub.unsubscribe_token_expires_at <= now:
        return False
    return secrets.compare_digest(sub.unsubscribe_token_hash, hash_token(token))


def unsubscribe_url(site_url: str, email: str, token: str) -> str:
    return f"{site_url}/unsubscribe?{urlencode({'email': email, 'token': token})}"


def set_subscribed(sub: Subscriber, subscribed: bool, *, now: datetime | None = None) -> None:
    """Flips the flag and keeps subscribedAt/unsubscribedAt consistent with it."""
    now = now or datetime.utcnow()
    if subscribed == sub.subscribed:
        return
    sub.subscribed = subscribed
    if subscribed:
        sub.subscribed_at = now
        sub.unsubscribed_at = None
    else:
        sub.unsubscribed_at = now


@dataclass(frozen=True)
class SubscriberFilter:
    subscribed: bool | None = None
    source: str | None = None

    @classmethod
    def from_args(cls, args: "MultiDict[str, str]") -> "SubscriberFilter":
        return cls(
            subscribed=parse_bool_flag(args.get("subscribed")),
            source=(args.get("source") or "").strip() or None,
        )

    def criteria(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.subscribed is not None:
            out["subscribed"] = self.subscribed
        if self.source is not None:
            out["source"] = self.source
        return out


class SubscriberRepository(Repository[Subscriber]):
    model = Subscriber
    entity_name = "Subscriber"
    unique_fields = ("email",)

    def default_order(self):
        return (Subscriber.subscribed_at.desc(),)

    def by_email_or_404(self, email: str) -> Subscriber:
        return self.find_one_or_404(email=normalize_email(email))


@dataclass(frozen=True)
class SubscribeResult:
    subscriber: Subscriber
    outcome: str
    token: str | None = None

    @property
    def message(self) -> str:
        return {
            OUTCOME_CREATED: "Subscribed successfully",
            OUTCOME_EXISTS: "Email already subscribed",
            OUTCOME_REACTIVATED: "Subscription reactivated successfully",
        }[self.outcome]

    @property
    def status_code(self) -> int:
        return 201 if self.outcome == OUTCOME_CREATED else 200


def list_subscribers(s: "Session", f: SubscriberFilter) -> list[Subscriber]:
    return SubscriberRepository(s).find_many(f.criteria())


def subscribe(s: "Session", payload: dict, *, ttl_hours: int) -> SubscribeResult:
    """
    Idempotent opt-in keyed by normalized email.

    Existing subscribed rows are left untouched. Unsubscribed rows are
    reactivated in place, keeping their id; name/interests/source are
    replaced only when supplied non-empty.
    """
    data = SUBSCRIBE_SCHEMA.validate(payload)
    repo = SubscriberRepository(s)
    existing = repo.find_one(email=data["email"])

    if existing is not None and existing.subscribed:
        return SubscribeResult(existing, OUTCOME_EXISTS)

    if existing is not None:
        set_subscribed(existing, True)
        if data.get("interests"):
            existing.interests = data["interests"]
        if data.get("source"):
            existing.source = data["source"]
        if data.get("name"):
            existing.name = data["name"]
        existing.updated_at = datetime.utcnow()
        token = issue_unsubscribe_token(existing, ttl_hours=ttl_hours)
        s.flush()
        return SubscribeResult(existing, OUTCOME_REACTIVATED, token)

    sub = repo.create(
        {
            "email": data["email"],
            "name": data.get("name") or "",
            "interests": data.get("interests") or [],
            "source": data.get("source") or DEFAULT_SOURCE,
        }
    )
    token = issue_unsubscribe_token(sub, ttl_hours=ttl_hours)
    s.flush()
    return SubscribeResult(sub, OUTCOME_CREATED, token)


def admin_update_subscriber(s: "Session", email: str, payload: dict) -> Subscriber:
    data = ADMIN_UPDATE_SCHEMA.validate(payload, partial=True)
    repo = SubscriberRepository(s)
    sub = repo.by_email_or_404(email)
    if "subscribed" in data:
        set_subscribed(sub, data.pop("subscribed"))
    return repo.update(sub, data)


def unsubscribe_with_token(s: "Session", email: str, payload: dict) -> Subscriber:
    data = TOKEN_SCHEMA.validate(payload)
    sub = SubscriberRepository(s).find_one(email=normalize_email(email))
    # Unknown email and bad token look the same to the caller.
    if sub is None or not verify_unsubscribe_token(sub, data["token"]):
        raise Forbidden("Invalid unsubscribe token")
    set_subscribed(sub, False)
    sub.unsubscribe_token_hash = None
    sub.unsubscribe_token_expires_at = None
    sub.updated_at = datetime.utcnow()
    s.flush()
    return sub


def delete_subscriber(s: "Session", email: str) -> Subscriber:
    repo = SubscriberRepository(s)
    return repo.delete(repo.by_email_or_404(email))
