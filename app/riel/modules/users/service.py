from __future__ import annotations

from typing import TYPE_CHECKING

from werkzeug.security import generate_password_hash

from app.riel.errors import Forbidden
from app.riel.models import User
from app.riel.rbac import ROLE_ADMIN, ROLE_EDITOR, VALID_ROLES
from app.riel.repository import Repository
from app.riel.validation import Field, schema

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

MIN_PASSWORD_LENGTH = 8

USER_CREATE_SCHEMA = schema(
    Field("name", required=True, max_length=255),
    Field("email", required=True, email=True, max_length=320),
    Field("password", required=True, min_length=MIN_PASSWORD_LENGTH),
    Field("role", choices=VALID_ROLES, default=ROLE_EDITOR),
    Field("image", nullable=True, url=True, relative=True),
)

# Email, password and ids are deliberately absent: they are rejected as unknown.
USER_UPDATE_SCHEMA = schema(
    Field("name", required=True, max_length=255),
    Field("role", required=True, choices=VALID_ROLES),
    Field("image", nullable=True, url=True, relative=True),
)


class UserRepository(Repository[User]):
    model = User
    entity_name = "User"
    unique_fields = ("email", "google_id")


def list_users(s: "Session") -> list[User]:
    return UserRepository(s).find_many()


def create_user(s: "Session", payload: dict) -> User:
    data = USER_CREATE_SCHEMA.validate(payload)
    data["password_hash"] = generate_password_hash(data.pop("password"))
    return UserRepository(s).create(data)


def update_user(s: "Session", actor: User, user_id: str, payload: dict) -> User:
    data = USER_UPDATE_SCHEMA.validate(payload, partial=True)
    repo = UserRepository(s)
    user = repo.get_or_404(user_id)
    if user.id == actor.id and data.get("role", user.role) != ROLE_ADMIN and user.role == ROLE_ADMIN:
        raise Forbidden("You cannot remove your own admin role")
    return repo.update(user, data)


def delete_user(s: "Session", actor: User, user_id: str) -> User:
    if user_id == actor.id:
        raise Forbidden("You cannot delete your own account")
    return UserRepository(s).delete(user_id)


def admin_users(s: "Session") -> list[User]:
    return UserRepository(s).find_many({"role": ROLE_ADMIN, "is_active": True})
