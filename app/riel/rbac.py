from collections.abc import Callable
from enum import Enum
from functools import wraps
from typing import Any

from flask import g

from app.riel.errors import Unauthorized
from app.riel.models import User

ROLE_ADMIN = "admin"
ROLE_EDITOR = "editor"
VALID_ROLES = (ROLE_ADMIN, ROLE_EDITOR)


class Capability(str, Enum):
    MANAGE_CONTENT = "manage_content"
    DELETE_CONTENT = "delete_content"
    MANAGE_USERS = "manage_users"
    MANAGE_SUBSCRIBERS = "manage_subscribers"


_ROLE_CAPABILITIES: dict[str, frozenset[Capability]] = {
    ROLE_ADMIN: frozenset(Capability),
    ROLE_EDITOR: frozenset({Capability.MANAGE_CONTENT}),
}


def role_capabilities(role: str | None) -> frozenset[Capability]:
    return _ROLE_CAPABILITIES.get((role or "").strip().lower(), frozenset())


def user_has_capability(user: User | None, capability: Capability) -> bool:
    if not user or not user.is_active:
        return False
    return capability in role_capabilities(user.role)


def _current_user() -> User | None:
    return getattr(g, "current_user", None)


def require_login() -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(fn)
        def wrapped(*args: Any, **kwargs: Any):
            user = _current_user()
            if not user or not user.is_active:
                raise Unauthorized()
            return fn(*args, **kwargs)

        return wrapped

    return decorator


def require_capability(capability: Capability) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(fn)
        def wrapped(*args: Any, **kwargs: Any):
            user = _current_user()
            # Unauthenticated and under-privileged callers both get 401.
            if not user_has_capability(user, capability):
                g.missing_capability = capability.value
                if capability is not Capability.MANAGE_CONTENT:
                    raise Unauthorized("Unauthorized - Admin access required")
                raise Unauthorized()
            return fn(*args, **kwargs)

        return wrapped

    return decorator
