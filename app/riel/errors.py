"""
Error taxonomy for the JSON API.

Handlers and services raise these; the app-level error handler renders
them as ``{"error": ..., "issues": ...}`` with the matching status code.
"""
from __future__ import annotations

from typing import Any


class ApiError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None, *, issues: dict[str, Any] | None = None) -> None:
        self.message = message or self.default_message
        self.issues = issues
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.message}
        if self.issues:
            body["issues"] = self.issues
        return body


class InvalidInput(ApiError):
    status_code = 400
    default_message = "Invalid input"


class Unauthorized(ApiError):
    status_code = 401
    default_message = "Unauthorized"


class Forbidden(ApiError):
    status_code = 403
    default_message = "Forbidden"


class NotFound(ApiError):
    status_code = 404
    default_message = "Not found"


class MethodNotAllowed(ApiError):
    status_code = 405
    default_message = "Method not allowed"


class Conflict(ApiError):
    status_code = 409
    default_message = "Conflict"


class TooManyRequests(ApiError):
    status_code = 429
    default_message = "Too many requests"


class Internal(ApiError):
    status_code = 500
    default_message = "Internal server error"
