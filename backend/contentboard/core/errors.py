from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any


class ContentBoardError(Exception):
    status_code = 500
    error_code = "internal_error"
    default_message = "internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailed(ContentBoardError):
    status_code = 400
    error_code = "validation_error"
    default_message = "Validation error"

    def __init__(self, errors: list[dict[str, str]], message: str | None = None):
        super().__init__(message)
        self.errors = errors

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationFailed":
        return cls([{"field": field, "message": message}])


class ContentNotFound(ContentBoardError):
    status_code = 404
    error_code = "not_found"
    default_message = "Content not found"


class AccessDenied(ContentBoardError):
    status_code = 403
    error_code = "forbidden"
    default_message = "Access denied"


class AuthenticationRequired(ContentBoardError):
    status_code = 401
    error_code = "unauthorized"
    default_message = "not authenticated"


class Conflict(ContentBoardError):
    status_code = 409
    error_code = "conflict"
    default_message = "already exists"


_LOCATIONS = {"body", "path", "query", "header", "cookie"}


def field_errors(raw_errors: Iterable[Mapping[str, Any]]) -> list[dict[str, str]]:
    """One ``{field, message}`` per invalid field, from pydantic or FastAPI error lists."""
    errors: list[dict[str, str]] = []
    seen: set[str] = set()
    for e in raw_errors:
        loc = [str(p) for p in (e.get("loc") or ())]
        # FastAPI prefixes the request part ("body", "path", ...); the field name follows.
        if len(loc) > 1 and loc[0] in _LOCATIONS:
            loc = loc[1:]
        field = loc[0] if loc else "body"
        if field in seen:
            continue
        seen.add(field)
        errors.append({"field": field, "message": str(e.get("msg") or "Invalid value")})
    return errors
