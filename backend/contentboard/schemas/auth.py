from __future__ import annotations

from datetime import datetime

from pydantic import EmailStr, Field, field_validator

from contentboard.schemas.content import CamelModel


class LoginRequest(CamelModel):
    username: str
    password: str


class RegisterRequest(CamelModel):
    username: str = Field(min_length=3, max_length=100)
    password: str
    email: EmailStr | None = None
    # Accepted for form compatibility; registration always grants the editor role.
    role: str | None = None

    @field_validator("username")
    @classmethod
    def _strip_username(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 3:
            raise ValueError("String should have at least 3 characters")
        return v

    @field_validator("email", mode="before")
    @classmethod
    def _blank_email_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v.strip() if isinstance(v, str) else v


class ChangePasswordRequest(CamelModel):
    current_password: str
    password: str


class UserPublic(CamelModel):
    id: int
    username: str
    email: str | None
    role: str
    created_at: datetime
