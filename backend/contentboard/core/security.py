from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.orm import Session

from contentboard.core.config import settings
from contentboard.core.errors import AuthenticationRequired
from contentboard.db.session import get_db
from contentboard.models.user import User, UserRole


oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/login", auto_error=False)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


@dataclass(frozen=True)
class AuthContext:
    """Caller identity, resolved once per request."""

    user_id: int | None = None
    username: str | None = None
    role: UserRole | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.admin

    def may_access(self, owner_id: int | None) -> bool:
        # Unowned rows and anonymous callers fall outside ownership checks.
        if not self.is_authenticated or self.is_admin or owner_id is None:
            return True
        return owner_id == self.user_id

    @classmethod
    def for_user(cls, user: User) -> "AuthContext":
        return cls(user_id=user.id, username=user.username, role=user.role)


ANONYMOUS = AuthContext()


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def create_access_token(*, user_id: int, role: str) -> str:
    now = datetime.utcnow()
    expire = now + timedelta(minutes=settings.jwt_access_token_minutes)
    payload = {
        "sub": str(user_id),
        "role": role,
        "iat": now,
        "exp": expire,
        "iss": str(settings.jwt_issuer),
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def _user_from_token(db: Session, token: str) -> User:
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            issuer=str(settings.jwt_issuer),
        )
    except JWTError as e:
        raise AuthenticationRequired("invalid token") from e

    try:
        user_id = int(str(payload.get("sub") or ""))
    except ValueError as e:
        raise AuthenticationRequired("invalid token") from e

    user = db.scalar(select(User).where(User.id == user_id))
    if user is None:
        raise AuthenticationRequired("invalid token")
    return user


def get_optional_user(
    request: Request,
    db: Session = Depends(get_db),
    token: str | None = Depends(oauth2_scheme),
) -> User | None:
    if not token:
        token = request.cookies.get(settings.session_cookie_name)
    if not token:
        return None

    user = _user_from_token(db, token)
    request.state.user_id = str(user.id)
    return user


def auth_context_for_token(db: Session, token: str | None) -> AuthContext:
    """Resolve the caller outside the HTTP dependency chain (the push channel handshake)."""
    if token:
        return AuthContext.for_user(_user_from_token(db, token))
    if not settings.allow_anonymous_access:
        raise AuthenticationRequired()
    return ANONYMOUS


def get_current_user(user: User | None = Depends(get_optional_user)) -> User:
    if user is None:
        raise AuthenticationRequired()
    return user


def get_auth_context(user: User | None = Depends(get_optional_user)) -> AuthContext:
    if user is not None:
        return AuthContext.for_user(user)
    if not settings.allow_anonymous_access:
        raise AuthenticationRequired()
    return ANONYMOUS
