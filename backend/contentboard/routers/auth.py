from __future__ import annotations

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from contentboard.core.config import settings
from contentboard.core.errors import AuthenticationRequired, Conflict, ValidationFailed
from contentboard.core.rate_limit import rate_limit
from contentboard.core.security import create_access_token, get_current_user, hash_password, verify_password
from contentboard.db.session import get_db
from contentboard.models.user import User, UserRole
from contentboard.schemas.auth import ChangePasswordRequest, LoginRequest, RegisterRequest, UserPublic

router = APIRouter(prefix="/api", tags=["auth"])

log = logging.getLogger(__name__)


def _user_public(user: User) -> dict:
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "role": user.role.value,
        "created_at": user.created_at,
    }


def _set_session_cookie(response: Response, user: User) -> None:
    token = create_access_token(user_id=user.id, role=user.role.value)
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=int(settings.jwt_access_token_minutes) * 60,
        httponly=True,
        secure=bool(settings.session_cookie_secure),
        samesite="lax",
    )


def _check_password_length(password: str) -> None:
    if not password or len(password) < int(settings.password_min_length or 0):
        raise ValidationFailed.for_field("password", f"Password must be at least {settings.password_min_length} characters")


@router.post("/login", response_model=UserPublic)
def login(
    payload: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
    _: object = rate_limit(key_prefix="auth_login", limit=20, window_seconds=60),
):
    user = db.scalar(select(User).where(User.username == payload.username))
    if user is None or not verify_password(payload.password, user.password_hash):
        log.warning("login failed for username=%s", payload.username)
        raise AuthenticationRequired("Invalid username or password")

    _set_session_cookie(response, user)
    log.info("user %s logged in", user.id)
    return _user_public(user)


@router.post("/logout")
def logout(response: Response):
    response.delete_cookie(
        key=settings.session_cookie_name,
        httponly=True,
        secure=bool(settings.session_cookie_secure),
        samesite="lax",
    )
    return {"ok": True}


@router.post("/register", response_model=UserPublic, status_code=201)
def register(
    payload: RegisterRequest,
    response: Response,
    db: Session = Depends(get_db),
    _: object = rate_limit(key_prefix="auth_register", limit=10, window_seconds=60),
):
    if not settings.allow_public_register:
        raise HTTPException(status_code=403, detail="registration disabled")

    _check_password_length(payload.password)

    existing = db.scalar(select(User).where(User.username == payload.username))
    if existing is not None:
        raise Conflict("Username already exists")

    user = User(
        username=payload.username,
        email=payload.email,
        role=UserRole.editor,
        password_hash=hash_password(payload.password),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise Conflict("Username already exists") from e
    db.refresh(user)

    _set_session_cookie(response, user)
    log.info("user %s registered", user.id)
    return _user_public(user)


@router.get("/user", response_model=UserPublic)
def current_user(user: User = Depends(get_current_user)):
    return _user_public(user)


@router.post("/user/password")
def change_password(
    payload: ChangePasswordRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    _: object = rate_limit(key_prefix="auth_change_password", limit=10, window_seconds=60),
):
    if not verify_password(payload.current_password, user.password_hash):
        raise AuthenticationRequired("Invalid credentials")

    _check_password_length(payload.password)

    user.password_hash = hash_password(payload.password)
    user.password_changed_at = datetime.utcnow()
    db.add(user)
    db.commit()
    log.info("user %s changed password", user.id)
    return {"ok": True}
