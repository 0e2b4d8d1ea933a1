import os
import sys
from pathlib import Path
import uuid
import time

import pytest
from fastapi.testclient import TestClient

backend_dir = Path(__file__).resolve().parents[1]
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

from sqlalchemy import create_engine, delete
from sqlalchemy.pool import StaticPool

from contentboard.db.base import Base
from contentboard.db import session as session_module
from contentboard.main import create_app

# Import models so that they are registered in Base.metadata before create_all.
from contentboard.models.user import User, UserRole
from contentboard.models.content import ContentItem
from contentboard.core.config import settings
from contentboard.core.security import hash_password


class _MemoryRedis:
    def __init__(self):
        self._data: dict[str, tuple[str, float | None]] = {}

    def ping(self):
        return True

    def _now(self) -> float:
        return time.time()

    def _get_entry(self, key: str):
        v = self._data.get(key)
        if not v:
            return None
        value, exp = v
        if exp is not None and exp <= self._now():
            self._data.pop(key, None)
            return None
        return value, exp

    def get(self, key: str):
        entry = self._get_entry(key)
        return entry[0] if entry else None

    def incr(self, key: str):
        cur = self.get(key)
        n = int(cur or 0) + 1
        _, exp = self._data.get(key, ("", None))
        self._data[key] = (str(n), exp)
        return n

    def expire(self, key: str, seconds: int):
        entry = self._get_entry(key)
        if not entry:
            return False
        value, _ = entry
        self._data[key] = (value, self._now() + int(seconds))
        return True

    def ttl(self, key: str):
        entry = self._get_entry(key)
        if not entry:
            return -2
        _, exp = entry
        if exp is None:
            return -1
        return max(0, int(exp - self._now()))

    def flushall(self):
        self._data.clear()


# SQLite in-memory shared by every session (StaticPool keeps one connection).
_engine = create_engine(
    "sqlite+pysqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
Base.metadata.create_all(bind=_engine)
session_module.engine = _engine
session_module.SessionLocal = session_module.sessionmaker(autocommit=False, autoflush=False, bind=_engine)


# Stub Redis at import time (rate limiting + readiness check).
_mem_redis = _MemoryRedis()
import contentboard.core.rate_limit as rate_limit_module

rate_limit_module.get_redis = lambda: _mem_redis

import contentboard.routers.health as health_router_module

health_router_module.get_redis = lambda: _mem_redis


@pytest.fixture(autouse=True)
def _clean_state():
    yield
    _mem_redis.flushall()
    with session_module.SessionLocal() as db:
        db.execute(delete(ContentItem))
        db.execute(delete(User))
        db.commit()


@pytest.fixture()
def app():
    app = create_app()

    # Ensure app dependencies use our session factory.
    def _get_db_override():
        db = session_module.SessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[session_module.get_db] = _get_db_override
    return app


@pytest.fixture()
def client(app):
    # One portal for requests and sockets, so broadcasts reach test sockets.
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def db():
    with session_module.SessionLocal() as session:
        yield session


def _create_user(*, username: str | None = None, password: str = "testpass123", role: UserRole = UserRole.editor) -> User:
    username = username or f"user_{uuid.uuid4().hex[:8]}"
    with session_module.SessionLocal() as db:
        user = User(username=username, email=None, role=role, password_hash=hash_password(password))
        db.add(user)
        db.commit()
        db.refresh(user)
        db.expunge(user)
        return user


def _login_headers(client: TestClient, *, username: str, password: str = "testpass123") -> dict[str, str]:
    r = client.post("/api/login", json={"username": username, "password": password})
    assert r.status_code == 200
    token = r.cookies.get(settings.session_cookie_name)
    assert token
    # Keep the jar empty so anonymous calls stay anonymous.
    client.cookies.clear()
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def editor(client):
    user = _create_user()
    return user, _login_headers(client, username=user.username)


@pytest.fixture()
def other_editor(client):
    user = _create_user()
    return user, _login_headers(client, username=user.username)


@pytest.fixture()
def admin(client):
    user = _create_user(role=UserRole.admin)
    return user, _login_headers(client, username=user.username)


@pytest.fixture()
def make_user():
    return _create_user


@pytest.fixture()
def login(client):
    def _login(username: str, password: str = "testpass123") -> dict[str, str]:
        return _login_headers(client, username=username, password=password)

    return _login
