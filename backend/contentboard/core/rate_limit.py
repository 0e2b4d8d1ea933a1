from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request

from contentboard.core.config import settings
from contentboard.core.redis_client import get_redis

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimit:
    key: str
    limit: int
    window_seconds: int

    def retry_after(self) -> int | None:
        """Count one hit in the current window; seconds to wait once over the limit, else None."""
        r = get_redis()
        hits = int(r.incr(self.key))
        if hits == 1:
            r.expire(self.key, self.window_seconds)
        if hits <= self.limit:
            return None
        ttl = r.ttl(self.key)
        return int(ttl) if ttl and ttl > 0 else self.window_seconds


def client_ip(request: Request) -> str:
    if settings.trust_proxy_headers:
        forwarded = (request.headers.get("x-real-ip") or "").strip()
        if not forwarded:
            forwarded = (request.headers.get("x-forwarded-for") or "").split(",")[0].strip()
        if forwarded:
            return forwarded
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def rate_limit(*, key_prefix: str, limit: int, window_seconds: int):
    """Fixed-window limiter per route and client ip; Redis outages let requests through."""

    def _dep(request: Request) -> RateLimit:
        rl = RateLimit(
            key=f"rl:{key_prefix}:{request.method}:{request.url.path}:{client_ip(request)}",
            limit=int(limit),
            window_seconds=int(window_seconds),
        )
        try:
            wait = rl.retry_after()
        except Exception as e:
            log.warning("rate limit skipped for %s: %s", key_prefix, e)
            return rl

        if wait is not None:
            log.info("rate limit hit for %s", rl.key)
            raise HTTPException(status_code=429, detail="rate limit exceeded", headers={"Retry-After": str(wait)})
        return rl

    return Depends(_dep)
