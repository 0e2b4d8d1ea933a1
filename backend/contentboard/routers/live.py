from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, WebSocket, status
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from contentboard.core.config import settings
from contentboard.core.errors import AuthenticationRequired
from contentboard.core.notifier import ChangeNotifier, get_notifier
from contentboard.core.security import auth_context_for_token
from contentboard.db.session import get_db

router = APIRouter(tags=["live"])

log = logging.getLogger(__name__)


def _handshake_token(websocket: WebSocket) -> str | None:
    auth = websocket.headers.get("authorization") or ""
    scheme, _, token = auth.partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    return websocket.cookies.get(settings.session_cookie_name)


@router.websocket("/ws")
async def content_updates(
    websocket: WebSocket,
    notifier: ChangeNotifier = Depends(get_notifier),
    db: Session = Depends(get_db),
):
    """Push-only channel; inbound frames are read and discarded.

    The handshake is gated like the content API: a bad token, or no session
    while anonymous access is off, closes the socket before it is accepted.
    """
    try:
        await run_in_threadpool(auth_context_for_token, db, _handshake_token(websocket))
    except AuthenticationRequired as e:
        log.info("push channel refused: %s", e.message)
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    finally:
        # The socket may stay open for hours; do not hold a connection for it.
        db.close()

    await notifier.connect(websocket)
    try:
        while True:
            message = await websocket.receive()
            if message.get("type") == "websocket.disconnect":
                break
    finally:
        notifier.disconnect(websocket)
