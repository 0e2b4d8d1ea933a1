from __future__ import annotations

import logging
from typing import Any

from fastapi import WebSocket
from starlette.websockets import WebSocketState

from contentboard.core.events import CONTENT_UPDATED

log = logging.getLogger(__name__)


class ChangeNotifier:
    """Fan-out of change markers to every connected socket.

    Delivery is best-effort: no acknowledgement, no replay for sockets that
    were not connected at broadcast time.
    """

    def __init__(self) -> None:
        self._connections: set[WebSocket] = set()

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    async def connect(self, websocket: WebSocket) -> None:
        # Registered before the handshake so the socket is counted from the start;
        # broadcasts skip it until the handshake has completed.
        self._connections.add(websocket)
        try:
            await websocket.accept()
        except Exception:
            self._connections.discard(websocket)
            raise
        log.debug("socket connected (%d open)", len(self._connections))

    def disconnect(self, websocket: WebSocket) -> None:
        self._connections.discard(websocket)
        log.debug("socket disconnected (%d open)", len(self._connections))

    async def broadcast(self, event: dict[str, Any]) -> int:
        delivered = 0
        for websocket in list(self._connections):
            if websocket.application_state == WebSocketState.CONNECTING:
                continue
            try:
                await websocket.send_json(event)
                delivered += 1
            except Exception as e:
                log.warning("dropping socket after failed send: %s", e)
                self.disconnect(websocket)
        log.debug("broadcast %s to %d socket(s)", event.get("type"), delivered)
        return delivered

    async def content_updated(self) -> int:
        return await self.broadcast({"type": CONTENT_UPDATED})


notifier = ChangeNotifier()


def get_notifier() -> ChangeNotifier:
    return notifier
