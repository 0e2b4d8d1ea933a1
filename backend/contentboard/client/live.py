from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from typing import Any

import websockets
from websockets.exceptions import WebSocketException

log = logging.getLogger(__name__)


class LiveUpdates:
    """Listens on the push channel and hands every message to ``on_message``.

    The connection is reopened after ``reconnect_delay`` seconds whenever it
    closes or cannot be established, until ``stop`` is called. Messages sent
    while disconnected are lost.
    """

    def __init__(
        self,
        url: str,
        on_message: Callable[[Any], Any],
        *,
        reconnect_delay: float = 2.0,
        connect: Callable[..., Any] = websockets.connect,
        headers: dict[str, str] | None = None,
    ):
        self.url = url
        self.headers = dict(headers or {})
        self.on_message = on_message
        self.reconnect_delay = reconnect_delay
        self._connect = connect
        self._stopped = asyncio.Event()
        self._connected = asyncio.Event()
        self._task: asyncio.Task | None = None
        self.connections = 0

    @property
    def connected(self) -> bool:
        return self._connected.is_set()

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._stopped.clear()
            self._task = asyncio.get_running_loop().create_task(self.run())
        return self._task

    async def stop(self) -> None:
        self._stopped.set()
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None

    async def wait_connected(self, timeout: float | None = None) -> None:
        await asyncio.wait_for(self._connected.wait(), timeout)

    async def run(self) -> None:
        while not self._stopped.is_set():
            try:
                kwargs = {"additional_headers": self.headers} if self.headers else {}
                async with self._connect(self.url, **kwargs) as ws:
                    self.connections += 1
                    self._connected.set()
                    log.info("push channel connected to %s", self.url)
                    async for raw in ws:
                        await self._dispatch(raw)
            except (OSError, asyncio.TimeoutError, WebSocketException) as e:
                log.info("push channel unavailable (%s)", e)
            finally:
                self._connected.clear()

            if self._stopped.is_set():
                break
            log.info("push channel closed; reconnecting in %.1fs", self.reconnect_delay)
            try:
                await asyncio.wait_for(self._stopped.wait(), self.reconnect_delay)
            except asyncio.TimeoutError:
                pass

    async def _dispatch(self, raw: Any) -> None:
        try:
            result = self.on_message(raw)
            if inspect.isawaitable(result):
                await result
        except Exception:
            log.exception("push message handler failed")
