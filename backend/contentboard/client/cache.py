from __future__ import annotations

import asyncio
import inspect
import json
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from contentboard.client.api import ContentApiClient
from contentboard.client.live import LiveUpdates
from contentboard.core.events import CONTENT_UPDATED

log = logging.getLogger(__name__)

ALL_CONTENTS = "all contents"

Fetcher = Callable[[], Awaitable[Any]]
Listener = Callable[[Any], Any]


@dataclass
class _Entry:
    fetcher: Fetcher
    data: Any = None
    has_data: bool = False
    stale: bool = True
    error: BaseException | None = None
    inflight: asyncio.Task | None = None
    started_at: float = 0.0
    # Bumped by every write invalidation; a fetch is current only if it began at the latest generation.
    generation: int = 0
    inflight_generation: int = 0
    follow_up: asyncio.Task | None = None
    listeners: list[Listener] = field(default_factory=list)


def _consume_result(task: asyncio.Task) -> None:
    # Failures are logged in _fetch; fire-and-forget refetches must not warn again.
    if not task.cancelled():
        task.exception()


class QueryCache:
    """Keyed cache of fetched data with invalidation and request coalescing.

    An invalidation that arrives while a fetch for the same key is in flight
    joins that fetch when it started less than ``dedupe_window`` seconds ago;
    otherwise one follow-up fetch is queued behind it. A fetch that started
    before a write invalidation is never joined and never clears the stale
    flag.
    """

    def __init__(self, *, dedupe_window: float = 0.25):
        self.dedupe_window = dedupe_window
        self._entries: dict[str, _Entry] = {}

    def register(self, key: str, fetcher: Fetcher) -> None:
        self._entries[key] = _Entry(fetcher=fetcher)

    def _entry(self, key: str) -> _Entry:
        try:
            return self._entries[key]
        except KeyError:
            raise KeyError(f"no fetcher registered for {key!r}") from None

    def peek(self, key: str) -> Any:
        return self._entry(key).data

    def is_stale(self, key: str) -> bool:
        return self._entry(key).stale

    def is_fetching(self, key: str) -> bool:
        task = self._entry(key).inflight
        return task is not None and not task.done()

    async def get(self, key: str) -> Any:
        entry = self._entry(key)
        if entry.has_data and not entry.stale:
            return entry.data
        return await self._schedule(entry, join_inflight=True)

    async def refetch(self, key: str) -> Any:
        return await self._schedule(self._entry(key), join_inflight=True)

    def invalidate(self, key: str, *, join_inflight: bool = True) -> asyncio.Task:
        """Mark ``key`` stale and start a refetch; returns the task serving it.

        ``join_inflight=False`` records a write: fetches already running are
        treated as outdated from then on.
        """
        entry = self._entry(key)
        entry.stale = True
        if not join_inflight:
            entry.generation += 1
        task = self._schedule(entry, join_inflight=join_inflight)
        task.add_done_callback(_consume_result)
        return task

    def subscribe(self, key: str, listener: Listener) -> Callable[[], None]:
        entry = self._entry(key)
        entry.listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in entry.listeners:
                entry.listeners.remove(listener)

        return _unsubscribe

    def _schedule(self, entry: _Entry, *, join_inflight: bool) -> asyncio.Task:
        loop = asyncio.get_running_loop()
        now = loop.time()
        if entry.inflight is not None and not entry.inflight.done():
            current = entry.inflight_generation == entry.generation
            if join_inflight and current and now - entry.started_at <= self.dedupe_window:
                return entry.inflight
            if entry.follow_up is None or entry.follow_up.done():
                entry.follow_up = loop.create_task(self._after(entry, entry.inflight))
            return entry.follow_up

        entry.started_at = now
        entry.inflight_generation = entry.generation
        entry.inflight = loop.create_task(self._fetch(entry, entry.generation))
        return entry.inflight

    async def _after(self, entry: _Entry, previous: asyncio.Task) -> Any:
        await asyncio.wait([previous])
        entry.follow_up = None
        return await self._schedule(entry, join_inflight=False)

    async def _fetch(self, entry: _Entry, generation: int) -> Any:
        try:
            data = await entry.fetcher()
        except Exception as e:
            # Previous data stays in place; the entry remains stale.
            entry.error = e
            log.warning("refetch failed: %s", e)
            raise

        entry.data = data
        entry.has_data = True
        entry.stale = generation != entry.generation
        entry.error = None
        for listener in list(entry.listeners):
            try:
                result = listener(data)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                log.exception("cache listener failed")
        return data


class ContentStore:
    """Client-side view of the content collection.

    Local mutations invalidate the collection once the server confirms them;
    push notifications do the same for writes made elsewhere.
    """

    def __init__(self, api: ContentApiClient, cache: QueryCache | None = None):
        self.api = api
        self.cache = cache or QueryCache()
        self.cache.register(ALL_CONTENTS, api.list_contents)

    async def contents(self) -> list[dict[str, Any]]:
        return await self.cache.get(ALL_CONTENTS)

    def cached(self) -> list[dict[str, Any]] | None:
        return self.cache.peek(ALL_CONTENTS)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        return self.cache.subscribe(ALL_CONTENTS, listener)

    async def create(self, data: dict[str, Any]) -> dict[str, Any]:
        created = await self.api.create_content(data)
        self._invalidate_after_write()
        return created

    async def update(self, content_id: int, data: dict[str, Any]) -> dict[str, Any]:
        updated = await self.api.update_content(content_id, data)
        self._invalidate_after_write()
        return updated

    async def move(self, content_id: int, stage: str) -> dict[str, Any]:
        updated = await self.api.update_stage(content_id, stage)
        self._invalidate_after_write()
        return updated

    async def delete(self, content_id: int) -> None:
        await self.api.delete_content(content_id)
        self._invalidate_after_write()

    def on_notification(self, message: Any) -> bool:
        if isinstance(message, (str, bytes)):
            try:
                message = json.loads(message)
            except ValueError:
                log.debug("ignoring non-json push message")
                return False
        if not isinstance(message, dict) or message.get("type") != CONTENT_UPDATED:
            log.debug("ignoring push message %r", message)
            return False
        self.cache.invalidate(ALL_CONTENTS)
        return True

    def live(self, *, reconnect_delay: float = 2.0) -> LiveUpdates:
        return LiveUpdates(
            self.api.websocket_url(),
            self.on_notification,
            reconnect_delay=reconnect_delay,
            headers=self.api.session_headers(),
        )

    def _invalidate_after_write(self) -> None:
        # Never joins a fetch that may have started before the write.
        self.cache.invalidate(ALL_CONTENTS, join_inflight=False)
