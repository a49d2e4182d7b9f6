from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Optional

from liveproto.constants import DEFAULT_HEARTBEAT_INTERVAL_MS

logger = logging.getLogger(__name__)

Beat = Callable[[], Awaitable[object]]


class HeartbeatScheduler:
    """
    Runs ``beat`` every ``interval_ms`` until cancelled.

    Each run gets its own cancellation token; ``cancel()`` sets it and drops
    the handle synchronously, so a cancelled loop never beats again even if
    a new one is started right after.
    """

    def __init__(self, beat: Beat, interval_ms: int = DEFAULT_HEARTBEAT_INTERVAL_MS) -> None:
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        self._beat = beat
        self.interval_ms = interval_ms
        self._task: Optional[asyncio.Task] = None
        self._token: Optional[asyncio.Event] = None

    @property
    def running(self) -> bool:
        return self._task is not None

    def start(self) -> None:
        if self._task is not None:
            return
        self._token = asyncio.Event()
        self._task = asyncio.create_task(self._heartbeat_loop(self._token), name="livews-heartbeat")

    def cancel(self) -> None:
        if self._token is not None:
            self._token.set()
        if self._task is not None:
            self._task.cancel()
        self._task = None
        self._token = None

    async def _heartbeat_loop(self, token: asyncio.Event) -> None:
        interval = self.interval_ms / 1000
        while not token.is_set():
            try:
                await asyncio.wait_for(token.wait(), timeout=interval)
                break
            except asyncio.TimeoutError:
                pass
            if token.is_set():
                break
            try:
                await self._beat()
            except Exception as exc:
                logger.debug("Heartbeat failed: %s", exc)


__all__ = ["HeartbeatScheduler"]
